"""Prometheus request metrics, exposed at ``/metrics``."""

from __future__ import annotations

import time

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest


class RequestMetrics:
    """Counts and times every request, labelled by method and route.

    Each app gets its own registry so several apps (tests) can coexist
    in one process.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.requests = Counter(
            "http_requests_total",
            "HTTP requests handled",
            ["method", "path", "status_code"],
            registry=self.registry,
        )
        self.duration = Histogram(
            "http_request_duration_seconds",
            "Time spent handling HTTP requests",
            ["method", "path"],
            registry=self.registry,
        )

    def install(self, app: FastAPI) -> None:
        app.middleware("http")(self._observe)
        app.add_api_route("/metrics", self.render, methods=["GET"], include_in_schema=False)

    async def _observe(self, request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            # Label by route template so booking ids don't explode cardinality
            route = request.scope.get("route")
            path = getattr(route, "path", "unmatched")
            self.requests.labels(request.method, path, str(status_code)).inc()
            self.duration.labels(request.method, path).observe(time.perf_counter() - started)

    async def render(self) -> Response:
        return Response(generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)
