"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from tilu_booking.api.exception_handlers import register_exception_handlers
from tilu_booking.api.routes import router as booking_router
from tilu_booking.config import Settings, settings
from tilu_booking.database.engine import init_db
from tilu_booking.metrics import RequestMetrics
from tilu_booking.security.otp import SecretCodec
from tilu_booking.security.password import get_hasher
from tilu_booking.services.email_service import EmailService
from tilu_booking.services.session_store import SessionStore
from tilu_booking.services.verification import utc_now

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", app.state.settings.app_name)
    await init_db()
    logger.info("Database initialised")
    yield
    logger.info(
        "Shutting down %s … (%d sessions dropped)",
        app.state.settings.app_name,
        app.state.session_store.active_count,
    )


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the application and its process-wide collaborators.

    The session store lives on ``app.state`` for the lifetime of the
    process; request handlers reach it through the dependencies.
    """
    config = config or settings
    app = FastAPI(
        title=config.app_name,
        description="Booking service with emailed one-time-passcode confirmation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.session_store = SessionStore(ttl_seconds=config.session_ttl_seconds)
    app.state.email_service = EmailService(config)
    app.state.password_hasher = get_hasher(config.password_hasher)
    app.state.codec = SecretCodec()
    app.state.clock = utc_now

    app.include_router(booking_router)
    register_exception_handlers(app)
    if config.metrics_enabled:
        app.state.metrics = RequestMetrics()
        app.state.metrics.install(app)

    @app.get("/health")
    async def health_check(request: Request):
        """Simple liveness probe."""
        return {
            "status": "healthy",
            "app": config.app_name,
            "active_sessions": request.app.state.session_store.active_count,
        }

    return app


app = create_app()
