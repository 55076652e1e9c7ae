"""Turn every failure into the ``{success: false, error, message}`` body."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tilu_booking.api.schemas import ErrorResponse
from tilu_booking.errors import BookingAppError, InternalError, StorageFailure, ValidationError

logger = logging.getLogger(__name__)


def _error_response(error: BookingAppError) -> JSONResponse:
    body = ErrorResponse(error=error.code, message=error.message)
    return JSONResponse(status_code=error.status_code, content=body.model_dump())


async def handle_app_error(request: Request, exc: BookingAppError) -> JSONResponse:
    logger.info("%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc)


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return _error_response(ValidationError(problems or None))


async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Unhandled storage error on %s %s", request.method, request.url.path)
    return _error_response(StorageFailure())


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingAppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)
    app.add_exception_handler(Exception, handle_unexpected)
