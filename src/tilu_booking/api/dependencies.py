"""FastAPI dependencies wiring per-request services to app-wide singletons."""

from __future__ import annotations

from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tilu_booking.database.engine import get_session
from tilu_booking.services.booking_service import BookingService


async def get_booking_service(
    request: Request, db_session: AsyncSession = Depends(get_session)
) -> BookingService:
    """Build a service around this request's DB session and the shared state."""
    state = request.app.state
    return BookingService(
        db_session,
        session_store=state.session_store,
        email_service=state.email_service,
        password_hasher=state.password_hasher,
        codec=state.codec,
        clock=state.clock,
        otp_ttl=timedelta(seconds=state.settings.otp_ttl_seconds),
    )


def session_token(request: Request) -> str | None:
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def current_user_id(
    token: str | None = Depends(session_token),
    service: BookingService = Depends(get_booking_service),
) -> str:
    """Resolve the session cookie; raises ``Unauthorized`` when absent."""
    return service.authenticate(token)
