"""HTTP routes for accounts and bookings.

Endpoints
---------
POST /register                → create an account
POST /login                   → start a session (HTTP-only cookie)
POST /logout                  → end the session
POST /bookings                → create a booking and email its OTP
POST /bookings/{id}/verify    → confirm a booking with its OTP
GET  /bookings                → the caller's bookings, newest first
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from tilu_booking.api.dependencies import current_user_id, get_booking_service, session_token
from tilu_booking.api.schemas import (
    BookingCreatedResponse,
    BookingListResponse,
    BookingOut,
    BookingRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    VerifyRequest,
    VerifyResponse,
)
from tilu_booking.services.booking_service import BookingService

router = APIRouter(tags=["booking"])


# ── Accounts ─────────────────────────────────────────────

@router.post("/register", response_model=MessageResponse)
async def register(
    body: RegisterRequest, service: BookingService = Depends(get_booking_service)
):
    await service.register(body.name, body.email, body.phone, body.password)
    return MessageResponse(success=True, message="Registration successful!")


@router.post("/login", response_model=MessageResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    service: BookingService = Depends(get_booking_service),
):
    token = await service.login(body.email, body.password)
    config = request.app.state.settings
    response.set_cookie(
        config.session_cookie_name,
        token,
        httponly=True,
        samesite="lax",
        secure=config.session_cookie_secure,
    )
    return MessageResponse(success=True, message="Login successful!")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    token: str | None = Depends(session_token),
    service: BookingService = Depends(get_booking_service),
):
    service.logout(token)
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return MessageResponse(success=True, message="Logged out.")


# ── Bookings ─────────────────────────────────────────────

@router.post("/bookings", response_model=BookingCreatedResponse)
async def create_booking(
    body: BookingRequest,
    user_id: str = Depends(current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    receipt = await service.create_booking(user_id, body.booking_date, body.amount)
    message = (
        "Booking created. OTP sent to your email."
        if receipt.otp_sent
        else "Booking created, but the OTP email could not be sent."
    )
    return BookingCreatedResponse(
        success=True,
        message=message,
        booking_id=receipt.booking.id,
        otp_sent=receipt.otp_sent,
    )


@router.post("/bookings/{booking_id}/verify", response_model=VerifyResponse)
async def verify_booking(
    booking_id: str,
    body: VerifyRequest,
    user_id: str = Depends(current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    result = await service.verify_booking(user_id, booking_id, body.otp)
    message = "Booking verified!" if result.newly_verified else "Booking already verified."
    return VerifyResponse(success=True, message=message, newly_verified=result.newly_verified)


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    user_id: str = Depends(current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    bookings = await service.list_bookings(user_id)
    return BookingListResponse(
        success=True,
        bookings=[BookingOut.model_validate(b.to_dict()) for b in bookings],
    )
