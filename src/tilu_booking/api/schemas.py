"""Request / response models for the HTTP API."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, Field

# ── Requests ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str
    email: str
    phone: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class BookingRequest(BaseModel):
    booking_date: date = Field(validation_alias=AliasChoices("booking_date", "bookingDate"))
    amount: int


class VerifyRequest(BaseModel):
    # The original frontend may post the code as a JSON number
    otp: str | int


# ── Responses ────────────────────────────────────────────


class MessageResponse(BaseModel):
    success: bool
    message: str


class BookingCreatedResponse(MessageResponse):
    booking_id: str
    otp_sent: bool


class VerifyResponse(MessageResponse):
    newly_verified: bool


class BookingOut(BaseModel):
    id: str
    booking_date: date
    amount: int
    is_verified: bool
    created_at: datetime | None


class BookingListResponse(BaseModel):
    success: bool
    bookings: list[BookingOut]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
