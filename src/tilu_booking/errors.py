"""Error taxonomy shared by the services and the HTTP boundary.

Every error carries a stable ``code`` (returned to clients in the
``error`` field) and the HTTP status the API maps it to.
"""

from __future__ import annotations


class BookingAppError(Exception):
    """Base class for all expected failures of the booking service."""

    code = "Error"
    status_code = 400
    default_message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingAppError):
    code = "ValidationError"
    status_code = 400
    default_message = "All fields are required."


class Unauthorized(BookingAppError):
    code = "Unauthorized"
    status_code = 401
    default_message = "Please log in first."


class NotFound(BookingAppError):
    code = "NotFound"
    status_code = 404
    default_message = "Not found."


class DuplicateEmail(BookingAppError):
    code = "DuplicateEmail"
    status_code = 409
    default_message = "Email is already registered."


class BadCredentials(BookingAppError):
    code = "BadCredentials"
    status_code = 401
    default_message = "Wrong password."


class Expired(BookingAppError):
    code = "Expired"
    status_code = 410
    default_message = "OTP has expired."


class Mismatch(BookingAppError):
    code = "Mismatch"
    status_code = 400
    default_message = "OTP is incorrect."


class ChallengeAlreadyIssued(BookingAppError):
    code = "ChallengeAlreadyIssued"
    status_code = 409
    default_message = "A verification code was already issued for this booking."


class StorageFailure(BookingAppError):
    """The relational store failed; the message shown to clients is generic."""

    code = "StorageFailure"
    status_code = 500
    default_message = "Internal server error."


class InternalError(BookingAppError):
    """Anything unexpected; details stay in the server log."""

    code = "InternalError"
    status_code = 500
    default_message = "Internal server error."


class DeliveryFailure(BookingAppError):
    """Outbound email could not be sent. Never fatal to a request."""

    code = "DeliveryFailure"
    status_code = 502
    default_message = "Email delivery failed."
