"""Booking verification — the OTP challenge state machine.

States are derived from a booking row::

    Created ──issue_challenge──▶ Challenged ──correct OTP──▶ Verified
                                     │
                                     └──time passes──▶ Expired

``Verified`` and ``Expired`` are terminal. Every state past ``Created``
keeps its challenge so repeated submissions inside the OTP window can be
answered idempotently; once the window closes every submission is
rejected as expired, verified or not.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from tilu_booking import errors
from tilu_booking.database.repository import BookingRepository
from tilu_booking.models.booking import Booking
from tilu_booking.security.otp import SecretCodec

logger = logging.getLogger(__name__)

DEFAULT_OTP_TTL = timedelta(minutes=5)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ── States ───────────────────────────────────────────────


@dataclass(frozen=True)
class Created:
    """Booking exists but no OTP has been issued."""


@dataclass(frozen=True)
class Challenged:
    otp_hash: str
    otp_salt: str
    expires_at: datetime


@dataclass(frozen=True)
class Verified:
    otp_hash: str
    otp_salt: str
    expires_at: datetime


@dataclass(frozen=True)
class Expired:
    otp_hash: str
    otp_salt: str
    expires_at: datetime


VerificationState = Created | Challenged | Verified | Expired


def state_of(booking: Booking, now: datetime) -> VerificationState:
    """Map the flat booking columns onto an explicit state."""
    if booking.otp_hash is None or booking.otp_salt is None or booking.otp_expires_at is None:
        return Created()
    expires_at = _as_utc(booking.otp_expires_at)
    if booking.is_verified:
        return Verified(
            otp_hash=booking.otp_hash, otp_salt=booking.otp_salt, expires_at=expires_at
        )
    if now > expires_at:
        return Expired(
            otp_hash=booking.otp_hash, otp_salt=booking.otp_salt, expires_at=expires_at
        )
    return Challenged(
        otp_hash=booking.otp_hash, otp_salt=booking.otp_salt, expires_at=expires_at
    )


@dataclass
class VerificationResult:
    """Outcome of a successful verification attempt."""

    booking: Booking
    newly_verified: bool


class BookingVerifier:
    """Issues OTP challenges for bookings and checks submitted codes."""

    def __init__(
        self,
        bookings: BookingRepository,
        codec: SecretCodec,
        clock: Clock = utc_now,
        otp_ttl: timedelta = DEFAULT_OTP_TTL,
    ) -> None:
        self._bookings = bookings
        self._codec = codec
        self._clock = clock
        self._otp_ttl = otp_ttl

    async def issue_challenge(self, booking_id: str) -> str:
        """Move a booking from Created to Challenged and return the plaintext OTP.

        The caller is responsible for delivering the OTP; it is not kept
        anywhere else.
        """
        booking = await self._bookings.find_by_id(booking_id)
        if booking is None:
            raise errors.NotFound("Booking not found.")
        if not isinstance(state_of(booking, self._clock()), Created):
            raise errors.ChallengeAlreadyIssued()

        otp = self._codec.generate_otp()
        salt = self._codec.generate_salt()
        expires_at = self._clock() + self._otp_ttl
        await self._bookings.set_challenge(
            booking, self._codec.hash_otp(otp, salt), salt, expires_at
        )
        logger.info("OTP challenge issued for booking %s (expires %s)", booking_id, expires_at)
        return otp

    async def attempt_verification(
        self, booking_id: str, user_id: str, otp: str
    ) -> VerificationResult:
        """Check *otp* for a booking owned by *user_id*.

        Raises ``NotFound``, ``Expired`` or ``Mismatch``. A booking that is
        already verified answers a correct OTP inside the window with
        success again (``newly_verified=False``) without touching storage.
        """
        booking = await self._bookings.find_for_user(booking_id, user_id)
        if booking is None:
            raise errors.NotFound("Booking not found.")

        now = self._clock()
        state = state_of(booking, now)

        if isinstance(state, Created):
            logger.warning("Verification attempted on booking %s without a challenge", booking_id)
            raise errors.Mismatch()

        if now > state.expires_at:
            logger.info("OTP submitted after expiry for booking %s", booking_id)
            raise errors.Expired()

        if not self._codec.matches(otp, state.otp_salt, state.otp_hash):
            logger.info("Wrong OTP submitted for booking %s", booking_id)
            raise errors.Mismatch()

        if isinstance(state, Verified):
            logger.info("Booking %s was already verified", booking_id)
            return VerificationResult(booking=booking, newly_verified=False)

        newly_verified = await self._bookings.mark_verified(booking)
        if newly_verified:
            logger.info("Booking %s verified", booking_id)
        else:
            logger.info("Booking %s verified concurrently by another request", booking_id)
        return VerificationResult(booking=booking, newly_verified=newly_verified)
