"""Booking service — registration, login and the booking/OTP lifecycle."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date, timedelta

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tilu_booking.database.repository import BookingRepository, UserRepository
from tilu_booking.errors import (
    BadCredentials,
    DeliveryFailure,
    DuplicateEmail,
    NotFound,
    StorageFailure,
    Unauthorized,
    ValidationError,
)
from tilu_booking.models.booking import Booking
from tilu_booking.models.user import User
from tilu_booking.security.otp import SecretCodec
from tilu_booking.security.password import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from tilu_booking.services.email_service import EmailService
from tilu_booking.services.session_store import SessionStore
from tilu_booking.services.verification import (
    DEFAULT_OTP_TTL,
    BookingVerifier,
    Clock,
    VerificationResult,
    utc_now,
)

logger = logging.getLogger(__name__)


@dataclass
class BookingReceipt:
    """Returned by :meth:`BookingService.create_booking`."""

    booking: Booking
    otp_sent: bool


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require(**fields: object) -> None:
    missing = [name for name, value in fields.items() if _is_blank(value)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _check_email(email: str) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError(f"Invalid email address: {exc}") from exc


class BookingService:
    """Glues the session store and the verification state machine to
    storage and mail.

    One instance serves one request: it wraps that request's database
    session. The session store, mailer, hasher and codec are shared.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        session_store: SessionStore,
        email_service: EmailService,
        password_hasher: PasswordHasher,
        codec: SecretCodec | None = None,
        clock: Clock = utc_now,
        otp_ttl: timedelta = DEFAULT_OTP_TTL,
    ) -> None:
        self._db = db_session
        self._sessions = session_store
        self._email = email_service
        self._hasher = password_hasher
        self._clock = clock
        self._otp_ttl = otp_ttl
        self._users = UserRepository(db_session)
        self._bookings = BookingRepository(db_session)
        self._verifier = BookingVerifier(
            self._bookings, codec or SecretCodec(), clock=clock, otp_ttl=otp_ttl
        )

    @asynccontextmanager
    async def _storage(self, action: str) -> AsyncIterator[None]:
        """Turn driver errors into ``StorageFailure`` after rolling back."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Storage failure during %s", action)
            await self._db.rollback()
            raise StorageFailure() from exc

    # ── Accounts ─────────────────────────────────────────

    async def register(self, name: str, email: str, phone: str, password: str) -> User:
        """Create a user account. Raises ``DuplicateEmail`` if taken."""
        _require(name=name, email=email, phone=phone, password=password)
        email = _normalize_email(email)
        _check_email(email)
        if password_too_long(password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

        async with self._storage("register"):
            if await self._users.find_by_email(email) is not None:
                raise DuplicateEmail()

            user = User(
                name=name.strip(),
                email=email,
                phone=phone.strip(),
                password_hash=await self._hasher.hash(password),
            )
            try:
                await self._users.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent registration
                await self._db.rollback()
                raise DuplicateEmail() from exc
            await self._db.commit()

        logger.info("Registered user %s (%s)", user.id, email)
        return user

    async def login(self, email: str, password: str) -> str:
        """Check credentials and return a new session token."""
        _require(email=email, password=password)
        email = _normalize_email(email)

        async with self._storage("login"):
            user = await self._users.find_by_email(email)

        if user is None:
            logger.info("Login failed: unknown email %s", email)
            raise NotFound("Email not found.")
        if not await self._hasher.verify(password, user.password_hash):
            logger.info("Login failed: bad password for user %s", user.id)
            raise BadCredentials()

        return self._sessions.create(user.id)

    def logout(self, token: str | None) -> None:
        self._sessions.destroy(token)

    def authenticate(self, token: str | None) -> str:
        """Return the user id behind *token* or raise ``Unauthorized``."""
        user_id = self._sessions.resolve(token)
        if user_id is None:
            raise Unauthorized()
        return user_id

    # ── Bookings ─────────────────────────────────────────

    async def create_booking(
        self, user_id: str, booking_date: date | str | None, amount: int | None
    ) -> BookingReceipt:
        """Store a booking, issue its OTP challenge and email the code.

        The booking and its challenge are committed together before the
        email goes out; a failed delivery is logged and reported through
        ``otp_sent`` but never undoes the booking.
        """
        _require(booking_date=booking_date, amount=amount)
        if isinstance(booking_date, str):
            try:
                booking_date = date.fromisoformat(booking_date)
            except ValueError as exc:
                raise ValidationError("booking_date must be an ISO date (YYYY-MM-DD).") from exc
        if amount <= 0:
            raise ValidationError("amount must be a positive number.")

        async with self._storage("create booking"):
            user = await self._users.find_by_id(user_id)
            if user is None:
                raise Unauthorized()
            booking = await self._bookings.add(
                Booking(
                    user_id=user_id,
                    booking_date=booking_date,
                    amount=amount,
                    created_at=self._clock(),
                )
            )
            otp = await self._verifier.issue_challenge(booking.id)
            await self._db.commit()

        logger.info("Booking %s created for user %s", booking.id, user_id)
        otp_sent = await self._deliver_otp(user.email, otp)
        return BookingReceipt(booking=booking, otp_sent=otp_sent)

    async def verify_booking(
        self, user_id: str, booking_id: str, otp: str | int | None
    ) -> VerificationResult:
        _require(booking_id=booking_id, otp=otp)
        async with self._storage("verify booking"):
            result = await self._verifier.attempt_verification(
                booking_id, user_id, str(otp).strip()
            )
            await self._db.commit()
        return result

    async def list_bookings(self, user_id: str) -> list[Booking]:
        """The caller's bookings, newest first."""
        async with self._storage("list bookings"):
            return await self._bookings.list_for_user(user_id)

    async def _deliver_otp(self, email: str, otp: str) -> bool:
        ttl_minutes = int(self._otp_ttl.total_seconds() // 60)
        try:
            await self._email.send_otp(email, otp, ttl_minutes=ttl_minutes)
        except DeliveryFailure as exc:
            logger.error("OTP email not delivered: %s", exc.message)
            return False
        return True
