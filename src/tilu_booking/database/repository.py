"""Repositories — data access layer for users and bookings."""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tilu_booking.models.booking import Booking
from tilu_booking.models.user import User


class UserRepository:
    """Encapsulates all database queries related to users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user: User) -> User:
        """Insert a new user and flush so constraint violations surface now."""
        self._session.add(user)
        await self._session.flush()
        return user

    async def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)


class BookingRepository:
    """Encapsulates all database queries related to bookings."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, booking: Booking) -> Booking:
        self._session.add(booking)
        await self._session.flush()
        return booking

    async def find_by_id(self, booking_id: str) -> Booking | None:
        return await self._session.get(Booking, booking_id)

    async def find_for_user(self, booking_id: str, user_id: str) -> Booking | None:
        """Look up a booking only if it belongs to *user_id*."""
        stmt = select(Booking).where(
            Booking.id == booking_id, Booking.user_id == user_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str) -> list[Booking]:
        """All bookings of *user_id*, most recent first."""
        stmt = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def set_challenge(
        self, booking: Booking, otp_hash: str, otp_salt: str, expires_at: datetime
    ) -> None:
        """Persist the OTP hash, salt and expiry of a freshly issued challenge."""
        booking.otp_hash = otp_hash
        booking.otp_salt = otp_salt
        booking.otp_expires_at = expires_at
        await self._session.flush()

    async def mark_verified(self, booking: Booking) -> bool:
        """Set ``is_verified`` only if it is still false.

        Returns ``True`` when this call performed the transition and
        ``False`` when another request got there first. The in-memory
        *booking* is refreshed either way.
        """
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.user_id == booking.user_id,
                Booking.is_verified.is_(False),
            )
            .values(is_verified=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.refresh(booking)
        return result.rowcount == 1
