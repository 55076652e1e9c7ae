"""Tests for the UserRepository and BookingRepository."""

from datetime import UTC, date, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tilu_booking.database.repository import BookingRepository, UserRepository
from tilu_booking.models.booking import Booking
from tilu_booking.models.user import User

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def seeded(db_session: AsyncSession):
    """Two users, three bookings."""
    alice = User(name="Alice", email="alice@example.com", phone="+62811", password_hash="x")
    bob = User(name="Bob", email="bob@example.com", phone="+62812", password_hash="x")
    db_session.add_all([alice, bob])
    await db_session.flush()
    db_session.add_all(
        [
            Booking(user_id=alice.id, booking_date=date(2025, 1, 10), amount=100, created_at=T0),
            Booking(
                user_id=alice.id,
                booking_date=date(2025, 2, 10),
                amount=200,
                created_at=T0 + timedelta(hours=1),
            ),
            Booking(user_id=bob.id, booking_date=date(2025, 3, 10), amount=300, created_at=T0),
        ]
    )
    await db_session.commit()
    return alice, bob


# ── Users ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_find_by_email_match(db_session, seeded):
    repo = UserRepository(db_session)
    user = await repo.find_by_email("alice@example.com")
    assert user is not None
    assert user.name == "Alice"


@pytest.mark.asyncio
async def test_find_by_email_no_match(db_session, seeded):
    assert await UserRepository(db_session).find_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_find_by_id(db_session, seeded):
    alice, _ = seeded
    user = await UserRepository(db_session).find_by_id(alice.id)
    assert user is not None
    assert user.email == "alice@example.com"
    assert await UserRepository(db_session).find_by_id("missing") is None


@pytest.mark.asyncio
async def test_email_is_unique(db_session, seeded):
    repo = UserRepository(db_session)
    with pytest.raises(IntegrityError):
        await repo.add(
            User(name="Alice 2", email="alice@example.com", phone="1", password_hash="x")
        )


# ── Bookings ─────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_for_user_newest_first_and_scoped(db_session, seeded):
    alice, _ = seeded
    bookings = await BookingRepository(db_session).list_for_user(alice.id)
    assert [b.amount for b in bookings] == [200, 100]
    assert all(b.user_id == alice.id for b in bookings)


@pytest.mark.asyncio
async def test_find_for_user_checks_ownership(db_session, seeded):
    alice, bob = seeded
    repo = BookingRepository(db_session)
    (bob_booking,) = await repo.list_for_user(bob.id)
    assert await repo.find_for_user(bob_booking.id, bob.id) is not None
    assert await repo.find_for_user(bob_booking.id, alice.id) is None


@pytest.mark.asyncio
async def test_set_challenge_persists_fields(db_session, seeded):
    alice, _ = seeded
    repo = BookingRepository(db_session)
    booking = (await repo.list_for_user(alice.id))[0]
    await repo.set_challenge(booking, "a" * 64, "b" * 32, T0 + timedelta(minutes=5))
    await db_session.commit()

    reloaded = await repo.find_by_id(booking.id)
    assert reloaded.otp_hash == "a" * 64
    assert reloaded.otp_salt == "b" * 32


@pytest.mark.asyncio
async def test_mark_verified_only_once(db_session, seeded):
    alice, _ = seeded
    repo = BookingRepository(db_session)
    booking = (await repo.list_for_user(alice.id))[0]

    assert await repo.mark_verified(booking) is True
    assert booking.is_verified is True
    assert await repo.mark_verified(booking) is False
    assert booking.is_verified is True
