"""Shared fixtures: in-memory database, fake clock, mocked collaborators."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from tilu_booking.database.engine import build_engine, build_session_factory, create_tables
from tilu_booking.security.otp import SecretCodec
from tilu_booking.security.password import SimpleHasher
from tilu_booking.services.email_service import EmailService
from tilu_booking.services.session_store import SessionStore


class FakeClock:
    """Deterministic UTC clock that tests can move forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 10, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codec():
    """Real codec whose OTP is pinned to ``123456``."""
    svc = SecretCodec()
    svc.generate_otp = MagicMock(return_value="123456")
    return svc


@pytest.fixture
def email_service():
    """Mocked email service — never actually sends emails."""
    svc = EmailService()
    svc.send_otp = AsyncMock()
    return svc


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def password_hasher():
    return SimpleHasher()
