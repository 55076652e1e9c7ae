"""Database engine and async session factory.

``build_engine`` / ``create_tables`` are also used by the test suite to
stand up throwaway in-memory databases.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tilu_booking.config import settings
from tilu_booking.models.base import Base
from tilu_booking.models import booking as _booking  # noqa: F401  (register table)
from tilu_booking.models import user as _user  # noqa: F401  (register table)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(database_url, echo=echo)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; responses are built from them
    return async_sessionmaker(bind, expire_on_commit=False)


async def create_tables(bind: AsyncEngine) -> None:
    """Create the users and bookings tables if they are missing."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = build_session_factory(engine)


async def init_db() -> None:
    await create_tables(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; anything left uncommitted is rolled back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
