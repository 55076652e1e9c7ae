"""Seed script — creates the tables and a demo account for local testing."""

import asyncio

from tilu_booking.config import settings
from tilu_booking.database.engine import async_session_factory, init_db
from tilu_booking.database.repository import UserRepository
from tilu_booking.models.user import User
from tilu_booking.security.password import get_hasher

DEMO_EMAIL = "demo@pineustilu.id"
DEMO_PASSWORD = "demo-password"


async def seed() -> None:
    """Insert the demo user unless it already exists."""
    await init_db()
    hasher = get_hasher(settings.password_hasher)
    async with async_session_factory() as session:
        repo = UserRepository(session)
        if await repo.find_by_email(DEMO_EMAIL) is not None:
            print(f"ℹ️  {DEMO_EMAIL} already exists, nothing to do.")
            return
        await repo.add(
            User(
                name="Demo Camper",
                email=DEMO_EMAIL,
                phone="+6281234567890",
                password_hash=await hasher.hash(DEMO_PASSWORD),
            )
        )
        await session.commit()
    print(f"✅ Seeded demo user {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(seed())
