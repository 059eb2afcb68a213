"""Integration-test fixtures.

These tests need a PostgreSQL database with migrations applied
(alembic upgrade head) and run only when TM_INTEGRATION=1. Each test gets its
own engine so asyncpg connections never outlive the test's event loop.
"""

from collections.abc import AsyncIterator

import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config.settings import settings


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(settings.DATABASE_URL, isolation_level="READ COMMITTED")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    async with engine.begin() as conn:
        await conn.execute(
            text("TRUNCATE payments, order_items, orders, listing_risk_flags, "
                 "listing_items, listings, seller_blacklist, sellers")
        )
    await engine.dispose()
