"""Unit-of-work helper for service operations that must commit atomically."""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.errors import StorageError


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit once on success, roll back on any error.

    Driver-level failures (lost connection, deadlock victim, serialization
    failure) surface as StorageError, which callers may retry.
    """
    try:
        yield db
        await db.commit()
    except DBAPIError as exc:
        await db.rollback()
        raise StorageError(f"Transaction aborted: {exc.__class__.__name__}") from exc
    except Exception:
        await db.rollback()
        raise
