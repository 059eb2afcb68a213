"""UTC datetime utilities."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def cutoff_before(now: datetime, seconds: int) -> datetime:
    """Instant `seconds` before `now`; rows created before it are past the deadline."""
    return now - timedelta(seconds=seconds)
