"""Sweep lease — keeps replicas from running the same pass at the same time.

Row locks already make concurrent passes correct; the lease only saves the
duplicated work. Losing Redis therefore degrades to "every replica sweeps".
"""
import logging
import uuid
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from config.settings import settings
from src.tm_common.redis_client import get_redis

logger = logging.getLogger(__name__)


class SweepLease(Protocol):
    async def acquire(self, ttl_ms: int) -> bool: ...


class RedisSweepLease:
    """SET key owner NX PX ttl. The lease simply expires; nothing releases it."""

    def __init__(self, redis: Redis | None = None, key: str | None = None) -> None:
        self._redis = redis
        self._key = key or settings.SWEEPER_LEASE_KEY
        self._owner = uuid.uuid4().hex

    async def acquire(self, ttl_ms: int) -> bool:
        try:
            redis = self._redis or await get_redis()
            acquired = await redis.set(self._key, self._owner, nx=True, px=ttl_ms)
        except RedisError:
            logger.warning("Sweep lease unavailable (Redis error); sweeping anyway", exc_info=True)
            return True
        return bool(acquired)
