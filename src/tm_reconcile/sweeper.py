"""Timeout reconciliation sweeper.

Cancels orders whose payment deadline passed and puts their tickets back on
sale. Each candidate is resolved in its own session and transaction through
OrderLifecycleManager.expire_order, which re-checks the order under its row
lock; an order confirmed in the meantime is simply skipped.

The recurring loop is an asyncio task owned by the application lifespan:
    sweeper.start()        # on startup
    await sweeper.stop()   # on shutdown
run_once() performs a single pass and is what tests and the admin endpoint call.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.tm_common.datetime_utils import Clock, cutoff_before, utc_now
from src.tm_order.application.lifecycle import OrderLifecycleManager
from src.tm_order.domain.repository import OrderRepositoryProtocol
from src.tm_order.infrastructure.persistence import OrderRepository
from src.tm_reconcile.lease import SweepLease

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    found: int = 0
    cancelled: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled_order_ids: list[str] = field(default_factory=list)
    failed_order_ids: list[str] = field(default_factory=list)
    lease_held_elsewhere: bool = False


class TimeoutSweeper:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lifecycle: OrderLifecycleManager | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        clock: Clock | None = None,
        deadline_seconds: int | None = None,
        interval_seconds: int | None = None,
        batch_limit: int | None = None,
        lease: SweepLease | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._lifecycle = lifecycle or OrderLifecycleManager(clock=clock or utc_now)
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._clock = clock
        self._deadline = deadline_seconds or settings.PAYMENT_DEADLINE_SECONDS
        self._interval = interval_seconds or settings.SWEEP_INTERVAL_SECONDS
        self._batch_limit = batch_limit or settings.SWEEP_BATCH_LIMIT
        self._lease = lease
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _find_candidates(self) -> tuple[datetime, list[str]]:
        async with self._session_factory() as db:
            try:
                # orders.created_at is stamped by the database, so the cutoff is too
                now = self._clock() if self._clock else await self._orders.database_now(db)
                cutoff = cutoff_before(now, self._deadline)
                ids = await self._orders.find_expired_order_ids(cutoff, self._batch_limit, db)
                return cutoff, ids
            finally:
                await db.rollback()

    async def run_once(self) -> SweepResult:
        """One reconciliation pass. Never raises for a single bad order."""
        result = SweepResult()
        if self._lease is not None:
            # Lease outlives the pass by a margin but not a full interval
            if not await self._lease.acquire(int(self._interval * 1000 * 0.9)):
                result.lease_held_elsewhere = True
                logger.debug("Sweep skipped: lease held by another replica")
                return result

        cutoff, order_ids = await self._find_candidates()
        result.found = len(order_ids)

        for order_id in order_ids:
            try:
                async with self._session_factory() as db:
                    expired = await self._lifecycle.expire_order(order_id, cutoff, db)
            except Exception:
                logger.exception("Sweep failed to reconcile order %s; retrying next pass", order_id)
                result.failed += 1
                result.failed_order_ids.append(order_id)
                continue
            if expired:
                result.cancelled += 1
                result.cancelled_order_ids.append(order_id)
            else:
                result.skipped += 1

        if result.found:
            logger.info(
                "Sweep pass: %d overdue, %d cancelled, %d skipped, %d failed",
                result.found,
                result.cancelled,
                result.skipped,
                result.failed,
            )
        return result

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Sweep pass aborted")
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval)
            except TimeoutError:
                pass

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._loop(), name="timeout-sweeper")
        logger.info(
            "Timeout sweeper started (deadline %ss, interval %ss)", self._deadline, self._interval
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        try:
            await self._task
        finally:
            self._task = None
        logger.info("Timeout sweeper stopped")
