# src/tm_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer."""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_order.domain.models import Order, Payment


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> None: ...

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None: ...

    async def lock_order(self, order_id: str, db: AsyncSession) -> Order | None: ...

    async def lock_payment(self, order_id: str, db: AsyncSession) -> Payment | None: ...

    async def update_order_status(
        self, order_id: str, status: str, cancel_reason: str | None, db: AsyncSession
    ) -> None: ...

    async def update_payment_status(
        self, order_id: str, status: str, db: AsyncSession
    ) -> None: ...

    async def find_expired_order_ids(
        self, cutoff: datetime, limit: int, db: AsyncSession
    ) -> list[str]: ...

    async def database_now(self, db: AsyncSession) -> datetime: ...
