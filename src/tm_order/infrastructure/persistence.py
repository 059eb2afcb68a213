# src/tm_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence for orders, order_items and payments."""
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_order.domain.models import Order, OrderItem, Payment

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (order_id, buyer_id, status)
    VALUES (:order_id, :buyer_id, :status)
    RETURNING created_at
""")

_INSERT_ORDER_ITEM_SQL = text("""
    INSERT INTO order_items (order_id, item_id, unit_price_cents)
    VALUES (:order_id, :item_id, :unit_price_cents)
""")

_INSERT_PAYMENT_SQL = text("""
    INSERT INTO payments (payment_id, order_id, amount_cents, status)
    VALUES (:payment_id, :order_id, :amount_cents, :status)
""")

_ORDER_COLUMNS = "order_id, buyer_id, status, cancel_reason, created_at, updated_at"
_PAYMENT_COLUMNS = "payment_id, order_id, amount_cents, status, paid_at"

_GET_ORDER_SQL = text(f"SELECT {_ORDER_COLUMNS} FROM orders WHERE order_id = :order_id")

_LOCK_ORDER_SQL = text(f"""
    SELECT {_ORDER_COLUMNS} FROM orders WHERE order_id = :order_id FOR UPDATE
""")

_GET_ORDER_ITEMS_SQL = text("""
    SELECT oi.item_id, oi.unit_price_cents, li.listing_id
    FROM order_items oi JOIN listing_items li ON li.item_id = oi.item_id
    WHERE oi.order_id = :order_id
    ORDER BY oi.item_id
""")

_GET_PAYMENT_SQL = text(f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE order_id = :order_id")

_LOCK_PAYMENT_SQL = text(f"""
    SELECT {_PAYMENT_COLUMNS} FROM payments WHERE order_id = :order_id FOR UPDATE
""")

_UPDATE_ORDER_SQL = text("""
    UPDATE orders SET status = :status, cancel_reason = :cancel_reason, updated_at = NOW()
    WHERE order_id = :order_id
""")

_UPDATE_PAYMENT_SQL = text("""
    UPDATE payments
    SET status = :status,
        paid_at = CASE WHEN :status = 'Completed' THEN NOW() ELSE paid_at END
    WHERE order_id = :order_id
""")

# Candidate scan only; each order is re-checked under its own row lock.
_FIND_EXPIRED_SQL = text("""
    SELECT o.order_id
    FROM orders o JOIN payments p ON p.order_id = o.order_id
    WHERE o.status = 'Pending'
      AND p.status = 'Pending'
      AND o.created_at < :cutoff
    ORDER BY o.created_at, o.order_id
    LIMIT :limit
""")

_NOW_SQL = text("SELECT NOW() AS now")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    return Order(
        order_id=row.order_id,
        buyer_id=row.buyer_id,
        status=row.status,
        cancel_reason=row.cancel_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_payment(row: Any) -> Payment:
    return Payment(
        payment_id=row.payment_id,
        order_id=row.order_id,
        amount_cents=row.amount_cents,
        status=row.status,
        paid_at=row.paid_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {"order_id": order.order_id, "buyer_id": order.buyer_id, "status": order.status},
        )
        row = result.fetchone()
        if row is not None:
            order.created_at = row.created_at
        for item in order.items:
            await db.execute(
                _INSERT_ORDER_ITEM_SQL,
                {
                    "order_id": order.order_id,
                    "item_id": item.item_id,
                    "unit_price_cents": item.unit_price_cents,
                },
            )
        if order.payment is not None:
            await db.execute(
                _INSERT_PAYMENT_SQL,
                {
                    "payment_id": order.payment.payment_id,
                    "order_id": order.order_id,
                    "amount_cents": order.payment.amount_cents,
                    "status": order.payment.status,
                },
            )

    async def _load_children(self, order: Order, db: AsyncSession) -> Order:
        rows = (
            await db.execute(_GET_ORDER_ITEMS_SQL, {"order_id": order.order_id})
        ).fetchall()
        order.items = [
            OrderItem(
                item_id=r.item_id, unit_price_cents=r.unit_price_cents, listing_id=r.listing_id
            )
            for r in rows
        ]
        return order

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        row = (await db.execute(_GET_ORDER_SQL, {"order_id": order_id})).fetchone()
        if row is None:
            return None
        order = await self._load_children(_row_to_order(row), db)
        payment_row = (await db.execute(_GET_PAYMENT_SQL, {"order_id": order_id})).fetchone()
        order.payment = _row_to_payment(payment_row) if payment_row else None
        return order

    async def lock_order(self, order_id: str, db: AsyncSession) -> Order | None:
        """SELECT ... FOR UPDATE on the order row. Items are immutable and read unlocked."""
        row = (await db.execute(_LOCK_ORDER_SQL, {"order_id": order_id})).fetchone()
        if row is None:
            return None
        return await self._load_children(_row_to_order(row), db)

    async def lock_payment(self, order_id: str, db: AsyncSession) -> Payment | None:
        row = (await db.execute(_LOCK_PAYMENT_SQL, {"order_id": order_id})).fetchone()
        return _row_to_payment(row) if row else None

    async def update_order_status(
        self, order_id: str, status: str, cancel_reason: str | None, db: AsyncSession
    ) -> None:
        await db.execute(
            _UPDATE_ORDER_SQL,
            {"order_id": order_id, "status": status, "cancel_reason": cancel_reason},
        )

    async def update_payment_status(
        self, order_id: str, status: str, db: AsyncSession
    ) -> None:
        await db.execute(_UPDATE_PAYMENT_SQL, {"order_id": order_id, "status": status})

    async def find_expired_order_ids(
        self, cutoff: datetime, limit: int, db: AsyncSession
    ) -> list[str]:
        rows = (
            await db.execute(_FIND_EXPIRED_SQL, {"cutoff": cutoff, "limit": limit})
        ).fetchall()
        return [r.order_id for r in rows]

    async def database_now(self, db: AsyncSession) -> datetime:
        """Server clock; orders.created_at defaults to it, so deadlines are measured on it."""
        return (await db.execute(_NOW_SQL)).scalar_one()
