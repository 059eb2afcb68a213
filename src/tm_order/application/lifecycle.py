"""OrderLifecycleManager — Pending -> {Paid, Cancelled} for orders and their payment.

Each public operation is one unit of work on the caller's session: it commits
exactly once at the end or rolls back, so Order, Payment and every referenced
inventory item move together.

Row lock order (shared with ReservationStateMachine and the listing service):
    orders -> payments -> listings (asc) -> listing_items (asc)
All state checks happen after the matching lock is held; READ COMMITTED plus
these explicit locks rules out write skew between confirm, cancel and the
timeout sweep.
"""
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tm_common.datetime_utils import Clock, utc_now
from src.tm_common.enums import CancelReason
from src.tm_common.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidRequestError,
    InventoryConflictError,
    OrderAlreadyResolvedError,
    OrderItemsNotReservedError,
    OrderNotFoundError,
    SelfPurchaseError,
)
from src.tm_common.id_generator import generate_id
from src.tm_common.transaction import transaction
from src.tm_listing.domain.repository import ListingRepositoryProtocol
from src.tm_listing.domain.reservation import ReservationStateMachine
from src.tm_listing.infrastructure.persistence import ListingRepository
from src.tm_order.domain.models import Order, OrderItem, Payment
from src.tm_order.domain.repository import OrderRepositoryProtocol
from src.tm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderLifecycleManager:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        clock: Clock = utc_now,
        max_items: int | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._reservations = ReservationStateMachine(self._listings, clock)
        self._max_items = max_items or settings.MAX_ITEMS_PER_ORDER

    async def create_order(self, buyer_id: str, item_ids: list[str], db: AsyncSession) -> Order:
        """Reserve items and open a Pending order with a Pending payment."""
        unique_ids = sorted(set(item_ids))
        if not unique_ids:
            raise InvalidRequestError("an order needs at least one item")
        if len(unique_ids) > self._max_items:
            raise InvalidRequestError(f"an order may hold at most {self._max_items} items")

        async with transaction(db):
            try:
                items = await self._reservations.reserve(unique_ids, db)
            except ConflictError as exc:
                raise InventoryConflictError(exc.item_ids) from exc
            if any(item.seller_id == buyer_id for item in items):
                raise SelfPurchaseError()

            order = Order(
                order_id=generate_id(),
                buyer_id=buyer_id,
                items=[
                    OrderItem(
                        item_id=item.item_id,
                        unit_price_cents=item.price_cents,
                        listing_id=item.listing_id,
                    )
                    for item in items
                ],
            )
            order.payment = Payment(
                payment_id=generate_id(),
                order_id=order.order_id,
                amount_cents=order.amount_cents,
            )
            await self._orders.save(order, db)

        logger.info(
            "Order %s created for buyer %s: %d items, %d cents",
            order.order_id,
            buyer_id,
            len(order.items),
            order.amount_cents,
        )
        return order

    async def _lock_order_and_payment(
        self, order_id: str, db: AsyncSession, buyer_id: str | None
    ) -> tuple[Order, Payment]:
        order = await self._orders.lock_order(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if buyer_id is not None and order.buyer_id != buyer_id:
            raise ForbiddenError()
        payment = await self._orders.lock_payment(order_id, db)
        if payment is None:
            raise InternalError(f"Order {order_id} has no payment record")
        order.payment = payment
        return order, payment

    async def confirm_payment(
        self, order_id: str, db: AsyncSession, *, buyer_id: str | None = None
    ) -> Order:
        """Payment succeeded: Payment -> Completed, Order -> Paid.

        A repeat call on a Paid order returns it unchanged; payment callbacks
        may be delivered more than once.
        """
        async with transaction(db):
            order, payment = await self._lock_order_and_payment(order_id, db, buyer_id)
            if order.status == "Paid" and payment.status == "Completed":
                logger.info("Duplicate payment confirmation for order %s ignored", order_id)
                return order
            if not order.is_pending or payment.status != "Pending":
                raise OrderAlreadyResolvedError(order_id, order.status)

            listing_ids = sorted({i.listing_id for i in order.items if i.listing_id})
            await self._listings.lock_listings(listing_ids, db)
            items = await self._listings.lock_items(order.item_ids, db)
            if len(items) != len(order.items) or any(i.status != "Sold" for i in items):
                raise OrderItemsNotReservedError(order_id)

            await self._orders.update_payment_status(order_id, "Completed", db)
            await self._orders.update_order_status(order_id, "Paid", None, db)
            sold_out = await self._listings.promote_sold_out_listings(listing_ids, db)
            order.status = "Paid"
            payment.status = "Completed"

        logger.info("Order %s paid", order_id)
        if sold_out:
            logger.info("Listings sold out: %s", sold_out)
        return order

    async def _cancel_locked(self, order: Order, reason: str, db: AsyncSession) -> None:
        released = await self._reservations.release(order.item_ids, db)
        await self._orders.update_payment_status(order.order_id, "Failed", db)
        await self._orders.update_order_status(order.order_id, "Cancelled", reason, db)
        order.status = "Cancelled"
        order.cancel_reason = reason
        if order.payment is not None:
            order.payment.status = "Failed"
        logger.info(
            "Order %s cancelled (%s), %d items released", order.order_id, reason, released
        )

    async def cancel_order(
        self, order_id: str, db: AsyncSession, *, buyer_id: str | None = None
    ) -> Order:
        """Buyer abandons checkout: release items, Payment -> Failed, Order -> Cancelled."""
        async with transaction(db):
            order, _ = await self._lock_order_and_payment(order_id, db, buyer_id)
            if not order.is_pending:
                raise OrderAlreadyResolvedError(order_id, order.status)
            await self._cancel_locked(order, CancelReason.BUYER_CANCELLED.value, db)
        return order

    async def expire_order(self, order_id: str, cutoff: datetime, db: AsyncSession) -> bool:
        """Cancel one order whose payment deadline passed.

        Returns False without writing anything if, once locked, the order no
        longer qualifies (confirmed or cancelled by a racing caller).
        """
        async with transaction(db):
            order = await self._orders.lock_order(order_id, db)
            if order is None or not order.is_pending:
                return False
            order.payment = await self._orders.lock_payment(order_id, db)
            if order.payment is None or order.payment.status != "Pending":
                return False
            if order.created_at is None or order.created_at >= cutoff:
                return False
            await self._cancel_locked(order, CancelReason.PAYMENT_TIMEOUT.value, db)
        return True

    async def get_order(
        self, order_id: str, db: AsyncSession, *, buyer_id: str | None = None
    ) -> Order:
        order = await self._orders.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        if buyer_id is not None and order.buyer_id != buyer_id:
            raise ForbiddenError()
        return order


_manager: OrderLifecycleManager | None = None


def get_lifecycle_manager() -> OrderLifecycleManager:
    global _manager  # noqa: PLW0603
    if _manager is None:
        _manager = OrderLifecycleManager()
    return _manager
