# tests/unit/test_order_lifecycle.py
"""Unit tests for OrderLifecycleManager with mock repositories and session."""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.tm_common.errors import (
    ForbiddenError,
    InvalidRequestError,
    InventoryConflictError,
    OrderAlreadyResolvedError,
    OrderItemsNotReservedError,
    OrderNotFoundError,
    SelfPurchaseError,
    StorageError,
)
from src.tm_listing.domain.models import InventoryItem, Listing
from src.tm_order.application.lifecycle import OrderLifecycleManager
from src.tm_order.domain.models import Order, OrderItem, Payment

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _clock() -> datetime:
    return NOW


def _item(item_id: str, status: str = "Active", price: int = 5000) -> InventoryItem:
    return InventoryItem(
        item_id=item_id,
        listing_id="L1",
        ticket_id=f"T-{item_id}",
        price_cents=price,
        face_value_cents=5000,
        status=status,
        seller_id="seller-1",
    )


def _listing(status: str = "Active") -> Listing:
    return Listing(
        listing_id="L1", seller_id="seller-1", expires_at=NOW + timedelta(days=1), status=status
    )


def _listing_repo(items: list[InventoryItem], listing: Listing | None = None) -> MagicMock:
    listing = listing or _listing()
    by_item = {i.item_id: i for i in items}
    repo = MagicMock()
    repo.listing_ids_for_items = AsyncMock(
        side_effect=lambda ids, db: {i: "L1" for i in ids if i in by_item}
    )
    repo.share_lock_listings = AsyncMock(return_value={"L1": listing})
    repo.lock_listings = AsyncMock(return_value={"L1": listing})
    repo.lock_items = AsyncMock(side_effect=lambda ids, db: [by_item[i] for i in sorted(ids)])
    repo.set_item_status = AsyncMock()
    repo.promote_sold_out_listings = AsyncMock(return_value=[])
    return repo


def _order(
    status: str = "Pending",
    payment_status: str = "Pending",
    created_at: datetime | None = None,
    item_ids: tuple[str, ...] = ("0001", "0002"),
) -> Order:
    order = Order(
        order_id="O1",
        buyer_id="buyer-1",
        status=status,
        items=[OrderItem(item_id=i, unit_price_cents=5000, listing_id="L1") for i in item_ids],
        created_at=created_at or NOW - timedelta(minutes=10),
    )
    order.payment = Payment(
        payment_id="P1", order_id="O1", amount_cents=order.amount_cents, status=payment_status
    )
    return order


def _order_repo(order: Order | None) -> MagicMock:
    repo = MagicMock()
    repo.save = AsyncMock()
    repo.lock_order = AsyncMock(return_value=order)
    repo.lock_payment = AsyncMock(return_value=order.payment if order else None)
    repo.get_by_id = AsyncMock(return_value=order)
    repo.update_order_status = AsyncMock()
    repo.update_payment_status = AsyncMock()
    return repo


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


class TestCreateOrder:
    async def test_reserves_and_persists_pending_order(self, db: AsyncMock) -> None:
        items = [_item("0001", price=4000), _item("0002", price=6000)]
        listings = _listing_repo(items)
        orders = _order_repo(None)
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        order = await mgr.create_order("buyer-1", ["0002", "0001"], db)

        assert order.status == "Pending"
        assert order.item_ids == ["0001", "0002"]
        assert order.amount_cents == 10000
        assert order.payment is not None
        assert order.payment.status == "Pending"
        assert order.payment.amount_cents == 10000
        assert all(i.status == "Sold" for i in items)
        orders.save.assert_awaited_once()
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_conflict_surfaces_as_inventory_conflict(self, db: AsyncMock) -> None:
        items = [_item("0001"), _item("0042", status="Sold")]
        orders = _order_repo(None)
        mgr = OrderLifecycleManager(orders, _listing_repo(items), clock=_clock)

        with pytest.raises(InventoryConflictError) as exc_info:
            await mgr.create_order("buyer-2", ["0001", "0042"], db)

        assert exc_info.value.item_ids == ["0042"]
        orders.save.assert_not_awaited()
        db.commit.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_self_purchase_rejected_and_rolled_back(self, db: AsyncMock) -> None:
        orders = _order_repo(None)
        mgr = OrderLifecycleManager(orders, _listing_repo([_item("0001")]), clock=_clock)

        with pytest.raises(SelfPurchaseError):
            await mgr.create_order("seller-1", ["0001"], db)

        orders.save.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_empty_item_list_rejected(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(_order_repo(None), _listing_repo([]), clock=_clock)
        with pytest.raises(InvalidRequestError):
            await mgr.create_order("buyer-1", [], db)
        db.commit.assert_not_awaited()

    async def test_too_many_items_rejected(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(
            _order_repo(None), _listing_repo([]), clock=_clock, max_items=2
        )
        with pytest.raises(InvalidRequestError):
            await mgr.create_order("buyer-1", ["1", "2", "3"], db)

    async def test_driver_failure_becomes_storage_error(self, db: AsyncMock) -> None:
        orders = _order_repo(None)
        orders.save = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("gone")))
        mgr = OrderLifecycleManager(orders, _listing_repo([_item("0001")]), clock=_clock)

        with pytest.raises(StorageError):
            await mgr.create_order("buyer-1", ["0001"], db)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestConfirmPayment:
    async def test_pending_order_becomes_paid(self, db: AsyncMock) -> None:
        order = _order()
        orders = _order_repo(order)
        listings = _listing_repo([_item("0001", "Sold"), _item("0002", "Sold")])
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        result = await mgr.confirm_payment("O1", db)

        assert result.status == "Paid"
        assert result.payment.status == "Completed"
        orders.update_payment_status.assert_awaited_once_with("O1", "Completed", db)
        orders.update_order_status.assert_awaited_once_with("O1", "Paid", None, db)
        listings.promote_sold_out_listings.assert_awaited_once_with(["L1"], db)
        db.commit.assert_awaited_once()

    async def test_lock_order_is_order_payment_listings_items(self, db: AsyncMock) -> None:
        order = _order()
        orders = _order_repo(order)
        listings = _listing_repo([_item("0001", "Sold"), _item("0002", "Sold")])
        calls: list[str] = []
        orders.lock_order.side_effect = lambda *a: calls.append("order") or order
        orders.lock_payment.side_effect = lambda *a: calls.append("payment") or order.payment
        listings.lock_listings.side_effect = lambda *a: calls.append("listings") or {}
        listings.lock_items.side_effect = lambda *a: calls.append("items") or [
            _item("0001", "Sold"),
            _item("0002", "Sold"),
        ]
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        await mgr.confirm_payment("O1", db)

        assert calls == ["order", "payment", "listings", "items"]

    async def test_duplicate_confirmation_is_noop(self, db: AsyncMock) -> None:
        order = _order(status="Paid", payment_status="Completed")
        orders = _order_repo(order)
        listings = _listing_repo([])
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        result = await mgr.confirm_payment("O1", db)

        assert result.status == "Paid"
        orders.update_order_status.assert_not_awaited()
        orders.update_payment_status.assert_not_awaited()
        listings.lock_items.assert_not_awaited()

    async def test_cancelled_order_cannot_be_paid(self, db: AsyncMock) -> None:
        order = _order(status="Cancelled", payment_status="Failed")
        order.cancel_reason = "PAYMENT_TIMEOUT"
        orders = _order_repo(order)
        mgr = OrderLifecycleManager(orders, _listing_repo([]), clock=_clock)

        with pytest.raises(OrderAlreadyResolvedError):
            await mgr.confirm_payment("O1", db)
        orders.update_order_status.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_items_no_longer_sold_is_invalid_state(self, db: AsyncMock) -> None:
        orders = _order_repo(_order())
        listings = _listing_repo([_item("0001", "Sold"), _item("0002", "Active")])
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        with pytest.raises(OrderItemsNotReservedError):
            await mgr.confirm_payment("O1", db)
        orders.update_payment_status.assert_not_awaited()

    async def test_unknown_order(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(_order_repo(None), _listing_repo([]), clock=_clock)
        with pytest.raises(OrderNotFoundError):
            await mgr.confirm_payment("nope", db)

    async def test_other_buyer_forbidden(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(_order_repo(_order()), _listing_repo([]), clock=_clock)
        with pytest.raises(ForbiddenError):
            await mgr.confirm_payment("O1", db, buyer_id="someone-else")


class TestCancelOrder:
    async def test_releases_items_and_fails_payment(self, db: AsyncMock) -> None:
        order = _order()
        orders = _order_repo(order)
        items = [_item("0001", "Sold"), _item("0002", "Sold")]
        listings = _listing_repo(items)
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        result = await mgr.cancel_order("O1", db, buyer_id="buyer-1")

        assert result.status == "Cancelled"
        assert result.cancel_reason == "BUYER_CANCELLED"
        assert result.payment.status == "Failed"
        listings.set_item_status.assert_awaited_once_with(["0001", "0002"], "Active", db)
        orders.update_payment_status.assert_awaited_once_with("O1", "Failed", db)
        orders.update_order_status.assert_awaited_once_with(
            "O1", "Cancelled", "BUYER_CANCELLED", db
        )
        db.commit.assert_awaited_once()

    @pytest.mark.parametrize(
        ("status", "payment_status"), [("Paid", "Completed"), ("Cancelled", "Failed")]
    )
    async def test_resolved_order_cannot_be_cancelled(
        self, db: AsyncMock, status: str, payment_status: str
    ) -> None:
        orders = _order_repo(_order(status=status, payment_status=payment_status))
        listings = _listing_repo([])
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        with pytest.raises(OrderAlreadyResolvedError):
            await mgr.cancel_order("O1", db)
        listings.set_item_status.assert_not_awaited()


class TestExpireOrder:
    async def test_overdue_order_is_cancelled_with_timeout_reason(self, db: AsyncMock) -> None:
        orders = _order_repo(_order(created_at=NOW - timedelta(minutes=6)))
        listings = _listing_repo([_item("0001", "Sold"), _item("0002", "Sold")])
        mgr = OrderLifecycleManager(orders, listings, clock=_clock)

        expired = await mgr.expire_order("O1", NOW - timedelta(minutes=5), db)

        assert expired is True
        orders.update_order_status.assert_awaited_once_with(
            "O1", "Cancelled", "PAYMENT_TIMEOUT", db
        )
        listings.set_item_status.assert_awaited_once_with(["0001", "0002"], "Active", db)
        db.commit.assert_awaited_once()

    async def test_paid_order_is_skipped(self, db: AsyncMock) -> None:
        orders = _order_repo(_order(status="Paid", payment_status="Completed"))
        mgr = OrderLifecycleManager(orders, _listing_repo([]), clock=_clock)

        assert await mgr.expire_order("O1", NOW, db) is False
        orders.update_order_status.assert_not_awaited()

    async def test_order_within_deadline_is_skipped(self, db: AsyncMock) -> None:
        orders = _order_repo(_order(created_at=NOW - timedelta(minutes=1)))
        mgr = OrderLifecycleManager(orders, _listing_repo([]), clock=_clock)

        assert await mgr.expire_order("O1", NOW - timedelta(minutes=5), db) is False
        orders.update_payment_status.assert_not_awaited()

    async def test_vanished_order_is_skipped(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(_order_repo(None), _listing_repo([]), clock=_clock)
        assert await mgr.expire_order("O1", NOW, db) is False


class TestGetOrder:
    async def test_owner_can_read(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(_order_repo(_order()), _listing_repo([]), clock=_clock)
        order = await mgr.get_order("O1", db, buyer_id="buyer-1")
        assert order.order_id == "O1"

    async def test_other_buyer_forbidden(self, db: AsyncMock) -> None:
        mgr = OrderLifecycleManager(_order_repo(_order()), _listing_repo([]), clock=_clock)
        with pytest.raises(ForbiddenError):
            await mgr.get_order("O1", db, buyer_id="intruder")
