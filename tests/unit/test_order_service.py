# tests/unit/test_order_service.py
"""Unit tests for the order application service with a mocked lifecycle manager."""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import settings
from src.tm_order.application import service as order_service
from src.tm_order.application.schemas import CreateOrderRequest, OrderResponse
from src.tm_order.domain.models import Order, OrderItem, Payment

CREATED = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _order(status: str = "Pending") -> Order:
    order = Order(
        order_id="O1",
        buyer_id="buyer-1",
        status=status,
        items=[OrderItem("0001", 4000, listing_id="L1")],
        created_at=CREATED,
    )
    order.payment = Payment(payment_id="P1", order_id="O1", amount_cents=4000)
    return order


@pytest.fixture
def manager(monkeypatch):
    mgr = MagicMock()
    monkeypatch.setattr(order_service, "get_lifecycle_manager", lambda: mgr)
    monkeypatch.setattr(settings, "PAYMENT_DEADLINE_SECONDS", 300)
    return mgr


class TestOrderService:
    async def test_create_maps_order_and_deadline(self, manager) -> None:
        manager.create_order = AsyncMock(return_value=_order())
        db = AsyncMock()

        resp = await order_service.create_order(
            CreateOrderRequest(item_ids=["0001"]), "buyer-1", db
        )

        assert isinstance(resp, OrderResponse)
        assert resp.amount_cents == 4000
        assert resp.payment_deadline_at == CREATED + timedelta(seconds=300)
        manager.create_order.assert_awaited_once_with("buyer-1", ["0001"], db)

    async def test_pay_passes_buyer_and_drops_deadline(self, manager) -> None:
        manager.confirm_payment = AsyncMock(return_value=_order("Paid"))
        db = AsyncMock()

        resp = await order_service.pay_order("O1", "buyer-1", db)

        assert resp.status == "Paid"
        assert resp.payment_deadline_at is None
        manager.confirm_payment.assert_awaited_once_with("O1", db, buyer_id="buyer-1")

    async def test_cancel_and_get_scope_to_buyer(self, manager) -> None:
        manager.cancel_order = AsyncMock(return_value=_order("Cancelled"))
        manager.get_order = AsyncMock(return_value=_order())
        db = AsyncMock()

        assert (await order_service.cancel_order("O1", "buyer-1", db)).status == "Cancelled"
        assert (await order_service.get_order("O1", "buyer-1", db)).order_id == "O1"
        assert manager.get_order.await_args.kwargs == {"buyer_id": "buyer-1"}
