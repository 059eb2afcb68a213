# tests/unit/test_schemas.py
"""Tests for order and listing request/response schemas."""
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.tm_common.enums import ModerationAction
from src.tm_listing.application.schemas import (
    CreateListingRequest,
    ListingResponse,
    ModerateListingRequest,
)
from src.tm_listing.domain.models import InventoryItem, Listing
from src.tm_order.application.schemas import CreateOrderRequest, OrderResponse
from src.tm_order.domain.models import Order, OrderItem, Payment


class TestCreateOrderRequest:
    def test_valid(self) -> None:
        assert CreateOrderRequest(item_ids=["0001", "0002"]).item_ids == ["0001", "0002"]

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateOrderRequest(item_ids=[])

    def test_blank_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateOrderRequest(item_ids=["0001", " "])


class TestOrderResponse:
    def test_pending_order_has_deadline(self) -> None:
        order = Order(
            order_id="O1",
            buyer_id="b",
            items=[OrderItem("0001", 2500, "L1"), OrderItem("0002", 2500, "L1")],
            created_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
        )
        order.payment = Payment(payment_id="P1", order_id="O1", amount_cents=5000)

        resp = OrderResponse.from_domain(order, 300)

        assert resp.amount_cents == 5000
        assert resp.payment is not None
        assert resp.payment.status == "Pending"
        assert resp.payment_deadline_at == datetime(2026, 3, 1, 12, 5, tzinfo=UTC)

    def test_resolved_order_has_no_deadline(self) -> None:
        order = Order(
            order_id="O1",
            buyer_id="b",
            status="Cancelled",
            cancel_reason="PAYMENT_TIMEOUT",
            created_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
        )
        resp = OrderResponse.from_domain(order, 300)
        assert resp.payment_deadline_at is None
        assert resp.cancel_reason == "PAYMENT_TIMEOUT"


class TestListingSchemas:
    def test_naive_expiry_assumed_utc(self) -> None:
        req = CreateListingRequest(
            expires_at=datetime(2026, 5, 1, 20, 0),
            items=[{"ticket_id": "T1", "price_cents": 100, "face_value_cents": 100}],
        )
        assert req.expires_at.tzinfo is not None

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateListingRequest(
                expires_at=datetime(2026, 5, 1, tzinfo=UTC),
                items=[{"ticket_id": "T1", "price_cents": -1, "face_value_cents": 100}],
            )

    def test_moderation_action(self) -> None:
        assert ModerateListingRequest(action="approve").action == ModerationAction.APPROVE
        with pytest.raises(ValidationError):
            ModerateListingRequest(action="delete")

    def test_listing_response_without_flags(self) -> None:
        listing = Listing(
            listing_id="L1",
            seller_id="s",
            expires_at=datetime(2026, 5, 1, tzinfo=UTC),
            status="Pending",
            items=[InventoryItem("0001", "L1", "T1", 100, 100, "Pending")],
        )
        resp = ListingResponse.from_domain(listing)
        assert resp.risk_flags is None
        assert resp.items[0].status == "Pending"
