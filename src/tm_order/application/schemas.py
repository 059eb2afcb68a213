# src/tm_order/application/schemas.py
from datetime import datetime, timedelta

from pydantic import BaseModel, Field, field_validator

from src.tm_order.domain.models import Order


class CreateOrderRequest(BaseModel):
    item_ids: list[str] = Field(min_length=1)

    @field_validator("item_ids")
    @classmethod
    def no_blank_ids(cls, v: list[str]) -> list[str]:
        if any(not i or i != i.strip() for i in v):
            raise ValueError("item_ids must not contain blank or padded ids")
        return v


class OrderItemResponse(BaseModel):
    item_id: str
    listing_id: str | None
    unit_price_cents: int


class PaymentResponse(BaseModel):
    payment_id: str
    amount_cents: int
    status: str
    paid_at: datetime | None = None


class OrderResponse(BaseModel):
    order_id: str
    buyer_id: str
    status: str
    cancel_reason: str | None = None
    amount_cents: int
    items: list[OrderItemResponse]
    payment: PaymentResponse | None
    created_at: datetime | None = None
    payment_deadline_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order, deadline_seconds: int) -> "OrderResponse":
        deadline = (
            order.created_at + timedelta(seconds=deadline_seconds)
            if order.created_at is not None and order.is_pending
            else None
        )
        payment = order.payment
        return cls(
            order_id=order.order_id,
            buyer_id=order.buyer_id,
            status=order.status,
            cancel_reason=order.cancel_reason,
            amount_cents=order.amount_cents,
            items=[
                OrderItemResponse(
                    item_id=i.item_id, listing_id=i.listing_id, unit_price_cents=i.unit_price_cents
                )
                for i in order.items
            ],
            payment=(
                PaymentResponse(
                    payment_id=payment.payment_id,
                    amount_cents=payment.amount_cents,
                    status=payment.status,
                    paid_at=payment.paid_at,
                )
                if payment
                else None
            ),
            created_at=order.created_at,
            payment_deadline_at=deadline,
        )
