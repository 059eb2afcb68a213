"""Order domain models — pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class OrderItem:
    item_id: str
    unit_price_cents: int
    listing_id: str | None = None


@dataclass
class Payment:
    payment_id: str
    order_id: str
    amount_cents: int
    status: str = "Pending"  # Pending / Completed / Failed
    paid_at: datetime | None = None


@dataclass
class Order:
    order_id: str
    buyer_id: str
    status: str = "Pending"  # Pending / Paid / Cancelled
    items: list[OrderItem] = field(default_factory=list)
    payment: Payment | None = None
    cancel_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "Pending"

    @property
    def item_ids(self) -> list[str]:
        return sorted(i.item_id for i in self.items)

    @property
    def amount_cents(self) -> int:
        return sum(i.unit_price_cents for i in self.items)
