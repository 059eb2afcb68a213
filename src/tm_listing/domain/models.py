"""Listing domain models — pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class InventoryItem:
    """One ticket offered inside one listing. Prices in cents."""

    item_id: str
    listing_id: str
    ticket_id: str
    price_cents: int
    face_value_cents: int
    status: str  # Pending / Active / Sold / Expired / Cancelled
    # Parent listing context, populated by locking reads
    listing_status: str | None = None
    seller_id: str | None = None


@dataclass
class Listing:
    listing_id: str
    seller_id: str
    expires_at: datetime
    status: str  # Pending / Active / Sold / Expired / Cancelled / Rejected
    items: list[InventoryItem] = field(default_factory=list)
    created_at: datetime | None = None

    def is_on_sale(self, now: datetime) -> bool:
        """Active and not yet past expires_at; only such listings accept reservations."""
        return self.status == "Active" and self.expires_at > now
