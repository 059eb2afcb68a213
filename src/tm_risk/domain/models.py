# src/tm_risk/domain/models.py
"""Risk domain models — pure dataclasses, no I/O."""
from dataclasses import dataclass, field
from datetime import datetime

# A seller below this verification tier is considered new.
MIN_TRUSTED_TIER = 2


@dataclass
class RiskFlag:
    flag_type: str
    reason: str
    listing_id: str | None = None
    flag_id: str | None = None
    created_at: datetime | None = None


@dataclass
class RiskItem:
    ticket_id: str
    price_cents: int
    face_value_cents: int


@dataclass
class ListingRiskContext:
    """Everything the rules look at: the listing's items and its seller."""

    listing_id: str
    seller_id: str
    verification_tier: int = 0
    # listings by the same seller created before this one
    prior_listings: int = 0
    is_blacklisted: bool = False
    items: list[RiskItem] = field(default_factory=list)
