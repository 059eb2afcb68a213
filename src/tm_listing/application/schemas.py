# src/tm_listing/application/schemas.py
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

from src.tm_common.enums import ModerationAction
from src.tm_listing.domain.models import Listing
from src.tm_risk.domain.models import RiskFlag


class ListingItemInput(BaseModel):
    ticket_id: str = Field(min_length=1, max_length=64)
    price_cents: int = Field(ge=0)
    face_value_cents: int = Field(ge=0)


class CreateListingRequest(BaseModel):
    expires_at: datetime
    items: list[ListingItemInput] = Field(min_length=1)

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def unique_tickets(self) -> "CreateListingRequest":
        ticket_ids = [i.ticket_id for i in self.items]
        if len(ticket_ids) != len(set(ticket_ids)):
            raise ValueError("ticket_id must be unique within a listing")
        return self


class ModerateListingRequest(BaseModel):
    action: ModerationAction


class ListingItemResponse(BaseModel):
    item_id: str
    ticket_id: str
    price_cents: int
    face_value_cents: int
    status: str


class RiskFlagResponse(BaseModel):
    flag_type: str
    reason: str
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, flag: RiskFlag) -> "RiskFlagResponse":
        return cls(flag_type=flag.flag_type, reason=flag.reason, created_at=flag.created_at)


class ListingResponse(BaseModel):
    listing_id: str
    seller_id: str
    status: str
    expires_at: datetime
    created_at: datetime | None = None
    items: list[ListingItemResponse]
    risk_flags: list[RiskFlagResponse] | None = None

    @classmethod
    def from_domain(
        cls, listing: Listing, flags: list[RiskFlag] | None = None
    ) -> "ListingResponse":
        return cls(
            listing_id=listing.listing_id,
            seller_id=listing.seller_id,
            status=listing.status,
            expires_at=listing.expires_at,
            created_at=listing.created_at,
            items=[
                ListingItemResponse(
                    item_id=i.item_id,
                    ticket_id=i.ticket_id,
                    price_cents=i.price_cents,
                    face_value_cents=i.face_value_cents,
                    status=i.status,
                )
                for i in listing.items
            ],
            risk_flags=(
                [RiskFlagResponse.from_domain(f) for f in flags] if flags is not None else None
            ),
        )

