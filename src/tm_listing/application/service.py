"""ListingApplicationService — every write path that moves a listing.

Keeps listing and item status in step inside one transaction:
  submit   -> listing Pending, items Pending (+ risk flags)
  approve  -> listing Active,  items Pending -> Active
  reject   -> listing Rejected, items Pending -> Cancelled
  cancel   -> listing Cancelled, unsold items -> Cancelled
  expire   -> listing Expired, unsold items -> Expired
Items already Sold to a paid order are never touched. A listing with tickets
held by an unpaid order is not ended until that order resolves.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tm_common.datetime_utils import Clock, utc_now
from src.tm_common.enums import ModerationAction
from src.tm_common.errors import (
    ForbiddenError,
    InvalidRequestError,
    ListingHasPendingOrdersError,
    ListingNotFoundError,
    ListingStateError,
)
from src.tm_common.id_generator import generate_id
from src.tm_common.transaction import transaction
from src.tm_listing.application.schemas import ListingItemInput
from src.tm_listing.domain.models import InventoryItem, Listing
from src.tm_listing.domain.repository import ListingRepositoryProtocol
from src.tm_listing.infrastructure.persistence import ListingRepository
from src.tm_risk.application.engine import RiskAssessmentEngine
from src.tm_risk.domain.models import RiskFlag

logger = logging.getLogger(__name__)


@dataclass
class ExpireResult:
    expired: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class ListingApplicationService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        risk_engine: RiskAssessmentEngine | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._risk = risk_engine or RiskAssessmentEngine()
        self._clock = clock

    async def submit_listing(
        self,
        seller_id: str,
        expires_at: datetime,
        items: list[ListingItemInput],
        db: AsyncSession,
    ) -> tuple[Listing, list[RiskFlag]]:
        if not items:
            raise InvalidRequestError("a listing needs at least one ticket")
        if expires_at <= self._clock():
            raise InvalidRequestError("expires_at must be in the future")

        listing_id = generate_id()
        listing = Listing(
            listing_id=listing_id,
            seller_id=seller_id,
            expires_at=expires_at,
            status="Pending",
            items=[
                InventoryItem(
                    item_id=generate_id(),
                    listing_id=listing_id,
                    ticket_id=i.ticket_id,
                    price_cents=i.price_cents,
                    face_value_cents=i.face_value_cents,
                    status="Pending",
                    listing_status="Pending",
                    seller_id=seller_id,
                )
                for i in items
            ],
        )
        async with transaction(db):
            await self._repo.save(listing, db)
            flags = await self._risk.evaluate_listing_risk(listing_id, db)

        logger.info(
            "Listing %s submitted by %s with %d tickets, %d risk flags",
            listing_id,
            seller_id,
            len(listing.items),
            len(flags),
        )
        return listing, flags

    async def moderate_listing(
        self, listing_id: str, action: ModerationAction, db: AsyncSession
    ) -> Listing:
        async with transaction(db):
            listing = await self._repo.lock_listing(listing_id, db)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if listing.status != "Pending":
                raise ListingStateError(listing_id, listing.status, action.value)

            if action == ModerationAction.APPROVE:
                item_status, listing_status = "Active", "Active"
            else:
                item_status, listing_status = "Cancelled", "Rejected"
            await self._repo.set_item_status_for_listing(
                listing_id, ["Pending"], item_status, db
            )
            await self._repo.update_listing_status(listing_id, listing_status, db)

        listing.status = listing_status
        for item in listing.items:
            if item.status == "Pending":
                item.status = item_status
            item.listing_status = listing_status
        logger.info("Listing %s moderated: %s -> %s", listing_id, action.value, listing_status)
        return listing

    async def cancel_listing(
        self, listing_id: str, seller_id: str, db: AsyncSession
    ) -> Listing:
        """Seller withdraws an Active listing."""
        async with transaction(db):
            listing = await self._repo.lock_listing(listing_id, db)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if listing.seller_id != seller_id:
                raise ForbiddenError()
            if listing.status != "Active":
                raise ListingStateError(listing_id, listing.status, "cancel")
            held = await self._repo.count_items_held_by_pending_orders(listing_id, db)
            if held:
                raise ListingHasPendingOrdersError(listing_id, held)

            await self._repo.set_item_status_for_listing(
                listing_id, ["Pending", "Active"], "Cancelled", db
            )
            await self._repo.update_listing_status(listing_id, "Cancelled", db)

        listing.status = "Cancelled"
        for item in listing.items:
            if item.status in ("Pending", "Active"):
                item.status = "Cancelled"
            item.listing_status = "Cancelled"
        logger.info("Listing %s cancelled by seller %s", listing_id, seller_id)
        return listing

    async def expire_listings(
        self, db: AsyncSession, now: datetime | None = None, limit: int | None = None
    ) -> ExpireResult:
        """End Active listings past expires_at. Commits once for the batch."""
        now = now or self._clock()
        result = ExpireResult()
        async with transaction(db):
            listing_ids = await self._repo.lock_expired_listings(
                now, limit or settings.SWEEP_BATCH_LIMIT, db
            )
            for listing_id in listing_ids:
                if await self._repo.count_items_held_by_pending_orders(listing_id, db):
                    result.skipped.append(listing_id)
                    continue
                await self._repo.set_item_status_for_listing(
                    listing_id, ["Active"], "Expired", db
                )
                await self._repo.update_listing_status(listing_id, "Expired", db)
                result.expired.append(listing_id)

        if listing_ids:
            logger.info(
                "Listing expiry: %d expired, %d deferred (held by unpaid orders)",
                len(result.expired),
                len(result.skipped),
            )
        return result

    async def get_listing(self, listing_id: str, db: AsyncSession) -> Listing:
        listing = await self._repo.get_by_id(listing_id, db)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing

    async def list_risk_flags(self, listing_id: str, db: AsyncSession) -> list[RiskFlag]:
        await self.get_listing(listing_id, db)
        return await self._risk.list_flags(listing_id, db)


_service: ListingApplicationService | None = None


def get_listing_service() -> ListingApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = ListingApplicationService()
    return _service
