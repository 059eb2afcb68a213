"""ReservationStateMachine — exclusive Active <-> Sold transitions for inventory items.

Both operations run inside the caller's transaction and never commit. Locks
are taken parent listings first (FOR SHARE, ascending listing_id), then items
(FOR UPDATE, ascending item_id), so two overlapping batches can never wait on
each other in opposite order. Whichever caller locks the first shared item
wins; the others block on it and then observe Sold.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.datetime_utils import Clock, utc_now
from src.tm_common.errors import ConflictError, ItemNotFoundError
from src.tm_listing.domain.models import InventoryItem, Listing
from src.tm_listing.domain.repository import ListingRepositoryProtocol

logger = logging.getLogger(__name__)

# Where a released item lands, keyed by its parent listing status. Keeps an
# item of a Pending listing Pending and never re-activates items of ended listings.
_RELEASE_TARGET: dict[str, str] = {
    "Active": "Active",
    "Pending": "Pending",
    "Expired": "Expired",
    "Cancelled": "Cancelled",
    "Rejected": "Cancelled",
}


class ReservationStateMachine:
    def __init__(self, repo: ListingRepositoryProtocol, clock: Clock = utc_now) -> None:
        self._repo = repo
        self._clock = clock

    async def _lock(
        self, item_ids: list[str], db: AsyncSession
    ) -> tuple[dict[str, Listing], list[InventoryItem]]:
        ids = sorted(set(item_ids))
        owners = await self._repo.listing_ids_for_items(ids, db)
        missing = [i for i in ids if i not in owners]
        if missing:
            raise ItemNotFoundError(missing)
        listings = await self._repo.share_lock_listings(sorted(set(owners.values())), db)
        items = await self._repo.lock_items(ids, db)
        return listings, items

    async def reserve(self, item_ids: list[str], db: AsyncSession) -> list[InventoryItem]:
        """Move every item Active -> Sold, or none of them.

        Raises ItemNotFoundError for unknown ids and ConflictError if any item
        is not Active or its listing is not an unexpired Active listing.
        """
        listings, items = await self._lock(item_ids, db)
        now = self._clock()
        unavailable = [
            item.item_id
            for item in items
            if item.status != "Active" or not listings[item.listing_id].is_on_sale(now)
        ]
        if unavailable:
            logger.info("Reservation rejected, unavailable items: %s", unavailable)
            raise ConflictError(unavailable)

        await self._repo.set_item_status([i.item_id for i in items], "Sold", db)
        for item in items:
            item.status = "Sold"
        return items

    async def release(self, item_ids: list[str], db: AsyncSession) -> int:
        """Move Sold items back to sale. Items in any other status are left alone.

        Returns the number of items released. Safe to repeat.
        """
        if not item_ids:
            return 0
        listings, items = await self._lock(item_ids, db)
        by_target: dict[str, list[str]] = {}
        for item in items:
            if item.status != "Sold":
                continue
            target = _RELEASE_TARGET.get(listings[item.listing_id].status, "Active")
            by_target.setdefault(target, []).append(item.item_id)

        for target, ids in sorted(by_target.items()):
            await self._repo.set_item_status(ids, target, db)
        return sum(len(ids) for ids in by_target.values())
