# src/tm_listing/domain/repository.py
"""ListingRepository Protocol — interface contract for persistence layer."""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_listing.domain.models import InventoryItem, Listing


class ListingRepositoryProtocol(Protocol):
    async def save(self, listing: Listing, db: AsyncSession) -> None: ...

    async def get_by_id(self, listing_id: str, db: AsyncSession) -> Listing | None: ...

    async def lock_listing(self, listing_id: str, db: AsyncSession) -> Listing | None: ...

    async def listing_ids_for_items(
        self, item_ids: list[str], db: AsyncSession
    ) -> dict[str, str]: ...

    async def share_lock_listings(
        self, listing_ids: list[str], db: AsyncSession
    ) -> dict[str, Listing]: ...

    async def lock_listings(
        self, listing_ids: list[str], db: AsyncSession
    ) -> dict[str, Listing]: ...

    async def lock_items(self, item_ids: list[str], db: AsyncSession) -> list[InventoryItem]: ...

    async def set_item_status(
        self, item_ids: list[str], status: str, db: AsyncSession
    ) -> None: ...

    async def set_item_status_for_listing(
        self, listing_id: str, from_statuses: list[str], to_status: str, db: AsyncSession
    ) -> int: ...

    async def update_listing_status(
        self, listing_id: str, status: str, db: AsyncSession
    ) -> None: ...

    async def count_items_held_by_pending_orders(
        self, listing_id: str, db: AsyncSession
    ) -> int: ...

    async def lock_expired_listings(
        self, now: datetime, limit: int, db: AsyncSession
    ) -> list[str]: ...

    async def promote_sold_out_listings(
        self, listing_ids: list[str], db: AsyncSession
    ) -> list[str]: ...
