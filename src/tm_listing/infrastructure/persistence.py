# src/tm_listing/infrastructure/persistence.py
"""ListingRepository — raw SQL persistence implementation.

Lock order used by every caller: listings (ascending listing_id) before
listing_items (ascending item_id). IDs are fixed-width strings, so
ORDER BY on the column matches sorted() in Python.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_listing.domain.models import InventoryItem, Listing

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings (listing_id, seller_id, expires_at, status)
    VALUES (:listing_id, :seller_id, :expires_at, :status)
""")

_INSERT_ITEM_SQL = text("""
    INSERT INTO listing_items
        (item_id, listing_id, ticket_id, price_cents, face_value_cents, status)
    VALUES (:item_id, :listing_id, :ticket_id, :price_cents, :face_value_cents, :status)
""")

_LISTING_COLUMNS = "listing_id, seller_id, expires_at, status, created_at"

_ITEM_COLUMNS = """
    li.item_id, li.listing_id, li.ticket_id, li.price_cents, li.face_value_cents,
    li.status, l.status AS listing_status, l.seller_id
"""

_GET_LISTING_SQL = text(f"SELECT {_LISTING_COLUMNS} FROM listings WHERE listing_id = :listing_id")

_LOCK_LISTING_SQL = text(f"""
    SELECT {_LISTING_COLUMNS} FROM listings WHERE listing_id = :listing_id FOR UPDATE
""")

_GET_ITEMS_FOR_LISTING_SQL = text(f"""
    SELECT {_ITEM_COLUMNS}
    FROM listing_items li JOIN listings l ON l.listing_id = li.listing_id
    WHERE li.listing_id = :listing_id
    ORDER BY li.item_id
""")

_LISTING_IDS_FOR_ITEMS_SQL = text("""
    SELECT item_id, listing_id FROM listing_items WHERE item_id = ANY(:item_ids)
""")

_SHARE_LOCK_LISTINGS_SQL = text(f"""
    SELECT {_LISTING_COLUMNS} FROM listings
    WHERE listing_id = ANY(:listing_ids)
    ORDER BY listing_id
    FOR SHARE
""")

_LOCK_LISTINGS_SQL = text(f"""
    SELECT {_LISTING_COLUMNS} FROM listings
    WHERE listing_id = ANY(:listing_ids)
    ORDER BY listing_id
    FOR UPDATE
""")

_LOCK_ITEMS_SQL = text(f"""
    SELECT {_ITEM_COLUMNS}
    FROM listing_items li JOIN listings l ON l.listing_id = li.listing_id
    WHERE li.item_id = ANY(:item_ids)
    ORDER BY li.item_id
    FOR UPDATE OF li
""")

_SET_ITEM_STATUS_SQL = text("""
    UPDATE listing_items SET status = :status, updated_at = NOW()
    WHERE item_id = ANY(:item_ids)
""")

_SET_ITEM_STATUS_FOR_LISTING_SQL = text("""
    UPDATE listing_items SET status = :to_status, updated_at = NOW()
    WHERE listing_id = :listing_id AND status = ANY(:from_statuses)
    RETURNING item_id
""")

_UPDATE_LISTING_STATUS_SQL = text("""
    UPDATE listings SET status = :status, updated_at = NOW() WHERE listing_id = :listing_id
""")

_COUNT_RESERVED_FOR_PENDING_ORDERS_SQL = text("""
    SELECT COUNT(*)
    FROM listing_items li
    JOIN order_items oi ON oi.item_id = li.item_id
    JOIN orders o ON o.order_id = oi.order_id
    WHERE li.listing_id = :listing_id AND li.status = 'Sold' AND o.status = 'Pending'
""")

_LOCK_EXPIRED_LISTINGS_SQL = text("""
    SELECT listing_id FROM listings
    WHERE status = 'Active' AND expires_at <= :now
    ORDER BY listing_id
    LIMIT :limit
    FOR UPDATE SKIP LOCKED
""")

# A listing is sold out when every item is Sold to a Paid order.
_PROMOTE_SOLD_OUT_SQL = text("""
    UPDATE listings l SET status = 'Sold', updated_at = NOW()
    WHERE l.listing_id = ANY(:listing_ids)
      AND l.status = 'Active'
      AND NOT EXISTS (
          SELECT 1 FROM listing_items li
          WHERE li.listing_id = l.listing_id
            AND NOT (
                li.status = 'Sold'
                AND EXISTS (
                    SELECT 1 FROM order_items oi JOIN orders o ON o.order_id = oi.order_id
                    WHERE oi.item_id = li.item_id AND o.status = 'Paid'
                )
            )
      )
    RETURNING l.listing_id
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_item(row: Any) -> InventoryItem:
    return InventoryItem(
        item_id=row.item_id,
        listing_id=row.listing_id,
        ticket_id=row.ticket_id,
        price_cents=row.price_cents,
        face_value_cents=row.face_value_cents,
        status=row.status,
        listing_status=row.listing_status,
        seller_id=row.seller_id,
    )


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        listing_id=row.listing_id,
        seller_id=row.seller_id,
        expires_at=row.expires_at,
        status=row.status,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol using raw SQL."""

    async def save(self, listing: Listing, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_LISTING_SQL,
            {
                "listing_id": listing.listing_id,
                "seller_id": listing.seller_id,
                "expires_at": listing.expires_at,
                "status": listing.status,
            },
        )
        for item in listing.items:
            await db.execute(
                _INSERT_ITEM_SQL,
                {
                    "item_id": item.item_id,
                    "listing_id": listing.listing_id,
                    "ticket_id": item.ticket_id,
                    "price_cents": item.price_cents,
                    "face_value_cents": item.face_value_cents,
                    "status": item.status,
                },
            )

    async def get_by_id(self, listing_id: str, db: AsyncSession) -> Listing | None:
        row = (await db.execute(_GET_LISTING_SQL, {"listing_id": listing_id})).fetchone()
        if row is None:
            return None
        listing = _row_to_listing(row)
        listing.items = await self._items_for_listing(listing_id, db)
        return listing

    async def lock_listing(self, listing_id: str, db: AsyncSession) -> Listing | None:
        """SELECT ... FOR UPDATE on the listing row, then load its items."""
        row = (await db.execute(_LOCK_LISTING_SQL, {"listing_id": listing_id})).fetchone()
        if row is None:
            return None
        listing = _row_to_listing(row)
        listing.items = await self._items_for_listing(listing_id, db)
        return listing

    async def _items_for_listing(self, listing_id: str, db: AsyncSession) -> list[InventoryItem]:
        rows = (
            await db.execute(_GET_ITEMS_FOR_LISTING_SQL, {"listing_id": listing_id})
        ).fetchall()
        return [_row_to_item(r) for r in rows]

    async def listing_ids_for_items(
        self, item_ids: list[str], db: AsyncSession
    ) -> dict[str, str]:
        """Map item_id -> listing_id. Unlocked: an item never changes listing."""
        rows = (
            await db.execute(_LISTING_IDS_FOR_ITEMS_SQL, {"item_ids": item_ids})
        ).fetchall()
        return {r.item_id: r.listing_id for r in rows}

    async def share_lock_listings(
        self, listing_ids: list[str], db: AsyncSession
    ) -> dict[str, Listing]:
        rows = (
            await db.execute(_SHARE_LOCK_LISTINGS_SQL, {"listing_ids": sorted(listing_ids)})
        ).fetchall()
        return {r.listing_id: _row_to_listing(r) for r in rows}

    async def lock_listings(
        self, listing_ids: list[str], db: AsyncSession
    ) -> dict[str, Listing]:
        rows = (
            await db.execute(_LOCK_LISTINGS_SQL, {"listing_ids": sorted(listing_ids)})
        ).fetchall()
        return {r.listing_id: _row_to_listing(r) for r in rows}

    async def lock_items(self, item_ids: list[str], db: AsyncSession) -> list[InventoryItem]:
        rows = (
            await db.execute(_LOCK_ITEMS_SQL, {"item_ids": sorted(item_ids)})
        ).fetchall()
        return [_row_to_item(r) for r in rows]

    async def set_item_status(
        self, item_ids: list[str], status: str, db: AsyncSession
    ) -> None:
        await db.execute(_SET_ITEM_STATUS_SQL, {"item_ids": item_ids, "status": status})

    async def set_item_status_for_listing(
        self, listing_id: str, from_statuses: list[str], to_status: str, db: AsyncSession
    ) -> int:
        rows = (
            await db.execute(
                _SET_ITEM_STATUS_FOR_LISTING_SQL,
                {
                    "listing_id": listing_id,
                    "from_statuses": from_statuses,
                    "to_status": to_status,
                },
            )
        ).fetchall()
        return len(rows)

    async def update_listing_status(
        self, listing_id: str, status: str, db: AsyncSession
    ) -> None:
        await db.execute(
            _UPDATE_LISTING_STATUS_SQL, {"listing_id": listing_id, "status": status}
        )

    async def count_items_held_by_pending_orders(
        self, listing_id: str, db: AsyncSession
    ) -> int:
        result = await db.execute(
            _COUNT_RESERVED_FOR_PENDING_ORDERS_SQL, {"listing_id": listing_id}
        )
        return int(result.scalar_one())

    async def lock_expired_listings(
        self, now: datetime, limit: int, db: AsyncSession
    ) -> list[str]:
        rows = (
            await db.execute(_LOCK_EXPIRED_LISTINGS_SQL, {"now": now, "limit": limit})
        ).fetchall()
        return [r.listing_id for r in rows]

    async def promote_sold_out_listings(
        self, listing_ids: list[str], db: AsyncSession
    ) -> list[str]:
        rows = (
            await db.execute(_PROMOTE_SOLD_OUT_SQL, {"listing_ids": listing_ids})
        ).fetchall()
        return [r.listing_id for r in rows]
