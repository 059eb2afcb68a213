"""Listing-Pending repair pass.

A Pending listing (awaiting moderation) must only hold Pending items. Every
write path keeps it that way; this pass exists to reconcile rows written
before that was enforced, or by hand. It is idempotent and commits once.

Orders that reference items of a Pending listing are reported, not cancelled:
unpaid ones are left to the timeout sweeper, paid ones need an operator.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.transaction import transaction

logger = logging.getLogger(__name__)

_LOCK_PENDING_LISTINGS_SQL = text("""
    SELECT l.listing_id FROM listings l
    WHERE l.status = 'Pending'
      AND EXISTS (
          SELECT 1 FROM listing_items li
          WHERE li.listing_id = l.listing_id AND li.status <> 'Pending'
      )
    ORDER BY l.listing_id
    FOR UPDATE
""")

_RESET_ITEMS_SQL = text("""
    UPDATE listing_items SET status = 'Pending', updated_at = NOW()
    WHERE listing_id = ANY(:listing_ids) AND status <> 'Pending'
    RETURNING item_id
""")

_ORDERS_ON_PENDING_LISTINGS_SQL = text("""
    SELECT DISTINCT o.order_id, o.status, li.listing_id
    FROM orders o
    JOIN order_items oi ON oi.order_id = o.order_id
    JOIN listing_items li ON li.item_id = oi.item_id
    JOIN listings l ON l.listing_id = li.listing_id
    WHERE l.status = 'Pending' AND o.status <> 'Cancelled'
    ORDER BY o.order_id
""")


@dataclass
class RepairResult:
    listings_repaired: list[str] = field(default_factory=list)
    items_reset: int = 0
    suspect_order_ids: list[str] = field(default_factory=list)


async def repair_pending_listings(db: AsyncSession) -> RepairResult:
    result = RepairResult()
    async with transaction(db):
        listing_ids = [
            r.listing_id for r in (await db.execute(_LOCK_PENDING_LISTINGS_SQL)).fetchall()
        ]
        if listing_ids:
            reset = (
                await db.execute(_RESET_ITEMS_SQL, {"listing_ids": listing_ids})
            ).fetchall()
            result.listings_repaired = listing_ids
            result.items_reset = len(reset)

        for row in (await db.execute(_ORDERS_ON_PENDING_LISTINGS_SQL)).fetchall():
            logger.warning(
                "Order %s (%s) references Pending listing %s",
                row.order_id,
                row.status,
                row.listing_id,
            )
            if row.order_id not in result.suspect_order_ids:
                result.suspect_order_ids.append(row.order_id)

    logger.info(
        "Pending-listing repair: %d listings, %d items reset to Pending, %d suspect orders",
        len(result.listings_repaired),
        result.items_reset,
        len(result.suspect_order_ids),
    )
    return result
