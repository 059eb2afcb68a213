# src/tm_risk/infrastructure/persistence.py
"""RiskFlagRepository — raw SQL over listing_risk_flags and the seller context."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_risk.domain.models import ListingRiskContext, RiskFlag, RiskItem

_LISTING_CONTEXT_SQL = text("""
    SELECT l.listing_id, l.seller_id,
           COALESCE(s.verification_tier, 0) AS verification_tier,
           EXISTS (
               SELECT 1 FROM seller_blacklist b WHERE b.seller_id = l.seller_id
           ) AS is_blacklisted,
           (
               SELECT COUNT(*) FROM listings p
               WHERE p.seller_id = l.seller_id AND p.listing_id < l.listing_id
           ) AS prior_listings
    FROM listings l
    LEFT JOIN sellers s ON s.seller_id = l.seller_id
    WHERE l.listing_id = :listing_id
""")

_LISTING_ITEMS_SQL = text("""
    SELECT ticket_id, price_cents, face_value_cents
    FROM listing_items
    WHERE listing_id = :listing_id
    ORDER BY item_id
""")

_EXISTING_TYPES_SQL = text("""
    SELECT flag_type FROM listing_risk_flags WHERE listing_id = :listing_id
""")

# UNIQUE (listing_id, flag_type) backs up the existence check above.
_INSERT_FLAG_SQL = text("""
    INSERT INTO listing_risk_flags (flag_id, listing_id, flag_type, reason)
    VALUES (:flag_id, :listing_id, :flag_type, :reason)
    ON CONFLICT (listing_id, flag_type) DO NOTHING
    RETURNING created_at
""")

_LIST_FLAGS_SQL = text("""
    SELECT flag_id, listing_id, flag_type, reason, created_at
    FROM listing_risk_flags
    WHERE listing_id = :listing_id
    ORDER BY created_at, flag_id
""")

_UNFLAGGED_PENDING_SQL = text("""
    SELECT l.listing_id FROM listings l
    WHERE l.status = 'Pending'
      AND NOT EXISTS (SELECT 1 FROM listing_risk_flags f WHERE f.listing_id = l.listing_id)
    ORDER BY l.listing_id
    LIMIT :limit
""")


def _row_to_flag(row: Any) -> RiskFlag:
    return RiskFlag(
        flag_id=row.flag_id,
        listing_id=row.listing_id,
        flag_type=row.flag_type,
        reason=row.reason,
        created_at=row.created_at,
    )


class RiskFlagRepository:
    """Concrete implementation of RiskFlagRepositoryProtocol using raw SQL."""

    async def load_context(
        self, listing_id: str, db: AsyncSession
    ) -> ListingRiskContext | None:
        row = (await db.execute(_LISTING_CONTEXT_SQL, {"listing_id": listing_id})).fetchone()
        if row is None:
            return None
        items = (await db.execute(_LISTING_ITEMS_SQL, {"listing_id": listing_id})).fetchall()
        return ListingRiskContext(
            listing_id=row.listing_id,
            seller_id=row.seller_id,
            verification_tier=int(row.verification_tier),
            is_blacklisted=bool(row.is_blacklisted),
            prior_listings=int(row.prior_listings),
            items=[
                RiskItem(
                    ticket_id=r.ticket_id,
                    price_cents=r.price_cents,
                    face_value_cents=r.face_value_cents,
                )
                for r in items
            ],
        )

    async def existing_flag_types(self, listing_id: str, db: AsyncSession) -> set[str]:
        rows = (await db.execute(_EXISTING_TYPES_SQL, {"listing_id": listing_id})).fetchall()
        return {r.flag_type for r in rows}

    async def insert_flag(self, flag: RiskFlag, db: AsyncSession) -> bool:
        """Insert one flag. Returns False if the (listing, type) pair already existed."""
        row = (
            await db.execute(
                _INSERT_FLAG_SQL,
                {
                    "flag_id": flag.flag_id,
                    "listing_id": flag.listing_id,
                    "flag_type": flag.flag_type,
                    "reason": flag.reason,
                },
            )
        ).fetchone()
        if row is None:
            return False
        flag.created_at = row.created_at
        return True

    async def list_flags(self, listing_id: str, db: AsyncSession) -> list[RiskFlag]:
        rows = (await db.execute(_LIST_FLAGS_SQL, {"listing_id": listing_id})).fetchall()
        return [_row_to_flag(r) for r in rows]

    async def find_unflagged_pending_listings(
        self, limit: int, db: AsyncSession
    ) -> list[str]:
        rows = (await db.execute(_UNFLAGGED_PENDING_SQL, {"limit": limit})).fetchall()
        return [r.listing_id for r in rows]
