"""RiskAssessmentEngine — evaluate a listing against the rules and persist flags.

Flags are advisory input for moderation and never block a listing. At most
one flag per (listing, flag type) ever exists, so evaluation can be re-run
any number of times.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tm_common.errors import ListingNotFoundError
from src.tm_common.id_generator import generate_id
from src.tm_common.transaction import transaction
from src.tm_risk.domain.models import ListingRiskContext, RiskFlag
from src.tm_risk.domain.repository import RiskFlagRepositoryProtocol
from src.tm_risk.infrastructure.persistence import RiskFlagRepository
from src.tm_risk.rules.blacklist import check_blacklisted_seller
from src.tm_risk.rules.new_seller import check_new_seller
from src.tm_risk.rules.price_ratio import check_high_price, check_low_price
from src.tm_risk.rules.quantity import check_high_quantity

logger = logging.getLogger(__name__)

Rule = Callable[[ListingRiskContext], RiskFlag | None]

RULES: tuple[Rule, ...] = (
    check_blacklisted_seller,
    check_new_seller,
    check_high_quantity,
    check_high_price,
    check_low_price,
)


def assess_listing(ctx: ListingRiskContext, rules: tuple[Rule, ...] = RULES) -> list[RiskFlag]:
    """Run every rule; at most one flag per type, in rule order."""
    flags: list[RiskFlag] = []
    seen: set[str] = set()
    for rule in rules:
        flag = rule(ctx)
        if flag is None or flag.flag_type in seen:
            continue
        seen.add(flag.flag_type)
        flag.listing_id = ctx.listing_id
        flags.append(flag)
    return flags


@dataclass
class BackfillResult:
    scanned: int = 0
    flagged_listings: int = 0
    flags_created: int = 0
    listing_ids: list[str] = field(default_factory=list)


class RiskAssessmentEngine:
    def __init__(self, repo: RiskFlagRepositoryProtocol | None = None) -> None:
        self._repo: RiskFlagRepositoryProtocol = repo or RiskFlagRepository()

    async def evaluate_listing_risk(self, listing_id: str, db: AsyncSession) -> list[RiskFlag]:
        """Insert the flags this listing is missing and return them.

        Runs in the caller's transaction and does not commit.
        """
        ctx = await self._repo.load_context(listing_id, db)
        if ctx is None:
            raise ListingNotFoundError(listing_id)

        existing = await self._repo.existing_flag_types(listing_id, db)
        inserted: list[RiskFlag] = []
        for flag in assess_listing(ctx):
            if flag.flag_type in existing:
                continue
            flag.flag_id = generate_id()
            if await self._repo.insert_flag(flag, db):
                inserted.append(flag)

        if inserted:
            logger.info(
                "Listing %s flagged: %s", listing_id, [f.flag_type for f in inserted]
            )
        return inserted

    async def list_flags(self, listing_id: str, db: AsyncSession) -> list[RiskFlag]:
        return await self._repo.list_flags(listing_id, db)

    async def backfill_pending_listings(
        self, db: AsyncSession, limit: int | None = None
    ) -> BackfillResult:
        """Evaluate Pending listings that have no flag at all. Commits once."""
        result = BackfillResult()
        async with transaction(db):
            listing_ids = await self._repo.find_unflagged_pending_listings(
                limit or settings.SWEEP_BATCH_LIMIT, db
            )
            result.scanned = len(listing_ids)
            for listing_id in listing_ids:
                flags = await self.evaluate_listing_risk(listing_id, db)
                if flags:
                    result.flagged_listings += 1
                    result.flags_created += len(flags)
                    result.listing_ids.append(listing_id)
        logger.info(
            "Risk backfill: %d pending listings scanned, %d flags created",
            result.scanned,
            result.flags_created,
        )
        return result


_engine: RiskAssessmentEngine | None = None


def get_risk_engine() -> RiskAssessmentEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = RiskAssessmentEngine()
    return _engine
