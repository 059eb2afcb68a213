# src/tm_admin/application/service.py
"""Admin application service: moderation and on-demand maintenance passes."""
import logging
from dataclasses import asdict
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import async_session_factory
from src.tm_common.enums import ModerationAction
from src.tm_listing.application.schemas import ListingResponse
from src.tm_listing.application.service import ListingApplicationService, get_listing_service
from src.tm_reconcile.repair import repair_pending_listings
from src.tm_reconcile.sweeper import TimeoutSweeper
from src.tm_risk.application.engine import RiskAssessmentEngine, get_risk_engine

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        listings: ListingApplicationService | None = None,
        risk: RiskAssessmentEngine | None = None,
        sweeper: TimeoutSweeper | None = None,
    ) -> None:
        self._listings = listings
        self._risk = risk
        self._sweeper = sweeper

    @property
    def listings(self) -> ListingApplicationService:
        return self._listings or get_listing_service()

    @property
    def risk(self) -> RiskAssessmentEngine:
        return self._risk or get_risk_engine()

    @property
    def sweeper(self) -> TimeoutSweeper:
        # Manual passes bypass the replica lease
        if self._sweeper is None:
            self._sweeper = TimeoutSweeper(async_session_factory)
        return self._sweeper

    async def moderate_listing(
        self, listing_id: str, action: ModerationAction, admin_id: str, db: AsyncSession
    ) -> ListingResponse:
        listing = await self.listings.moderate_listing(listing_id, action, db)
        logger.info("Admin %s %s listing %s", admin_id, action.value, listing_id)
        return ListingResponse.from_domain(listing)

    async def run_sweep(self) -> dict[str, Any]:
        return asdict(await self.sweeper.run_once())

    async def expire_listings(self, db: AsyncSession) -> dict[str, Any]:
        return asdict(await self.listings.expire_listings(db))

    async def backfill_risk_flags(self, db: AsyncSession) -> dict[str, Any]:
        return asdict(await self.risk.backfill_pending_listings(db))

    async def repair_pending_listings(self, db: AsyncSession) -> dict[str, Any]:
        return asdict(await repair_pending_listings(db))
