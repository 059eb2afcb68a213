# src/tm_risk/domain/repository.py
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_risk.domain.models import ListingRiskContext, RiskFlag


class RiskFlagRepositoryProtocol(Protocol):
    async def load_context(
        self, listing_id: str, db: AsyncSession
    ) -> ListingRiskContext | None: ...

    async def existing_flag_types(self, listing_id: str, db: AsyncSession) -> set[str]: ...

    async def insert_flag(self, flag: RiskFlag, db: AsyncSession) -> bool: ...

    async def list_flags(self, listing_id: str, db: AsyncSession) -> list[RiskFlag]: ...

    async def find_unflagged_pending_listings(
        self, limit: int, db: AsyncSession
    ) -> list[str]: ...
