# src/tm_admin/api/router.py
"""Admin REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_admin.application.service import AdminService
from src.tm_common.database import get_db_session
from src.tm_common.response import ApiResponse, success_response
from src.tm_gateway.auth.dependencies import require_admin
from src.tm_listing.application.schemas import ModerateListingRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/listings/{listing_id}/moderate")
async def moderate_listing(
    listing_id: str,
    body: ModerateListingRequest,
    admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.moderate_listing(listing_id, body.action, admin_id, db)
    return success_response(result)


@router.post("/maintenance/sweep")
async def run_sweep(_admin_id: Annotated[str, Depends(require_admin)]) -> ApiResponse:
    return success_response(await _service.run_sweep())


@router.post("/maintenance/expire-listings")
async def expire_listings(
    _admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.expire_listings(db))


@router.post("/maintenance/backfill-risk-flags")
async def backfill_risk_flags(
    _admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.backfill_risk_flags(db))


@router.post("/maintenance/repair-pending-listings")
async def repair_pending_listings(
    _admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.repair_pending_listings(db))
