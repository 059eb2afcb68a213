# src/tm_listing/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import get_db_session
from src.tm_common.response import ApiResponse, success_response
from src.tm_gateway.auth.dependencies import get_current_principal
from src.tm_listing.application.schemas import (
    CreateListingRequest,
    ListingResponse,
    RiskFlagResponse,
)
from src.tm_listing.application.service import get_listing_service

router = APIRouter(prefix="/listings", tags=["listings"])


@router.post("", response_model=ApiResponse, status_code=201)
async def submit_listing(
    req: CreateListingRequest,
    principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    listing, flags = await get_listing_service().submit_listing(
        principal, req.expires_at, req.items, db
    )
    return success_response(ListingResponse.from_domain(listing, flags))


@router.post("/{listing_id}/cancel", response_model=ApiResponse)
async def cancel_listing(
    listing_id: str,
    principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    listing = await get_listing_service().cancel_listing(listing_id, principal, db)
    return success_response(ListingResponse.from_domain(listing))


@router.get("/{listing_id}", response_model=ApiResponse)
async def get_listing(
    listing_id: str,
    _principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    listing = await get_listing_service().get_listing(listing_id, db)
    return success_response(ListingResponse.from_domain(listing))


@router.get("/{listing_id}/risk-flags", response_model=ApiResponse)
async def list_risk_flags(
    listing_id: str,
    _principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    flags = await get_listing_service().list_risk_flags(listing_id, db)
    return success_response([RiskFlagResponse.from_domain(f) for f in flags])
