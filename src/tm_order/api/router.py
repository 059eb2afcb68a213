# src/tm_order/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import get_db_session
from src.tm_common.response import ApiResponse, success_response
from src.tm_gateway.auth.dependencies import get_current_principal
from src.tm_order.application import service as svc
from src.tm_order.application.schemas import CreateOrderRequest

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=ApiResponse, status_code=201)
async def create_order(
    req: CreateOrderRequest,
    principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await svc.create_order(req, principal, db))


@router.post("/{order_id}/pay", response_model=ApiResponse)
async def pay_order(
    order_id: str,
    principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await svc.pay_order(order_id, principal, db))


@router.post("/{order_id}/cancel", response_model=ApiResponse)
async def cancel_order(
    order_id: str,
    principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await svc.cancel_order(order_id, principal, db))


@router.get("/{order_id}", response_model=ApiResponse)
async def get_order(
    order_id: str,
    principal: Annotated[str, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await svc.get_order(order_id, principal, db))
