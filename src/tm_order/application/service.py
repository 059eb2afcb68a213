# src/tm_order/application/service.py
"""Order application service — maps lifecycle results to API schemas."""
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tm_order.application.lifecycle import get_lifecycle_manager
from src.tm_order.application.schemas import CreateOrderRequest, OrderResponse
from src.tm_order.domain.models import Order


def _to_response(order: Order) -> OrderResponse:
    return OrderResponse.from_domain(order, settings.PAYMENT_DEADLINE_SECONDS)


async def create_order(req: CreateOrderRequest, buyer_id: str, db: AsyncSession) -> OrderResponse:
    order = await get_lifecycle_manager().create_order(buyer_id, req.item_ids, db)
    return _to_response(order)


async def pay_order(order_id: str, buyer_id: str, db: AsyncSession) -> OrderResponse:
    order = await get_lifecycle_manager().confirm_payment(order_id, db, buyer_id=buyer_id)
    return _to_response(order)


async def cancel_order(order_id: str, buyer_id: str, db: AsyncSession) -> OrderResponse:
    order = await get_lifecycle_manager().cancel_order(order_id, db, buyer_id=buyer_id)
    return _to_response(order)


async def get_order(order_id: str, buyer_id: str, db: AsyncSession) -> OrderResponse:
    order = await get_lifecycle_manager().get_order(order_id, db, buyer_id=buyer_id)
    return _to_response(order)
