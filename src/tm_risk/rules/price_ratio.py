"""Asking price vs. face value rules.

Ratios are compared in integer cents (price * 100 vs face * percent), never
as floats. A zero face value makes any positive price a HighPrice hit; the
LowPrice rule skips such items since no price can fall below zero.
"""
from src.tm_common.cents import cents_to_display, ratio_below, ratio_exceeds, ratio_percent
from src.tm_common.enums import RiskFlagType
from src.tm_risk.domain.models import ListingRiskContext, RiskFlag, RiskItem

HIGH_PRICE_PERCENT = 120
LOW_PRICE_PERCENT = 50


def _reason(item: RiskItem, relation: str, percent: int, others: int) -> str:
    text = (
        f"Ticket {item.ticket_id}: price {cents_to_display(item.price_cents)} is "
        f"{relation} {percent}% of face value {cents_to_display(item.face_value_cents)}"
    )
    if item.face_value_cents > 0:
        text += f" ({ratio_percent(item.price_cents, item.face_value_cents)}%)"
    if others:
        text += f" and {others} more"
    return text


def check_high_price(ctx: ListingRiskContext) -> RiskFlag | None:
    hits = [
        i for i in ctx.items
        if ratio_exceeds(i.price_cents, i.face_value_cents, HIGH_PRICE_PERCENT)
    ]
    if not hits:
        return None
    return RiskFlag(
        flag_type=RiskFlagType.HIGH_PRICE.value,
        reason=_reason(hits[0], "above", HIGH_PRICE_PERCENT, len(hits) - 1),
    )


def check_low_price(ctx: ListingRiskContext) -> RiskFlag | None:
    hits = [
        i for i in ctx.items
        if i.face_value_cents > 0
        and ratio_below(i.price_cents, i.face_value_cents, LOW_PRICE_PERCENT)
    ]
    if not hits:
        return None
    return RiskFlag(
        flag_type=RiskFlagType.LOW_PRICE.value,
        reason=_reason(hits[0], "below", LOW_PRICE_PERCENT, len(hits) - 1),
    )
