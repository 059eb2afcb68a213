from src.tm_common.enums import RiskFlagType
from src.tm_risk.domain.models import ListingRiskContext, RiskFlag

MAX_ITEMS_WITHOUT_FLAG = 5


def check_high_quantity(ctx: ListingRiskContext) -> RiskFlag | None:
    """Flag listings offering more than MAX_ITEMS_WITHOUT_FLAG tickets at once."""
    count = len(ctx.items)
    if count <= MAX_ITEMS_WITHOUT_FLAG:
        return None
    return RiskFlag(
        flag_type=RiskFlagType.HIGH_QUANTITY.value,
        reason=f"{count} tickets listed at once (more than {MAX_ITEMS_WITHOUT_FLAG})",
    )
