from src.tm_common.enums import RiskFlagType
from src.tm_risk.domain.models import ListingRiskContext, RiskFlag


def check_blacklisted_seller(ctx: ListingRiskContext) -> RiskFlag | None:
    if not ctx.is_blacklisted:
        return None
    return RiskFlag(
        flag_type=RiskFlagType.BLACKLISTED_SELLER.value,
        reason=f"Seller {ctx.seller_id} is on the blacklist",
    )
