from src.tm_common.enums import RiskFlagType
from src.tm_risk.domain.models import MIN_TRUSTED_TIER, ListingRiskContext, RiskFlag


def check_new_seller(ctx: ListingRiskContext) -> RiskFlag | None:
    """Flag sellers below MIN_TRUSTED_TIER or with no earlier listings."""
    if ctx.verification_tier >= MIN_TRUSTED_TIER and ctx.prior_listings > 0:
        return None
    return RiskFlag(
        flag_type=RiskFlagType.NEW_SELLER.value,
        reason=(
            f"Seller {ctx.seller_id} is new (verification tier {ctx.verification_tier}, "
            f"{ctx.prior_listings} earlier listings)"
        ),
    )
