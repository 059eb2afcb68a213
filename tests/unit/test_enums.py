"""Tests for tm_common.enums — all enum values must match DB CHECK constraints."""

from src.tm_common.enums import (
    CancelReason,
    ItemStatus,
    ListingStatus,
    ModerationAction,
    OrderStatus,
    PaymentStatus,
    RiskFlagType,
)


class TestAllEnumsAreStr:
    def test_listing_status_is_str(self) -> None:
        assert isinstance(ListingStatus.ACTIVE, str)
        assert ListingStatus.ACTIVE == "Active"

    def test_cancel_reason_is_str(self) -> None:
        assert CancelReason.PAYMENT_TIMEOUT == "PAYMENT_TIMEOUT"


class TestListingStatus:
    def test_all_values(self) -> None:
        expected = {"Pending", "Active", "Sold", "Expired", "Cancelled", "Rejected"}
        assert {s.value for s in ListingStatus} == expected


class TestItemStatus:
    def test_items_are_never_rejected(self) -> None:
        assert "Rejected" not in {s.value for s in ItemStatus}
        assert len(ItemStatus) == 5


class TestOrderAndPaymentStatus:
    def test_order_values(self) -> None:
        assert {s.value for s in OrderStatus} == {"Pending", "Paid", "Cancelled"}

    def test_payment_values(self) -> None:
        assert {s.value for s in PaymentStatus} == {"Pending", "Completed", "Failed"}

    def test_cancel_reasons(self) -> None:
        assert {r.value for r in CancelReason} == {"BUYER_CANCELLED", "PAYMENT_TIMEOUT"}


class TestRiskFlagType:
    def test_all_values(self) -> None:
        expected = {"HighPrice", "LowPrice", "NewSeller", "HighQuantity", "BlacklistedSeller"}
        assert {t.value for t in RiskFlagType} == expected


class TestModerationAction:
    def test_parses_lowercase(self) -> None:
        assert ModerationAction("approve") is ModerationAction.APPROVE
        assert ModerationAction("reject") is ModerationAction.REJECT
