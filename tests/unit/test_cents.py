"""Tests for tm_common.cents — integer arithmetic utilities."""

import pytest

from src.tm_common.cents import cents_to_display, ratio_below, ratio_exceeds, ratio_percent


class TestCentsToDisplay:
    def test_basic(self) -> None:
        assert cents_to_display(6500) == "$65.00"

    def test_zero(self) -> None:
        assert cents_to_display(0) == "$0.00"

    def test_one_cent(self) -> None:
        assert cents_to_display(1) == "$0.01"

    def test_large(self) -> None:
        assert cents_to_display(150000) == "$1,500.00"

    def test_negative(self) -> None:
        assert cents_to_display(-1200) == "-$12.00"


class TestRatios:
    def test_exactly_at_threshold_does_not_exceed(self) -> None:
        assert ratio_exceeds(12000, 10000, 120) is False

    def test_one_cent_over_exceeds(self) -> None:
        assert ratio_exceeds(12001, 10000, 120) is True

    def test_exactly_half_is_not_below(self) -> None:
        assert ratio_below(5000, 10000, 50) is False

    def test_one_cent_under_is_below(self) -> None:
        assert ratio_below(4999, 10000, 50) is True

    def test_percent_rounds(self) -> None:
        assert ratio_percent(1500, 1000) == 150
        assert ratio_percent(1, 3) == 33
        assert ratio_percent(2, 3) == 67

    def test_percent_zero_face_raises(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            ratio_percent(100, 0)
