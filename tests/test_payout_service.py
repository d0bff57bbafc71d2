"""
Tests for driver payout calculation.
"""
from decimal import Decimal

import pytest

from app.services.payout_service import calculate_driver_payout


class TestDriverPayout:
    """Fare / 1.45, rounded half-up to cents."""

    @pytest.mark.parametrize(
        "fare,expected",
        [
            ("100.00", "68.97"),
            ("145.00", "100.00"),
            ("10.00", "6.90"),
            ("250.00", "172.41"),
        ],
    )
    def test_payout(self, fare: str, expected: str) -> None:
        assert calculate_driver_payout(Decimal(fare)) == Decimal(expected)

    def test_half_cent_rounds_up(self) -> None:
        # 0.00725 / 1.45 is exactly 0.005
        assert calculate_driver_payout("0.00725") == Decimal("0.01")

    def test_accepts_float(self) -> None:
        assert calculate_driver_payout(100.0) == Decimal("68.97")

    def test_custom_divisor(self) -> None:
        assert calculate_driver_payout(Decimal("120"), divisor=Decimal("1.2")) == Decimal("100.00")
