"""Tests for tier bracket selection."""

from decimal import Decimal

import pytest

from tariff.pricing.tiers import (
    distance_column,
    flat_distance_column,
    is_local,
    quantity_tier_index,
    range_tier_index,
    sqft_row,
    volume_row,
    weight_row,
)
from tariff.rates.schedule import DISTANCE_TIERS, VOLUME_TIERS, WEIGHT_TIERS


class TestQuantityTiers:
    """Weight and volume are bracket floors."""

    @pytest.mark.parametrize(
        ("weight", "expected"),
        [
            ("0", "w1000"),
            ("500", "w1000"),
            ("1999", "w1000"),
            ("2000", "w2000"),
            ("3999.5", "w2000"),
            ("4000", "w4000"),
            ("5000", "w4000"),
            ("8000", "w8000"),
            ("25000", "w8000"),
        ],
        ids=["zero", "below-first", "just-below-2000", "on-2000", "fractional", "on-4000",
             "between", "on-last", "beyond-last"],
    )
    def test_weight_row(self, weight: str, expected: str) -> None:
        assert weight_row(Decimal(weight)) == expected

    @pytest.mark.parametrize(
        ("volume", "expected"),
        [("100", "c300"), ("600", "c600"), ("999", "c600"), ("1500", "c1500"), ("4000", "c1500")],
        ids=["below-first", "on-600", "between", "on-last", "beyond-last"],
    )
    def test_volume_row(self, volume: str, expected: str) -> None:
        assert volume_row(Decimal(volume)) == expected

    @pytest.mark.parametrize("tiers", [WEIGHT_TIERS, VOLUME_TIERS], ids=["weight", "volume"])
    def test_monotonic_non_decreasing(self, tiers: tuple[int, ...]) -> None:
        previous = -1
        for value in range(0, tiers[-1] * 2, 50):
            index = quantity_tier_index(Decimal(value), tiers)
            assert index >= previous
            previous = index


class TestRangeTiers:
    """Distance and square footage are upper bounds."""

    @pytest.mark.parametrize(
        ("miles", "expected"),
        [("0", "d250"), ("250", "d250"), ("251", "d500"), ("400", "d500"),
         ("1000", "d1000"), ("1200", "d1500"), ("3000", "d1500")],
        ids=["zero", "on-250", "just-past-250", "between", "on-1000", "last-range", "beyond"],
    )
    def test_distance_column(self, miles: str, expected: str) -> None:
        assert distance_column(Decimal(miles)) == expected

    @pytest.mark.parametrize(
        ("sqft", "expected"),
        [("800", "sq1000"), ("1000", "sq1000"), ("1200", "sq1500"), ("2600", "sq3000"),
         ("5000", "sq3000")],
        ids=["small", "on-1000", "between", "near-last", "beyond-last"],
    )
    def test_sqft_row(self, sqft: str, expected: str) -> None:
        assert sqft_row(Decimal(sqft)) == expected

    def test_range_index_clamps_to_last(self) -> None:
        assert range_tier_index(Decimal("99999"), DISTANCE_TIERS) == len(DISTANCE_TIERS) - 1


class TestLocalThreshold:
    """Moves under 50 miles are local."""

    @pytest.mark.parametrize(
        ("miles", "local"),
        [("0", True), ("49.9", True), ("50", False), ("400", False)],
        ids=["zero", "just-under", "on-threshold", "long"],
    )
    def test_is_local(self, miles: str, local: bool) -> None:
        assert is_local(Decimal(miles)) is local

    @pytest.mark.parametrize(
        ("miles", "expected"),
        [("20", "local"), ("50", "d500"), ("500", "d500"), ("750", "d1000"), ("2000", "d1500")],
        ids=["local", "threshold", "on-500", "between", "beyond"],
    )
    def test_flat_distance_column(self, miles: str, expected: str) -> None:
        assert flat_distance_column(Decimal(miles)) == expected
