"""Tests for normalizing raw rate submissions into complete RateSchedules."""

from decimal import Decimal

import pytest

from tariff.domain.errors import InvalidRateSubmission
from tariff.domain.types import PricingMethod
from tariff.rates.normalizer import MAX_RATE, normalize, normalize_with_warnings
from tariff.rates.schedule import (
    FLAT_COLUMNS,
    TRANSPORTATION_COLUMNS,
    FlatOverage,
    LaborRate,
    RateSchedule,
    transportation_rows,
)


def _numeric_leaves(value, path: str = ""):
    """Yield (path, value) for every numeric leaf of a dumped schedule."""
    if isinstance(value, dict):
        for key, child in value.items():
            yield from _numeric_leaves(child, f"{path}.{key}" if path else key)
    elif isinstance(value, (Decimal, int)) and not isinstance(value, bool):
        yield path, value


DEFAULTS_BY_SUFFIX = {
    "overage.threshold_percent": Decimal("10"),
    "overage.rate_per_lb": Decimal("0.55"),
    "min_hours": Decimal("2"),
    "min_men": 2,
}


class TestDefaultCompleteness:
    """An empty submission yields a fully populated schedule for every method."""

    @pytest.mark.parametrize("method", list(PricingMethod), ids=[m.value for m in PricingMethod])
    def test_every_leaf_has_its_default(self, method: PricingMethod) -> None:
        schedule, warnings = normalize_with_warnings({}, method)

        assert warnings == []
        assert schedule.pricing_method is method
        leaves = dict(_numeric_leaves(schedule.model_dump(exclude={"pricing_method"})))
        assert leaves, "schedule should have numeric leaves"
        for path, value in leaves.items():
            expected = next(
                (v for suffix, v in DEFAULTS_BY_SUFFIX.items() if path.endswith(suffix)),
                Decimal("0"),
            )
            assert value == expected, f"{path} = {value}, expected {expected}"

    @pytest.mark.parametrize("method", list(PricingMethod), ids=[m.value for m in PricingMethod])
    def test_matrices_have_every_row_and_column(self, method: PricingMethod) -> None:
        schedule = normalize({}, method)

        assert set(schedule.transportation_matrix) == set(transportation_rows(method))
        for row in schedule.transportation_matrix.values():
            assert tuple(row) == TRANSPORTATION_COLUMNS
        for row in schedule.flat_matrix.rates.values():
            assert tuple(row) == FLAT_COLUMNS
        assert len(schedule.flat_matrix.rates) == 4

    def test_none_is_treated_as_empty(self) -> None:
        assert normalize(None) == normalize({})

    def test_defaults_to_weight_method(self) -> None:
        assert normalize({}).pricing_method is PricingMethod.WEIGHT

    def test_documented_labor_and_overage_defaults(self) -> None:
        schedule = normalize({}, PricingMethod.FLAT)
        assert schedule.loading == LaborRate(per_man_hour=Decimal("0"), min_hours=Decimal("2"), min_men=2)
        assert schedule.flat_matrix.overage == FlatOverage()


class TestMethodResolution:
    """Pricing method comes from the argument, then the submission, then weight."""

    def test_argument_overrides_submission(self) -> None:
        schedule = normalize({"pricing_method": "flat"}, PricingMethod.CUBIC)
        assert schedule.pricing_method is PricingMethod.CUBIC

    @pytest.mark.parametrize(
        ("raw_method", "expected"),
        [
            ("cubic", PricingMethod.CUBIC),
            ("Weight-Based (per lb)", PricingMethod.WEIGHT),
            ("  MIXED METHODS ", PricingMethod.MIXED),
            ("", PricingMethod.WEIGHT),
        ],
        ids=["value", "label", "label-case-insensitive", "blank"],
    )
    def test_submission_method(self, raw_method: str, expected: PricingMethod) -> None:
        assert normalize({"pricing_method": raw_method}).pricing_method is expected

    def test_unknown_method_raises(self) -> None:
        with pytest.raises(InvalidRateSubmission, match="Unknown pricing method"):
            normalize({"pricing_method": "per-piece"})


class TestStructuralErrors:
    """Only uninterpretable shapes raise."""

    def test_non_mapping_submission(self) -> None:
        with pytest.raises(InvalidRateSubmission):
            normalize_with_warnings(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_non_mapping_section(self) -> None:
        with pytest.raises(InvalidRateSubmission, match="loading"):
            normalize({"loading": "40 per hour"})

    def test_non_mapping_mixed_subsection(self) -> None:
        with pytest.raises(InvalidRateSubmission, match="mixed.local"):
            normalize({"mixed": {"local": 95}}, PricingMethod.MIXED)


class TestFieldRecovery:
    """Bad cells become defaults with a warning instead of failing."""

    def test_non_numeric_cell(self) -> None:
        schedule, warnings = normalize_with_warnings(
            {"transportation": {"w4000": {"d500": "call us", "d250": "0.70"}}}
        )

        assert schedule.transportation_rate("w4000", "d500") == Decimal("0")
        assert schedule.transportation_rate("w4000", "d250") == Decimal("0.70")
        assert [(w.field, w.value) for w in warnings] == [("transportation.w4000.d500", "call us")]

    def test_negative_rate(self) -> None:
        schedule, warnings = normalize_with_warnings({"loading": {"per_man_hour": -40}})

        assert schedule.loading.per_man_hour == Decimal("0")
        assert warnings[0].field == "loading.per_man_hour"
        assert "negative" in warnings[0].message

    def test_negative_minimum_hours_falls_back_to_default(self) -> None:
        schedule, warnings = normalize_with_warnings({"unloading": {"min_hours": "-1"}})

        assert schedule.unloading.min_hours == Decimal("2")
        assert len(warnings) == 1

    @pytest.mark.parametrize("value", ["100", "250", 100.0], ids=["100", "250", "float"])
    def test_fuel_surcharge_at_or_above_100_percent(self, value) -> None:
        schedule, warnings = normalize_with_warnings({"accessorial": {"fuel_surcharge": value}})

        assert schedule.accessorial.fuel_surcharge == Decimal("0")
        assert warnings[0].field == "accessorial.fuel_surcharge"

    @pytest.mark.parametrize(
        "value",
        ["1" + "0" * 27, "1e30", str(MAX_RATE)],
        ids=["28-digits", "exponent", "at-ceiling"],
    )
    def test_oversized_cell_falls_back_with_warning(self, value: str) -> None:
        schedule, warnings = normalize_with_warnings({"transportation": {"w4000": {"d500": value}}})

        assert schedule.transportation_rate("w4000", "d500") == Decimal("0")
        assert [w.field for w in warnings] == ["transportation.w4000.d500"]
        assert "must be below" in warnings[0].message

    def test_oversized_min_men_keeps_default(self) -> None:
        schedule, warnings = normalize_with_warnings({"loading": {"min_men": "9" * 40}})

        assert schedule.loading.min_men == 2
        assert warnings[0].field == "loading.min_men"

    def test_large_but_reasonable_amount_kept(self) -> None:
        schedule, warnings = normalize_with_warnings({"minimums": {"long_distance": "250000"}})

        assert schedule.minimums.long_distance == Decimal("250000")
        assert warnings == []

    def test_fractional_min_men_rounds_up(self) -> None:
        schedule = normalize({"loading": {"min_men": "2.5"}})
        assert schedule.loading.min_men == 3

    def test_blank_values_use_defaults_silently(self) -> None:
        schedule, warnings = normalize_with_warnings(
            {"minimums": {"local": "", "long_distance": None}, "loading": {"min_hours": " "}}
        )

        assert warnings == []
        assert schedule.minimums.local == Decimal("0")
        assert schedule.loading.min_hours == Decimal("2")

    def test_row_that_is_not_a_mapping(self) -> None:
        schedule, warnings = normalize_with_warnings({"transportation": {"w2000": "1.00"}})

        assert all(v == 0 for v in schedule.transportation_matrix["w2000"].values())
        assert warnings[0].field == "transportation.w2000"

    def test_unknown_keys_ignored(self) -> None:
        schedule, warnings = normalize_with_warnings(
            {"transportation": {"w9999": {"d500": "1"}}, "discounts": {"military": 10}}
        )

        assert "w9999" not in schedule.transportation_matrix
        assert warnings == []

    def test_numeric_types_accepted(self) -> None:
        schedule = normalize({"accessorial": {"stairs": 75, "shuttle": 350.5}})
        assert schedule.accessorial.stairs == Decimal("75")
        assert schedule.accessorial.shuttle == Decimal("350.5")


class TestMethodExclusivity:
    """Only the active method's matrix is read from the submission."""

    def test_weight_ignores_flat_and_mixed(self, nonzero_flat: dict) -> None:
        schedule = normalize(
            {
                "pricing_method": "weight",
                "flat": nonzero_flat,
                "mixed": {"local": {"two_men": "120"}},
            }
        )

        assert schedule.flat_matrix.rates["sq1000"]["local"] == Decimal("0")
        assert schedule.mixed_rates.local.two_men == Decimal("0")

    def test_flat_ignores_transportation(self, nonzero_flat: dict) -> None:
        schedule = normalize(
            {"transportation": {"w4000": {"d500": "0.75"}}, "flat": nonzero_flat},
            PricingMethod.FLAT,
        )

        assert schedule.transportation_rate("w4000", "d500") == Decimal("0")
        assert schedule.flat_rate("sq1000", "d500") == Decimal("2500")
        assert schedule.flat_matrix.overage.threshold_percent == Decimal("15")
        assert schedule.flat_matrix.overage.rate_per_lb == Decimal("0.65")

    def test_flat_rows_directly_under_section(self) -> None:
        schedule = normalize({"flat": {"sq1500": {"local": "1100"}}}, PricingMethod.FLAT)
        assert schedule.flat_rate("sq1500", "local") == Decimal("1100")

    def test_cubic_reads_volume_rows(self) -> None:
        schedule = normalize(
            {"transportation": {"c600": {"d500": "4.25"}, "w4000": {"d500": "0.75"}}},
            PricingMethod.CUBIC,
        )

        assert schedule.transportation_rate("c600", "d500") == Decimal("4.25")
        assert "w4000" not in schedule.transportation_matrix

    def test_mixed_reads_nested_rates(self) -> None:
        schedule = normalize(
            {
                "mixed": {
                    "local": {"two_men": "120", "three_men": "160"},
                    "long_distance": {"base_rate": "0.80", "min_weight": "2000"},
                }
            },
            PricingMethod.MIXED,
        )

        assert schedule.mixed_rates.local.three_men == Decimal("160")
        assert schedule.mixed_rates.long_distance.min_weight == Decimal("2000")


class TestRenormalization:
    """A stored schedule can be re-normalized under a new method."""

    def test_dumped_schedule_round_trips(self, weight_schedule: RateSchedule) -> None:
        raw = weight_schedule.model_dump(mode="json")
        again, warnings = normalize_with_warnings(raw)

        assert again == weight_schedule
        assert warnings == []

    def test_switch_to_cubic_keeps_shared_sections(self, weight_schedule: RateSchedule) -> None:
        raw = weight_schedule.model_dump(mode="json", exclude={"pricing_method"})
        cubic = normalize(raw, PricingMethod.CUBIC)

        assert cubic.pricing_method is PricingMethod.CUBIC
        assert cubic.loading == weight_schedule.loading
        assert cubic.accessorial == weight_schedule.accessorial
        assert all(
            rate == 0 for row in cubic.transportation_matrix.values() for rate in row.values()
        )
