"""Normalize raw, possibly partial rate submissions into a complete RateSchedule.

The normalizer is the single place where "missing field -> default" logic
lives.  It never rejects a submission because of an individual bad rate
cell: non-numeric or negative values become zero (or the field's documented
default) and a :class:`ValidationWarning` is recorded for the caller to show
the user.  Only structurally uninterpretable input raises
:class:`~tariff.domain.errors.InvalidRateSubmission`.

Accepted input shape mirrors the stored field names::

    {
        "pricing_method": "weight",
        "transportation": {"w4000": {"d500": "0.75"}},
        "loading": {"per_man_hour": 40},
        "accessorial": {"fuel_surcharge": "8.5"},
    }

Unknown keys are ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from tariff.domain.errors import InvalidRateSubmission
from tariff.domain.types import PricingMethod, parse_pricing_method
from tariff.rates.schedule import (
    FLAT_COLUMNS,
    SQFT_TIERS,
    TRANSPORTATION_COLUMNS,
    ZERO,
    AccessorialRates,
    FlatMatrix,
    FlatOverage,
    LaborRate,
    Minimums,
    MixedLocalRates,
    MixedLongDistanceRates,
    MixedRates,
    RateMatrix,
    RateSchedule,
    SpecialtyRates,
    sqft_key,
    transportation_rows,
    zero_matrix,
)

logger = structlog.get_logger()

FUEL_SURCHARGE_CEILING = Decimal("100")
# Upper bound for every other numeric field, so computed amounts stay
# within the 28 digits the default decimal context can quantize to cents.
MAX_RATE = Decimal("1000000000")

# Alternate keys accepted for each top-level section, first match wins
_SECTION_KEYS: dict[str, tuple[str, ...]] = {
    "transportation": ("transportation", "transportation_matrix"),
    "flat": ("flat", "flat_matrix"),
    "mixed": ("mixed", "mixed_rates"),
    "loading": ("loading",),
    "unloading": ("unloading",),
    "minimums": ("minimums",),
    "accessorial": ("accessorial",),
    "specialty": ("specialty",),
}


class ValidationWarning(BaseModel):
    """A rate field that failed to parse and was replaced by its default.

    Attributes:
        field: Dotted path of the offending field (``transportation.w4000.d500``).
        value: The rejected raw value, as text.
        message: Human-readable reason suitable for a correction prompt.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    value: str
    message: str


def _to_decimal(value: Any) -> Decimal | None:
    """Coerce a raw value to Decimal, or return None if it is not numeric.

    Strings may carry a leading ``$`` and thousands separators.  Booleans are
    rejected even though they are ints.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int | float):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "")
        try:
            parsed = Decimal(cleaned)
        except InvalidOperation:
            return None
    else:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class _Normalizer:
    """Accumulates warnings while walking one raw submission."""

    def __init__(self) -> None:
        self.warnings: list[ValidationWarning] = []

    def warn(self, path: str, value: Any, message: str) -> None:
        self.warnings.append(ValidationWarning(field=path, value=str(value), message=message))

    def decimal(
        self,
        section: Mapping[str, Any],
        key: str,
        path: str,
        default: Decimal = ZERO,
        *,
        ceiling: Decimal | None = None,
    ) -> Decimal:
        """Read one numeric field, falling back to *default* on bad input.

        Values at or above *ceiling* (:data:`MAX_RATE` when not given) are
        rejected with a warning.
        """
        value = section.get(key)
        if _is_blank(value):
            return default
        parsed = _to_decimal(value)
        if parsed is None:
            self.warn(path, value, "not a number; using default")
            return default
        if parsed < 0:
            self.warn(path, value, "negative rate; using default")
            return default
        limit = MAX_RATE if ceiling is None else ceiling
        if parsed >= limit:
            self.warn(path, value, f"must be below {limit}; using default")
            return default
        return parsed

    def whole(self, section: Mapping[str, Any], key: str, path: str, default: int) -> int:
        """Read a count field, rounding fractional input up."""
        parsed = self.decimal(section, key, path, Decimal(default))
        return int(parsed.to_integral_value(rounding=ROUND_CEILING))

    def matrix(
        self,
        section: Mapping[str, Any],
        rows: tuple[str, ...],
        columns: tuple[str, ...],
        prefix: str,
    ) -> RateMatrix:
        """Read a tier matrix, zero-filling any missing row or cell."""
        result = zero_matrix(rows, columns)
        for row in rows:
            raw_row = section.get(row)
            if _is_blank(raw_row):
                continue
            if not isinstance(raw_row, Mapping):
                self.warn(f"{prefix}.{row}", raw_row, "expected a row of rates; using 0")
                continue
            for col in columns:
                result[row][col] = self.decimal(raw_row, col, f"{prefix}.{row}.{col}")
        return result


def _section(raw: Mapping[str, Any], name: str, path: str | None = None) -> Mapping[str, Any]:
    """Return a named sub-mapping of *raw*, or an empty mapping when absent."""
    value: Any = None
    for key in _SECTION_KEYS.get(name, (name,)):
        if key in raw:
            value = raw[key]
            break
    if _is_blank(value):
        return {}
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if not isinstance(value, Mapping):
        raise InvalidRateSubmission(
            f"'{path or name}' must be an object, got {type(value).__name__}"
        )
    return value


def _resolve_method(raw: Mapping[str, Any], method: PricingMethod | str | None) -> PricingMethod:
    candidate = method if method is not None else raw.get("pricing_method")
    if _is_blank(candidate):
        return PricingMethod.WEIGHT
    try:
        return parse_pricing_method(candidate)
    except ValueError as exc:
        raise InvalidRateSubmission(str(exc)) from exc


def _labor(n: _Normalizer, section: Mapping[str, Any], prefix: str) -> LaborRate:
    defaults = LaborRate()
    return LaborRate(
        per_man_hour=n.decimal(section, "per_man_hour", f"{prefix}.per_man_hour"),
        min_hours=n.decimal(section, "min_hours", f"{prefix}.min_hours", defaults.min_hours),
        min_men=n.whole(section, "min_men", f"{prefix}.min_men", defaults.min_men),
    )


def normalize_with_warnings(
    raw: Mapping[str, Any] | None,
    method: PricingMethod | str | None = None,
) -> tuple[RateSchedule, list[ValidationWarning]]:
    """Build a complete RateSchedule from a raw submission.

    Only the matrix required by the resolved method is read from *raw*; the
    inactive matrices are zero-filled so stale values cannot leak into a
    document.  Method resolution order: the *method* argument, then
    ``raw["pricing_method"]``, then weight.

    Args:
        raw: The unstructured submission (JSON-like mapping).  ``None`` is
            treated as an empty submission.
        method: The pricing method to normalize under.

    Returns:
        A tuple of the normalized schedule and the warnings collected for
        fields that were replaced by defaults.

    Raises:
        InvalidRateSubmission: If *raw* or one of its sections is not a
            mapping, or the pricing method is unknown.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise InvalidRateSubmission(f"rate submission must be an object, got {type(raw).__name__}")

    resolved = _resolve_method(raw, method)
    n = _Normalizer()

    rows = transportation_rows(resolved)
    if resolved in (PricingMethod.WEIGHT, PricingMethod.CUBIC):
        transportation = n.matrix(
            _section(raw, "transportation"), rows, TRANSPORTATION_COLUMNS, "transportation"
        )
    else:
        transportation = zero_matrix(rows, TRANSPORTATION_COLUMNS)

    flat_rows = tuple(sqft_key(t) for t in SQFT_TIERS)
    if resolved is PricingMethod.FLAT:
        flat_raw = _section(raw, "flat")
        # Rows may sit directly under "flat" or beneath a nested "rates" key
        grid = flat_raw.get("rates", flat_raw)
        if not isinstance(grid, Mapping):
            raise InvalidRateSubmission("'flat.rates' must be an object")
        overage_raw = _section(flat_raw, "overage", "flat.overage")
        overage_defaults = FlatOverage()
        flat = FlatMatrix(
            rates=n.matrix(grid, flat_rows, FLAT_COLUMNS, "flat"),
            overage=FlatOverage(
                threshold_percent=n.decimal(
                    overage_raw,
                    "threshold_percent",
                    "flat.overage.threshold_percent",
                    overage_defaults.threshold_percent,
                ),
                rate_per_lb=n.decimal(
                    overage_raw,
                    "rate_per_lb",
                    "flat.overage.rate_per_lb",
                    overage_defaults.rate_per_lb,
                ),
            ),
        )
    else:
        flat = FlatMatrix()

    if resolved is PricingMethod.MIXED:
        mixed_raw = _section(raw, "mixed")
        local_raw = _section(mixed_raw, "local", "mixed.local")
        long_raw = _section(mixed_raw, "long_distance", "mixed.long_distance")
        mixed = MixedRates(
            local=MixedLocalRates(
                two_men=n.decimal(local_raw, "two_men", "mixed.local.two_men"),
                three_men=n.decimal(local_raw, "three_men", "mixed.local.three_men"),
            ),
            long_distance=MixedLongDistanceRates(
                base_rate=n.decimal(long_raw, "base_rate", "mixed.long_distance.base_rate"),
                min_weight=n.decimal(long_raw, "min_weight", "mixed.long_distance.min_weight"),
            ),
        )
    else:
        mixed = MixedRates()

    minimums_raw = _section(raw, "minimums")
    accessorial_raw = _section(raw, "accessorial")
    specialty_raw = _section(raw, "specialty")

    schedule = RateSchedule(
        pricing_method=resolved,
        transportation_matrix=transportation,
        flat_matrix=flat,
        mixed_rates=mixed,
        loading=_labor(n, _section(raw, "loading"), "loading"),
        unloading=_labor(n, _section(raw, "unloading"), "unloading"),
        minimums=Minimums(
            **{
                name: n.decimal(minimums_raw, name, f"minimums.{name}")
                for name in Minimums.model_fields
            }
        ),
        accessorial=AccessorialRates(
            **{
                name: n.decimal(
                    accessorial_raw,
                    name,
                    f"accessorial.{name}",
                    ceiling=FUEL_SURCHARGE_CEILING if name == "fuel_surcharge" else None,
                )
                for name in AccessorialRates.model_fields
            }
        ),
        specialty=SpecialtyRates(
            **{
                name: n.decimal(specialty_raw, name, f"specialty.{name}")
                for name in SpecialtyRates.model_fields
            }
        ),
    )
    return schedule, n.warnings


def normalize(
    raw: Mapping[str, Any] | None,
    method: PricingMethod | str | None = None,
) -> RateSchedule:
    """Normalize a raw submission, logging any validation warnings.

    Convenience wrapper over :func:`normalize_with_warnings` for callers that
    only need the schedule.

    Args:
        raw: The unstructured submission.
        method: The pricing method to normalize under.

    Returns:
        The normalized schedule.
    """
    schedule, warnings = normalize_with_warnings(raw, method)
    for warning in warnings:
        logger.warning(
            "rate_validation_warning",
            field=warning.field,
            value=warning.value,
            detail=warning.message,
        )
    return schedule
