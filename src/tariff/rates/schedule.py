"""Pydantic v2 models for a carrier's normalized rate schedule.

A :class:`RateSchedule` carries every pricing method's payload, but only the
one selected by ``pricing_method`` is semantically active.  All monetary
fields are ``Decimal``; the normalizer in :mod:`tariff.rates.normalizer`
guarantees every field is populated, so calculators never null-check.
"""

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from tariff.domain.types import PricingMethod

ZERO = Decimal("0")

# Tier boundaries as published in the rate tables
WEIGHT_TIERS: tuple[int, ...] = (1000, 2000, 4000, 6000, 8000)
VOLUME_TIERS: tuple[int, ...] = (300, 600, 1000, 1500)
DISTANCE_TIERS: tuple[int, ...] = (250, 500, 1000, 1500)
SQFT_TIERS: tuple[int, ...] = (1000, 1500, 2500, 3000)
FLAT_DISTANCE_TIERS: tuple[int, ...] = (500, 1000, 1500)

LOCAL_COLUMN = "local"

RateMatrix = dict[str, dict[str, Decimal]]


def weight_key(tier: int) -> str:
    """Return the matrix row key for a weight tier (``w4000``)."""
    return f"w{tier}"


def volume_key(tier: int) -> str:
    """Return the matrix row key for a volume tier (``c600``)."""
    return f"c{tier}"


def distance_key(tier: int) -> str:
    """Return the matrix column key for a distance tier (``d500``)."""
    return f"d{tier}"


def sqft_key(tier: int) -> str:
    """Return the flat matrix row key for a square-footage tier (``sq1500``)."""
    return f"sq{tier}"


TRANSPORTATION_COLUMNS: tuple[str, ...] = tuple(distance_key(t) for t in DISTANCE_TIERS)
FLAT_COLUMNS: tuple[str, ...] = (LOCAL_COLUMN, *(distance_key(t) for t in FLAT_DISTANCE_TIERS))


def transportation_rows(method: PricingMethod) -> tuple[str, ...]:
    """Return the transportation matrix row keys used by *method*.

    Cubic pricing is keyed by volume tiers; every other method keeps the
    weight-tier shape.
    """
    if method is PricingMethod.CUBIC:
        return tuple(volume_key(t) for t in VOLUME_TIERS)
    return tuple(weight_key(t) for t in WEIGHT_TIERS)


def zero_matrix(rows: tuple[str, ...], columns: tuple[str, ...]) -> RateMatrix:
    """Build a fully-populated matrix with every cell set to zero."""
    return {row: {col: ZERO for col in columns} for row in rows}


class FlatOverage(BaseModel):
    """Per-pound charge for weight beyond the flat-rate assumption."""

    model_config = ConfigDict(frozen=True)

    threshold_percent: Decimal = Decimal("10")
    rate_per_lb: Decimal = Decimal("0.55")


class FlatMatrix(BaseModel):
    """Flat dollar amounts by square-footage tier and distance column."""

    model_config = ConfigDict(frozen=True)

    rates: RateMatrix = Field(
        default_factory=lambda: zero_matrix(tuple(sqft_key(t) for t in SQFT_TIERS), FLAT_COLUMNS)
    )
    overage: FlatOverage = FlatOverage()


class MixedLocalRates(BaseModel):
    """Hourly crew rates for local moves under mixed pricing."""

    model_config = ConfigDict(frozen=True)

    two_men: Decimal = ZERO
    three_men: Decimal = ZERO


class MixedLongDistanceRates(BaseModel):
    """Per-pound rate and minimum billable weight for long-distance moves."""

    model_config = ConfigDict(frozen=True)

    base_rate: Decimal = ZERO
    min_weight: Decimal = ZERO


class MixedRates(BaseModel):
    """Mixed pricing: hourly locally, weight-based for long distance."""

    model_config = ConfigDict(frozen=True)

    local: MixedLocalRates = MixedLocalRates()
    long_distance: MixedLongDistanceRates = MixedLongDistanceRates()


class LaborRate(BaseModel):
    """Per-man-hour labor rate with crew and time floors."""

    model_config = ConfigDict(frozen=True)

    per_man_hour: Decimal = ZERO
    min_hours: Decimal = Decimal("2")
    min_men: int = 2


class Minimums(BaseModel):
    """Floor charges applied after all components are summed."""

    model_config = ConfigDict(frozen=True)

    local: Decimal = ZERO
    long_distance: Decimal = ZERO
    hours: Decimal = ZERO


class AccessorialRates(BaseModel):
    """Accessorial service charges plus the fuel surcharge percentage."""

    model_config = ConfigDict(frozen=True)

    packing: Decimal = ZERO
    storage: Decimal = ZERO
    stairs: Decimal = ZERO
    long_carry: Decimal = ZERO
    shuttle: Decimal = ZERO
    waiting: Decimal = ZERO
    fuel_surcharge: Decimal = ZERO

    @field_validator("fuel_surcharge")
    @classmethod
    def fuel_surcharge_in_range(cls, v: Decimal) -> Decimal:
        """Ensure the fuel surcharge is a percentage in [0, 100)."""
        if v < 0 or v >= 100:
            raise ValueError(f"fuel_surcharge must be in [0, 100), got {v}")
        return v


class SpecialtyRates(BaseModel):
    """Flat add-on charges for specialty items."""

    model_config = ConfigDict(frozen=True)

    piano_upright: Decimal = ZERO
    piano_grand: Decimal = ZERO
    pool_table: Decimal = ZERO
    safe: Decimal = ZERO
    gym: Decimal = ZERO
    appliance: Decimal = ZERO


ACCESSORIAL_ADD_ONS: tuple[str, ...] = (
    "packing",
    "storage",
    "stairs",
    "long_carry",
    "shuttle",
    "waiting",
)
SPECIALTY_ADD_ONS: tuple[str, ...] = tuple(SpecialtyRates.model_fields)
ADD_ON_NAMES: frozenset[str] = frozenset(ACCESSORIAL_ADD_ONS + SPECIALTY_ADD_ONS)


class RateSchedule(BaseModel):
    """A carrier's complete pricing configuration.

    Exactly one of ``transportation_matrix`` (weight and cubic),
    ``flat_matrix`` (flat) or ``mixed_rates`` (mixed) is active, selected by
    ``pricing_method``.  The others may hold stale data and are never read by
    the calculators or the document assembler.

    Edits never mutate a schedule; they produce a new value.  Field names
    accept both the long form and the short submission keys
    (``transportation``, ``flat``, ``mixed``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pricing_method: PricingMethod = PricingMethod.WEIGHT
    transportation_matrix: RateMatrix = Field(
        default_factory=lambda: zero_matrix(
            transportation_rows(PricingMethod.WEIGHT), TRANSPORTATION_COLUMNS
        ),
        validation_alias=AliasChoices("transportation_matrix", "transportation"),
    )
    flat_matrix: FlatMatrix = Field(
        default_factory=FlatMatrix,
        validation_alias=AliasChoices("flat_matrix", "flat"),
    )
    mixed_rates: MixedRates = Field(
        default_factory=MixedRates,
        validation_alias=AliasChoices("mixed_rates", "mixed"),
    )
    loading: LaborRate = LaborRate()
    unloading: LaborRate = LaborRate()
    minimums: Minimums = Minimums()
    accessorial: AccessorialRates = AccessorialRates()
    specialty: SpecialtyRates = SpecialtyRates()

    def transportation_rate(self, row: str, column: str) -> Decimal:
        """Return a transportation matrix cell, zero when absent."""
        return self.transportation_matrix.get(row, {}).get(column, ZERO)

    def flat_rate(self, row: str, column: str) -> Decimal:
        """Return a flat matrix cell, zero when absent."""
        return self.flat_matrix.rates.get(row, {}).get(column, ZERO)

    def add_on_rate(self, name: str) -> Decimal:
        """Return the unit charge for a named accessorial or specialty add-on.

        Raises:
            KeyError: If *name* is not a known add-on.
        """
        if name in ACCESSORIAL_ADD_ONS:
            return getattr(self.accessorial, name)
        if name in SPECIALTY_ADD_ONS:
            return getattr(self.specialty, name)
        raise KeyError(name)
