"""Itemized sample-charge calculators for each pricing method.

All monetary calculations use Decimal arithmetic.  Components are kept
exact; values are quantized to two decimal places with ROUND_HALF_UP only
when formatted for display.  Calculators never raise for out-of-range
shipments: tier lookups clamp to the nearest published tier.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tariff.domain.errors import PricingError
from tariff.domain.types import PricingMethod
from tariff.pricing.tiers import (
    distance_column,
    flat_distance_column,
    is_local,
    sqft_row,
    volume_row,
    weight_row,
)
from tariff.rates.schedule import ADD_ON_NAMES, SQFT_TIERS, ZERO, LaborRate, RateSchedule

# Precision: displayed monetary values quantized to 2 decimal places
TWO_PLACES = Decimal("0.01")

ZERO_RATE_PLACEHOLDER = "$XX.XX"

# Constructive weight: pounds per cubic foot of van space
CONSTRUCTIVE_LBS_PER_CUBIC_FOOT = Decimal("7")

# Weight a home of each square-footage tier is assumed to ship at flat rate
ASSUMED_WEIGHT_BY_SQFT: dict[int, Decimal] = {
    1000: Decimal("4000"),
    1500: Decimal("6000"),
    2500: Decimal("10000"),
    3000: Decimal("12000"),
}

ADD_ON_LABELS: dict[str, str] = {
    "packing": "Packing",
    "storage": "Storage",
    "stairs": "Stair Carry",
    "long_carry": "Long Carry",
    "shuttle": "Shuttle Service",
    "waiting": "Waiting Time",
    "piano_upright": "Piano (upright)",
    "piano_grand": "Piano (grand)",
    "pool_table": "Pool Table",
    "safe": "Safe",
    "gym": "Gym Equipment",
    "appliance": "Appliance Service",
}


def format_money(amount: Decimal, *, placeholder: str | None = ZERO_RATE_PLACEHOLDER) -> str:
    """Format a dollar amount as ``$1,234.50``.

    Args:
        amount: The amount to format.
        placeholder: Text shown for a zero amount (pending rate entry).  Pass
            ``None`` to render zero as ``$0.00``.

    Returns:
        The formatted amount.
    """
    if amount == 0 and placeholder is not None:
        return placeholder
    return f"${amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP):,.2f}"


def format_rate(rate: Decimal, *, placeholder: str | None = ZERO_RATE_PLACEHOLDER) -> str:
    """Format a unit rate, keeping sub-cent precision when the rate has it.

    ``Decimal("0.75")`` renders as ``$0.75``; ``Decimal("0.755")`` as ``$0.755``.
    """
    if rate == 0 and placeholder is not None:
        return placeholder
    exponent = rate.normalize().as_tuple().exponent
    places = max(2, -exponent) if isinstance(exponent, int) else 2
    return f"${rate:,.{places}f}"


def format_quantity(value: Decimal) -> str:
    """Format a weight, volume or hour count without trailing zeros."""
    exponent = value.normalize().as_tuple().exponent
    places = max(0, -exponent) if isinstance(exponent, int) else 0
    return f"{value:,.{places}f}"


def format_percent(value: Decimal) -> str:
    """Format a percentage without trailing zeros (``8.5%``)."""
    return f"{format_quantity(value)}%"


class Shipment(BaseModel):
    """A synthetic shipment used to illustrate charges.

    ``cubic_feet`` defaults to the constructive volume (weight / 7, rounded
    up) and ``square_feet`` to the smallest home size whose assumed weight
    covers the shipment.
    """

    model_config = ConfigDict(frozen=True)

    weight_lbs: Decimal = Field(ge=0)
    distance_miles: Decimal = Field(ge=0)
    crew_size: int = Field(default=2, ge=1)
    load_hours: Decimal = Field(default=ZERO, ge=0)
    unload_hours: Decimal = Field(default=ZERO, ge=0)
    cubic_feet: Decimal | None = Field(default=None, ge=0)
    square_feet: Decimal | None = Field(default=None, ge=0)
    add_ons: dict[str, int] = Field(default_factory=dict)

    @field_validator("add_ons")
    @classmethod
    def add_ons_must_be_known(cls, v: dict[str, int]) -> dict[str, int]:
        """Ensure every add-on names a rate in the schedule with a non-negative count."""
        unknown = sorted(set(v) - ADD_ON_NAMES)
        if unknown:
            raise ValueError(
                f"Unknown add-ons: {', '.join(unknown)}. "
                f"Valid add-ons: {', '.join(sorted(ADD_ON_NAMES))}"
            )
        for name, quantity in v.items():
            if quantity < 0:
                raise ValueError(f"add-on quantity for {name} must not be negative")
        return v

    @property
    def effective_cubic_feet(self) -> Decimal:
        """Return the declared volume or the constructive volume."""
        if self.cubic_feet is not None:
            return self.cubic_feet
        return (self.weight_lbs / CONSTRUCTIVE_LBS_PER_CUBIC_FOOT).to_integral_value(
            rounding=ROUND_CEILING
        )

    @property
    def effective_square_feet(self) -> Decimal:
        """Return the declared home size or the size implied by weight."""
        if self.square_feet is not None:
            return self.square_feet
        for tier in SQFT_TIERS:
            if ASSUMED_WEIGHT_BY_SQFT[tier] >= self.weight_lbs:
                return Decimal(tier)
        return Decimal(SQFT_TIERS[-1])

    @property
    def is_local(self) -> bool:
        """Return True if the shipment is billed as a local move."""
        return is_local(self.distance_miles)


class ChargeLine(BaseModel):
    """One itemized row of a charge breakdown."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    calculation: str
    amount: Decimal


class ChargeBreakdown(BaseModel):
    """Fully itemized charges for one shipment under one schedule.

    ``total`` is ``subtotal`` floored at ``minimum_charge``.
    """

    model_config = ConfigDict(frozen=True)

    pricing_method: PricingMethod
    lines: tuple[ChargeLine, ...]
    line_haul: Decimal
    fuel_surcharge_percent: Decimal
    fuel_surcharge_amount: Decimal
    loading_cost: Decimal
    unloading_cost: Decimal
    add_on_cost: Decimal
    subtotal: Decimal
    minimum_charge: Decimal
    total: Decimal
    is_local: bool

    @property
    def minimum_applied(self) -> bool:
        """Return True if the minimum charge raised the total."""
        return self.total > self.subtotal


LineHaul = tuple[Decimal, list[ChargeLine]]


def weight_line_haul(schedule: RateSchedule, shipment: Shipment) -> LineHaul:
    """Line haul for weight pricing: weight x rate for the weight/distance cell."""
    rate = schedule.transportation_rate(
        weight_row(shipment.weight_lbs), distance_column(shipment.distance_miles)
    )
    amount = shipment.weight_lbs * rate
    line = ChargeLine(
        code="line_haul",
        description="Transportation (Line Haul)",
        calculation=f"{format_quantity(shipment.weight_lbs)} lbs × {format_rate(rate)}/lb",
        amount=amount,
    )
    return amount, [line]


def cubic_line_haul(schedule: RateSchedule, shipment: Shipment) -> LineHaul:
    """Line haul for cubic pricing: volume x rate for the volume/distance cell."""
    volume = shipment.effective_cubic_feet
    rate = schedule.transportation_rate(
        volume_row(volume), distance_column(shipment.distance_miles)
    )
    amount = volume * rate
    line = ChargeLine(
        code="line_haul",
        description="Transportation (Line Haul)",
        calculation=f"{format_quantity(volume)} cu ft × {format_rate(rate)}/cu ft",
        amount=amount,
    )
    return amount, [line]


def flat_line_haul(schedule: RateSchedule, shipment: Shipment) -> LineHaul:
    """Line haul for flat pricing: the flat amount plus any weight overage.

    Overage applies only when the shipment weighs more than the tier's
    assumed weight by more than ``threshold_percent``; it is then billed on
    every pound above the assumed weight.
    """
    square_feet = shipment.effective_square_feet
    row = sqft_row(square_feet)
    flat_amount = schedule.flat_rate(row, flat_distance_column(shipment.distance_miles))
    lines = [
        ChargeLine(
            code="flat_rate",
            description="Flat Rate",
            calculation=f"{format_quantity(square_feet)} sq ft home, "
            f"{format_quantity(shipment.distance_miles)} mi",
            amount=flat_amount,
        )
    ]

    overage_terms = schedule.flat_matrix.overage
    assumed = ASSUMED_WEIGHT_BY_SQFT[int(row.removeprefix("sq"))]
    limit = assumed * (1 + overage_terms.threshold_percent / 100)
    overage = ZERO
    if shipment.weight_lbs > limit:
        excess = shipment.weight_lbs - assumed
        overage = excess * overage_terms.rate_per_lb
        lines.append(
            ChargeLine(
                code="flat_overage",
                description="Weight Overage",
                calculation=f"{format_quantity(excess)} lbs over {format_quantity(assumed)} "
                f"× {format_rate(overage_terms.rate_per_lb)}/lb",
                amount=overage,
            )
        )
    return flat_amount + overage, lines


def mixed_line_haul(schedule: RateSchedule, shipment: Shipment) -> LineHaul:
    """Line haul for mixed pricing: hourly when local, weight-based otherwise."""
    mixed = schedule.mixed_rates
    if shipment.is_local:
        three_men = shipment.crew_size >= 3
        rate = mixed.local.three_men if three_men else mixed.local.two_men
        hours = max(shipment.load_hours + shipment.unload_hours, schedule.minimums.hours)
        amount = hours * rate
        crew = "3 men" if three_men else "2 men"
        line = ChargeLine(
            code="hourly_service",
            description=f"Hourly Service ({crew})",
            calculation=f"{format_quantity(hours)} hrs × {format_rate(rate)}/hr",
            amount=amount,
        )
        return amount, [line]

    billable = max(shipment.weight_lbs, mixed.long_distance.min_weight)
    rate = mixed.long_distance.base_rate
    amount = billable * rate
    line = ChargeLine(
        code="line_haul",
        description="Transportation (Line Haul)",
        calculation=f"{format_quantity(billable)} lbs × {format_rate(rate)}/lb",
        amount=amount,
    )
    return amount, [line]


LINE_HAUL_CALCULATORS: dict[PricingMethod, Callable[[RateSchedule, Shipment], LineHaul]] = {
    PricingMethod.WEIGHT: weight_line_haul,
    PricingMethod.CUBIC: cubic_line_haul,
    PricingMethod.FLAT: flat_line_haul,
    PricingMethod.MIXED: mixed_line_haul,
}


def billed_crew(rate: LaborRate, crew_size: int) -> int:
    """Return the crew size billed after the minimum-men floor."""
    return max(crew_size, rate.min_men)


def billed_hours(rate: LaborRate, hours: Decimal) -> Decimal:
    """Return the hours billed after the minimum-hours floor."""
    return max(hours, rate.min_hours)


def labor_cost(rate: LaborRate, crew_size: int, hours: Decimal) -> Decimal:
    """Calculate a labor charge with crew and hour floors applied first.

    Formula: max(crew, min_men) x max(hours, min_hours) x per_man_hour.

    Args:
        rate: The loading or unloading rate.
        crew_size: Actual crew size.
        hours: Actual hours worked.

    Returns:
        The exact labor charge.
    """
    return billed_crew(rate, crew_size) * billed_hours(rate, hours) * rate.per_man_hour


def _labor_line(
    code: str, description: str, rate: LaborRate, shipment: Shipment, hours: Decimal
) -> ChargeLine:
    men = billed_crew(rate, shipment.crew_size)
    billed = billed_hours(rate, hours)
    return ChargeLine(
        code=code,
        description=description,
        calculation=f"{men} men × {format_quantity(billed)} hrs × {format_rate(rate.per_man_hour)}",
        amount=labor_cost(rate, shipment.crew_size, hours),
    )


def compute_sample(schedule: RateSchedule, shipment: Shipment) -> ChargeBreakdown:
    """Compute the itemized charges for *shipment* under *schedule*.

    The line haul comes from the calculator for ``schedule.pricing_method``.
    Every method then adds the fuel surcharge (on line haul only), loading
    and unloading labor, and any requested add-ons, and floors the sum at the
    local or long-distance minimum.

    Args:
        schedule: A normalized rate schedule.
        shipment: The shipment to price.

    Returns:
        The full charge breakdown.

    Raises:
        PricingError: If no calculator is registered for the schedule's method.
    """
    calculator = LINE_HAUL_CALCULATORS.get(schedule.pricing_method)
    if calculator is None:
        raise PricingError(f"No calculator for pricing method {schedule.pricing_method!r}")

    line_haul, lines = calculator(schedule, shipment)

    fuel_percent = schedule.accessorial.fuel_surcharge
    fuel_amount = line_haul * (fuel_percent / Decimal(100))
    if fuel_percent > 0:
        lines.append(
            ChargeLine(
                code="fuel_surcharge",
                description=f"Fuel Surcharge ({format_percent(fuel_percent)})",
                calculation=f"{format_money(line_haul, placeholder=None)} × "
                f"{format_percent(fuel_percent)}",
                amount=fuel_amount,
            )
        )

    loading = _labor_line(
        "loading", "Loading Labor", schedule.loading, shipment, shipment.load_hours
    )
    unloading = _labor_line(
        "unloading", "Unloading Labor", schedule.unloading, shipment, shipment.unload_hours
    )
    lines.extend([loading, unloading])

    add_on_cost = ZERO
    for name, quantity in sorted(shipment.add_ons.items()):
        if quantity == 0:
            continue
        unit = schedule.add_on_rate(name)
        amount = unit * quantity
        add_on_cost += amount
        lines.append(
            ChargeLine(
                code=name,
                description=ADD_ON_LABELS[name],
                calculation=f"{quantity} × {format_rate(unit)}",
                amount=amount,
            )
        )

    subtotal = line_haul + fuel_amount + loading.amount + unloading.amount + add_on_cost
    local = shipment.is_local
    minimum = schedule.minimums.local if local else schedule.minimums.long_distance
    return ChargeBreakdown(
        pricing_method=schedule.pricing_method,
        lines=tuple(lines),
        line_haul=line_haul,
        fuel_surcharge_percent=fuel_percent,
        fuel_surcharge_amount=fuel_amount,
        loading_cost=loading.amount,
        unloading_cost=unloading.amount,
        add_on_cost=add_on_cost,
        subtotal=subtotal,
        minimum_charge=minimum,
        total=max(subtotal, minimum),
        is_local=local,
    )
