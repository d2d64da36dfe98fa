"""Build the tariff document's content plan from a profile, schedule and order.

:func:`build_content_plan` is pure: the same ``(profile, schedule, order)``
always yields identical blocks.  Rate tables and sample calculations are
derived from the schedule at call time by running the pricing calculators,
so the document cannot disagree with the stored rates.  Only the rate
presentation for ``schedule.pricing_method`` is emitted; stale data for
other methods is never read.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal

from tariff.document.blocks import (
    ContentBlock,
    ContentPlan,
    Heading,
    KeyValueBox,
    Paragraph,
    ParagraphStyle,
    Table,
)
from tariff.document.sections import (
    ACKNOWLEDGMENT,
    APPLICATION,
    CLOSING_SECTIONS,
    DEFINITIONS_SECTION,
    LABOR_EXCLUDES,
    LOADING_INCLUDES,
    PACKING_MATERIALS,
    SCOPE_SERVICES,
    SIGNATURE_LINES,
    TABLE_OF_CONTENTS,
    TERRITORY_DESCRIPTIONS,
    TRANSPORTATION_EXCLUDES,
    TRANSPORTATION_INCLUDES,
    UNLOADING_INCLUDES,
    WEIGHING_RULES,
    SectionDefinition,
)
from tariff.domain.models import DEFAULT_TERRITORY, CarrierProfile, TariffOrder
from tariff.domain.types import PRICING_METHOD_LABELS, PricingMethod
from tariff.pricing.calculators import (
    ASSUMED_WEIGHT_BY_SQFT,
    ChargeBreakdown,
    Shipment,
    compute_sample,
    format_money,
    format_percent,
    format_quantity,
    format_rate,
    labor_cost,
)
from tariff.rates.schedule import (
    FLAT_COLUMNS,
    SQFT_TIERS,
    TRANSPORTATION_COLUMNS,
    VOLUME_TIERS,
    WEIGHT_TIERS,
    LaborRate,
    RateSchedule,
    sqft_key,
    transportation_rows,
)
from tariff.regeneration.policy import derive_document_id

DEFAULT_ISSUER = "Interstate Compliance Solutions"
DEFAULT_ISSUER_WEBSITE = "www.interstatecompliancesolutions.com"
NOT_AVAILABLE = "N/A"

DISTANCE_LABELS: tuple[str, ...] = ("0-250 mi", "251-500 mi", "501-1000 mi", "1000+ mi")
FLAT_DISTANCE_LABELS: tuple[str, ...] = ("Local", "0-500 mi", "501-1000 mi", "1000+ mi")
SQFT_LABELS: tuple[str, ...] = (
    "0-1,000 sq ft",
    "1,001-1,500 sq ft",
    "1,501-2,500 sq ft",
    "2,501+ sq ft",
)

# Representative shipments used for the sample calculations of each method
SAMPLE_SHIPMENTS: dict[PricingMethod, tuple[tuple[str, Shipment], ...]] = {
    PricingMethod.WEIGHT: (
        ("Small shipment", Shipment(
            weight_lbs=Decimal(2000), distance_miles=Decimal(400), crew_size=2,
            load_hours=Decimal(2), unload_hours=Decimal(2),
        )),
        ("Typical household move", Shipment(
            weight_lbs=Decimal(5000), distance_miles=Decimal(400), crew_size=3,
            load_hours=Decimal(4), unload_hours=Decimal(3), add_ons={"stairs": 2},
        )),
        ("Large cross-country move", Shipment(
            weight_lbs=Decimal(8000), distance_miles=Decimal(1200), crew_size=4,
            load_hours=Decimal(5), unload_hours=Decimal(4),
        )),
    ),
    PricingMethod.CUBIC: (
        ("Small shipment", Shipment(
            weight_lbs=Decimal(2100), cubic_feet=Decimal(300), distance_miles=Decimal(400),
            crew_size=2, load_hours=Decimal(2), unload_hours=Decimal(2),
        )),
        ("Typical household move", Shipment(
            weight_lbs=Decimal(4900), cubic_feet=Decimal(700), distance_miles=Decimal(400),
            crew_size=3, load_hours=Decimal(4), unload_hours=Decimal(3), add_ons={"stairs": 2},
        )),
        ("Large cross-country move", Shipment(
            weight_lbs=Decimal(10500), cubic_feet=Decimal(1500), distance_miles=Decimal(1200),
            crew_size=4, load_hours=Decimal(5), unload_hours=Decimal(4),
        )),
    ),
    PricingMethod.FLAT: (
        ("Local apartment move", Shipment(
            weight_lbs=Decimal(4500), square_feet=Decimal(1200), distance_miles=Decimal(25),
            crew_size=3, load_hours=Decimal(3), unload_hours=Decimal(3),
        )),
        ("Typical household move", Shipment(
            weight_lbs=Decimal(9000), square_feet=Decimal(2000), distance_miles=Decimal(400),
            crew_size=3, load_hours=Decimal(4), unload_hours=Decimal(3),
        )),
        ("Heavy shipment with overage", Shipment(
            weight_lbs=Decimal(14000), square_feet=Decimal(3000), distance_miles=Decimal(1200),
            crew_size=4, load_hours=Decimal(6), unload_hours=Decimal(5),
        )),
    ),
    PricingMethod.MIXED: (
        ("Local hourly move", Shipment(
            weight_lbs=Decimal(4000), distance_miles=Decimal(20), crew_size=3,
            load_hours=Decimal(3), unload_hours=Decimal(2),
        )),
        ("Long-distance move", Shipment(
            weight_lbs=Decimal(5000), distance_miles=Decimal(800), crew_size=3,
            load_hours=Decimal(4), unload_hours=Decimal(3),
        )),
        ("Small long-distance shipment", Shipment(
            weight_lbs=Decimal(1500), distance_miles=Decimal(1200), crew_size=2,
            load_hours=Decimal(2), unload_hours=Decimal(2),
        )),
    ),
}

METHOD_PROSE: dict[PricingMethod, str] = {
    PricingMethod.WEIGHT: (
        "Weight-based rates are determined by the actual weight of the shipment and the "
        "distance of the move. Weight is certified by weighing the loaded vehicle and "
        "subtracting the tare (empty) weight."
    ),
    PricingMethod.CUBIC: (
        "Cubic foot rates are based on the volume of space occupied by the shipment in the "
        "moving vehicle, calculated by standard industry measurement practices."
    ),
    PricingMethod.FLAT: (
        "Flat rates are quoted based on the size of the residence and the distance of the "
        "move. The quoted rate is guaranteed provided the inventory is accurate, the "
        "shipment does not exceed the assumed weight for the residence by more than the "
        "published overage threshold, and no additional services are required."
    ),
    PricingMethod.MIXED: (
        "Local moves (under 50 miles) are charged at an hourly crew rate for the actual "
        "time required. Long-distance moves are charged by weight at the published base "
        "rate, subject to a minimum billable weight."
    ),
}

TRANSPORTATION_FORMULA: dict[PricingMethod, str] = {
    PricingMethod.WEIGHT: "Transportation: (shipment weight in lbs) × (rate per lb for weight "
    "and distance)",
    PricingMethod.CUBIC: "Transportation: (shipment volume in cu ft) × (rate per cu ft for "
    "volume and distance)",
    PricingMethod.FLAT: "Transportation: flat rate for home size and distance, plus any "
    "weight overage",
    PricingMethod.MIXED: "Transportation: hourly crew rate × hours (local), or billable "
    "weight × base rate (long distance)",
}

LOADING_SAMPLES: tuple[tuple[int, int], ...] = ((2, 2), (2, 4), (3, 3), (3, 5), (4, 4))
UNLOADING_SAMPLES: tuple[tuple[int, int], ...] = ((2, 2), (2, 3), (3, 3), (3, 4), (4, 3))

ACCESSORIAL_UNITS: tuple[tuple[str, str, str], ...] = (
    ("packing", "Packing Labor", "per hour per packer"),
    ("storage", "Storage", "per month"),
    ("stairs", "Stair Carry", "per flight"),
    ("long_carry", "Long Carry", "per 100 feet"),
    ("shuttle", "Shuttle Service", "minimum"),
    ("waiting", "Waiting Time", "per hour"),
)

SPECIALTY_ITEMS: tuple[tuple[str, str], ...] = (
    ("piano_upright", "Piano (upright)"),
    ("piano_grand", "Piano (grand)"),
    ("pool_table", "Pool table"),
    ("safe", "Safe (per 100 lbs)"),
    ("gym", "Gym equipment (per piece)"),
    ("appliance", "Appliance service"),
)


def format_long_date(value: date) -> str:
    """Format a date as ``January 5, 2026``."""
    return f"{value:%B} {value.day}, {value.year}"


def _item(item: str, title: str) -> Heading:
    return Heading(text=title, item=item, new_page=True)


def _sub(text: str) -> Heading:
    return Heading(text=text, level=2)


def _p(text: str, style: ParagraphStyle = ParagraphStyle.BODY) -> Paragraph:
    return Paragraph(text=text, style=style)


def _bullets(lines: tuple[str, ...] | list[str]) -> list[Paragraph]:
    return [Paragraph(text=line, style=ParagraphStyle.BULLET) for line in lines]


def _fill(block: ContentBlock, context: dict[str, str]) -> ContentBlock:
    """Substitute carrier placeholders into a boilerplate block."""
    if isinstance(block, Heading | Paragraph):
        return block.model_copy(update={"text": block.text.format_map(context)})
    return block


def _static_section(section: SectionDefinition, context: dict[str, str]) -> list[ContentBlock]:
    return [_item(section.item, section.title), *(_fill(b, context) for b in section.blocks)]


# ---------------------------------------------------------------------------
# Sample calculations
# ---------------------------------------------------------------------------


def _describe_shipment(method: PricingMethod, shipment: Shipment) -> str:
    parts = [f"{format_quantity(shipment.weight_lbs)} lbs"]
    if method is PricingMethod.CUBIC:
        parts.append(f"{format_quantity(shipment.effective_cubic_feet)} cu ft")
    if method is PricingMethod.FLAT:
        parts.append(f"{format_quantity(shipment.effective_square_feet)} sq ft home")
    parts.append(f"{format_quantity(shipment.distance_miles)} miles")
    parts.append(f"{shipment.crew_size} men")
    parts.append(
        f"{format_quantity(shipment.load_hours)} hrs loading, "
        f"{format_quantity(shipment.unload_hours)} hrs unloading"
    )
    for name, quantity in sorted(shipment.add_ons.items()):
        parts.append(f"{quantity} × {name.replace('_', ' ')}")
    return "Example: " + ", ".join(parts)


def _breakdown_table(key: str, breakdown: ChargeBreakdown) -> Table:
    rows = [(line.description, line.calculation, format_money(line.amount)) for line in breakdown.lines]
    rows.append(("Subtotal", "", format_money(breakdown.subtotal)))
    if breakdown.minimum_applied:
        kind = "local" if breakdown.is_local else "long-distance"
        rows.append(("Minimum Charge", f"{kind} minimum applies", format_money(breakdown.minimum_charge)))
    rows.append(("ESTIMATED TOTAL", "", format_money(breakdown.total)))
    return Table(
        key=key,
        columns=("Service", "Calculation", "Amount"),
        rows=tuple(rows),
        total_row=True,
    )


def sample_breakdowns(schedule: RateSchedule) -> list[tuple[str, Shipment, ChargeBreakdown]]:
    """Run the schedule's calculator over its method's representative shipments.

    Args:
        schedule: A normalized rate schedule.

    Returns:
        ``(label, shipment, breakdown)`` triples in presentation order.
    """
    return [
        (label, shipment, compute_sample(schedule, shipment))
        for label, shipment in SAMPLE_SHIPMENTS[schedule.pricing_method]
    ]


def _sample_blocks(schedule: RateSchedule) -> list[ContentBlock]:
    method = schedule.pricing_method
    blocks: list[ContentBlock] = [
        _sub("Sample Charge Calculations"),
        _p("The following examples apply the rates published in this tariff to "
           "representative shipments. Amounts shown as $XX.XX are pending rate entry."),
    ]
    for n, (label, shipment, breakdown) in enumerate(sample_breakdowns(schedule), start=1):
        blocks.append(Heading(text=f"Sample {n}: {label}", level=3))
        blocks.append(_p(_describe_shipment(method, shipment), ParagraphStyle.NOTE))
        blocks.append(_breakdown_table(f"sample_{method.value}_{n}", breakdown))
    return blocks


# ---------------------------------------------------------------------------
# Rate presentation (Item 310), one builder per pricing method
# ---------------------------------------------------------------------------


def _transportation_table(schedule: RateSchedule, key: str, title: str, labels: list[str]) -> Table:
    rows = tuple(
        (label, *(format_rate(schedule.transportation_rate(row, col)) for col in TRANSPORTATION_COLUMNS))
        for label, row in zip(labels, transportation_rows(schedule.pricing_method), strict=True)
    )
    first = "Volume" if schedule.pricing_method is PricingMethod.CUBIC else "Weight"
    return Table(key=key, title=title, columns=(first, *DISTANCE_LABELS), rows=rows)


def _fuel_box(schedule: RateSchedule) -> list[ContentBlock]:
    pct = schedule.accessorial.fuel_surcharge
    if pct <= 0:
        return [_p("A fuel surcharge may be applied to transportation charges based on current "
                   "fuel prices. The current fuel surcharge percentage, if applicable, will be "
                   "disclosed on your estimate and bill of lading.")]
    _, _, typical = sample_breakdowns(schedule)[1]
    return [
        _p(f"A fuel surcharge of {format_percent(pct)} is applied to all transportation (line "
           "haul) charges. It is never applied to labor or accessorial charges."),
        KeyValueBox(
            title="Fuel Surcharge",
            items=(
                ("Formula", f"Fuel Surcharge = Transportation Charge × {format_percent(pct)}"),
                (
                    "Example",
                    f"{format_money(typical.line_haul)} transportation × {format_percent(pct)} "
                    f"= {format_money(typical.fuel_surcharge_amount)}",
                ),
            ),
        ),
    ]


def _weight_presentation(schedule: RateSchedule) -> list[ContentBlock]:
    labels = [f"{tier:,} lbs" for tier in WEIGHT_TIERS]
    labels[-1] = f"{WEIGHT_TIERS[-1]:,}+ lbs"
    return [
        _item("310", "TRANSPORTATION RATES (LINE HAUL)"),
        _p("Transportation charges for interstate household goods moves are based on the "
           "actual weight of the shipment and the distance traveled. Federal regulations "
           "require that interstate moves be charged by weight, not by the hour."),
        _sub("A. Rate Schedule - Weight & Distance Matrix"),
        _p("Rates are shown per pound. A shipment is rated at the highest weight bracket it "
           "reaches and at the distance bracket that contains the move."),
        _transportation_table(schedule, "transportation_weight", "Rates per lb", labels),
        *WEIGHING_RULES,
    ]


def _cubic_presentation(schedule: RateSchedule) -> list[ContentBlock]:
    labels = [f"{tier:,} cu ft" for tier in VOLUME_TIERS]
    labels[-1] = f"{VOLUME_TIERS[-1]:,}+ cu ft"
    return [
        _item("310", "TRANSPORTATION RATES (CUBIC FEET)"),
        _p("Transportation charges are based on the volume of van space occupied by the "
           "shipment and the distance traveled."),
        _sub("A. Rate Schedule - Volume & Distance Matrix"),
        _p("Rates are shown per cubic foot. A shipment is rated at the highest volume bracket "
           "it reaches and at the distance bracket that contains the move."),
        _transportation_table(schedule, "transportation_cubic", "Rates per cu ft", labels),
        _sub("B. Volume Determination"),
        _p("Volume is measured in cubic feet of van space occupied. Where volume is not "
           "measured, it is derived at a constructive density of 7 lbs per cubic foot."),
    ]


def _flat_presentation(schedule: RateSchedule) -> list[ContentBlock]:
    rows = tuple(
        (label, *(format_money(schedule.flat_rate(sqft_key(tier), col)) for col in FLAT_COLUMNS))
        for label, tier in zip(SQFT_LABELS, SQFT_TIERS, strict=True)
    )
    overage = schedule.flat_matrix.overage
    return [
        _item("310", "FLAT RATES BY SQUARE FOOTAGE"),
        _p("Flat rates are quoted by the size of the residence and the distance of the move. "
           "Local moves are those under 50 miles."),
        _sub("A. Flat Rate Schedule"),
        Table(
            key="flat_rates",
            title="Flat rate per move",
            columns=("Square Feet", *FLAT_DISTANCE_LABELS),
            rows=rows,
        ),
        _sub("B. Assumed Shipment Weights"),
        _p("Each flat rate assumes the shipment weight shown below for the residence size."),
        Table(
            key="flat_assumed_weights",
            columns=("Square Feet", "Assumed Weight"),
            rows=tuple(
                (label, f"{format_quantity(ASSUMED_WEIGHT_BY_SQFT[tier])} lbs")
                for label, tier in zip(SQFT_LABELS, SQFT_TIERS, strict=True)
            ),
        ),
        _sub("C. Weight Overage"),
        KeyValueBox(
            title="Overage Terms",
            items=(
                ("Threshold", f"{format_percent(overage.threshold_percent)} over assumed weight"),
                ("Overage Rate", f"{format_rate(overage.rate_per_lb)} per lb over assumed weight"),
            ),
        ),
    ]


def _mixed_presentation(schedule: RateSchedule) -> list[ContentBlock]:
    mixed = schedule.mixed_rates
    # No floor is applied when minimum hours is zero, so none is printed.
    minimum_note = (
        [_p(f"Local moves are billed for a minimum of "
            f"{format_quantity(schedule.minimums.hours)} hours.", ParagraphStyle.NOTE)]
        if schedule.minimums.hours > 0
        else []
    )
    return [
        _item("310", "MIXED RATES (HOURLY LOCAL / WEIGHT LONG-DISTANCE)"),
        _p(METHOD_PROSE[PricingMethod.MIXED]),
        _sub("A. Local Hourly Rates (under 50 miles)"),
        Table(
            key="mixed_local_rates",
            columns=("Crew", "Hourly Rate"),
            rows=(
                ("2 men and truck", format_rate(mixed.local.two_men)),
                ("3 men and truck", format_rate(mixed.local.three_men)),
            ),
        ),
        *minimum_note,
        _sub("B. Long-Distance Rates (50 miles and over)"),
        KeyValueBox(
            title="Long-Distance Rates",
            items=(
                ("Base Rate", f"{format_rate(mixed.long_distance.base_rate)} per lb"),
                ("Minimum Weight", f"{format_quantity(mixed.long_distance.min_weight)} lbs"),
            ),
        ),
    ]


RATE_PRESENTATIONS: dict[PricingMethod, Callable[[RateSchedule], list[ContentBlock]]] = {
    PricingMethod.WEIGHT: _weight_presentation,
    PricingMethod.CUBIC: _cubic_presentation,
    PricingMethod.FLAT: _flat_presentation,
    PricingMethod.MIXED: _mixed_presentation,
}


def _rate_presentation(schedule: RateSchedule) -> list[ContentBlock]:
    blocks = RATE_PRESENTATIONS[schedule.pricing_method](schedule)
    blocks.append(_sub("Fuel Surcharge"))
    blocks.extend(_fuel_box(schedule))
    blocks.append(_sub("What Transportation Charges Include"))
    blocks.extend(_bullets(TRANSPORTATION_INCLUDES))
    blocks.append(_sub("What Transportation Charges Do NOT Include"))
    blocks.extend(_bullets(TRANSPORTATION_EXCLUDES))
    blocks.extend(_sample_blocks(schedule))
    return blocks


# ---------------------------------------------------------------------------
# Items shared by every pricing method
# ---------------------------------------------------------------------------


def _rates_and_charges(schedule: RateSchedule) -> list[ContentBlock]:
    method = schedule.pricing_method
    pct = schedule.accessorial.fuel_surcharge
    if pct > 0:
        fuel = (f"A fuel surcharge of {format_percent(pct)} will be applied to all "
                "transportation charges and disclosed on estimates and invoices.")
    else:
        fuel = ("A fuel surcharge may be applied to all transportation charges based on "
                "current fuel prices. The surcharge percentage will be disclosed on estimates "
                "and invoices.")
    return [
        _item("300", "RATES AND CHARGES"),
        _p("All rates and charges in this tariff are stated in United States dollars and "
           "cents. Rates are subject to change upon notice to the shipper."),
        _sub("A. Rate Determination Method"),
        _p(f"Primary Pricing Method: {PRICING_METHOD_LABELS[method]}", ParagraphStyle.EMPHASIS),
        _p(METHOD_PROSE[method]),
        _sub("B. Fuel Surcharge"),
        _p(fuel),
    ]


def _labor_table(key: str, title: str, rate: LaborRate, samples: tuple[tuple[int, int], ...]) -> Table:
    rows = []
    for men, hours in samples:
        label = f"{men} men × {hours} hours"
        if men == rate.min_men and hours == rate.min_hours:
            label += " (minimum)"
        rows.append((label, format_money(labor_cost(rate, men, Decimal(hours)))))
    return Table(key=key, title=title, columns=("Crew and Time", "Cost"), rows=tuple(rows))


def _labor_box(title: str, rate: LaborRate) -> KeyValueBox:
    return KeyValueBox(
        title=title,
        items=(
            ("Rate", f"{format_money(rate.per_man_hour)} per man, per hour"),
            ("Minimum Crew Size", f"{rate.min_men} men"),
            ("Minimum Time", f"{format_quantity(rate.min_hours)} hours"),
        ),
    )


def _labor(schedule: RateSchedule) -> list[ContentBlock]:
    return [
        _item("320", "ORIGIN & DESTINATION SERVICES"),
        _p("Labor charges for loading and unloading are separate from transportation "
           "charges. Labor is charged on a per-man, per-hour basis at the origin (loading) "
           "and destination (unloading) locations. Crew size and hours are billed at no less "
           "than the published minimums."),
        _sub("A. Loading Labor at Origin"),
        _labor_box("Loading Rate", schedule.loading),
        _p("Loading labor includes the following services at the origin location:"),
        *_bullets(LOADING_INCLUDES),
        _labor_table("loading_samples", "Sample Loading Calculations", schedule.loading,
                     LOADING_SAMPLES),
        _sub("B. Unloading Labor at Destination"),
        _labor_box("Unloading Rate", schedule.unloading),
        _p("Unloading labor includes the following services at the destination location:"),
        *_bullets(UNLOADING_INCLUDES),
        _labor_table("unloading_samples", "Sample Unloading Calculations", schedule.unloading,
                     UNLOADING_SAMPLES),
        _sub("C. Services NOT Included in Standard Labor"),
        *_bullets(LABOR_EXCLUDES),
        _sub("D. Total Move Cost Calculation"),
        _p("The total cost of a move is the sum of the following charges, subject to the "
           "minimum charges in Item 330:"),
        *_bullets((
            "Loading Labor: (number of men) × (hours at origin) × (per man/hour rate)",
            TRANSPORTATION_FORMULA[schedule.pricing_method],
            "Unloading Labor: (number of men) × (hours at destination) × (per man/hour rate)",
            "Accessorial Charges: packing, stairs, long carry, etc. as applicable",
            "Fuel Surcharge: percentage applied to transportation charges only",
        )),
    ]


def _minimums(schedule: RateSchedule) -> list[ContentBlock]:
    minimums = schedule.minimums
    lines = [
        f"Local moves (under 50 miles): {format_money(minimums.local)} minimum",
        f"Long-distance moves (50+ miles): {format_money(minimums.long_distance)} minimum",
    ]
    if minimums.hours > 0:
        lines.append(f"Minimum hours: {format_quantity(minimums.hours)} hours")
    return [
        _item("330", "MINIMUM CHARGES"),
        _p("The following minimum charges apply to all shipments regardless of actual weight "
           "or time. When the computed charges fall below the applicable minimum, the minimum "
           "is charged instead."),
        *_bullets(lines),
        _p("Minimum charges ensure coverage of basic operational costs including crew, "
           "equipment, and transportation."),
    ]


def _accessorial_services(schedule: RateSchedule, order: TariffOrder) -> list[ContentBlock]:
    blocks: list[ContentBlock] = [
        _item("400", "ACCESSORIAL SERVICES"),
        _p("The following accessorial services are available at additional charge. Services "
           "must be requested in advance when possible."),
        _sub("Selected Services for This Tariff"),
    ]
    if order.accessorials:
        blocks.extend(_bullets(order.accessorials))
    else:
        blocks.append(_p("All standard accessorial services are available upon request."))
    blocks.append(
        Table(
            key="accessorial_rates",
            title="Accessorial Rates",
            columns=("Service", "Rate", "Unit"),
            rows=tuple(
                (label, format_money(getattr(schedule.accessorial, name)), unit)
                for name, label, unit in ACCESSORIAL_UNITS
            ),
        )
    )
    return blocks


def _accessorial_detail(schedule: RateSchedule) -> list[ContentBlock]:
    acc = schedule.accessorial
    return [
        _item("410", "PACKING AND UNPACKING"),
        _p("Professional packing and unpacking services are available to protect your "
           "belongings during transport."),
        _sub("A. Packing Materials"),
        Table(key="packing_materials", columns=("Material", "Unit Price"), rows=PACKING_MATERIALS),
        _sub("B. Packing Labor"),
        _p(f"Packing labor is charged at {format_money(acc.packing)} per hour per packer, with "
           "a minimum of 2 hours."),
        _item("420", "STORAGE IN TRANSIT"),
        _p("Storage-in-transit (SIT) is available when delivery cannot be completed "
           "immediately. Goods are stored in a secure facility."),
        _sub("A. Storage Rates"),
        *_bullets((f"Monthly storage: {format_money(acc.storage)} per month",)),
        _sub("B. Storage Conditions"),
        _p("Storage charges begin on the date goods are placed in storage. A minimum of 48 "
           "hours notice is required for removal from storage."),
        _item("430", "EXTRA LABOR CHARGES"),
        _p("Additional labor charges apply when extra effort is required to complete the move:"),
        _sub("A. Stair Carry"),
        *_bullets((
            f"Per flight of stairs (8+ steps): {format_money(acc.stairs)} per flight",
            "Applicable at both origin and destination",
            "Elevator service: No charge when available and operational",
        )),
        _sub("B. Long Carry"),
        *_bullets((
            f"Distance exceeding 75 feet from truck to door: {format_money(acc.long_carry)} "
            "per 100 feet",
        )),
        _sub("C. Waiting Time"),
        _p(f"Waiting time caused by circumstances beyond the carrier's control is charged at "
           f"{format_money(acc.waiting)} per hour after the first 30 minutes."),
        _item("440", "SPECIAL SERVICES"),
        _sub("A. Shuttle Service"),
        _p("When the primary vehicle cannot reach the loading or unloading point, a shuttle "
           f"vehicle may be required. Shuttle charge: {format_money(acc.shuttle)} minimum."),
        _sub("B. Bulky Items"),
        Table(
            key="specialty_rates",
            columns=("Item", "Charge"),
            rows=tuple(
                (label, format_money(getattr(schedule.specialty, name)))
                for name, label in SPECIALTY_ITEMS
            ),
        ),
        _sub("C. Third-Party Services"),
        _p("The carrier can arrange for third-party services such as appliance servicing, "
           "crating, and specialty item handling. Charges are quoted separately."),
    ]


def _title_page(
    profile: CarrierProfile,
    order: TariffOrder,
    issuer_name: str,
) -> list[ContentBlock]:
    effective = format_long_date(order.enrolled_date)
    expires = format_long_date(order.expiry_date)
    return [
        Heading(text="TARIFF"),
        _p("NAMING RULES, REGULATIONS, RATES AND CHARGES FOR THE TRANSPORTATION OF "
           "HOUSEHOLD GOODS", ParagraphStyle.CENTER),
        KeyValueBox(
            title=profile.company_name.upper(),
            items=(
                ("MC Number", profile.mc_number or NOT_AVAILABLE),
                ("USDOT Number", profile.usdot_number or NOT_AVAILABLE),
                ("Address", profile.mailing_address or "Address on file"),
                ("Phone", profile.phone or NOT_AVAILABLE),
            ),
        ),
        _p(f"Effective Date: {effective}", ParagraphStyle.CENTER),
        _p(f"Valid Through: {expires}", ParagraphStyle.CENTER),
        _p(f"Service Territory: {order.service_territory}", ParagraphStyle.CENTER),
        _p("This tariff is published in compliance with 49 U.S.C. § 13702 and 49 CFR "
           "Part 1310", ParagraphStyle.NOTE),
        _p(f"Issued by: {issuer_name}", ParagraphStyle.NOTE),
        _p(f"This tariff expires on {expires} and must be renewed annually to remain valid.",
           ParagraphStyle.NOTE),
    ]


def build_content_plan(
    profile: CarrierProfile,
    schedule: RateSchedule,
    order: TariffOrder,
    *,
    issuer_name: str = DEFAULT_ISSUER,
    issuer_website: str = DEFAULT_ISSUER_WEBSITE,
    generated_at: datetime | None = None,
) -> ContentPlan:
    """Assemble the ordered content blocks of a carrier's tariff.

    Args:
        profile: The carrier whose details appear on the document.
        schedule: The normalized schedule to publish.
        order: The order supplying territory, accessorials and effective dates.
        issuer_name: Name printed as the document's issuer.
        issuer_website: Web address printed in the footer.
        generated_at: Optional generation time for the "generated on" header.
            It is carried outside the blocks and never affects them.

    Returns:
        The content plan for the renderer.
    """
    document_id = derive_document_id(profile, order)
    context = {
        "company_name": profile.company_name,
        "mc_number": profile.mc_number or NOT_AVAILABLE,
        "usdot_number": profile.usdot_number or NOT_AVAILABLE,
        "territory": order.service_territory,
        "issuer_name": issuer_name,
    }
    territory = TERRITORY_DESCRIPTIONS.get(
        order.service_territory, TERRITORY_DESCRIPTIONS[DEFAULT_TERRITORY]
    )

    blocks: list[ContentBlock] = _title_page(profile, order, issuer_name)
    blocks.append(Heading(text="TABLE OF CONTENTS", new_page=True))
    blocks.append(
        Table(key="contents", columns=("Item", "Title"), rows=TABLE_OF_CONTENTS)
    )
    blocks.extend(_static_section(APPLICATION, context))
    blocks.extend(_static_section(DEFINITIONS_SECTION, context))
    blocks.append(_item("200", "SCOPE OF OPERATIONS"))
    blocks.append(_p(territory))
    blocks.extend(SCOPE_SERVICES)
    blocks.extend(_rates_and_charges(schedule))
    blocks.extend(_rate_presentation(schedule))
    blocks.extend(_labor(schedule))
    blocks.extend(_minimums(schedule))
    blocks.extend(_accessorial_services(schedule, order))
    blocks.extend(_accessorial_detail(schedule))
    for section in CLOSING_SECTIONS:
        blocks.extend(_static_section(section, context))
    blocks.extend(_fill(block, context) for block in ACKNOWLEDGMENT)
    blocks.append(_p(f"Effective Date: {format_long_date(order.enrolled_date)}"))
    blocks.append(KeyValueBox(title="Carrier Acknowledgment", items=SIGNATURE_LINES))

    return ContentPlan(
        document_id=document_id,
        title=f"Tariff - {profile.company_name}",
        subject=f"Household Goods Tariff for {profile.company_name}",
        author=issuer_name,
        blocks=tuple(blocks),
        footer=(
            f"This tariff document was generated by {issuer_name}.",
            f"Document ID: {document_id}",
            issuer_website,
        ),
        generated_at=generated_at,
    )
