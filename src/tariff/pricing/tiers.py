"""Tier selection rules for published rate brackets.

Two bracket conventions appear in the rate tables:

- **Quantity tiers** (weight, volume) are bracket floors: a shipment is billed
  at the largest published tier it has reached, so 5,000 lb uses the 4,000 lb
  row and anything past the last tier uses the "8,000+ lbs" row.  Shipments
  lighter than the first tier are billed at the first tier.
- **Range tiers** (distance, square footage) are upper bounds: a value is
  billed in the first range whose bound it does not exceed, and anything past
  the last bound falls in the open-ended last range ("1000+ mi").

In both conventions a value exactly on a boundary uses that tier.  Tiers are
never interpolated.
"""

from decimal import Decimal

from tariff.rates.schedule import (
    DISTANCE_TIERS,
    FLAT_DISTANCE_TIERS,
    LOCAL_COLUMN,
    SQFT_TIERS,
    VOLUME_TIERS,
    WEIGHT_TIERS,
    distance_key,
    sqft_key,
    volume_key,
    weight_key,
)

# Shipments under this many miles are billed as local moves
LOCAL_DISTANCE_THRESHOLD_MILES = Decimal("50")


def quantity_tier_index(value: Decimal, tiers: tuple[int, ...]) -> int:
    """Return the index of the largest tier not exceeding *value*.

    Values below the first tier clamp to index 0.

    Args:
        value: Shipment weight or volume.
        tiers: Ascending tier boundaries.

    Returns:
        Index into *tiers*.
    """
    index = 0
    for i, tier in enumerate(tiers):
        if value >= tier:
            index = i
    return index


def range_tier_index(value: Decimal, tiers: tuple[int, ...]) -> int:
    """Return the index of the first tier whose bound is at least *value*.

    Values beyond the last bound clamp to the last index.

    Args:
        value: Distance or square footage.
        tiers: Ascending upper bounds.

    Returns:
        Index into *tiers*.
    """
    for i, tier in enumerate(tiers):
        if value <= tier:
            return i
    return len(tiers) - 1


def is_local(distance_miles: Decimal) -> bool:
    """Return True if a move of *distance_miles* is billed as local."""
    return distance_miles < LOCAL_DISTANCE_THRESHOLD_MILES


def weight_row(weight_lbs: Decimal) -> str:
    """Return the transportation row key for a shipment weight."""
    return weight_key(WEIGHT_TIERS[quantity_tier_index(weight_lbs, WEIGHT_TIERS)])


def volume_row(cubic_feet: Decimal) -> str:
    """Return the transportation row key for a shipment volume."""
    return volume_key(VOLUME_TIERS[quantity_tier_index(cubic_feet, VOLUME_TIERS)])


def distance_column(distance_miles: Decimal) -> str:
    """Return the transportation column key for a distance."""
    return distance_key(DISTANCE_TIERS[range_tier_index(distance_miles, DISTANCE_TIERS)])


def sqft_row(square_feet: Decimal) -> str:
    """Return the flat matrix row key for a home size."""
    return sqft_key(SQFT_TIERS[range_tier_index(square_feet, SQFT_TIERS)])


def flat_distance_column(distance_miles: Decimal) -> str:
    """Return the flat matrix column key, using the local column under 50 miles."""
    if is_local(distance_miles):
        return LOCAL_COLUMN
    return distance_key(
        FLAT_DISTANCE_TIERS[range_tier_index(distance_miles, FLAT_DISTANCE_TIERS)]
    )
