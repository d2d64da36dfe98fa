"""Pricing calculators for tariff sample charges.

Re-exports key functions and types for convenient access:
    from tariff.pricing import Shipment, compute_sample, ChargeBreakdown
"""

from tariff.pricing.calculators import (
    ASSUMED_WEIGHT_BY_SQFT,
    CONSTRUCTIVE_LBS_PER_CUBIC_FOOT,
    LINE_HAUL_CALCULATORS,
    ChargeBreakdown,
    ChargeLine,
    Shipment,
    compute_sample,
    format_money,
    format_rate,
    labor_cost,
)
from tariff.pricing.tiers import (
    LOCAL_DISTANCE_THRESHOLD_MILES,
    distance_column,
    is_local,
    quantity_tier_index,
    range_tier_index,
    volume_row,
    weight_row,
)

__all__ = [
    "ASSUMED_WEIGHT_BY_SQFT",
    "CONSTRUCTIVE_LBS_PER_CUBIC_FOOT",
    "LINE_HAUL_CALCULATORS",
    "LOCAL_DISTANCE_THRESHOLD_MILES",
    "ChargeBreakdown",
    "ChargeLine",
    "Shipment",
    "compute_sample",
    "distance_column",
    "format_money",
    "format_rate",
    "is_local",
    "labor_cost",
    "quantity_tier_index",
    "range_tier_index",
    "volume_row",
    "weight_row",
]
