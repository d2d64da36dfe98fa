"""Rate schedule models and the raw-submission normalizer.

Re-exports key functions and types for convenient access:
    from tariff.rates import RateSchedule, normalize, normalize_with_warnings
"""

from tariff.rates.normalizer import ValidationWarning, normalize, normalize_with_warnings
from tariff.rates.schedule import (
    ADD_ON_NAMES,
    DISTANCE_TIERS,
    SQFT_TIERS,
    VOLUME_TIERS,
    WEIGHT_TIERS,
    AccessorialRates,
    FlatMatrix,
    FlatOverage,
    LaborRate,
    Minimums,
    MixedRates,
    RateSchedule,
    SpecialtyRates,
)

__all__ = [
    "ADD_ON_NAMES",
    "DISTANCE_TIERS",
    "SQFT_TIERS",
    "VOLUME_TIERS",
    "WEIGHT_TIERS",
    "AccessorialRates",
    "FlatMatrix",
    "FlatOverage",
    "LaborRate",
    "Minimums",
    "MixedRates",
    "RateSchedule",
    "SpecialtyRates",
    "ValidationWarning",
    "normalize",
    "normalize_with_warnings",
]
