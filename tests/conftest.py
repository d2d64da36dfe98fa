"""Shared pytest fixtures for the tariff pipeline test suite."""

from datetime import date
from decimal import Decimal

import pytest

from tariff.domain.models import CarrierProfile, TariffOrder
from tariff.domain.types import PricingMethod
from tariff.rates.normalizer import normalize
from tariff.rates.schedule import RateSchedule


@pytest.fixture
def sample_profile() -> CarrierProfile:
    """A representative carrier profile for testing."""
    return CarrierProfile(
        carrier_id="carrier-001",
        company_name="Blue Ridge Movers LLC",
        mc_number="MC-123456",
        usdot_number="1234567",
        address="100 Main St",
        city="Asheville",
        state="NC",
        zip="28801",
        phone="828-555-0100",
        email="dispatch@blueridgemovers.example",
    )


@pytest.fixture
def weight_raw() -> dict:
    """A raw weight-based submission matching the published worked example."""
    return {
        "pricing_method": "weight",
        "transportation": {
            "w1000": {"d250": "1.10", "d500": "1.20", "d1000": "1.35", "d1500": "1.50"},
            "w2000": {"d250": "0.95", "d500": "1.00", "d1000": "1.15", "d1500": "1.30"},
            "w4000": {"d250": "0.70", "d500": "0.75", "d1000": "0.90", "d1500": "1.05"},
            "w6000": {"d250": "0.60", "d500": "0.65", "d1000": "0.80", "d1500": "0.95"},
            "w8000": {"d250": "0.55", "d500": "0.60", "d1000": "0.75", "d1500": "0.85"},
        },
        "loading": {"per_man_hour": "40", "min_hours": "2", "min_men": 2},
        "unloading": {"per_man_hour": "40", "min_hours": "2", "min_men": 2},
        "minimums": {"local": "350", "long_distance": "1200", "hours": "3"},
        "accessorial": {
            "packing": "45",
            "storage": "150",
            "stairs": "75",
            "long_carry": "85",
            "shuttle": "350",
            "waiting": "60",
            "fuel_surcharge": "8.5",
        },
        "specialty": {"piano_upright": "250", "piano_grand": "450", "safe": "200"},
    }


@pytest.fixture
def weight_schedule(weight_raw: dict) -> RateSchedule:
    """The weight submission normalized."""
    return normalize(weight_raw)


@pytest.fixture
def sample_order(weight_schedule: RateSchedule) -> TariffOrder:
    """A pending weight-based order effective 2026-03-01."""
    return TariffOrder(
        order_id="TRF-ABCD2345",
        carrier_id="carrier-001",
        pricing_method=PricingMethod.WEIGHT,
        rates=weight_schedule,
        accessorials=("Packing", "Storage"),
        enrolled_date=date(2026, 3, 1),
        expiry_date=date(2027, 3, 1),
    )


@pytest.fixture
def nonzero_flat() -> dict:
    """Stale flat-rate data that must never leak into a non-flat document."""
    return {
        "rates": {
            "sq1000": {"local": "900", "d500": "2500", "d1000": "3500", "d1500": "4500"},
            "sq3000": {"local": "2100", "d500": "6100", "d1000": "8100", "d1500": "9900"},
        },
        "overage": {"threshold_percent": "15", "rate_per_lb": Decimal("0.65")},
    }
