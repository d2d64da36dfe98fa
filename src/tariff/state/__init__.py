"""Tariff persistence package.

Provides SQLite-backed storage for carrier profiles, tariff orders and
method change requests, plus serialization helpers for orders.
"""

from tariff.state.schema import init_tariff_tables
from tariff.state.serializers import (
    deserialize_history,
    deserialize_order,
    serialize_history,
    serialize_order,
    serialize_schedule,
)
from tariff.state.store import TariffStore

__all__ = [
    "TariffStore",
    "deserialize_history",
    "deserialize_order",
    "init_tariff_tables",
    "serialize_history",
    "serialize_order",
    "serialize_schedule",
]
