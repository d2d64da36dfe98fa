"""Serialization helpers for persisted tariff orders.

Pydantic dumps ``Decimal`` rate fields as strings so no precision is lost,
and re-validates them into ``Decimal`` on load.  Lifecycle history is split
out of the order JSON into ``[from, event, to]`` triples, matching how the
lifecycle machine records it.
"""

from __future__ import annotations

import json

from tariff.domain.models import TariffOrder
from tariff.domain.types import OrderStatus
from tariff.rates.schedule import RateSchedule

HistoryTriples = tuple[tuple[OrderStatus, str, OrderStatus], ...]


def serialize_history(history: HistoryTriples) -> str:
    """JSON-encode lifecycle history as a list of string triples."""
    return json.dumps([[from_s.value, event, to_s.value] for from_s, event, to_s in history])


def deserialize_history(json_str: str) -> HistoryTriples:
    """Decode history triples produced by :func:`serialize_history`."""
    return tuple(
        (OrderStatus(from_s), event, OrderStatus(to_s)) for from_s, event, to_s in json.loads(json_str)
    )


def serialize_order(order: TariffOrder) -> tuple[str, str]:
    """Return ``(order_json, history_json)`` for a tariff order."""
    return order.model_dump_json(exclude={"history"}), serialize_history(order.history)


def deserialize_order(order_json: str, history_json: str = "[]") -> TariffOrder:
    """Rebuild a tariff order from its stored JSON and history."""
    data = json.loads(order_json)
    data["history"] = deserialize_history(history_json)
    return TariffOrder.model_validate(data)


def serialize_schedule(schedule: RateSchedule) -> str:
    """JSON-encode a rate schedule with decimals as strings."""
    return schedule.model_dump_json()
