"""Tariff order lifecycle with transition validation."""

from tariff.lifecycle.machine import OrderLifecycle
from tariff.lifecycle.transitions import TERMINAL_STATES, TRANSITIONS, OrderEvent

__all__ = [
    "OrderEvent",
    "OrderLifecycle",
    "TERMINAL_STATES",
    "TRANSITIONS",
]
