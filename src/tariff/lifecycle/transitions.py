"""Transition map defining all valid (status, event) -> status mappings."""

from enum import StrEnum

from tariff.domain.types import OrderStatus


class OrderEvent(StrEnum):
    """Events that can move a tariff order between statuses."""

    DOCUMENT_GENERATED = "document_generated"
    EXPIRE = "expire"
    SUPERSEDE = "supersede"


# All valid (current_status, event_string) -> next_status mappings.
# Any pair not in this dict is an invalid transition.
TRANSITIONS: dict[tuple[OrderStatus, str], OrderStatus] = {
    # From PENDING
    (OrderStatus.PENDING, OrderEvent.DOCUMENT_GENERATED): OrderStatus.COMPLETED,
    (OrderStatus.PENDING, OrderEvent.EXPIRE): OrderStatus.EXPIRED,
    (OrderStatus.PENDING, OrderEvent.SUPERSEDE): OrderStatus.EXPIRED,
    # From COMPLETED: a rate edit regenerates in place
    (OrderStatus.COMPLETED, OrderEvent.DOCUMENT_GENERATED): OrderStatus.COMPLETED,
    (OrderStatus.COMPLETED, OrderEvent.EXPIRE): OrderStatus.EXPIRED,
    (OrderStatus.COMPLETED, OrderEvent.SUPERSEDE): OrderStatus.EXPIRED,
}

# Statuses that reject all events
TERMINAL_STATES: frozenset[OrderStatus] = frozenset({OrderStatus.EXPIRED})
