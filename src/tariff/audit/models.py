"""Audit trail models for tracking every tariff order event.

Each entry carries the order and carrier identifiers, the pricing method and
order status at the time of the event, the document ID, a JSON snapshot of
the rates involved, and arbitrary string metadata.
"""

from enum import StrEnum

from pydantic import BaseModel


class EventType(StrEnum):
    """Types of events tracked in the audit trail."""

    ORDER_CREATED = "order_created"
    RATES_UPDATED = "rates_updated"
    RATE_WARNING = "rate_warning"
    DOCUMENT_GENERATED = "document_generated"
    REGENERATION_FAILED = "regeneration_failed"
    REGENERATION_SUPERSEDED = "regeneration_superseded"
    METHOD_CHANGE_REQUESTED = "method_change_requested"
    METHOD_CHANGE_REVIEWED = "method_change_reviewed"
    ORDER_RENEWED = "order_renewed"
    ORDER_EXPIRED = "order_expired"


class AuditEntry(BaseModel):
    """A single audit trail entry.

    All fields except event_type are optional to accommodate different
    event types (e.g., rate_warning has no document_id).
    """

    event_type: EventType
    order_id: str | None = None
    carrier_id: str | None = None
    pricing_method: str | None = None
    order_status: str | None = None
    document_id: str | None = None
    rates_snapshot: str | None = None
    message: str | None = None
    metadata: dict[str, str] | None = None
