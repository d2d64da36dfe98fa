"""Convenience class for inserting audit trail entries.

Every order event is logged: creation, rate edits and their warnings,
document generation and its failures, superseded regenerations, method
change requests and reviews, renewals and expirations.  Each method builds a
properly structured :class:`AuditEntry` and inserts it via
:func:`insert_audit_entry`.
"""

from __future__ import annotations

import sqlite3

from tariff.audit.models import AuditEntry, EventType
from tariff.audit.store import insert_audit_entry
from tariff.domain.models import MethodChangeRequest, TariffOrder
from tariff.rates.normalizer import ValidationWarning


def _order_fields(order: TariffOrder) -> dict[str, str | None]:
    return {
        "order_id": order.order_id,
        "carrier_id": order.carrier_id,
        "pricing_method": order.pricing_method.value,
        "order_status": order.status.value,
        "document_id": order.document.document_id if order.document else None,
    }


class AuditLogger:
    """Typed convenience API for inserting audit entries.

    Args:
        conn: An open SQLite connection to the audit database.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def log_order_created(self, order: TariffOrder) -> int:
        """Log a new order with its initial rate snapshot.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.ORDER_CREATED,
            rates_snapshot=order.rates.model_dump_json(),
            message=f"Tariff order created with {order.pricing_method} pricing",
            metadata={
                "enrolled_date": order.enrolled_date.isoformat(),
                "expiry_date": order.expiry_date.isoformat(),
                "service_territory": order.service_territory,
            },
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_rates_updated(self, order: TariffOrder, warning_count: int = 0) -> int:
        """Log a rate edit with the new schedule snapshot.

        Args:
            order: The order after the edit.
            warning_count: Number of validation warnings raised by the edit.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.RATES_UPDATED,
            rates_snapshot=order.rates.model_dump_json(),
            message="Rate schedule updated",
            metadata={"warning_count": str(warning_count)},
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_rate_warning(self, order: TariffOrder, warning: ValidationWarning) -> int:
        """Log a single rate cell that was coerced to its default.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.RATE_WARNING,
            message=warning.message,
            metadata={"field": warning.field, "value": warning.value},
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_document_generated(self, order: TariffOrder) -> int:
        """Log a committed document with its identity.

        Returns:
            The row ID of the inserted audit entry.
        """
        metadata: dict[str, str] = {}
        if order.document is not None:
            metadata = {
                "filename": order.document.filename,
                "revision": str(order.document.revision),
                "plan_fingerprint": order.document.plan_fingerprint,
            }
        entry = AuditEntry(
            event_type=EventType.DOCUMENT_GENERATED,
            message="Tariff document generated",
            metadata=metadata,
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_regeneration_failed(self, order: TariffOrder, reason: str) -> int:
        """Log a failed regeneration; the previous artifact stays in place.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.REGENERATION_FAILED,
            message=reason,
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_regeneration_superseded(self, order: TariffOrder, ticket: int) -> int:
        """Log a regeneration discarded because a newer edit arrived.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.REGENERATION_SUPERSEDED,
            message="Regeneration superseded by a newer edit",
            metadata={"ticket": str(ticket)},
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_method_change_requested(self, order: TariffOrder, request: MethodChangeRequest) -> int:
        """Log a carrier's pricing method change request.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.METHOD_CHANGE_REQUESTED,
            message=request.reason or None,
            metadata={
                "request_id": request.request_id,
                "current_method": request.current_method.value,
                "requested_method": request.requested_method.value,
            },
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_method_change_reviewed(self, order: TariffOrder, request: MethodChangeRequest) -> int:
        """Log an admin's approval or rejection of a method change request.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.METHOD_CHANGE_REVIEWED,
            message=request.admin_notes or None,
            metadata={
                "request_id": request.request_id,
                "decision": request.status.value,
                "requested_method": request.requested_method.value,
            },
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_order_renewed(self, old_order: TariffOrder, new_order: TariffOrder) -> int:
        """Log a renewal, recorded against the new order.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.ORDER_RENEWED,
            rates_snapshot=new_order.rates.model_dump_json(),
            message=f"Renewed from {old_order.order_id}",
            metadata={
                "renewed_from": old_order.order_id,
                "enrolled_date": new_order.enrolled_date.isoformat(),
                "expiry_date": new_order.expiry_date.isoformat(),
            },
            **_order_fields(new_order),
        )
        return insert_audit_entry(self._conn, entry)

    def log_order_expired(self, order: TariffOrder, reason: str = "expired") -> int:
        """Log an order leaving active service.

        Args:
            order: The order after it moved to expired.
            reason: ``expired`` for the sweep, ``superseded`` for renewal.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.ORDER_EXPIRED,
            message=f"Tariff {reason}",
            metadata={"reason": reason, "expiry_date": order.expiry_date.isoformat()},
            **_order_fields(order),
        )
        return insert_audit_entry(self._conn, entry)
