"""Audit trail: models, storage, logger, and CLI for tariff order events."""

from tariff.audit.cli import build_parser
from tariff.audit.logger import AuditLogger
from tariff.audit.models import AuditEntry, EventType
from tariff.audit.store import (
    close_audit_db,
    init_audit_db,
    insert_audit_entry,
    query_audit_trail,
)

__all__ = [
    "AuditEntry",
    "AuditLogger",
    "EventType",
    "build_parser",
    "close_audit_db",
    "init_audit_db",
    "insert_audit_entry",
    "query_audit_trail",
]
