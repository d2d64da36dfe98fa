"""Regeneration gating, document identity, and per-order serialization."""

from tariff.regeneration.coordinator import (
    RegenerationCoordinator,
    RegenerationResult,
    RegenerationStatus,
)
from tariff.regeneration.policy import (
    compute_expiry,
    derive_document_id,
    document_filename,
    document_is_stale,
    generate_order_id,
    is_expired,
    renewal_period,
    sanitize_mc_number,
    schedule_fingerprint,
    should_regenerate,
)

__all__ = [
    "RegenerationCoordinator",
    "RegenerationResult",
    "RegenerationStatus",
    "compute_expiry",
    "derive_document_id",
    "document_filename",
    "document_is_stale",
    "generate_order_id",
    "is_expired",
    "renewal_period",
    "sanitize_mc_number",
    "schedule_fingerprint",
    "should_regenerate",
]
