"""When to regenerate a tariff document, and how its identity is derived.

Regeneration is gated: a download never regenerates.  Only a rate edit, an
approved method change, or a renewal produces a new artifact.  Document
identity is a pure function of the carrier and order, so regenerating the
same order keeps the same document ID.
"""

from __future__ import annotations

import hashlib
import re
import secrets
from datetime import date

from tariff.domain.models import CarrierProfile, TariffOrder
from tariff.domain.types import DocumentType
from tariff.rates.schedule import RateSchedule

ORDER_ID_PREFIX = "TRF-"
ORDER_ID_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
ORDER_ID_LENGTH = 8

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def should_regenerate(
    order: TariffOrder | None,
    schedule_changed: bool,
    method_change_approved: bool,
) -> bool:
    """Decide whether the cached artifact for *order* must be rebuilt.

    Args:
        order: The order whose artifact is in question.  Accepted for
            interface symmetry with callers; the decision depends only on
            the flags.
        schedule_changed: True when a rate edit produced a new schedule.
        method_change_approved: True when an admin approved a method switch.

    Returns:
        True if either flag is set, False otherwise.
    """
    return schedule_changed or method_change_approved


def schedule_fingerprint(schedule: RateSchedule) -> str:
    """Return a SHA-256 hex digest identifying *schedule*'s contents."""
    return hashlib.sha256(schedule.model_dump_json().encode()).hexdigest()


def document_is_stale(order: TariffOrder) -> bool:
    """Return True if *order* has no artifact or one built from other rates.

    A stale document is rebuilt by the next rate edit even when the edit
    leaves the schedule unchanged, so a failed regeneration can be retried
    by resubmitting the same rates.
    """
    if order.document is None:
        return True
    return order.document.rates_fingerprint != schedule_fingerprint(order.rates)


def compute_expiry(enrolled: date) -> date:
    """Return the date one year after *enrolled*.

    February 29 maps to February 28 of the following year.
    """
    try:
        return enrolled.replace(year=enrolled.year + 1)
    except ValueError:
        return enrolled.replace(year=enrolled.year + 1, day=28)


def is_expired(order: TariffOrder, today: date) -> bool:
    """Return True once *today* is past the order's expiry date."""
    return today > order.expiry_date


def renewal_period(order: TariffOrder, today: date) -> tuple[date, date]:
    """Return the ``(enrolled, expiry)`` pair for renewing *order*.

    An early renewal continues from the old expiry date so no coverage is
    lost; a lapsed tariff restarts from *today*.
    """
    start = today if is_expired(order, today) else order.expiry_date
    return start, compute_expiry(start)


def sanitize_mc_number(mc_number: str) -> str:
    """Strip everything but letters and digits from an MC number."""
    return _NON_ALPHANUMERIC.sub("", mc_number)


def document_filename(
    profile: CarrierProfile,
    order: TariffOrder,
    document_type: DocumentType = DocumentType.TARIFF,
) -> str:
    """Return the download filename, e.g. ``Tariff-MC123456.pdf``.

    Falls back to the order ID when the carrier has no MC number.
    """
    suffix = sanitize_mc_number(profile.mc_number) or order.order_id
    return f"{document_type.value}-{suffix}.pdf"


def derive_document_id(profile: CarrierProfile, order: TariffOrder) -> str:
    """Return the stable document ID printed in the footer.

    The ID combines the sanitized MC number, the order ID and the effective
    date, so it changes on renewal but not on a rate edit.
    """
    mc = sanitize_mc_number(profile.mc_number) or "NA"
    return f"TARIFF-{mc}-{order.order_id}-{order.enrolled_date:%Y%m%d}"


def generate_order_id() -> str:
    """Return a new random order ID such as ``TRF-7KQ2M9XD``."""
    body = "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_LENGTH))
    return f"{ORDER_ID_PREFIX}{body}"
