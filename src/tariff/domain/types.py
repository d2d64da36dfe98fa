"""Domain enumerations and pricing-method label mappings for the tariff pipeline."""

from enum import StrEnum


class PricingMethod(StrEnum):
    """Supported tariff pricing methods."""

    WEIGHT = "weight"
    CUBIC = "cubic"
    FLAT = "flat"
    MIXED = "mixed"


class OrderStatus(StrEnum):
    """Lifecycle states of a tariff order."""

    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


class DocumentType(StrEnum):
    """Document types issued for an order.

    The value doubles as the download filename prefix.
    """

    TARIFF = "Tariff"


class ChangeRequestStatus(StrEnum):
    """Review states of a pricing-method change request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Display labels used on order forms and in the published document
PRICING_METHOD_LABELS: dict[PricingMethod, str] = {
    PricingMethod.WEIGHT: "Weight-Based (per lb)",
    PricingMethod.CUBIC: "Cubic Feet Based",
    PricingMethod.FLAT: "Flat Rate",
    PricingMethod.MIXED: "Mixed Methods",
}


def parse_pricing_method(value: str | PricingMethod) -> PricingMethod:
    """Resolve a pricing method from its enum value or its display label.

    Matching is case-insensitive and ignores surrounding whitespace, so both
    ``"weight"`` and ``"Weight-Based (per lb)"`` resolve to
    :attr:`PricingMethod.WEIGHT`.

    Args:
        value: An enum member, enum value, or display label.

    Returns:
        The matching pricing method.

    Raises:
        ValueError: If the value names no known pricing method.
    """
    if isinstance(value, PricingMethod):
        return value
    needle = str(value).strip().lower()
    for method in PricingMethod:
        if needle in (method.value, PRICING_METHOD_LABELS[method].lower()):
            return method
    raise ValueError(
        f"Unknown pricing method: {value!r}. "
        f"Valid methods: {', '.join(m.value for m in PricingMethod)}"
    )
