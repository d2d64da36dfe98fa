"""Domain types, models, and errors for the tariff pipeline."""

from tariff.domain.errors import (
    AssemblyFailure,
    CarrierNotFound,
    ChangeRequestNotFound,
    ConcurrentEditConflict,
    DocumentNotFound,
    InvalidRateSubmission,
    InvalidTransitionError,
    MethodChangeRequestError,
    OrderExpiredError,
    OrderNotFound,
    PricingError,
    TariffError,
    UnsupportedMethodTransition,
)
from tariff.domain.models import (
    DEFAULT_TERRITORY,
    CarrierProfile,
    DocumentIdentity,
    MethodChangeRequest,
    TariffOrder,
)
from tariff.domain.types import (
    PRICING_METHOD_LABELS,
    ChangeRequestStatus,
    DocumentType,
    OrderStatus,
    PricingMethod,
    parse_pricing_method,
)

__all__ = [
    "DEFAULT_TERRITORY",
    "PRICING_METHOD_LABELS",
    "AssemblyFailure",
    "CarrierNotFound",
    "CarrierProfile",
    "ChangeRequestNotFound",
    "ChangeRequestStatus",
    "ConcurrentEditConflict",
    "DocumentIdentity",
    "DocumentNotFound",
    "DocumentType",
    "InvalidRateSubmission",
    "InvalidTransitionError",
    "MethodChangeRequest",
    "MethodChangeRequestError",
    "OrderExpiredError",
    "OrderNotFound",
    "OrderStatus",
    "PricingError",
    "PricingMethod",
    "TariffError",
    "TariffOrder",
    "UnsupportedMethodTransition",
    "parse_pricing_method",
]
