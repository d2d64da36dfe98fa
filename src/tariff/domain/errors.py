"""Domain-specific exception classes for the tariff pipeline."""

from tariff.domain.types import OrderStatus, PricingMethod


class TariffError(Exception):
    """Base class for all domain errors in the tariff pipeline."""


class InvalidRateSubmission(TariffError):
    """Raised when a raw rate submission is structurally invalid.

    Individual bad rate cells never raise; they become validation warnings.
    This error covers shapes the normalizer cannot interpret at all.
    """


class InvalidTransitionError(TariffError):
    """Raised when an invalid order lifecycle transition is attempted.

    Attributes:
        current_state: The status the order was in when the event arrived.
        event: The event that was rejected.
    """

    def __init__(self, current_state: OrderStatus, event: str) -> None:
        self.current_state = current_state
        self.event = event
        super().__init__(f"Cannot apply event '{event}' in state '{current_state}'")


class UnsupportedMethodTransition(TariffError):
    """Raised when a rate edit tries to switch pricing methods without approval.

    Attributes:
        current_method: The order's pricing method.
        requested_method: The method named by the rate edit.
    """

    def __init__(self, current_method: PricingMethod, requested_method: PricingMethod) -> None:
        self.current_method = current_method
        self.requested_method = requested_method
        super().__init__(
            f"Cannot change pricing method from '{current_method}' to "
            f"'{requested_method}' with a rate edit; submit a method change request"
        )


class OrderNotFound(TariffError):
    """Raised when an order ID does not exist."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Tariff order not found: {order_id}")


class CarrierNotFound(TariffError):
    """Raised when a carrier profile does not exist."""

    def __init__(self, carrier_id: str) -> None:
        self.carrier_id = carrier_id
        super().__init__(f"Carrier profile not found: {carrier_id}")


class ChangeRequestNotFound(TariffError):
    """Raised when a method change request ID does not exist."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Method change request not found: {request_id}")


class DocumentNotFound(TariffError):
    """Raised when an order has no stored artifact to serve."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"No document has been generated for order {order_id}")


class OrderExpiredError(TariffError):
    """Raised when rates are edited on an expired tariff."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Cannot edit an expired tariff ({order_id}). Please renew first.")


class MethodChangeRequestError(TariffError):
    """Raised when a method change request cannot be created or reviewed.

    Attributes:
        conflict: True when the request collides with existing state (a pending
            request already exists, or the request was already reviewed) rather
            than being malformed.
    """

    def __init__(self, message: str, *, conflict: bool = False) -> None:
        self.conflict = conflict
        super().__init__(message)


class ConcurrentEditConflict(TariffError):
    """Raised when too many regenerations are queued for one order.

    The error is retryable.

    Attributes:
        order_id: The order whose queue is full.
        pending: Number of regenerations queued or running.
        retry_after: Suggested back-off in seconds.
    """

    def __init__(self, order_id: str, pending: int, retry_after: int = 5) -> None:
        self.order_id = order_id
        self.pending = pending
        self.retry_after = retry_after
        super().__init__(
            f"{pending} regenerations already pending for order {order_id}; "
            f"retry in {retry_after}s"
        )


class AssemblyFailure(TariffError):
    """Raised when rendering or storing a document fails.

    The previously stored artifact, if any, is left in place.
    """

    def __init__(self, order_id: str, reason: str) -> None:
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Document assembly failed for order {order_id}: {reason}")


class PricingError(TariffError):
    """Raised when a pricing calculation cannot be dispatched."""
