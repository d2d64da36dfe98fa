"""Tariff service: normalize, persist, assemble, render and store documents.

:class:`TariffService` is the only component that touches storage, the
artifact directory, the audit trail and the metrics together.  Everything
it calls below it (normalizer, calculators, assembler, renderer) is pure.

Flow for a rate edit::

    submit_rate_edit -> normalize_with_warnings -> save order
        -> should_regenerate -> coordinator.submit(build, commit)
        -> build: build_content_plan + render_plan (worker thread)
        -> commit: atomic artifact write + DocumentIdentity on the order
           (declined when the order was retired while building)

Renewal and expiry change status through coordinator.run_exclusive, which
discards any build still in flight for the order.
"""

from __future__ import annotations

import contextlib
import os
import secrets
import tempfile
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from tariff.audit.logger import AuditLogger
from tariff.document.assembler import DEFAULT_ISSUER, DEFAULT_ISSUER_WEBSITE, build_content_plan
from tariff.document.blocks import ContentPlan
from tariff.document.renderer import render_plan
from tariff.domain.errors import (
    AssemblyFailure,
    CarrierNotFound,
    ChangeRequestNotFound,
    DocumentNotFound,
    InvalidRateSubmission,
    InvalidTransitionError,
    MethodChangeRequestError,
    OrderExpiredError,
    OrderNotFound,
    UnsupportedMethodTransition,
)
from tariff.domain.models import (
    DEFAULT_TERRITORY,
    CarrierProfile,
    DocumentIdentity,
    MethodChangeRequest,
    TariffOrder,
)
from tariff.domain.types import ChangeRequestStatus, OrderStatus, PricingMethod, parse_pricing_method
from tariff.lifecycle.machine import OrderLifecycle
from tariff.lifecycle.transitions import OrderEvent
from tariff.observability.metrics import (
    ACTIVE_TARIFFS,
    DOCUMENTS_GENERATED,
    REGENERATION_FAILURES,
    REGENERATIONS_SUPERSEDED,
)
from tariff.pricing.calculators import ChargeBreakdown, Shipment, compute_sample
from tariff.rates.normalizer import ValidationWarning, normalize_with_warnings
from tariff.rates.schedule import RateSchedule
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
    schedule_fingerprint,
    should_regenerate,
)
from tariff.state.store import TariffStore

logger = structlog.get_logger()

Built = tuple[ContentPlan, bytes]


class RateEditResult(BaseModel):
    """Outcome of creating an order or editing its rates."""

    model_config = ConfigDict(frozen=True)

    order: TariffOrder
    warnings: tuple[ValidationWarning, ...] = ()
    regenerated: bool = False
    regeneration_status: RegenerationStatus | None = None


class ReviewResult(BaseModel):
    """Outcome of an admin review of a method change request."""

    model_config = ConfigDict(frozen=True)

    request: MethodChangeRequest
    order: TariffOrder
    warnings: tuple[ValidationWarning, ...] = ()
    regenerated: bool = False


def write_artifact(path: Path, data: bytes) -> None:
    """Write *data* to *path* atomically.

    The bytes go to a temporary file in the same directory which then
    replaces *path*, so readers see either the old or the new artifact.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class TariffService:
    """Orchestrates tariff orders from rate submission to stored document.

    Args:
        store: Persistence for profiles, orders and change requests.
        audit: Audit trail writer.
        artifact_dir: Root directory for rendered documents.
        coordinator: Per-order regeneration serializer.
        issuer_name: Issuer printed on documents.
        issuer_website: Website printed in document footers.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        store: TariffStore,
        audit: AuditLogger,
        artifact_dir: Path,
        coordinator: RegenerationCoordinator | None = None,
        issuer_name: str = DEFAULT_ISSUER,
        issuer_website: str = DEFAULT_ISSUER_WEBSITE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._audit = audit
        self._artifact_dir = artifact_dir
        self._coordinator = coordinator or RegenerationCoordinator()
        self._issuer_name = issuer_name
        self._issuer_website = issuer_website
        self._clock = clock

    @property
    def coordinator(self) -> RegenerationCoordinator:
        return self._coordinator

    def _today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_profile(self, carrier_id: str) -> CarrierProfile:
        profile = self._store.get_profile(carrier_id)
        if profile is None:
            raise CarrierNotFound(carrier_id)
        return profile

    def get_order(self, order_id: str) -> TariffOrder:
        order = self._store.get_order(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def get_change_request(self, request_id: str) -> MethodChangeRequest:
        request = self._store.get_change_request(request_id)
        if request is None:
            raise ChangeRequestNotFound(request_id)
        return request

    # ------------------------------------------------------------------
    # Carriers and orders
    # ------------------------------------------------------------------

    def register_carrier(self, profile: CarrierProfile) -> CarrierProfile:
        """Insert or update a carrier profile."""
        self._store.save_profile(profile)
        logger.info("Carrier profile saved", carrier_id=profile.carrier_id)
        return profile

    async def create_order(
        self,
        carrier_id: str,
        raw_rates: Mapping[str, Any] | None,
        *,
        pricing_method: PricingMethod | str | None = None,
        service_territory: str = DEFAULT_TERRITORY,
        accessorials: Iterable[str] = (),
        enrolled_date: date | None = None,
    ) -> RateEditResult:
        """Create a tariff order and generate its first document.

        Args:
            carrier_id: The carrier purchasing the tariff.
            raw_rates: The raw rate submission.
            pricing_method: Method to normalize under; defaults to the
                submission's ``pricing_method`` key, then weight.
            service_territory: Territory printed in Item 200.
            accessorials: Selected accessorial service names.
            enrolled_date: Effective date; defaults to today.

        Returns:
            The completed order, the normalizer's warnings and the
            regeneration outcome.

        Raises:
            CarrierNotFound: If the carrier has no profile.
            InvalidRateSubmission: If the submission cannot be interpreted.
            AssemblyFailure: If the first document cannot be rendered.  The
                order is kept in ``pending`` status.
        """
        self.get_profile(carrier_id)
        schedule, warnings = normalize_with_warnings(raw_rates, pricing_method)
        enrolled = enrolled_date or self._today()
        order = TariffOrder(
            order_id=generate_order_id(),
            carrier_id=carrier_id,
            pricing_method=schedule.pricing_method,
            service_territory=service_territory or DEFAULT_TERRITORY,
            accessorials=tuple(accessorials),
            rates=schedule,
            enrolled_date=enrolled,
            expiry_date=compute_expiry(enrolled),
        )
        self._store.save_order(order)
        self._audit.log_order_created(order)
        self._record_warnings(order, warnings)
        ACTIVE_TARIFFS.set(self._store.count_active())
        logger.info(
            "Tariff order created",
            order_id=order.order_id,
            carrier_id=carrier_id,
            pricing_method=order.pricing_method,
            warnings=len(warnings),
        )

        result = await self._regenerate(order)
        return RateEditResult(
            order=self.get_order(order.order_id),
            warnings=tuple(warnings),
            regenerated=result.committed,
            regeneration_status=result.status,
        )

    async def submit_rate_edit(
        self, order_id: str, raw_rates: Mapping[str, Any] | None
    ) -> RateEditResult:
        """Apply a rate edit and regenerate the document if the schedule changed.

        The submission is normalized under the order's current method.  A
        submission naming a different method is rejected before
        normalization and the stored schedule is left untouched.  An
        unchanged schedule still regenerates when the stored document is
        missing or was built from other rates.

        Raises:
            OrderNotFound: If the order does not exist.
            OrderExpiredError: If the tariff has expired.
            UnsupportedMethodTransition: If the edit names another method.
            InvalidRateSubmission: If the submission cannot be interpreted.
            ConcurrentEditConflict: If too many regenerations are queued.
            AssemblyFailure: If rendering fails; the previous artifact stays.
        """
        order = self.get_order(order_id)
        if order.status is OrderStatus.EXPIRED or is_expired(order, self._today()):
            raise OrderExpiredError(order_id)

        requested = (raw_rates or {}).get("pricing_method")
        if requested:
            try:
                requested_method = parse_pricing_method(requested)
            except ValueError as exc:
                raise InvalidRateSubmission(str(exc)) from exc
            if requested_method is not order.pricing_method:
                raise UnsupportedMethodTransition(order.pricing_method, requested_method)

        schedule, warnings = normalize_with_warnings(raw_rates, order.pricing_method)
        schedule_changed = schedule != order.rates or document_is_stale(order)

        if not should_regenerate(order, schedule_changed, False):
            logger.info("Rate edit left schedule unchanged", order_id=order_id)
            self._record_warnings(order, warnings)
            return RateEditResult(order=order, warnings=tuple(warnings))

        self._coordinator.check_capacity(order_id)
        updated = order.model_copy(update={"rates": schedule})
        self._store.save_order(updated)
        self._audit.log_rates_updated(updated, warning_count=len(warnings))
        self._record_warnings(updated, warnings)
        logger.info("Rate schedule updated", order_id=order_id, warnings=len(warnings))

        result = await self._regenerate(updated)
        return RateEditResult(
            order=self.get_order(order_id),
            warnings=tuple(warnings),
            regenerated=result.committed,
            regeneration_status=result.status,
        )

    def preview_sample(self, order_id: str, shipment: Shipment) -> ChargeBreakdown:
        """Compute sample charges for *shipment* against the order's schedule."""
        return compute_sample(self.get_order(order_id).rates, shipment)

    def get_document(self, order_id: str) -> tuple[bytes, str]:
        """Return the stored artifact bytes and download filename.

        Never regenerates; an order without an artifact raises.

        Raises:
            OrderNotFound: If the order does not exist.
            DocumentNotFound: If no artifact has been stored yet.
        """
        order = self.get_order(order_id)
        if order.document is None:
            raise DocumentNotFound(order_id)
        path = Path(order.document.artifact_path)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            logger.error("Stored artifact missing", order_id=order_id, path=str(path))
            raise DocumentNotFound(order_id) from exc
        return data, order.document.filename

    # ------------------------------------------------------------------
    # Method change requests
    # ------------------------------------------------------------------

    def request_method_change(
        self,
        order_id: str,
        requested_method: PricingMethod | str,
        reason: str = "",
    ) -> MethodChangeRequest:
        """Record a carrier's request to switch pricing methods.

        Raises:
            OrderNotFound: If the order does not exist.
            OrderExpiredError: If the tariff has expired.
            MethodChangeRequestError: If the method is unchanged or a
                request is already pending.
        """
        order = self.get_order(order_id)
        if order.status is OrderStatus.EXPIRED:
            raise OrderExpiredError(order_id)
        try:
            method = parse_pricing_method(requested_method)
        except ValueError as exc:
            raise MethodChangeRequestError(str(exc)) from exc
        if method is order.pricing_method:
            raise MethodChangeRequestError(f"Order {order_id} already uses {method} pricing")
        if self._store.find_pending_change_request(order_id) is not None:
            raise MethodChangeRequestError(
                f"A method change request is already pending for order {order_id}",
                conflict=True,
            )

        request = MethodChangeRequest(
            request_id=f"MCR-{secrets.token_hex(6).upper()}",
            order_id=order_id,
            current_method=order.pricing_method,
            requested_method=method,
            reason=reason,
            created_at=self._clock(),
        )
        self._store.save_change_request(request)
        self._audit.log_method_change_requested(order, request)
        logger.info(
            "Method change requested",
            order_id=order_id,
            request_id=request.request_id,
            requested_method=method,
        )
        return request

    async def review_method_change(
        self,
        request_id: str,
        approve: bool,
        admin_notes: str = "",
    ) -> ReviewResult:
        """Approve or reject a pending method change request.

        Approval switches the order's method, re-normalizes the stored
        schedule under the new method and regenerates the document.
        Rejection leaves the order untouched.

        Raises:
            ChangeRequestNotFound: If the request does not exist.
            MethodChangeRequestError: If the request was already reviewed.
            OrderExpiredError: If approving a change on an expired tariff.
        """
        request = self.get_change_request(request_id)
        if request.status is not ChangeRequestStatus.PENDING:
            raise MethodChangeRequestError(
                f"Method change request {request_id} was already {request.status}",
                conflict=True,
            )
        order = self.get_order(request.order_id)
        reviewed = request.model_copy(
            update={
                "status": ChangeRequestStatus.APPROVED if approve else ChangeRequestStatus.REJECTED,
                "admin_notes": admin_notes,
                "reviewed_at": self._clock(),
            }
        )

        if not approve:
            self._store.save_change_request(reviewed)
            self._audit.log_method_change_reviewed(order, reviewed)
            logger.info("Method change rejected", request_id=request_id, order_id=order.order_id)
            return ReviewResult(request=reviewed, order=order)

        if order.status is OrderStatus.EXPIRED:
            raise OrderExpiredError(order.order_id)

        self._coordinator.check_capacity(order.order_id)
        schedule, warnings = self._renormalize(order.rates, reviewed.requested_method)
        updated = order.model_copy(
            update={"pricing_method": reviewed.requested_method, "rates": schedule}
        )
        self._store.save_order(updated)
        self._store.save_change_request(reviewed)
        self._audit.log_method_change_reviewed(updated, reviewed)
        self._record_warnings(updated, warnings)
        logger.info(
            "Method change approved",
            request_id=request_id,
            order_id=order.order_id,
            pricing_method=reviewed.requested_method,
        )

        regenerated = False
        if should_regenerate(updated, False, True):
            result = await self._regenerate(updated)
            regenerated = result.committed
        return ReviewResult(
            request=reviewed,
            order=self.get_order(order.order_id),
            warnings=tuple(warnings),
            regenerated=regenerated,
        )

    @staticmethod
    def _renormalize(
        schedule: RateSchedule, method: PricingMethod
    ) -> tuple[RateSchedule, list[ValidationWarning]]:
        raw = schedule.model_dump(mode="json", exclude={"pricing_method"})
        return normalize_with_warnings(raw, method)

    # ------------------------------------------------------------------
    # Renewal and expiration
    # ------------------------------------------------------------------

    async def renew_order(self, order_id: str, today: date | None = None) -> TariffOrder:
        """Start a new annual period for an order's carrier.

        The new order reuses the prior schedule, territory and accessorials.
        It starts on the old expiry date when renewed early, or on *today*
        when the old order has lapsed.  The old order is marked superseded
        under its regeneration lock, so a build still running for it is
        discarded rather than committed over the retired order.

        Raises:
            OrderNotFound: If the order does not exist.
            InvalidTransitionError: If the order was already renewed.
            AssemblyFailure: If the new document cannot be rendered.  The new
                order is kept in ``pending`` status.
        """
        today = today or self._today()
        self.get_order(order_id)
        new = await self._coordinator.run_exclusive(order_id, lambda: self._retire(order_id, today))
        await self._regenerate(new)
        return self.get_order(new.order_id)

    def _retire(self, order_id: str, today: date) -> TariffOrder:
        old = self.get_order(order_id)
        if old.superseded_by is not None:
            raise InvalidTransitionError(old.status, OrderEvent.SUPERSEDE)

        enrolled, expiry = renewal_period(old, today)
        new = TariffOrder(
            order_id=generate_order_id(),
            carrier_id=old.carrier_id,
            pricing_method=old.pricing_method,
            service_territory=old.service_territory,
            accessorials=old.accessorials,
            rates=old.rates,
            enrolled_date=enrolled,
            expiry_date=expiry,
            renewed_from=old.order_id,
        )

        lifecycle = OrderLifecycle.from_snapshot(old.status, old.history)
        if not lifecycle.is_terminal:
            lifecycle.trigger(OrderEvent.SUPERSEDE)
        retired = old.model_copy(
            update={
                "status": lifecycle.state,
                "history": tuple(lifecycle.history),
                "superseded_by": new.order_id,
            }
        )

        self._store.save_order(new)
        self._store.save_order(retired)
        self._audit.log_order_renewed(retired, new)
        self._audit.log_order_expired(retired, reason="superseded")
        ACTIVE_TARIFFS.set(self._store.count_active())
        logger.info(
            "Tariff renewed",
            order_id=new.order_id,
            renewed_from=old.order_id,
            enrolled_date=enrolled.isoformat(),
        )
        return new

    async def expire_orders(self, today: date | None = None) -> list[TariffOrder]:
        """Move every active order whose expiry date has passed to expired.

        Each order is expired under its regeneration lock; an order that was
        renewed or expired by someone else in the meantime is skipped.

        Returns:
            The orders that were expired by this call.
        """
        today = today or self._today()
        expired: list[TariffOrder] = []
        for order in self._store.load_expiring(today):
            updated = await self._coordinator.run_exclusive(
                order.order_id, lambda: self._expire_one(order.order_id, today)
            )
            if updated is not None:
                expired.append(updated)

        ACTIVE_TARIFFS.set(self._store.count_active())
        if expired:
            logger.info("Expired tariff orders", count=len(expired), today=today.isoformat())
        return expired

    def _expire_one(self, order_id: str, today: date) -> TariffOrder | None:
        order = self._store.get_order(order_id)
        if order is None or order.expiry_date >= today:
            return None
        lifecycle = OrderLifecycle.from_snapshot(order.status, order.history)
        if lifecycle.is_terminal:
            return None
        lifecycle.trigger(OrderEvent.EXPIRE)
        updated = order.model_copy(
            update={"status": lifecycle.state, "history": tuple(lifecycle.history)}
        )
        self._store.save_order(updated)
        self._audit.log_order_expired(updated)
        return updated

    # ------------------------------------------------------------------
    # Regeneration
    # ------------------------------------------------------------------

    def _record_warnings(self, order: TariffOrder, warnings: list[ValidationWarning]) -> None:
        for warning in warnings:
            logger.warning(
                "rate_validation_warning",
                order_id=order.order_id,
                field=warning.field,
                value=warning.value,
                detail=warning.message,
            )
            self._audit.log_rate_warning(order, warning)

    def _build(self, profile: CarrierProfile, order: TariffOrder) -> Built:
        try:
            plan = build_content_plan(
                profile,
                order.rates,
                order,
                issuer_name=self._issuer_name,
                issuer_website=self._issuer_website,
                generated_at=self._clock(),
            )
            return plan, render_plan(plan, order.order_id)
        except ArithmeticError as exc:
            raise AssemblyFailure(order.order_id, f"could not format amounts: {exc!r}") from exc

    def _commit(self, profile: CarrierProfile, snapshot: TariffOrder, built: Built) -> bool:
        plan, pdf = built
        current = self.get_order(snapshot.order_id)
        if current.status is OrderStatus.EXPIRED or current.superseded_by is not None:
            logger.info(
                "Regeneration dropped, order retired",
                order_id=current.order_id,
                status=current.status,
                superseded_by=current.superseded_by,
            )
            return False

        filename = document_filename(profile, current)
        path = self._artifact_dir / current.order_id / filename
        try:
            write_artifact(path, pdf)
        except OSError as exc:
            raise AssemblyFailure(current.order_id, f"could not store artifact: {exc}") from exc

        lifecycle = OrderLifecycle.from_snapshot(current.status, current.history)
        lifecycle.trigger(OrderEvent.DOCUMENT_GENERATED)
        identity = DocumentIdentity(
            document_id=derive_document_id(profile, current),
            filename=filename,
            effective_date=current.enrolled_date,
            expiry_date=current.expiry_date,
            artifact_path=str(path),
            plan_fingerprint=plan.fingerprint(),
            rates_fingerprint=schedule_fingerprint(snapshot.rates),
            revision=current.document.revision + 1 if current.document else 1,
            generated_at=plan.generated_at or self._clock(),
        )
        updated = current.model_copy(
            update={
                "document": identity,
                "status": lifecycle.state,
                "history": tuple(lifecycle.history),
            }
        )
        self._store.save_order(updated)
        self._audit.log_document_generated(updated)
        DOCUMENTS_GENERATED.inc()
        ACTIVE_TARIFFS.set(self._store.count_active())
        logger.info(
            "Tariff document generated",
            order_id=updated.order_id,
            document_id=identity.document_id,
            revision=identity.revision,
            size=len(pdf),
        )
        return True

    async def _regenerate(self, order: TariffOrder) -> RegenerationResult[Built]:
        profile = self.get_profile(order.carrier_id)
        try:
            result = await self._coordinator.submit(
                order.order_id,
                lambda: self._build(profile, order),
                lambda built: self._commit(profile, order, built),
            )
        except AssemblyFailure as exc:
            REGENERATION_FAILURES.inc()
            self._audit.log_regeneration_failed(order, exc.reason)
            logger.error("Tariff regeneration failed", order_id=order.order_id, reason=exc.reason)
            raise

        if not result.committed:
            REGENERATIONS_SUPERSEDED.inc()
            self._audit.log_regeneration_superseded(order, result.ticket)
        return result
