"""FastAPI routes for tariff orders, documents and method change requests.

The router reaches the :class:`~tariff.service.TariffService` through
``request.app.state.services["tariff_service"]``.  Domain errors are mapped
to HTTP responses by :func:`register_error_handlers`; request-body
validation errors keep FastAPI's default 422 response.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import structlog
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

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
from tariff.domain.models import DEFAULT_TERRITORY, CarrierProfile, MethodChangeRequest, TariffOrder
from tariff.pricing.calculators import Shipment
from tariff.rates.normalizer import ValidationWarning
from tariff.service import TariffService

logger = structlog.get_logger()

router = APIRouter()

# Order matters: the first matching base class wins.
_STATUS_BY_ERROR: tuple[tuple[type[TariffError], int], ...] = (
    (InvalidRateSubmission, 400),
    (UnsupportedMethodTransition, 409),
    (OrderExpiredError, 409),
    (InvalidTransitionError, 409),
    (OrderNotFound, 404),
    (CarrierNotFound, 404),
    (ChangeRequestNotFound, 404),
    (DocumentNotFound, 404),
    (ConcurrentEditConflict, 429),
    (AssemblyFailure, 502),
    (PricingError, 500),
)


class CreateTariffRequest(BaseModel):
    """Body of ``POST /tariffs``."""

    carrier_id: str
    pricing_method: str | None = None
    service_territory: str = DEFAULT_TERRITORY
    accessorials: list[str] = Field(default_factory=list)
    enrolled_date: date | None = None
    rates: dict[str, Any] = Field(default_factory=dict)


class MethodChangeBody(BaseModel):
    """Body of ``POST /tariffs/{order_id}/method-change-requests``."""

    requested_method: str
    reason: str = ""


class ReviewBody(BaseModel):
    """Body of ``POST /method-change-requests/{request_id}/review``."""

    approve: bool
    admin_notes: str = ""


def status_for(exc: TariffError) -> int:
    """Return the HTTP status code for a domain error."""
    if isinstance(exc, MethodChangeRequestError):
        return 409 if exc.conflict else 400
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def register_error_handlers(app: FastAPI) -> None:
    """Map :class:`TariffError` subclasses to JSON error responses on *app*."""

    @app.exception_handler(TariffError)
    async def tariff_error_handler(request: Request, exc: TariffError) -> JSONResponse:
        status_code = status_for(exc)
        headers: dict[str, str] = {}
        if isinstance(exc, ConcurrentEditConflict):
            headers["Retry-After"] = str(exc.retry_after)

        log = logger.error if status_code >= 500 else logger.warning
        log(
            "request_failed",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=status_code,
            detail=str(exc),
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "detail": str(exc)},
            headers=headers,
        )


def _service(request: Request) -> TariffService:
    return request.app.state.services["tariff_service"]


def _order_summary(order: TariffOrder, *, include_rates: bool = False) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "order_id": order.order_id,
        "carrier_id": order.carrier_id,
        "pricing_method": order.pricing_method.value,
        "status": order.status.value,
        "service_territory": order.service_territory,
        "accessorials": list(order.accessorials),
        "enrolled_date": order.enrolled_date.isoformat(),
        "expiry_date": order.expiry_date.isoformat(),
        "renewed_from": order.renewed_from,
        "superseded_by": order.superseded_by,
        "document": order.document.model_dump(mode="json", exclude={"artifact_path"})
        if order.document
        else None,
    }
    if include_rates:
        summary["rates"] = order.rates.model_dump(mode="json")
    return summary


def _warnings(warnings: tuple[ValidationWarning, ...]) -> list[dict[str, str]]:
    return [warning.model_dump() for warning in warnings]


def _request_summary(change_request: MethodChangeRequest) -> dict[str, Any]:
    return change_request.model_dump(mode="json")


@router.post("/carriers")
async def register_carrier(profile: CarrierProfile, request: Request) -> dict[str, Any]:
    """Insert or update a carrier profile."""
    saved = _service(request).register_carrier(profile)
    return saved.model_dump(mode="json")


@router.post("/tariffs", status_code=201)
async def create_tariff(body: CreateTariffRequest, request: Request) -> dict[str, Any]:
    """Create a tariff order and generate its first document."""
    result = await _service(request).create_order(
        body.carrier_id,
        body.rates,
        pricing_method=body.pricing_method,
        service_territory=body.service_territory,
        accessorials=body.accessorials,
        enrolled_date=body.enrolled_date,
    )
    return {
        "order": _order_summary(result.order),
        "warnings": _warnings(result.warnings),
        "regenerated": result.regenerated,
    }


@router.get("/tariffs/{order_id}")
async def get_tariff(order_id: str, request: Request) -> dict[str, Any]:
    """Return an order summary including its normalized schedule."""
    return _order_summary(_service(request).get_order(order_id), include_rates=True)


@router.put("/tariffs/{order_id}/rates")
async def edit_rates(order_id: str, raw_rates: dict[str, Any], request: Request) -> dict[str, Any]:
    """Apply a rate edit; regenerates the document when the schedule changed."""
    result = await _service(request).submit_rate_edit(order_id, raw_rates)
    return {
        "order": _order_summary(result.order),
        "warnings": _warnings(result.warnings),
        "regenerated": result.regenerated,
        "regeneration_status": result.regeneration_status,
    }


@router.get("/tariffs/{order_id}/document")
async def download_document(order_id: str, request: Request) -> Response:
    """Return the stored document.  Never triggers a regeneration."""
    data, filename = _service(request).get_document(order_id)
    logger.info("Document downloaded", order_id=order_id, filename=filename)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/tariffs/{order_id}/samples")
async def preview_sample(order_id: str, shipment: Shipment, request: Request) -> dict[str, Any]:
    """Compute sample charges for a shipment against the order's schedule."""
    breakdown = _service(request).preview_sample(order_id, shipment)
    return {**breakdown.model_dump(mode="json"), "minimum_applied": breakdown.minimum_applied}


@router.post("/tariffs/{order_id}/renew", status_code=201)
async def renew_tariff(order_id: str, request: Request) -> dict[str, Any]:
    """Renew a tariff for another annual period."""
    renewed = await _service(request).renew_order(order_id)
    return _order_summary(renewed)


@router.post("/tariffs/{order_id}/method-change-requests", status_code=201)
async def request_method_change(
    order_id: str, body: MethodChangeBody, request: Request
) -> dict[str, Any]:
    """Record a request to switch the order's pricing method."""
    change_request = _service(request).request_method_change(
        order_id, body.requested_method, body.reason
    )
    return _request_summary(change_request)


@router.post("/method-change-requests/{request_id}/review")
async def review_method_change(
    request_id: str, body: ReviewBody, request: Request
) -> dict[str, Any]:
    """Approve or reject a pending method change request."""
    result = await _service(request).review_method_change(
        request_id, body.approve, body.admin_notes
    )
    return {
        "request": _request_summary(result.request),
        "order": _order_summary(result.order),
        "warnings": _warnings(result.warnings),
        "regenerated": result.regenerated,
    }
