"""Pydantic v2 models for carrier profiles, tariff orders and change requests."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tariff.domain.types import (
    ChangeRequestStatus,
    DocumentType,
    OrderStatus,
    PricingMethod,
)
from tariff.rates.schedule import RateSchedule

DEFAULT_TERRITORY = "Nationwide (All 50 States)"


class CarrierProfile(BaseModel):
    """Registration details printed on a carrier's documents."""

    model_config = ConfigDict(frozen=True)

    carrier_id: str
    company_name: str
    mc_number: str = ""
    usdot_number: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("carrier_id", "company_name")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        """Ensure identifying fields are non-empty."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @property
    def mailing_address(self) -> str:
        """Return the single-line address, or an empty string."""
        city_state = ", ".join(part for part in (self.city, self.state) if part)
        locality = " ".join(part for part in (city_state, self.zip) if part)
        return " ".join(part for part in (self.address, locality) if part)


class DocumentIdentity(BaseModel):
    """Identity and location of the most recently generated artifact."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    document_type: DocumentType = DocumentType.TARIFF
    filename: str
    effective_date: date
    expiry_date: date
    artifact_path: str
    plan_fingerprint: str
    rates_fingerprint: str | None = None
    revision: int = Field(default=1, ge=1)
    generated_at: datetime


class TariffOrder(BaseModel):
    """One carrier's tariff for one annual period.

    The order carries its own copy of the rate schedule; edits replace the
    schedule with a new value via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    order_id: str
    carrier_id: str
    pricing_method: PricingMethod
    service_territory: str = DEFAULT_TERRITORY
    accessorials: tuple[str, ...] = ()
    rates: RateSchedule
    status: OrderStatus = OrderStatus.PENDING
    enrolled_date: date
    expiry_date: date
    document: DocumentIdentity | None = None
    renewed_from: str | None = None
    superseded_by: str | None = None
    history: tuple[tuple[OrderStatus, str, OrderStatus], ...] = ()

    @model_validator(mode="after")
    def schedule_matches_method(self) -> "TariffOrder":
        """Ensure the stored schedule is normalized under the order's method."""
        if self.rates.pricing_method != self.pricing_method:
            raise ValueError(
                f"rates are for '{self.rates.pricing_method}' but order uses "
                f"'{self.pricing_method}'"
            )
        if self.expiry_date <= self.enrolled_date:
            raise ValueError("expiry_date must be after enrolled_date")
        return self


class MethodChangeRequest(BaseModel):
    """A carrier's request to switch pricing methods, pending admin review."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    order_id: str
    current_method: PricingMethod
    requested_method: PricingMethod
    reason: str = ""
    status: ChangeRequestStatus = ChangeRequestStatus.PENDING
    admin_notes: str = ""
    created_at: datetime
    reviewed_at: datetime | None = None
