"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries:
aggregation results, template resolution, persistence payloads and the
submission report.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from travel_desk.models.enums import Currency, ResolutionStatus
from travel_desk.models.line_item import Destination
from travel_desk.models.provider import ProviderDocument
from travel_desk.models.template import ServiceTemplate
from travel_desk.utils.general import convert_to_json_safe
from travel_desk.utils.string_helpers import JsonValue, denormalize_keys

T = TypeVar("T")

__all__ = [
    "CreatedService",
    "FailedItem",
    "PayloadResult",
    "PersistencePayload",
    "ProviderCount",
    "ProviderPayload",
    "ServiceDates",
    "ServiceResult",
    "SubmissionReport",
    "TemplateResolution",
]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class ProviderCount(BaseModel):
    """A provider display name and how many units of it a line item holds."""

    name: str
    count: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Template reconciliation
# ---------------------------------------------------------------------------

class TemplateResolution(BaseModel):
    """Result of matching a line item's template against the server's list.

    ``FOUND`` carries the authoritative template.  ``NEEDS_CREATION`` carries
    what the caller must create before the item can be persisted.
    """

    status: ResolutionStatus
    template: Optional[ServiceTemplate] = None
    name: str = ""
    category: str = ""
    description: str = ""

    @property
    def needs_creation(self) -> bool:
        return self.status == ResolutionStatus.NEEDS_CREATION


# ---------------------------------------------------------------------------
# Persistence payload (POST /api/sales/:id/services-from-template)
# ---------------------------------------------------------------------------

class ProviderPayload(BaseModel):
    provider_id: str
    provider_name: Optional[str] = None
    cost_provider: Decimal = Decimal("0")
    currency: Currency = Currency.USD
    commission_rate: Decimal = Decimal("0")
    documents: list[ProviderDocument] = Field(default_factory=list)


class ServiceDates(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PersistencePayload(BaseModel):
    """Body sent to the backend to add one service to a sale."""

    service_template_id: str
    service_name: str
    cost: Decimal
    currency: Currency
    provider_id: str
    providers: list[ProviderPayload]
    destination: Destination
    service_dates: ServiceDates
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    notes: str = ""
    original_currency: Optional[Currency] = None
    original_amount: Optional[Decimal] = None
    exchange_rate: Optional[Decimal] = None

    def to_api(self) -> dict[str, JsonValue]:
        """camelCase, JSON-safe representation; unset conversion fields are omitted."""
        data = self.model_dump(exclude_none=True)
        return denormalize_keys(convert_to_json_safe(data))


class PayloadResult(BaseModel):
    """Either a ready payload or a signal that a template must be created first."""

    line_item_id: str
    resolution: TemplateResolution
    payload: Optional[PersistencePayload] = None

    @property
    def needs_template_creation(self) -> bool:
        return self.resolution.needs_creation


# ---------------------------------------------------------------------------
# Submission report
# ---------------------------------------------------------------------------

class CreatedService(BaseModel):
    line_item_id: str
    service_id: Optional[str] = None
    service_name: str = ""


class FailedItem(BaseModel):
    line_item_id: str
    error: str
    status_code: Optional[int] = None


class SubmissionReport(BaseModel):
    """Per-item outcome of a multi-service submission.

    Items are processed in order; the first failure stops the run, so
    ``not_attempted`` holds every item after ``failed``.  Services listed in
    ``succeeded`` exist server-side even when the run as a whole failed.
    """

    sale_id: str
    succeeded: list[CreatedService] = Field(default_factory=list)
    failed: Optional[FailedItem] = None
    not_attempted: list[str] = Field(default_factory=list)
    created_templates: list[str] = Field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.failed is None and not self.not_attempted


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, providing a consistent contract for
    the calling layer.  ``error`` holds a user-facing message, verbatim
    from the backend when the failure came from there.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
