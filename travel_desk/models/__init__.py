"""
Data Models Package.

Re-exports all Pydantic models for convenient imports:
    from travel_desk.models import ServiceLineItem, ProviderAssignment, WizardState
    from travel_desk.models import Currency, WizardStep, ResolutionStatus
    from travel_desk.models import ServiceResult, SubmissionReport
"""

from travel_desk.models.enums import Currency, ResolutionStatus, WizardStep
from travel_desk.models.line_item import Destination, ServiceLineItem, new_line_item_id
from travel_desk.models.provider import (
    MAX_PROVIDER_INSTANCES,
    Provider,
    ProviderAssignment,
    ProviderDocument,
    coerce_amount,
    provider_key,
)
from travel_desk.models.service_models import (
    CreatedService,
    FailedItem,
    PayloadResult,
    PersistencePayload,
    ProviderCount,
    ProviderPayload,
    ServiceDates,
    ServiceResult,
    SubmissionReport,
    TemplateResolution,
)
from travel_desk.models.template import MOCK_TEMPLATE_PREFIX, ServiceTemplate, ServiceType
from travel_desk.models.wizard import PendingServiceCard, WizardState

__all__ = [
    "Currency",
    "ResolutionStatus",
    "WizardStep",
    "Destination",
    "ServiceLineItem",
    "new_line_item_id",
    "MAX_PROVIDER_INSTANCES",
    "Provider",
    "ProviderAssignment",
    "ProviderDocument",
    "coerce_amount",
    "provider_key",
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
    "MOCK_TEMPLATE_PREFIX",
    "ServiceTemplate",
    "ServiceType",
    "PendingServiceCard",
    "WizardState",
]
