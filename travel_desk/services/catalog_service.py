"""
Catalog Service.

Read access to the data the wizard offers for selection: service templates,
active service types and providers.  Repository failures are returned as
``ServiceResult`` envelopes so callers can show the backend message.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from travel_desk.errors import ApiError, StepValidationError
from travel_desk.logger import StructuredLogger
from travel_desk.models.provider import Provider
from travel_desk.models.service_models import ServiceResult
from travel_desk.models.template import ServiceTemplate, ServiceType
from travel_desk.repositories.provider_repository import ProviderRepository
from travel_desk.repositories.template_repository import TemplateRepository
from travel_desk.services.base_service import BaseService
from travel_desk.services.validation_rules import validate_card_name
from travel_desk.utils.audit import log_audit_event


class CatalogService(BaseService):
    """Templates, service types and provider search for the wizard."""

    def __init__(
        self,
        template_repo: TemplateRepository,
        provider_repo: ProviderRepository,
        logger: StructuredLogger,
        search_limit: int = 50,
        default_category: str = "",
    ) -> None:
        super().__init__(logger)
        self._templates = template_repo
        self._providers = provider_repo
        self._search_limit = search_limit
        self._default_category = default_category

    def wizard_templates(self) -> ServiceResult[list[ServiceTemplate]]:
        try:
            templates = self._templates.list_for_wizard()
        except ApiError as exc:
            self._logger.error("Failed to load service templates: %s", exc.message)
            return ServiceResult(success=False, error=exc.message, status_code=exc.status_code or 502)
        return ServiceResult(success=True, data=templates)

    def service_types(self, active_only: bool = True) -> ServiceResult[list[ServiceType]]:
        try:
            types = self._templates.list_service_types(active_only=active_only)
        except ApiError as exc:
            self._logger.error("Failed to load service types: %s", exc.message)
            return ServiceResult(success=False, error=exc.message, status_code=exc.status_code or 502)
        return ServiceResult(success=True, data=types)

    def create_template(
        self, name: str, description: str = "", category: str = ""
    ) -> ServiceResult[ServiceTemplate]:
        """Create a template from the "add service" form."""
        try:
            cleaned = validate_card_name(name)
        except StepValidationError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        try:
            template = self._templates.create(
                cleaned, description=description, category=category or self._default_category
            )
        except ApiError as exc:
            self._logger.error("Failed to create service template '%s': %s", cleaned, exc.message)
            return ServiceResult(success=False, error=exc.message, status_code=exc.status_code or 502)
        log_audit_event(
            self._logger,
            action="CREATE",
            entity_type="ServiceTemplate",
            entity_id=template.id,
            details={"name": template.name, "category": template.category},
        )
        return ServiceResult(success=True, data=template, status_code=201)

    def search_providers(self, term: str = "", limit: Optional[int] = None) -> ServiceResult[list[Provider]]:
        """Free-text provider search, capped at the configured limit."""
        effective_limit = min(limit or self._search_limit, self._search_limit)
        try:
            providers = self._providers.search(term, limit=effective_limit)
        except ApiError as exc:
            self._logger.warning("Provider search '%s' failed: %s", term, exc.message)
            return ServiceResult(success=False, error=exc.message, status_code=exc.status_code or 502)
        return ServiceResult(success=True, data=providers)

    @staticmethod
    def provider_directory(providers: Iterable[Provider]) -> dict[str, Provider]:
        """Index providers by id, for naming bare-id assignments."""
        return {provider.id: provider for provider in providers}
