"""
Service Template Repository.

Handles data access for service templates and service types.
"""

from __future__ import annotations

from travel_desk.api_client import ApiClient
from travel_desk.errors import ApiError
from travel_desk.logger import StructuredLogger
from travel_desk.models.template import ServiceTemplate, ServiceType
from travel_desk.repositories.base_repository import BaseRepository


class TemplateRepository(BaseRepository):
    """Data access layer for ServiceTemplate and ServiceType entities."""

    RESOURCE = "/api/service-templates"

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        super().__init__(api, logger)

    def list_for_wizard(self) -> list[ServiceTemplate]:
        """Fetch the authoritative template list used by the sale wizard."""
        data = self._api.get(f"{self.RESOURCE}/sale-wizard")
        return [ServiceTemplate.model_validate(r) for r in self._records(data, "serviceTemplates")]

    def create(self, name: str, description: str = "", category: str = "") -> ServiceTemplate:
        """Create a template and return the server's record.

        Raises:
            ApiError: When the backend rejects the request or returns no record.
        """
        data = self._api.post(
            self.RESOURCE,
            {"name": name.strip(), "description": description.strip(), "category": category},
        )
        record = self._record(data, "serviceTemplate")
        if record is None or not (record.get("_id") or record.get("id")):
            raise ApiError(f"Service template '{name}' was not returned by the server")
        return ServiceTemplate.model_validate(record)

    def list_service_types(self, active_only: bool = True) -> list[ServiceType]:
        params = {"active": "true"} if active_only else None
        data = self._api.get("/api/service-types", params=params)
        return [ServiceType.model_validate(r) for r in self._records(data, "serviceTypes")]
