"""
Sale Service Repository.

Creates services on a sale from a persistence payload.
"""

from __future__ import annotations

from typing import Optional

from travel_desk.api_client import ApiClient
from travel_desk.logger import StructuredLogger
from travel_desk.repositories.base_repository import BaseRepository
from travel_desk.utils.string_helpers import JsonValue


class SaleServiceRepository(BaseRepository):
    """Data access layer for the services attached to a sale."""

    RESOURCE = "/api/sales"

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        super().__init__(api, logger)

    def add_from_template(
        self, sale_id: str, payload: dict[str, JsonValue]
    ) -> Optional[dict[str, JsonValue]]:
        """POST one service to *sale_id*; returns the created record (snake_case).

        Raises:
            ApiError: When the backend rejects the service.
        """
        data = self._api.post(f"{self.RESOURCE}/{sale_id}/services-from-template", payload)
        return self._record(data, "service")
