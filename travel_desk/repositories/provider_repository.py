"""
Provider Repository.

Read-only access to providers; providers are owned by the backend.
"""

from __future__ import annotations

from typing import Union

from travel_desk.api_client import ApiClient
from travel_desk.logger import StructuredLogger
from travel_desk.models.provider import Provider
from travel_desk.repositories.base_repository import BaseRepository


class ProviderRepository(BaseRepository):
    """Data access layer for Provider entities."""

    RESOURCE = "/api/providers"

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        super().__init__(api, logger)

    def search(self, search: str = "", limit: int = 50) -> list[Provider]:
        """Search providers by free text.  An empty term lists the first *limit*."""
        params: dict[str, Union[str, int]] = {"limit": limit}
        if search.strip():
            params["search"] = search.strip()
        data = self._api.get(self.RESOURCE, params=params)
        return [Provider.model_validate(r) for r in self._records(data, "providers")]
