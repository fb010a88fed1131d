"""
Base Repository.

Provides shared infrastructure for all repositories:
- ApiClient reference (backend REST API)
- Logger reference
- Envelope unwrapping and camelCase -> snake_case normalisation
"""

from __future__ import annotations

from typing import Optional

from travel_desk.api_client import ApiClient
from travel_desk.logger import StructuredLogger
from travel_desk.utils.string_helpers import JsonValue, normalize_keys


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    RESOURCE: str = ""

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        self._api = api
        self._logger = logger

    @property
    def api(self) -> ApiClient:
        return self._api

    def _records(self, data: JsonValue, key: str) -> list[dict[str, JsonValue]]:
        """Return ``data[key]`` as a list of snake_case dicts.

        Accepts either the keyed object (``{"providers": [...]}``) or a
        bare list, since some endpoints return the collection directly.
        """
        items: JsonValue = data.get(key) if isinstance(data, dict) else data
        if not isinstance(items, list):
            self._logger.warning("Expected a list under '%s' from %s", key, self.RESOURCE)
            return []
        return [normalize_keys(item) for item in items if isinstance(item, dict)]

    def _record(self, data: JsonValue, key: str) -> Optional[dict[str, JsonValue]]:
        """Return ``data[key]`` (or ``data`` itself) as a snake_case dict."""
        if not isinstance(data, dict):
            return None
        record = data.get(key, data)
        return normalize_keys(record) if isinstance(record, dict) else None
