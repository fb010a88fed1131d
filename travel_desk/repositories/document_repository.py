"""
Provider Document Repository.

Uploads files attached to a provider assignment.
"""

from __future__ import annotations

from typing import IO, Union

from travel_desk.api_client import ApiClient
from travel_desk.logger import StructuredLogger
from travel_desk.repositories.base_repository import BaseRepository
from travel_desk.utils.string_helpers import JsonValue, normalize_keys


class DocumentRepository(BaseRepository):
    """Data access layer for provider documents."""

    RESOURCE = "/api/upload/provider-document"

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        super().__init__(api, logger)

    def upload_provider_document(
        self,
        provider_id: str,
        filename: str,
        content: Union[IO[bytes], bytes],
        mime_type: str = "application/octet-stream",
    ) -> dict[str, JsonValue]:
        """Upload one file; returns ``{"url": ..., "filename": ...}`` (snake_case).

        Raises:
            ApiError: When the upload is rejected or the server is unreachable.
        """
        data = self._api.post_multipart(
            self.RESOURCE,
            files={"file": (filename, content, mime_type)},
            data={"providerId": provider_id},
        )
        return normalize_keys(data) if isinstance(data, dict) else {}
