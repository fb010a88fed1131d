"""
Provider Document Upload Service.

Uploads files attached to a provider assignment.  A file whose upload
fails is still kept, as a local document without URL, so the user can
retry; only uploaded documents are sent with the sale.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from travel_desk.errors import ApiError
from travel_desk.logger import StructuredLogger
from travel_desk.models.provider import ProviderAssignment, ProviderDocument
from travel_desk.repositories.document_repository import DocumentRepository
from travel_desk.services.base_service import BaseService


class LocalFile(BaseModel):
    """A file picked by the user, not yet uploaded."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes
    mime_type: str = Field(default="application/octet-stream")

    @property
    def size(self) -> int:
        return len(self.content)


class DocumentUploadService(BaseService):
    """Uploads provider documents and attaches them to assignments."""

    def __init__(self, document_repo: DocumentRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._documents = document_repo

    def upload(self, provider_id: str, files: Iterable[LocalFile]) -> list[ProviderDocument]:
        """Upload each file in turn; failures become local-only documents."""
        documents: list[ProviderDocument] = []
        for file in files:
            uploaded_at = datetime.now(timezone.utc)
            try:
                result = self._documents.upload_provider_document(
                    provider_id, file.name, file.content, file.mime_type
                )
            except ApiError as exc:
                self._logger.warning(
                    "Upload of '%s' for provider %s failed: %s", file.name, provider_id, exc.message
                )
                result = {}
            url = str(result.get("url") or "")
            documents.append(
                ProviderDocument(
                    filename=str(result.get("filename") or file.name),
                    name=file.name,
                    size=file.size,
                    mime_type=file.mime_type,
                    url=url,
                    upload_date=uploaded_at,
                )
            )
            if url:
                self._logger.info("Uploaded '%s' for provider %s", file.name, provider_id)
        return documents

    def attach(self, assignment: ProviderAssignment, files: Iterable[LocalFile]) -> ProviderAssignment:
        """Upload *files* for the assignment's provider and return the updated assignment."""
        provider_id = assignment.resolved_provider_id
        if provider_id is None:
            raise ValueError("Cannot attach documents to an assignment without a provider id")
        new_documents = self.upload(provider_id, files)
        return assignment.model_copy(update={"documents": [*assignment.documents, *new_documents]})
