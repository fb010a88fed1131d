"""
Repository Layer Package.

Repositories own every call to the backend REST API and hand back
validated models; services never touch ``ApiClient`` directly.
"""

from travel_desk.repositories.base_repository import BaseRepository
from travel_desk.repositories.document_repository import DocumentRepository
from travel_desk.repositories.provider_repository import ProviderRepository
from travel_desk.repositories.sale_service_repository import SaleServiceRepository
from travel_desk.repositories.template_repository import TemplateRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "ProviderRepository",
    "SaleServiceRepository",
    "TemplateRepository",
]
