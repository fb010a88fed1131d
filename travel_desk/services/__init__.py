"""
Business Logic Services Package.

Pure wizard logic (allocation, aggregation, step transitions, selection)
lives in plain-function modules; services that talk to the backend extend
``BaseService`` and depend on the repository layer.

The ``create_services()`` factory wires the API client, every repository
and service together, returning a typed dict that the application layer
can consume without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

import requests

from travel_desk.api_client import ApiClient
from travel_desk.config import AppConfig
from travel_desk.logger import get_logger
from travel_desk.repositories.document_repository import DocumentRepository
from travel_desk.repositories.provider_repository import ProviderRepository
from travel_desk.repositories.sale_service_repository import SaleServiceRepository
from travel_desk.repositories.template_repository import TemplateRepository
from travel_desk.services.catalog_service import CatalogService
from travel_desk.services.provider_documents import DocumentUploadService
from travel_desk.services.provider_selection import ProviderSelection, apply_cost_edit
from travel_desk.services.sale_submission import SaleSubmissionService
from travel_desk.services.wizard_steps import (
    add_card,
    apply_step_transition,
    commit_provider_selection,
    edit_providers,
    go_back,
    remove_card,
    remove_line_item,
    replace_line_item,
    set_line_item_cost,
    set_schedule,
)

__all__ = [
    "ProviderSelection",
    "ServiceContainer",
    "add_card",
    "apply_cost_edit",
    "apply_step_transition",
    "commit_provider_selection",
    "create_services",
    "edit_providers",
    "go_back",
    "remove_card",
    "remove_line_item",
    "replace_line_item",
    "set_line_item_cost",
    "set_schedule",
]


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    api_client: ApiClient
    catalog_service: CatalogService
    document_service: DocumentUploadService
    sale_submission_service: SaleSubmissionService


def create_services(
    config: AppConfig,
    session: Optional[requests.Session] = None,
) -> ServiceContainer:
    """
    Wire the API client, repositories and services together.

    This is the single composition root for the service layer.

    Args:
        config: Application configuration.
        session: Optional HTTP session, mainly for tests.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    api = ApiClient(
        base_url=config.API_BASE_URL,
        logger=get_logger("api"),
        token=config.API_TOKEN.get_secret_value(),
        timeout=config.API_TIMEOUT_S,
        session=session,
    )

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    template_repo = TemplateRepository(api=api, logger=logger)
    provider_repo = ProviderRepository(api=api, logger=logger)
    sale_service_repo = SaleServiceRepository(api=api, logger=logger)
    document_repo = DocumentRepository(api=api, logger=logger)

    # ------------------------------------------------------------------
    # 2. Services
    # ------------------------------------------------------------------
    catalog_service = CatalogService(
        template_repo=template_repo,
        provider_repo=provider_repo,
        logger=logger,
        search_limit=config.PROVIDER_SEARCH_LIMIT,
        default_category=config.DEFAULT_TEMPLATE_CATEGORY,
    )
    sale_submission_service = SaleSubmissionService(
        template_repo=template_repo,
        sale_service_repo=sale_service_repo,
        logger=logger,
        default_category=config.DEFAULT_TEMPLATE_CATEGORY,
    )
    document_service = DocumentUploadService(document_repo=document_repo, logger=logger)

    logger.info("Services wired against %s", api.base_url)

    return ServiceContainer(
        api_client=api,
        catalog_service=catalog_service,
        document_service=document_service,
        sale_submission_service=sale_submission_service,
    )
