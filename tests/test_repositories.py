"""Repositories, catalog and document upload over a stubbed ApiClient."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tests.conftest import FakeProviderRepository, FakeTemplateRepository
from travel_desk.api_client import ApiClient
from travel_desk.errors import ApiError
from travel_desk.models import Provider, ProviderAssignment
from travel_desk.repositories import (
    DocumentRepository,
    ProviderRepository,
    SaleServiceRepository,
    TemplateRepository,
)
from travel_desk.services.catalog_service import CatalogService
from travel_desk.services.provider_documents import DocumentUploadService, LocalFile


@pytest.fixture
def api() -> MagicMock:
    return MagicMock(spec=ApiClient)


class TestTemplateRepository:
    def test_list_for_wizard(self, api, logger):
        api.get.return_value = {
            "serviceTemplates": [{"_id": "t1", "name": "Hotel", "category": "Lodging", "isActive": True}]
        }
        templates = TemplateRepository(api, logger).list_for_wizard()
        api.get.assert_called_once_with("/api/service-templates/sale-wizard")
        assert [(t.id, t.name, t.category) for t in templates] == [("t1", "Hotel", "Lodging")]

    def test_create_returns_server_record(self, api, logger):
        api.post.return_value = {"serviceTemplate": {"_id": "t9", "name": "Excursion", "category": "Tours"}}
        template = TemplateRepository(api, logger).create(" Excursion ", category="Tours")
        api.post.assert_called_once_with(
            "/api/service-templates", {"name": "Excursion", "description": "", "category": "Tours"}
        )
        assert template.id == "t9"

    def test_create_without_record_raises(self, api, logger):
        api.post.return_value = {}
        with pytest.raises(ApiError):
            TemplateRepository(api, logger).create("Excursion")

    def test_active_service_types(self, api, logger):
        api.get.return_value = {"serviceTypes": [{"_id": "st1", "name": "Lodging", "isActive": True}]}
        types = TemplateRepository(api, logger).list_service_types()
        api.get.assert_called_once_with("/api/service-types", params={"active": "true"})
        assert types[0].active


class TestProviderAndSaleRepositories:
    def test_provider_search(self, api, logger):
        api.get.return_value = {"providers": [{"_id": 42, "name": "Hotel X", "contactPerson": "Ana"}]}
        providers = ProviderRepository(api, logger).search(" hotel ", limit=50)
        api.get.assert_called_once_with("/api/providers", params={"limit": 50, "search": "hotel"})
        assert providers[0].id == "42"
        assert providers[0].contact_person == "Ana"

    def test_provider_list_without_term(self, api, logger):
        api.get.return_value = {"providers": []}
        ProviderRepository(api, logger).search()
        api.get.assert_called_once_with("/api/providers", params={"limit": 50})

    def test_add_from_template(self, api, logger):
        api.post.return_value = {"service": {"_id": "s1", "serviceName": "Hotel"}}
        record = SaleServiceRepository(api, logger).add_from_template("sale-1", {"serviceName": "Hotel"})
        api.post.assert_called_once_with("/api/sales/sale-1/services-from-template", {"serviceName": "Hotel"})
        assert record == {"_id": "s1", "service_name": "Hotel"}


class TestCatalogService:
    def test_search_caps_limit(self, logger):
        providers = FakeProviderRepository([Provider(id="p1", name="Hotel X"), Provider(id="p2", name="Transfer Co")])
        catalog = CatalogService(FakeTemplateRepository(), providers, logger, search_limit=50)
        result = catalog.search_providers("hotel", limit=500)
        assert result.success
        assert [p.id for p in result.data] == ["p1"]
        assert providers.searches == [("hotel", 50)]

    def test_template_failure_becomes_result(self, logger):
        templates = FakeTemplateRepository(fail_list=ApiError("Unauthorized", status_code=401))
        result = CatalogService(templates, FakeProviderRepository(), logger).wizard_templates()
        assert not result.success
        assert result.error == "Unauthorized"
        assert result.status_code == 401

    def test_create_template_requires_name(self, logger):
        result = CatalogService(FakeTemplateRepository(), FakeProviderRepository(), logger).create_template(" ")
        assert not result.success
        assert result.status_code == 400

    def test_create_template_uses_default_category(self, logger):
        templates = FakeTemplateRepository()
        catalog = CatalogService(templates, FakeProviderRepository(), logger, default_category="General")
        result = catalog.create_template("Excursion")
        assert result.success
        assert templates.created[0]["category"] == "General"

    def test_provider_directory(self):
        directory = CatalogService.provider_directory([Provider(id="p1", name="Hotel X")])
        assert directory["p1"].name == "Hotel X"


class TestDocumentUpload:
    def test_uploaded_and_failed_files_are_both_kept(self, api, logger):
        api.post_multipart.side_effect = [
            {"success": True, "url": "/uploads/voucher.pdf", "filename": "voucher-1.pdf"},
            ApiError("File too large", status_code=413),
        ]
        service = DocumentUploadService(DocumentRepository(api, logger), logger)
        assignment = ProviderAssignment(provider_id="p1")

        updated = service.attach(
            assignment,
            [
                LocalFile(name="voucher.pdf", content=b"%PDF-1.4", mime_type="application/pdf"),
                LocalFile(name="big.zip", content=b"x" * 10),
            ],
        )

        uploaded, local = updated.documents
        assert uploaded.uploaded and uploaded.filename == "voucher-1.pdf"
        assert uploaded.size == 8
        assert not local.uploaded and local.name == "big.zip"
        assert assignment.documents == []
        files = api.post_multipart.call_args_list[0].kwargs["files"]
        assert files["file"][0] == "voucher.pdf"
        assert api.post_multipart.call_args_list[0].kwargs["data"] == {"providerId": "p1"}

    def test_attach_requires_provider_id(self, api, logger):
        service = DocumentUploadService(DocumentRepository(api, logger), logger)
        with pytest.raises(ValueError):
            service.attach(ProviderAssignment(), [])
