"""Shared fixtures: a file-backed test logger and in-memory repositories."""

from __future__ import annotations

import uuid
from typing import Optional

import pytest

from travel_desk.errors import ApiError
from travel_desk.logger import StructuredLogger
from travel_desk.models.line_item import ServiceLineItem
from travel_desk.models.provider import Provider
from travel_desk.models.template import ServiceTemplate


@pytest.fixture
def logger(tmp_path) -> StructuredLogger:
    return StructuredLogger(
        name=f"test-{uuid.uuid4().hex}",
        log_file=str(tmp_path / "test.log"),
    )


def make_item(item_id: str, provider_ids: list[str], **fields) -> ServiceLineItem:
    """Line item whose providers are bare ids, one entry per assignment."""
    return ServiceLineItem(id=item_id, providers=list(provider_ids), **fields)


class FakeTemplateRepository:
    """Stands in for ``TemplateRepository``."""

    def __init__(
        self,
        templates: Optional[list[ServiceTemplate]] = None,
        fail_create: Optional[ApiError] = None,
        fail_list: Optional[ApiError] = None,
    ) -> None:
        self.templates = list(templates or [])
        self.fail_create = fail_create
        self.fail_list = fail_list
        self.created: list[dict[str, str]] = []
        self.list_calls = 0

    def list_for_wizard(self) -> list[ServiceTemplate]:
        self.list_calls += 1
        if self.fail_list is not None:
            raise self.fail_list
        return list(self.templates)

    def create(self, name: str, description: str = "", category: str = "") -> ServiceTemplate:
        if self.fail_create is not None:
            raise self.fail_create
        template = ServiceTemplate(
            id=f"tpl-{len(self.created) + 1}", name=name, description=description, category=category
        )
        self.created.append({"name": name, "description": description, "category": category})
        self.templates.append(template)
        return template

    def list_service_types(self, active_only: bool = True) -> list:
        return []


class FakeSaleServiceRepository:
    """Stands in for ``SaleServiceRepository``; fails on the configured call."""

    def __init__(self, fail_on_call: Optional[int] = None, error: Optional[ApiError] = None) -> None:
        self.fail_on_call = fail_on_call
        self.error = error or ApiError("Service could not be created", status_code=400)
        self.calls: list[tuple[str, dict]] = []

    def add_from_template(self, sale_id: str, payload: dict) -> dict:
        self.calls.append((sale_id, payload))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.error
        return {"_id": f"svc-{len(self.calls)}", "service_name": payload.get("serviceName")}


class FakeProviderRepository:
    def __init__(self, providers: Optional[list[Provider]] = None) -> None:
        self.providers = list(providers or [])
        self.searches: list[tuple[str, int]] = []

    def search(self, search: str = "", limit: int = 50) -> list[Provider]:
        self.searches.append((search, limit))
        term = search.strip().lower()
        return [p for p in self.providers if term in p.name.lower()][:limit]


@pytest.fixture
def hotel_template() -> ServiceTemplate:
    return ServiceTemplate(id="t-hotel", name="Hotel", category="Lodging")


@pytest.fixture
def transfer_template() -> ServiceTemplate:
    return ServiceTemplate(id="t-transfer", name="Transfer", category="Transport")
