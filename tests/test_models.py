"""Model normalisation: provider references, legacy fields and backend shapes."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from travel_desk.models import (
    MAX_PROVIDER_INSTANCES,
    Currency,
    Provider,
    ProviderAssignment,
    ServiceLineItem,
    ServiceTemplate,
    ServiceType,
    coerce_amount,
    provider_key,
)


class TestProviderAssignment:
    def test_bare_id(self):
        assignment = ProviderAssignment.model_validate("p1")
        assert assignment.resolved_provider_id == "p1"
        assert assignment.provider is None
        assert assignment.cost_provider == Decimal("0")

    def test_populated_provider_object(self):
        assignment = ProviderAssignment.model_validate(Provider(id="p1", name="Hotel X"))
        assert assignment.resolved_provider_id == "p1"
        assert assignment.display_name == "Hotel X"

    def test_backend_shape_with_populated_provider_id(self):
        assignment = ProviderAssignment.model_validate(
            {"provider_id": {"_id": "p1", "name": "Hotel X"}, "cost_provider": "12.5", "currency": "ARS"}
        )
        assert assignment.resolved_provider_id == "p1"
        assert assignment.display_name == "Hotel X"
        assert assignment.cost_provider == Decimal("12.5")
        assert assignment.currency == Currency.ARS

    def test_frontend_shape_splits_provider_and_cost_fields(self):
        assignment = ProviderAssignment.model_validate(
            {"_id": "p2", "name": "Transfer Co", "email": "ops@transfer.test", "cost_provider": 40}
        )
        assert assignment.provider_id == "p2"
        assert assignment.provider.email == "ops@transfer.test"
        assert assignment.cost_provider == Decimal("40")

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", True])
    def test_unusable_cost_becomes_zero(self, raw):
        assignment = ProviderAssignment.model_validate({"provider_id": "p1", "cost_provider": raw})
        assert assignment.cost_provider == Decimal("0")

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            ProviderAssignment.model_validate({"provider_id": "p1", "cost_provider": -5})

    def test_provider_key_forms_agree(self):
        forms = [
            "p1",
            Provider(id="p1", name="Hotel X"),
            ProviderAssignment(provider_id="p1"),
            {"providerId": "p1"},
            {"_id": "p1", "name": "Hotel X"},
        ]
        assert {provider_key(form) for form in forms} == {"p1"}
        assert provider_key(None) is None


class TestServiceLineItem:
    def test_legacy_provider_folded_when_list_empty(self):
        item = ServiceLineItem.model_validate({"id": "a", "provider": {"_id": "p1", "name": "Hotel X"}})
        assert [p.resolved_provider_id for p in item.providers] == ["p1"]
        assert item.provider.display_name == "Hotel X"

    def test_legacy_provider_ignored_when_list_present(self):
        item = ServiceLineItem.model_validate({"id": "a", "provider": "p1", "providers": ["p1"]})
        assert len(item.providers) == 1
        assert item.count_provider("p1") == 1

    def test_from_api_backend_record(self):
        item = ServiceLineItem.from_api({
            "_id": "665f1c",
            "serviceName": "Hotel Llao Llao, 3 nights",
            "serviceTemplateId": {"_id": "t-hotel", "name": "Hotel", "category": "Lodging"},
            "serviceDates": {"startDate": "2025-03-01T00:00:00.000Z", "endDate": "2025-03-04"},
            "destination": {"city": "Bariloche", "country": "Argentina"},
            "cost": "1200.50",
            "currency": "USD",
            "providers": [{"providerId": "p1", "costProvider": 1200.5}],
        })
        assert item.id == "665f1c"
        assert item.matches("665f1c")
        assert item.template_id == "t-hotel"
        assert item.template_name == "Hotel"
        assert item.category == "Lodging"
        assert item.service_info == "Hotel Llao Llao, 3 nights"
        assert item.check_in == date(2025, 3, 1)
        assert item.check_out == date(2025, 3, 4)
        assert item.destination.label == "Bariloche, Argentina"
        assert item.cost == Decimal("1200.50")

    def test_same_provider_over_cap_in_one_item_rejected(self):
        with pytest.raises(ValidationError):
            ServiceLineItem(id="a", providers=["p1"] * (MAX_PROVIDER_INSTANCES + 1))

    def test_same_provider_at_cap_in_one_item_allowed(self):
        item = ServiceLineItem(id="a", providers=["p1"] * MAX_PROVIDER_INSTANCES)
        assert item.count_provider("p1") == MAX_PROVIDER_INSTANCES

    def test_blank_dates_become_none(self):
        item = ServiceLineItem(id="a", check_in="", check_out=None)
        assert item.check_in is None and item.check_out is None

    def test_matches_client_and_server_id(self):
        item = ServiceLineItem(id="client-1", server_id="srv-1")
        assert item.matches("client-1")
        assert item.matches("srv-1")
        assert not item.matches("other")
        assert not item.matches(None)


class TestTemplates:
    def test_mock_template(self):
        template = ServiceTemplate.mock("  Excursion ")
        assert template.is_mock
        assert template.name == "Excursion"
        assert not ServiceTemplate(id="t1", name="Hotel").is_mock

    def test_service_type_accepts_is_active(self):
        service_type = ServiceType.model_validate({"_id": "st1", "name": "Lodging", "is_active": False})
        assert service_type.id == "st1"
        assert service_type.active is False


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, "0"), ("", "0"), ("12.30", "12.30"), (7, "7"), ("inf", "0"), ("x", "0")],
)
def test_coerce_amount(raw, expected):
    assert coerce_amount(raw) == Decimal(expected)
