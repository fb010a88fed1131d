"""Sale-wide provider cap: counting, boundaries and exclusion."""

from __future__ import annotations

import pytest

from tests.conftest import make_item
from travel_desk.errors import ProviderCapExceeded
from travel_desk.models import MAX_PROVIDER_INSTANCES, Provider, ServiceLineItem
from travel_desk.services.provider_allocation import ProviderAllocationTracker, check_sale_allocation


def _sale_with(existing: int) -> list[ServiceLineItem]:
    """`existing` assignments of p1 spread over other items, plus an empty current item."""
    first = min(existing, 4)
    return [
        make_item("other-1", ["p1"] * first),
        make_item("other-2", ["p1"] * (existing - first) + ["p2"]),
        make_item("current", []),
    ]


def test_cap_is_seven():
    assert MAX_PROVIDER_INSTANCES == 7


def test_six_existing_is_addable():
    tracker = ProviderAllocationTracker(_sale_with(6))
    assert tracker.count_for("p1", "current") == 6
    assert tracker.can_add("p1", "current", 0) is True


def test_seven_existing_is_not_addable():
    tracker = ProviderAllocationTracker(_sale_with(7))
    assert tracker.can_add("p1", "current", 0) is False


def test_modal_selection_counts_toward_cap():
    tracker = ProviderAllocationTracker(_sale_with(5))
    assert tracker.can_add("p1", "current", 1) is True
    assert tracker.can_add("p1", "current", 2) is False
    assert tracker.remaining("p1", "current", 1) == 1


def test_excluded_item_is_skipped_entirely():
    items = [make_item("a", ["p1", "p1"]), make_item("b", ["p1"])]
    tracker = ProviderAllocationTracker(items)
    assert tracker.count_for("p1") == 3
    assert tracker.count_for("p1", exclude_line_item_id="a") == 1


def test_exclusion_matches_server_id():
    items = [
        ServiceLineItem(id="client-a", server_id="srv-a", providers=["p1"]),
        make_item("b", ["p1"]),
    ]
    assert ProviderAllocationTracker(items).count_for("p1", "srv-a") == 1


def test_populated_and_bare_references_count_as_same_provider():
    items = [
        make_item("a", ["p1"]),
        ServiceLineItem(id="b", providers=[Provider(id="p1", name="Hotel X")]),
        ServiceLineItem.from_api({"id": "c", "providers": [{"providerId": {"_id": "p1"}}]}),
    ]
    tracker = ProviderAllocationTracker(items)
    assert tracker.count_for("p1") == 3
    assert tracker.count_for(Provider(id="p1", name="Hotel X")) == 3


def test_legacy_provider_field_is_not_double_counted():
    item = ServiceLineItem.model_validate({"id": "a", "provider": "p1", "providers": ["p1"]})
    assert ProviderAllocationTracker([item]).count_for("p1") == 1


def test_missing_lists_contribute_zero():
    tracker = ProviderAllocationTracker([ServiceLineItem(id="a"), make_item("b", [])])
    assert tracker.count_for("p1") == 0
    assert tracker.count_for(None) == 0
    assert tracker.usage() == {}


def test_usage_and_over_cap():
    items = [make_item("a", ["p1"] * 4 + ["p2"]), make_item("b", ["p1"] * 4)]
    tracker = ProviderAllocationTracker(items)
    assert tracker.usage() == {"p1": 8, "p2": 1}
    assert tracker.over_cap() == ["p1"]


def test_check_sale_allocation_raises_over_cap():
    items = [make_item("a", ["p1"] * 4), make_item("b", ["p1"] * 4)]
    with pytest.raises(ProviderCapExceeded) as excinfo:
        check_sale_allocation(items)
    assert excinfo.value.provider_id == "p1"
    assert excinfo.value.count == 8
    assert excinfo.value.limit == 7


def test_check_sale_allocation_accepts_exactly_cap():
    check_sale_allocation([make_item("a", ["p1"] * 3), make_item("b", ["p1"] * 4)])
