"""Wizard state machine: guards, materialisation and broadcast."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from travel_desk.errors import StepValidationError
from travel_desk.models import Currency, Provider, ServiceLineItem, ServiceTemplate, WizardState, WizardStep
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


@pytest.fixture
def at_step_two(hotel_template) -> WizardState:
    state = add_card(WizardState(sale_currency=Currency.ARS), hotel_template)
    state = add_card(state, "Excursion")
    return apply_step_transition(state, WizardStep.DATES_AND_DESTINATION)


@pytest.fixture
def at_step_three(at_step_two) -> WizardState:
    state = set_schedule(at_step_two, "2025-03-01", "2025-03-04", "Bariloche", "Argentina")
    return apply_step_transition(state, WizardStep.COST_AND_PROVIDERS)


def _with_providers(state: WizardState, *provider_lists: list[str]) -> WizardState:
    for item, providers in zip(state.line_items, provider_lists):
        updated = ServiceLineItem.model_validate({**item.model_dump(), "providers": providers})
        state = replace_line_item(state, updated)
    return state


class TestSelectTemplate:
    def test_no_cards_blocks_advance(self):
        with pytest.raises(StepValidationError, match="Please select a service template to continue"):
            apply_step_transition(WizardState(), WizardStep.DATES_AND_DESTINATION)

    def test_cards_materialise_into_line_items(self, at_step_two, hotel_template):
        assert at_step_two.step == WizardStep.DATES_AND_DESTINATION
        hotel, excursion = at_step_two.line_items
        assert hotel.id == at_step_two.cards[0].id
        assert hotel.template_id == hotel_template.id
        assert not hotel.is_mock_template
        assert excursion.is_mock_template
        assert excursion.template_name == "Excursion"
        assert hotel.currency == Currency.ARS

    def test_blank_card_name_rejected(self):
        with pytest.raises(StepValidationError, match="Service name is required"):
            add_card(WizardState(), "   ")

    def test_existing_items_keep_edits_when_materialised_again(self, at_step_two):
        first = at_step_two.line_items[0]
        edited = replace_line_item(at_step_two, first.model_copy(update={"service_info": "Llao Llao"}))
        back = go_back(edited)
        assert back.step == WizardStep.SELECT_TEMPLATE
        again = apply_step_transition(add_card(back, "Transfer"), WizardStep.DATES_AND_DESTINATION)
        assert [i.service_info for i in again.line_items] == ["Llao Llao", "Excursion", "Transfer"]

    def test_remove_card_drops_its_line_item(self, at_step_two):
        card_id = at_step_two.cards[0].id
        state = remove_card(at_step_two, card_id)
        assert len(state.cards) == 1
        assert state.line_item(card_id) is None


class TestDatesAndDestination:
    def test_missing_city_blocks_advance(self, at_step_two):
        state = set_schedule(at_step_two, "2025-03-01", "2025-03-04", "  ")
        with pytest.raises(
            StepValidationError,
            match="Please enter check-in and check-out dates and city to continue",
        ):
            apply_step_transition(state, WizardStep.COST_AND_PROVIDERS)

    def test_checkout_before_checkin_rejected(self, at_step_two):
        state = set_schedule(at_step_two, date(2025, 3, 4), date(2025, 3, 1), "Bariloche")
        with pytest.raises(StepValidationError, match="Check-out date cannot be before check-in date"):
            apply_step_transition(state, WizardStep.COST_AND_PROVIDERS)

    def test_schedule_broadcast_to_every_item(self, at_step_three):
        assert at_step_three.step == WizardStep.COST_AND_PROVIDERS
        for item in at_step_three.line_items:
            assert item.check_in == date(2025, 3, 1)
            assert item.check_out == date(2025, 3, 4)
            assert item.destination.city == "Bariloche"
            assert item.destination.country == "Argentina"


class TestCostAndProviders:
    def test_one_item_without_providers_blocks_advance(self, at_step_three):
        state = _with_providers(at_step_three, ["p1"])
        with pytest.raises(StepValidationError) as excinfo:
            apply_step_transition(state, WizardStep.REVIEW)
        assert str(excinfo.value) == "1 service(s) still need provider configuration."

    def test_all_items_configured_reaches_review(self, at_step_three):
        state = apply_step_transition(_with_providers(at_step_three, ["p1"], ["p2"]), WizardStep.REVIEW)
        assert state.step == WizardStep.REVIEW

    def test_sale_over_cap_blocks_advance(self, at_step_three):
        state = _with_providers(at_step_three, ["p1"] * 4, ["p1"] * 4)
        with pytest.raises(StepValidationError, match="p1"):
            apply_step_transition(state, WizardStep.REVIEW)

    def test_remove_line_item(self, at_step_three):
        item_id = at_step_three.line_items[1].id
        state = remove_line_item(at_step_three, item_id)
        assert [i.id for i in state.line_items] == [at_step_three.line_items[0].id]


class TestProviderAndCostEdits:
    def test_committed_selection_replaces_item_providers(self, at_step_three):
        item_id = at_step_three.line_items[0].id
        selection = edit_providers(at_step_three, item_id)
        assert selection.add(Provider(id="p1", name="Hotel X")).success
        state = commit_provider_selection(at_step_three, selection)
        assert [p.provider_id for p in state.line_item(item_id).providers] == ["p1"]
        assert at_step_three.line_item(item_id).providers == []

    def test_editor_counts_the_rest_of_the_sale(self, at_step_three):
        state = _with_providers(at_step_three, [], ["p1"] * 7)
        result = edit_providers(state, state.line_items[0].id).add("p1")
        assert not result.success
        assert result.status_code == 409

    def test_unknown_item_rejected(self, at_step_three):
        with pytest.raises(StepValidationError, match="Unknown service"):
            edit_providers(at_step_three, "missing")

    def test_cost_edit_applied_to_item(self, at_step_three):
        state = _with_providers(at_step_three, ["p1"])
        item_id = state.line_items[0].id
        item = set_line_item_cost(state, item_id, "1500", "ARS").line_item(item_id)
        assert item.cost == Decimal("1500")
        assert item.currency == Currency.ARS
        assert item.providers[0].cost_provider == Decimal("1500")

    def test_foreign_cost_without_rate_rejected(self, at_step_three):
        with pytest.raises(StepValidationError):
            set_line_item_cost(at_step_three, at_step_three.line_items[0].id, "100", "USD")


class TestNavigation:
    def test_forward_skips_rejected(self, hotel_template):
        state = add_card(WizardState(), hotel_template)
        with pytest.raises(StepValidationError, match="Cannot skip"):
            apply_step_transition(state, WizardStep.COST_AND_PROVIDERS)

    def test_backward_always_allowed(self, at_step_three):
        state = apply_step_transition(at_step_three, WizardStep.SELECT_TEMPLATE)
        assert state.step == WizardStep.SELECT_TEMPLATE
        assert state.line_items == at_step_three.line_items

    def test_go_back_from_first_step_is_noop(self):
        state = WizardState()
        assert go_back(state) is state

    def test_unknown_step_rejected(self):
        with pytest.raises(StepValidationError):
            apply_step_transition(WizardState(), 9)

    def test_transitions_do_not_mutate_input(self, at_step_two):
        set_schedule(at_step_two, "2025-03-01", "2025-03-04", "Bariloche")
        assert at_step_two.check_in is None

    def test_replace_unknown_item_rejected(self, at_step_two):
        stranger = at_step_two.line_items[0].model_copy(update={"id": "nope"})
        with pytest.raises(StepValidationError):
            replace_line_item(at_step_two, stranger)


def test_add_card_from_template_keeps_template_id():
    template = ServiceTemplate(id="t-1", name="Hotel")
    state = add_card(WizardState(), template)
    assert state.cards[0].template_id == "t-1"
    assert not state.cards[0].is_mock
