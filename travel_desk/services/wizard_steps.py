"""
Wizard Step Transitions.

The sale-service wizard is a linear four-step machine over an immutable
``WizardState``.  Every function here takes a state and returns a new one,
or raises ``StepValidationError`` with the message shown to the user.

    SELECT_TEMPLATE (1) -> DATES_AND_DESTINATION (2)
        -> COST_AND_PROVIDERS (3) -> REVIEW (4)

Forward moves go one step at a time and are validated; backward moves are
always allowed.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from travel_desk.errors import ProviderCapExceeded, StepValidationError
from travel_desk.models.enums import Currency, WizardStep
from travel_desk.models.line_item import Destination, ServiceLineItem
from travel_desk.models.template import ServiceTemplate
from travel_desk.models.wizard import PendingServiceCard, WizardState
from travel_desk.services.provider_allocation import ProviderAllocationTracker, check_sale_allocation
from travel_desk.services.provider_selection import ProviderSelection, apply_cost_edit
from travel_desk.services.validation_rules import (
    MISSING_TEMPLATE_MESSAGE,
    Amount,
    missing_providers_message,
    parse_date,
    validate_card_name,
    validate_schedule,
)

__all__ = [
    "add_card",
    "apply_step_transition",
    "commit_provider_selection",
    "edit_providers",
    "go_back",
    "remove_card",
    "remove_line_item",
    "replace_line_item",
    "set_line_item_cost",
    "set_schedule",
]


# ---------------------------------------------------------------------------
# State edits
# ---------------------------------------------------------------------------

def add_card(
    state: WizardState,
    template: Union[ServiceTemplate, str],
    category: str = "",
) -> WizardState:
    """Add a service card from a known template or from a free-text name.

    A name becomes a mock template, reconciled against the server's
    templates at submission time.
    """
    if isinstance(template, str):
        template = ServiceTemplate.mock(validate_card_name(template), category=category)
    else:
        validate_card_name(template.name)
    card = PendingServiceCard.from_template(template)
    return state.model_copy(update={"cards": (*state.cards, card)})


def remove_card(state: WizardState, card_id: str) -> WizardState:
    """Drop a card and the line item it produced, if any."""
    return state.model_copy(update={
        "cards": tuple(c for c in state.cards if c.id != card_id),
        "line_items": tuple(i for i in state.line_items if not i.matches(card_id)),
    })


def set_schedule(
    state: WizardState,
    check_in: Union[date, str, None],
    check_out: Union[date, str, None],
    city: Optional[str],
    country: Optional[str] = "",
) -> WizardState:
    """Record the shared dates and destination; validated when leaving step 2."""
    return state.model_copy(update={
        "check_in": parse_date(check_in),
        "check_out": parse_date(check_out),
        "destination": Destination(city=(city or "").strip(), country=(country or "").strip()),
    })


def replace_line_item(state: WizardState, item: ServiceLineItem) -> WizardState:
    """Swap in an edited line item, matched by id."""
    if state.line_item(item.id) is None:
        raise StepValidationError(f"Unknown service '{item.id}'")
    return state.model_copy(update={
        "line_items": tuple(item if existing.matches(item.id) else existing for existing in state.line_items),
    })


def remove_line_item(state: WizardState, line_item_id: str) -> WizardState:
    return remove_card(state, line_item_id)


def _require_line_item(state: WizardState, line_item_id: str) -> ServiceLineItem:
    item = state.line_item(line_item_id)
    if item is None:
        raise StepValidationError(f"Unknown service '{line_item_id}'")
    return item


def edit_providers(state: WizardState, line_item_id: str) -> ProviderSelection:
    """Open the provider editor for one line item, counted against the whole sale."""
    item = _require_line_item(state, line_item_id)
    return ProviderSelection(item, ProviderAllocationTracker(state.line_items))


def commit_provider_selection(state: WizardState, selection: ProviderSelection) -> WizardState:
    return replace_line_item(state, selection.apply())


def set_line_item_cost(
    state: WizardState,
    line_item_id: str,
    cost: Amount,
    currency: Union[Currency, str],
    exchange_rate: Amount = None,
) -> WizardState:
    """Apply a cost edit to one line item, validated against the sale currency."""
    item = _require_line_item(state, line_item_id)
    edited = apply_cost_edit(item, cost, currency, state.sale_currency, exchange_rate)
    return replace_line_item(state, edited)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _materialize(state: WizardState) -> tuple[ServiceLineItem, ...]:
    items: list[ServiceLineItem] = []
    for card in state.cards:
        existing = state.line_item(card.id)
        if existing is not None:
            items.append(existing)
            continue
        items.append(ServiceLineItem(
            id=card.id,
            template_id=card.template_id,
            template_name=card.template_name,
            category=card.category,
            is_mock_template=card.is_mock,
            service_info=card.template_name,
            check_in=state.check_in,
            check_out=state.check_out,
            destination=state.destination,
            currency=state.sale_currency,
        ))
    return tuple(items)


def _broadcast_schedule(state: WizardState) -> tuple[ServiceLineItem, ...]:
    return tuple(
        item.model_copy(update={
            "check_in": state.check_in,
            "check_out": state.check_out,
            "destination": state.destination,
        })
        for item in state.line_items
    )


def _leave_select_template(state: WizardState) -> WizardState:
    if not state.cards:
        raise StepValidationError(MISSING_TEMPLATE_MESSAGE)
    return state.model_copy(update={
        "step": WizardStep.DATES_AND_DESTINATION,
        "line_items": _materialize(state),
    })


def _leave_dates_and_destination(state: WizardState) -> WizardState:
    validate_schedule(state.check_in, state.check_out, state.destination.city)
    return state.model_copy(update={
        "step": WizardStep.COST_AND_PROVIDERS,
        "line_items": _broadcast_schedule(state),
    })


def _leave_cost_and_providers(state: WizardState) -> WizardState:
    missing = state.items_missing_providers
    if missing:
        raise StepValidationError(missing_providers_message(len(missing)))
    try:
        check_sale_allocation(state.line_items)
    except ProviderCapExceeded as exc:
        raise StepValidationError(str(exc)) from exc
    return state.model_copy(update={"step": WizardStep.REVIEW})


_FORWARD = {
    WizardStep.SELECT_TEMPLATE: _leave_select_template,
    WizardStep.DATES_AND_DESTINATION: _leave_dates_and_destination,
    WizardStep.COST_AND_PROVIDERS: _leave_cost_and_providers,
}


def apply_step_transition(state: WizardState, target: Union[WizardStep, int]) -> WizardState:
    """Move *state* to *target*.

    Raises:
        StepValidationError: Unknown step, a skipped step, or the current
            step's requirements are not met.
    """
    try:
        target = WizardStep(target)
    except ValueError as exc:
        raise StepValidationError(f"Unknown wizard step: {target}") from exc

    if target == state.step:
        return state
    if target < state.step:
        return state.model_copy(update={"step": target})
    if target != state.step + 1:
        raise StepValidationError(
            f"Cannot skip from step {int(state.step)} to step {int(target)}"
        )
    return _FORWARD[state.step](state)


def go_back(state: WizardState) -> WizardState:
    """One step back; a no-op on the first step."""
    if state.step == WizardStep.SELECT_TEMPLATE:
        return state
    return apply_step_transition(state, WizardStep(state.step - 1))
