"""
Provider Selection.

State of the cost-and-provider editor for one line item: the in-progress
list of provider instances, checked against the sale-wide cap before each
addition, and the cost/currency edit applied to a line item.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from travel_desk.errors import StepValidationError
from travel_desk.models.enums import Currency
from travel_desk.models.line_item import ServiceLineItem
from travel_desk.models.provider import MAX_PROVIDER_INSTANCES, Provider, ProviderAssignment, provider_key
from travel_desk.models.service_models import ServiceResult
from travel_desk.services.provider_allocation import ProviderAllocationTracker
from travel_desk.services.validation_rules import (
    NO_PROVIDER_SELECTED_MESSAGE,
    Amount,
    validate_cost_entry,
)

__all__ = ["ProviderSelection", "apply_cost_edit", "cap_message"]


def cap_message(name: str, would_be: int) -> str:
    return (
        f"Cannot select more instances of {name}. "
        f"Global limit is {MAX_PROVIDER_INSTANCES} selections across all services. "
        f"Current count would be: {would_be}"
    )


class ProviderSelection:
    """In-progress provider selection for *line_item*.

    Starts from the item's current assignments.  The *tracker* must cover
    the whole sale; the edited item is excluded from its count and the
    selection held here is counted instead.
    """

    def __init__(self, line_item: ServiceLineItem, tracker: ProviderAllocationTracker) -> None:
        self._line_item = line_item
        self._tracker = tracker
        self._selected: list[ProviderAssignment] = list(line_item.providers)

    @property
    def line_item(self) -> ServiceLineItem:
        return self._line_item

    @property
    def selected(self) -> tuple[ProviderAssignment, ...]:
        return tuple(self._selected)

    def count(self, provider_id: Union[str, Provider, ProviderAssignment]) -> int:
        """Instances of *provider_id* in the current selection."""
        key = provider_key(provider_id)
        return sum(1 for p in self._selected if key is not None and p.resolved_provider_id == key)

    def can_add(self, provider_id: Union[str, Provider, ProviderAssignment]) -> bool:
        return self._tracker.can_add(provider_id, self._line_item.id, self.count(provider_id))

    def add(self, provider: Union[str, Provider, ProviderAssignment]) -> ServiceResult[ProviderAssignment]:
        """Add one instance of *provider*; declined when the cap would be exceeded."""
        assignment = (
            provider
            if isinstance(provider, ProviderAssignment)
            else ProviderAssignment.model_validate(provider)
        )
        key = assignment.resolved_provider_id
        if key is None:
            return ServiceResult(success=False, error="Provider has no id", status_code=400)

        in_selection = self.count(key)
        if not self._tracker.can_add(key, self._line_item.id, in_selection):
            would_be = self._tracker.count_for(key, self._line_item.id) + in_selection + 1
            name = assignment.display_name or key
            return ServiceResult(success=False, error=cap_message(name, would_be), status_code=409)

        if "currency" not in assignment.model_fields_set:
            assignment = assignment.model_copy(update={"currency": self._line_item.currency})
        self._selected.append(assignment)
        return ServiceResult(success=True, data=assignment)

    def remove(self, provider_id: Union[str, Provider, ProviderAssignment], instance_index: int = 0) -> bool:
        """Remove the *instance_index*-th instance of a provider.  Never gated by the cap."""
        key = provider_key(provider_id)
        seen = 0
        for position, assignment in enumerate(self._selected):
            if key is not None and assignment.resolved_provider_id == key:
                if seen == instance_index:
                    del self._selected[position]
                    return True
                seen += 1
        return False

    def remove_all(self, provider_id: Union[str, Provider, ProviderAssignment]) -> int:
        key = provider_key(provider_id)
        if key is None:
            return 0
        before = len(self._selected)
        self._selected = [p for p in self._selected if p.resolved_provider_id != key]
        return before - len(self._selected)

    def apply(self) -> ServiceLineItem:
        """Return the line item with the selected assignments.

        Raises:
            StepValidationError: Nothing is selected.
        """
        if not self._selected:
            raise StepValidationError(NO_PROVIDER_SELECTED_MESSAGE)
        return self._line_item.model_copy(update={"providers": list(self._selected)})


def apply_cost_edit(
    item: ServiceLineItem,
    cost: Amount,
    currency: Union[Currency, str],
    sale_currency: Union[Currency, str],
    exchange_rate: Amount = None,
) -> ServiceLineItem:
    """Set the item's cost, currency and rate.

    The first assignment carries the whole cost; any further assignments
    are zeroed so the provider total always equals the item cost.

    Raises:
        StepValidationError: See ``validate_cost_entry``.
    """
    amount, rate = validate_cost_entry(cost, currency, sale_currency, exchange_rate)
    currency = Currency(currency)
    providers = [
        p.model_copy(update={
            "cost_provider": amount if index == 0 else Decimal("0"),
            "currency": currency,
        })
        for index, p in enumerate(item.providers)
    ]
    if rate is None and currency == Currency.ARS:
        rate = item.exchange_rate
    return item.model_copy(update={
        "cost": amount,
        "currency": currency,
        "exchange_rate": rate,
        "providers": providers,
    })
