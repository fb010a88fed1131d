"""
Provider Allocation Tracker.

Enforces the sale-wide cap: any single provider may be assigned at most
``MAX_PROVIDER_INSTANCES`` times across every line item of one sale.
Pure logic over a snapshot of line items, no side effects.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Optional

from travel_desk.errors import ProviderCapExceeded
from travel_desk.models.line_item import ServiceLineItem
from travel_desk.models.provider import MAX_PROVIDER_INSTANCES, ProviderRef, provider_key

__all__ = ["ProviderAllocationTracker", "check_sale_allocation"]


class ProviderAllocationTracker:
    """Counts provider assignments over a sale's line items.

    The tracker is advisory: it answers whether one more assignment fits,
    but never blocks removals.
    """

    def __init__(self, line_items: Iterable[ServiceLineItem]) -> None:
        self._line_items: tuple[ServiceLineItem, ...] = tuple(line_items)

    @property
    def line_items(self) -> tuple[ServiceLineItem, ...]:
        return self._line_items

    @property
    def limit(self) -> int:
        return MAX_PROVIDER_INSTANCES

    def count_for(
        self, provider_id: ProviderRef, exclude_line_item_id: Optional[str] = None
    ) -> int:
        """Assignments of *provider_id* across the sale.

        The line item matching *exclude_line_item_id* (client or server id)
        is skipped entirely, so the caller can count its own modal
        selection separately.
        """
        key = provider_key(provider_id)
        if key is None:
            return 0
        total = 0
        for item in self._line_items:
            if item.matches(exclude_line_item_id):
                continue
            total += item.count_provider(key)
        return total

    def can_add(
        self,
        provider_id: ProviderRef,
        exclude_line_item_id: Optional[str] = None,
        current_modal_selection_count: int = 0,
    ) -> bool:
        """True when one more assignment keeps the provider within the cap."""
        existing = self.count_for(provider_id, exclude_line_item_id)
        return existing + current_modal_selection_count + 1 <= MAX_PROVIDER_INSTANCES

    def remaining(
        self,
        provider_id: ProviderRef,
        exclude_line_item_id: Optional[str] = None,
        current_modal_selection_count: int = 0,
    ) -> int:
        used = self.count_for(provider_id, exclude_line_item_id) + current_modal_selection_count
        return max(0, MAX_PROVIDER_INSTANCES - used)

    def usage(self) -> dict[str, int]:
        """Assignment count per provider id, in first-seen order."""
        counts: Counter[str] = Counter()
        for item in self._line_items:
            for assignment in item.providers:
                key = assignment.resolved_provider_id
                if key:
                    counts[key] += 1
        return dict(counts)

    def over_cap(self) -> list[str]:
        return [pid for pid, count in self.usage().items() if count > MAX_PROVIDER_INSTANCES]


def check_sale_allocation(line_items: Iterable[ServiceLineItem]) -> None:
    """Raise ``ProviderCapExceeded`` for the first provider over the cap."""
    tracker = ProviderAllocationTracker(line_items)
    over = tracker.over_cap()
    if over:
        raise ProviderCapExceeded(over[0], tracker.usage()[over[0]], MAX_PROVIDER_INSTANCES)
