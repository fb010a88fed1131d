"""
Wizard State Models.

The wizard's in-progress data is one immutable ``WizardState`` value.
Every step transition returns a new state via ``model_copy``; nothing is
mutated in place.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from travel_desk.models.enums import Currency, WizardStep
from travel_desk.models.line_item import Destination, ServiceLineItem
from travel_desk.models.template import ServiceTemplate


class PendingServiceCard(BaseModel):
    """A template picked in step 1, not yet materialised into a line item."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    template_id: str
    template_name: str
    category: str = ""
    description: str = ""
    is_mock: bool = False

    @classmethod
    def from_template(cls, template: ServiceTemplate) -> "PendingServiceCard":
        return cls(
            template_id=template.id,
            template_name=template.name,
            category=template.category,
            description=template.description,
            is_mock=template.is_mock,
        )


class WizardState(BaseModel):
    """Snapshot of the sale-service wizard.

    ``cards`` and ``line_items`` are tuples.  A card and the line item it
    produced share the same ``id``.
    """

    model_config = ConfigDict(frozen=True)

    step: WizardStep = WizardStep.SELECT_TEMPLATE
    cards: tuple[PendingServiceCard, ...] = ()
    line_items: tuple[ServiceLineItem, ...] = ()
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    destination: Destination = Field(default_factory=Destination)
    sale_currency: Currency = Currency.USD

    def line_item(self, line_item_id: str) -> Optional[ServiceLineItem]:
        return next((item for item in self.line_items if item.matches(line_item_id)), None)

    @property
    def items_missing_providers(self) -> list[ServiceLineItem]:
        return [item for item in self.line_items if not item.providers]
