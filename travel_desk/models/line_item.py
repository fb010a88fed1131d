"""
ServiceLineItem Model.

One service being added to, or already part of, a sale.  The model accepts
both the wizard's own shape and the backend's persisted shape
(``serviceName``, ``serviceTemplateId``, ``serviceDates``), so a payload
that was sent to the server can be read back into an equivalent item.
"""

from __future__ import annotations

import uuid
from collections import Counter
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from travel_desk.models.enums import Currency
from travel_desk.models.provider import (
    MAX_PROVIDER_INSTANCES,
    ProviderAssignment,
    coerce_amount,
    provider_key,
)
from travel_desk.utils.string_helpers import normalize_keys


def new_line_item_id() -> str:
    """Client-generated id, stable for the lifetime of a wizard run."""
    return uuid.uuid4().hex


def _coerce_date(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        # Backend dates come back as ISO datetimes ("2025-03-01T00:00:00.000Z").
        return text[:10]
    return value


class Destination(BaseModel):
    """City and country a service takes place in."""

    city: str = ""
    country: str = ""

    @property
    def label(self) -> str:
        return ", ".join(part for part in (self.city.strip(), self.country.strip()) if part)


class ServiceLineItem(BaseModel):
    """A service line item of a sale.

    ``providers`` is the single canonical list of assignments.  A legacy
    singular ``provider`` value on input is folded into ``providers`` only
    when that list is empty; afterwards :attr:`provider` is a read-only view
    of ``providers[0]``.
    """

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(default_factory=new_line_item_id)
    server_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("server_id", "_id"))

    template_id: Optional[str] = None
    template_name: str = ""
    category: str = ""
    is_mock_template: bool = False

    service_info: str = ""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    destination: Destination = Field(default_factory=Destination)

    cost: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Currency = Currency.USD
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)

    providers: list[ProviderAssignment] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _fold_legacy_fields(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data: dict[str, object] = dict(value)

        if not data.get("id") and data.get("_id"):
            data["id"] = str(data["_id"])

        legacy_provider = data.pop("provider", None)
        if not data.get("providers") and legacy_provider is not None:
            data["providers"] = [legacy_provider]

        # Persisted (backend) shape
        if not data.get("service_info") and data.get("service_name"):
            data["service_info"] = data["service_name"]
        if not data.get("template_id"):
            ref = data.get("service_template_id") or data.get("service_id")
            if isinstance(ref, Mapping):
                data.setdefault("template_name", ref.get("name", ""))
                data.setdefault("category", ref.get("category", ""))
                ref = ref.get("_id", ref.get("id"))
            if ref is not None:
                data["template_id"] = str(ref)
        dates = data.get("service_dates")
        if isinstance(dates, Mapping):
            data.setdefault("check_in", dates.get("start_date"))
            data.setdefault("check_out", dates.get("end_date"))

        # Converted amounts are read back in the currency they were entered in.
        original_amount = data.pop("original_amount", None)
        original_currency = data.pop("original_currency", None)
        if original_amount is not None and original_currency:
            data["cost"] = original_amount
            data["currency"] = original_currency

        return data

    @field_validator("id", "server_id", "template_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v: object) -> object:
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def _parse_dates(cls, v: object) -> object:
        return _coerce_date(v)

    @field_validator("cost", mode="before")
    @classmethod
    def _parse_cost(cls, v: object) -> Decimal:
        return coerce_amount(v)

    @field_validator("exchange_rate", mode="before")
    @classmethod
    def _parse_rate(cls, v: object) -> object:
        if v is None or v == "":
            return None
        return coerce_amount(v)

    @field_validator("providers")
    @classmethod
    def _cap_same_provider(cls, providers: list[ProviderAssignment]) -> list[ProviderAssignment]:
        counts = Counter(p.resolved_provider_id for p in providers if p.resolved_provider_id)
        for provider_id, count in counts.items():
            if count > MAX_PROVIDER_INSTANCES:
                raise ValueError(
                    f"provider '{provider_id}' appears {count} times; "
                    f"at most {MAX_PROVIDER_INSTANCES} instances are allowed"
                )
        return providers

    # ------------------------------------------------------------------
    # Construction from backend records
    # ------------------------------------------------------------------

    @classmethod
    def from_api(cls, record: Mapping[str, object]) -> "ServiceLineItem":
        """Build a line item from a camelCase backend or draft record."""
        return cls.model_validate(normalize_keys(dict(record)))

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def provider(self) -> Optional[ProviderAssignment]:
        """First assignment, kept for callers that expect a single provider."""
        return self.providers[0] if self.providers else None

    @property
    def display_name(self) -> str:
        return self.service_info or self.template_name or self.id

    def matches(self, identifier: Optional[str]) -> bool:
        """True when *identifier* is this item's client id or server id."""
        if not identifier:
            return False
        return identifier == self.id or (self.server_id is not None and identifier == self.server_id)

    def count_provider(self, provider_id: str) -> int:
        """Number of assignments of *provider_id* inside this item."""
        key = provider_key(provider_id)
        if key is None:
            return 0
        return sum(1 for p in self.providers if p.resolved_provider_id == key)
