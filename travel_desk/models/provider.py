"""
Provider Models.

``Provider`` is the backend-owned entity; ``ProviderAssignment`` is one
purchased unit of that provider inside a service line item.  Assignments
arrive in several shapes (bare id, populated object, backend record with
``providerId``, frontend provider object with cost fields mixed in) and are
normalised here so every caller compares providers by the same key.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Final, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from travel_desk.models.enums import Currency
from travel_desk.utils.string_helpers import normalize_keys

__all__ = [
    "MAX_PROVIDER_INSTANCES",
    "Provider",
    "ProviderAssignment",
    "ProviderDocument",
    "coerce_amount",
    "provider_key",
]

# Global cap: one provider may be assigned at most this many times per sale.
MAX_PROVIDER_INSTANCES: Final[int] = 7

_ASSIGNMENT_FIELDS: frozenset[str] = frozenset(
    {"cost_provider", "currency", "commission_rate", "documents"}
)


def coerce_amount(value: object) -> Decimal:
    """Coerce a user or backend amount to ``Decimal``.

    ``None``, empty strings and non-numeric values become ``Decimal("0")``.
    Negative values are returned unchanged so field constraints can reject them.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return Decimal("0")
    if amount.is_nan() or amount.is_infinite():
        return Decimal("0")
    return amount


def _coerce_id(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class Provider(BaseModel):
    """A travel provider (hotel, transfer company, airline...)."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    type: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: object) -> object:
        return _coerce_id(v)


class ProviderDocument(BaseModel):
    """Metadata of a file attached to a provider assignment.

    ``url`` is empty when the upload failed and the document only exists
    locally; such documents are kept so the user can retry.
    """

    filename: str = ""
    name: str = ""
    size: int = Field(default=0, ge=0)
    type: str = "other"
    mime_type: Optional[str] = None
    url: str = ""
    upload_date: Optional[datetime] = None

    @property
    def uploaded(self) -> bool:
        return bool(self.url)


class ProviderAssignment(BaseModel):
    """One occurrence of a provider inside a line item's provider list.

    Duplicates are meaningful: three assignments of the same provider
    represent three purchased units.
    """

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    provider_id: Optional[str] = None
    provider: Optional[Provider] = None
    cost_provider: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Currency = Currency.USD
    commission_rate: Decimal = Field(default=Decimal("0"), ge=0)
    documents: list[ProviderDocument] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_reference(cls, value: object) -> object:
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return {"provider_id": _coerce_id(value)}
        if isinstance(value, Provider):
            return {"provider": value, "provider_id": value.id}
        if not isinstance(value, Mapping):
            return value

        data: dict[str, object] = dict(value)
        name = data.pop("provider_name", None)
        ref = data.get("provider_id")

        if ref is None and "provider" not in data and ("_id" in data or "id" in data):
            # Frontend shape: the provider object itself, with cost fields mixed in.
            provider_fields = {k: v for k, v in data.items() if k not in _ASSIGNMENT_FIELDS}
            data = {k: v for k, v in data.items() if k in _ASSIGNMENT_FIELDS}
            data["provider"] = provider_fields
            data["provider_id"] = _coerce_id(provider_fields.get("_id", provider_fields.get("id")))
        elif isinstance(ref, Provider):
            data["provider"] = ref
            data["provider_id"] = ref.id
        elif isinstance(ref, Mapping):
            data["provider"] = dict(ref)
            data["provider_id"] = _coerce_id(ref.get("_id", ref.get("id")))
        elif ref is not None:
            data["provider_id"] = _coerce_id(ref)

        # Persisted payloads carry the name next to the bare id.
        if name and data.get("provider") is None and data.get("provider_id"):
            data["provider"] = {"id": data["provider_id"], "name": name}
        return data

    @field_validator("cost_provider", "commission_rate", mode="before")
    @classmethod
    def _coerce_amounts(cls, v: object) -> Decimal:
        return coerce_amount(v)

    @property
    def resolved_provider_id(self) -> Optional[str]:
        """Comparable provider key, whichever form the reference was stored in."""
        if self.provider_id:
            return self.provider_id
        if self.provider is not None:
            return self.provider.id
        return None

    @property
    def display_name(self) -> Optional[str]:
        if self.provider is not None and self.provider.name:
            return self.provider.name
        return None


ProviderRef = Union[str, Provider, ProviderAssignment, Mapping[str, object], None]


def provider_key(ref: ProviderRef) -> Optional[str]:
    """Normalise any provider reference to its comparable id.

    Accepts a bare id, a ``Provider``, a ``ProviderAssignment`` or a raw
    mapping in either the backend (``providerId``) or frontend (``_id``) shape.
    """
    if ref is None:
        return None
    if isinstance(ref, ProviderAssignment):
        return ref.resolved_provider_id
    if isinstance(ref, Provider):
        return ref.id
    if isinstance(ref, Mapping):
        return ProviderAssignment.model_validate(normalize_keys(dict(ref))).resolved_provider_id
    return _coerce_id(ref)
