"""
Line Item Aggregation.

Derives display and persistence-ready values from a ``ServiceLineItem``
without mutating it: provider cost totals, grouped provider counts,
template reconciliation and the backend payload.
Pure Math: input data -> output result, no side effects.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Optional

from travel_desk.errors import MissingProviderReference
from travel_desk.models.enums import Currency, ResolutionStatus
from travel_desk.models.line_item import ServiceLineItem
from travel_desk.models.provider import Provider, ProviderAssignment
from travel_desk.models.service_models import (
    PayloadResult,
    PersistencePayload,
    ProviderCount,
    ProviderPayload,
    ServiceDates,
    TemplateResolution,
)
from travel_desk.models.template import ServiceTemplate
from travel_desk.services.currency import CurrencyConverter

__all__ = [
    "UNKNOWN_PROVIDER",
    "check_provider_references",
    "format_provider_summary",
    "grouped_provider_counts",
    "resolve_template",
    "to_persistence_payload",
    "total_provider_cost",
]

UNKNOWN_PROVIDER = "Unknown Provider"
NO_PROVIDER = "No provider"

ProviderDirectory = Mapping[str, Provider]


def total_provider_cost(item: ServiceLineItem) -> Decimal:
    """Sum of ``cost_provider`` over every assignment (missing costs count as 0)."""
    return sum((p.cost_provider for p in item.providers), Decimal("0"))


def _display_name(assignment: ProviderAssignment, directory: Optional[ProviderDirectory]) -> str:
    if assignment.display_name:
        return assignment.display_name
    key = assignment.resolved_provider_id
    if directory is not None and key is not None:
        provider = directory.get(key)
        if provider is not None and provider.name:
            return provider.name
    return UNKNOWN_PROVIDER


def grouped_provider_counts(
    item: ServiceLineItem, directory: Optional[ProviderDirectory] = None
) -> list[ProviderCount]:
    """Group assignments by display name, preserving first-seen order.

    Name precedence: the populated provider object's ``name``, then the
    optional *directory* (provider id -> ``Provider``), then
    ``"Unknown Provider"``.
    """
    counts: dict[str, int] = {}
    for assignment in item.providers:
        name = _display_name(assignment, directory)
        counts[name] = counts.get(name, 0) + 1
    return [ProviderCount(name=name, count=count) for name, count in counts.items()]


def format_provider_summary(
    item: ServiceLineItem, directory: Optional[ProviderDirectory] = None
) -> str:
    """Render e.g. ``"Hotel X × 2, Transfer Co"``."""
    groups = grouped_provider_counts(item, directory)
    if not groups:
        return NO_PROVIDER
    return ", ".join(g.name if g.count == 1 else f"{g.name} × {g.count}" for g in groups)


# ---------------------------------------------------------------------------
# Template reconciliation
# ---------------------------------------------------------------------------

def _normalize_name(name: str) -> str:
    return name.strip().casefold()


def resolve_template(
    item: ServiceLineItem, known_templates: Iterable[ServiceTemplate]
) -> TemplateResolution:
    """Match *item* against the authoritative templates.

    Exact id match first, then case-insensitive trimmed name match.  When
    neither matches, the result carries what must be created upstream.
    """
    templates = list(known_templates)
    if item.template_id:
        for template in templates:
            if template.id == item.template_id:
                return TemplateResolution(status=ResolutionStatus.FOUND, template=template)

    name = item.template_name or item.service_info
    wanted = _normalize_name(name)
    if wanted:
        for template in templates:
            if _normalize_name(template.name) == wanted:
                return TemplateResolution(status=ResolutionStatus.FOUND, template=template)

    return TemplateResolution(
        status=ResolutionStatus.NEEDS_CREATION,
        name=name.strip(),
        category=item.category,
        description=item.service_info if item.service_info != name else "",
    )


# ---------------------------------------------------------------------------
# Persistence payload
# ---------------------------------------------------------------------------

def check_provider_references(item: ServiceLineItem) -> None:
    """Raise ``MissingProviderReference`` unless every assignment has a provider id."""
    if not item.providers:
        raise MissingProviderReference(item.id, f"Service '{item.display_name}' has no provider assigned.")
    for index, assignment in enumerate(item.providers):
        if assignment.resolved_provider_id is None:
            raise MissingProviderReference(
                item.id,
                f"Provider #{index + 1} of service '{item.display_name}' has no provider id.",
            )


def _provider_payloads(
    item: ServiceLineItem, converter: CurrencyConverter
) -> list[ProviderPayload]:
    check_provider_references(item)

    result: list[ProviderPayload] = []
    for assignment in item.providers:
        key = assignment.resolved_provider_id
        cost, currency = assignment.cost_provider, assignment.currency
        if currency == Currency.ARS and converter.has_rate:
            cost, currency = converter.to_usd(cost, currency), Currency.USD
        result.append(
            ProviderPayload(
                provider_id=key,
                provider_name=assignment.display_name,
                cost_provider=cost,
                currency=currency,
                commission_rate=assignment.commission_rate,
                documents=[d for d in assignment.documents if d.uploaded],
            )
        )
    return result


def to_persistence_payload(
    item: ServiceLineItem, known_templates: Iterable[ServiceTemplate]
) -> PayloadResult:
    """Build the backend payload for *item*.

    Returns a result flagged ``needs_template_creation`` (and no payload)
    when the item's template does not exist on the server yet.

    Raises:
        MissingProviderReference: The item has no assignments, or one of
            them has no resolvable provider id.
    """
    converter = CurrencyConverter(item.exchange_rate)
    providers = _provider_payloads(item, converter)

    resolution = resolve_template(item, known_templates)
    if resolution.needs_creation or resolution.template is None:
        return PayloadResult(line_item_id=item.id, resolution=resolution)

    cost, currency = item.cost, item.currency
    original_currency: Optional[Currency] = None
    original_amount: Optional[Decimal] = None
    exchange_rate: Optional[Decimal] = None
    if item.currency == Currency.ARS and converter.has_rate:
        cost, currency = converter.to_usd(item.cost, item.currency), Currency.USD
        original_currency, original_amount = item.currency, item.cost
        exchange_rate = converter.exchange_rate

    payload = PersistencePayload(
        service_template_id=resolution.template.id,
        service_name=item.service_info or resolution.template.name,
        cost=cost,
        currency=currency,
        provider_id=providers[0].provider_id,
        providers=providers,
        destination=item.destination,
        service_dates=ServiceDates(start_date=item.check_in, end_date=item.check_out),
        check_in=item.check_in,
        check_out=item.check_out,
        notes=item.destination.label,
        original_currency=original_currency,
        original_amount=original_amount,
        exchange_rate=exchange_rate,
    )
    return PayloadResult(line_item_id=item.id, resolution=resolution, payload=payload)
