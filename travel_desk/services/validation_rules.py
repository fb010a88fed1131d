"""
Wizard Validation Rules.

Pure-function module with the field rules of each wizard step.
Every rule either returns the cleaned value or raises
``StepValidationError`` with the message shown to the user.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from travel_desk.errors import StepValidationError
from travel_desk.models.enums import Currency

__all__ = [
    "MISSING_SCHEDULE_MESSAGE",
    "MISSING_TEMPLATE_MESSAGE",
    "NO_PROVIDER_SELECTED_MESSAGE",
    "missing_providers_message",
    "parse_date",
    "validate_card_name",
    "validate_cost_entry",
    "validate_schedule",
]

MISSING_TEMPLATE_MESSAGE = "Please select a service template to continue"
MISSING_SCHEDULE_MESSAGE = "Please enter check-in and check-out dates and city to continue"
NO_PROVIDER_SELECTED_MESSAGE = "Please select at least one provider"

Amount = Union[Decimal, int, float, str, None]


def missing_providers_message(count: int) -> str:
    return f"{count} service(s) still need provider configuration."


def _parse_amount(value: Amount, label: str) -> Decimal:
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        raise StepValidationError(f"{label} is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise StepValidationError(f"{label} must be a valid number") from exc
    if amount.is_nan() or amount.is_infinite():
        raise StepValidationError(f"{label} must be a valid number")
    return amount


def parse_date(value: Union[date, str, None]) -> Optional[date]:
    """Accept a ``date`` or an ISO string; blank values become ``None``."""
    if value is None or isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise StepValidationError(f"Invalid date: '{value}'") from exc


def validate_card_name(name: Optional[str]) -> str:
    """A service card needs a non-blank template name."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise StepValidationError("Service name is required")
    return cleaned


def validate_schedule(
    check_in: Optional[date], check_out: Optional[date], city: Optional[str]
) -> None:
    """Rules for leaving the dates-and-destination step."""
    if check_in is None or check_out is None or not (city or "").strip():
        raise StepValidationError(MISSING_SCHEDULE_MESSAGE)
    if check_out < check_in:
        raise StepValidationError("Check-out date cannot be before check-in date")


def validate_cost_entry(
    cost: Amount,
    currency: Union[Currency, str],
    sale_currency: Union[Currency, str],
    exchange_rate: Amount = None,
) -> tuple[Decimal, Optional[Decimal]]:
    """Validate a cost edit from the cost-and-provider step.

    Returns:
        ``(cost, exchange_rate)``; the rate is ``None`` when it was not
        given and is not needed.

    Raises:
        StepValidationError: Negative or non-numeric cost, unknown currency,
            or a missing/non-positive rate when the service is priced in a
            currency other than the sale's.
    """
    amount = _parse_amount(cost, "Cost")
    if amount < 0:
        raise StepValidationError("Cost cannot be negative")

    try:
        currency = Currency(currency)
        sale_currency = Currency(sale_currency)
    except ValueError as exc:
        raise StepValidationError(f"Unsupported currency: {exc}") from exc

    rate: Optional[Decimal] = None
    if exchange_rate is not None and not (isinstance(exchange_rate, str) and not exchange_rate.strip()):
        rate = _parse_amount(exchange_rate, "Exchange rate")
        if rate <= 0:
            raise StepValidationError("Exchange rate must be greater than zero")

    if currency != sale_currency and rate is None:
        raise StepValidationError(
            f"Exchange rate is required when the service is priced in {currency.value} "
            f"and the sale is in {sale_currency.value}"
        )
    return amount, rate
