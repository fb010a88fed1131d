"""
Currency Conversion.

Pure math for the two supported currencies.  Rates are user supplied and
expressed as ``1 USD = <rate> ARS``; amounts are stored in USD.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from travel_desk.models.enums import Currency

__all__ = ["CENT", "CurrencyConverter", "quantize_money"]

CENT: Decimal = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class CurrencyConverter:
    """Holds the ARS exchange rate and converts values to and from USD."""

    exchange_rate: Optional[Decimal]

    def __init__(self, exchange_rate: Optional[Decimal] = None) -> None:
        self.exchange_rate: Optional[Decimal] = exchange_rate if exchange_rate else None

    @property
    def has_rate(self) -> bool:
        return self.exchange_rate is not None and self.exchange_rate > 0

    def to_usd(self, value: Decimal, currency: Union[Currency, str]) -> Decimal:
        """Convert a monetary value to USD.

        Args:
            value: The monetary amount (defaults to Decimal("0") if falsy).
            currency: The source currency.

        Raises:
            ValueError: When converting ARS without a positive rate.
        """
        value = value or Decimal("0")
        if currency == Currency.ARS:
            if not self.has_rate:
                raise ValueError("An exchange rate is required to convert ARS to USD")
            return quantize_money(value / self.exchange_rate)
        return value

    def from_usd(self, value: Decimal, currency: Union[Currency, str]) -> Decimal:
        """Convert a USD amount into *currency*."""
        value = value or Decimal("0")
        if currency == Currency.ARS:
            if not self.has_rate:
                raise ValueError("An exchange rate is required to convert USD to ARS")
            return quantize_money(value * self.exchange_rate)
        return value
