"""
Shared Enumerations for Travel Desk Models.

StrEnum values compare equal to their string equivalents, so payloads
coming back from the backend (``"USD"``) match without conversion.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Currency(StrEnum):
    """Supported currencies.

    ARS amounts are converted with a user-supplied rate expressed as
    ``1 USD = <rate> ARS``; no market data is fetched.
    """

    USD = "USD"
    ARS = "ARS"


class WizardStep(IntEnum):
    """Linear states of the sale-service composition wizard."""

    SELECT_TEMPLATE = 1
    DATES_AND_DESTINATION = 2
    COST_AND_PROVIDERS = 3
    REVIEW = 4


class ResolutionStatus(StrEnum):
    """Outcome of matching a line item against the server's templates."""

    FOUND = "FOUND"
    NEEDS_CREATION = "NEEDS_CREATION"
