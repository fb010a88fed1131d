"""
Error Taxonomy.

Exceptions raised by the pure domain functions and the API client.
Services translate these into ``ServiceResult`` envelopes at their
boundary; pure functions let them propagate.
"""

from __future__ import annotations

from typing import Optional


class WizardError(Exception):
    """Base class for every domain error raised by the sale wizard core."""


class StepValidationError(WizardError, ValueError):
    """A required field for the current wizard step is missing or invalid.

    Non-fatal: the message is shown inline and the user may retry.
    """


class ProviderCapExceeded(WizardError):
    """A provider would be (or already is) assigned more times than allowed."""

    def __init__(self, provider_id: str, count: int, limit: int, message: Optional[str] = None) -> None:
        self.provider_id = provider_id
        self.count = count
        self.limit = limit
        super().__init__(
            message
            or (
                f"Provider '{provider_id}' is assigned {count} times; "
                f"the limit is {limit} across all services."
            )
        )


class MissingProviderReference(WizardError):
    """A provider assignment has no resolvable provider id at persistence time."""

    def __init__(self, line_item_id: str, message: Optional[str] = None) -> None:
        self.line_item_id = line_item_id
        super().__init__(
            message or f"Service '{line_item_id}' has a provider assignment without a provider id."
        )


class ApiError(WizardError):
    """The backend rejected a request or could not be reached.

    ``message`` is the backend's ``message`` field when one was returned.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class TemplateReconciliationFailure(WizardError):
    """Creating a missing service template failed; the submission is aborted."""

    def __init__(self, template_name: str, message: str) -> None:
        self.template_name = template_name
        self.message = message
        super().__init__(f"Could not create service template '{template_name}': {message}")


class PersistenceFailure(WizardError):
    """A single line item could not be persisted."""

    def __init__(self, line_item_id: str, message: str, status_code: Optional[int] = None) -> None:
        self.line_item_id = line_item_id
        self.message = message
        self.status_code = status_code
        super().__init__(message)
