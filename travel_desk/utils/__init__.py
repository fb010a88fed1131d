"""Shared utility functions for the Travel Desk wizard core.

Convenience re-exports so consumers can import directly from
``travel_desk.utils`` while full module paths remain supported.
"""

from travel_desk.utils.audit import AuditEvent, log_audit_event
from travel_desk.utils.general import convert_to_json_safe
from travel_desk.utils.string_helpers import (
    denormalize_keys,
    normalize_keys,
    to_camel_case,
    to_snake_case,
)

__all__ = [
    "AuditEvent",
    "convert_to_json_safe",
    "denormalize_keys",
    "log_audit_event",
    "normalize_keys",
    "to_camel_case",
    "to_snake_case",
]
