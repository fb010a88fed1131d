"""
String Helpers: Key Naming Convention Converter.

The backend speaks camelCase JSON; models and services use snake_case.
Incoming payloads are normalised with :func:`normalize_keys` at the
repository boundary and outgoing payloads are produced with
:func:`denormalize_keys`.  All key transformations flow through here.
"""

from __future__ import annotations

import re
from typing import Union, overload

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "JsonValue",
    "denormalize_keys",
    "normalize_keys",
    "to_camel_case",
    "to_snake_case",
]

# ---------------------------------------------------------------------------
# Recursive JSON value type
# ---------------------------------------------------------------------------

JsonValue = Union[
    str,
    int,
    float,
    bool,
    None,
    dict[str, "JsonValue"],
    list["JsonValue"],
]

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

# "MIMEType" -> "MIME_Type"
_RE_UPPER_RUN = re.compile(r"([A-Z]+)([A-Z][a-z])")

# "checkIn" -> "check_In"
_RE_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")

_RE_MULTI_UNDERSCORE = re.compile(r"_+")


# ---------------------------------------------------------------------------
# Case-conversion primitives
# ---------------------------------------------------------------------------


def to_snake_case(name: str) -> str:
    """Convert a camelCase or PascalCase key to snake_case.

    Examples from the sale wizard payloads::

        providerId        -> provider_id
        costProvider      -> cost_provider
        serviceTemplateId -> service_template_id
        checkIn           -> check_in
        _id               -> _id

    A single leading underscore (MongoDB-style ``_id``) is preserved.
    """
    leading = "_" if name.startswith("_") else ""
    body = name.lstrip("_")
    s1 = _RE_UPPER_RUN.sub(r"\1_\2", body)
    s2 = _RE_CAMEL_BOUNDARY.sub(r"\1_\2", s1)
    s3 = _RE_MULTI_UNDERSCORE.sub("_", s2)
    return leading + s3.lower()


def to_camel_case(name: str) -> str:
    """Convert a snake_case key to camelCase (``start_date`` -> ``startDate``).

    Keys without underscores are returned unchanged, as is a leading
    underscore.
    """
    leading = "_" if name.startswith("_") else ""
    head, *rest = name.lstrip("_").split("_")
    return leading + head + "".join(part[:1].upper() + part[1:] for part in rest if part)


# ---------------------------------------------------------------------------
# Recursive key-normalisation helpers
# ---------------------------------------------------------------------------


@overload
def normalize_keys(data: dict[str, JsonValue]) -> dict[str, JsonValue]: ...


@overload
def normalize_keys(data: list[JsonValue]) -> list[JsonValue]: ...


@overload
def normalize_keys(data: JsonValue) -> JsonValue: ...


def normalize_keys(
    data: Union[dict[str, JsonValue], list[JsonValue], JsonValue],
) -> Union[dict[str, JsonValue], list[JsonValue], JsonValue]:
    """Recursively convert all dictionary keys to snake_case."""
    if isinstance(data, dict):
        return {to_snake_case(k): normalize_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [normalize_keys(item) for item in data]
    return data


def denormalize_keys(
    data: Union[dict[str, JsonValue], list[JsonValue], JsonValue],
) -> Union[dict[str, JsonValue], list[JsonValue], JsonValue]:
    """Recursively convert all dictionary keys to camelCase for the backend."""
    if isinstance(data, dict):
        return {to_camel_case(k): denormalize_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [denormalize_keys(item) for item in data]
    return data
