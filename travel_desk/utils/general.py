"""General Utility Functions."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Protocol, Union, runtime_checkable

__all__ = ["convert_to_json_safe"]


JsonSafeType = Union[
    None,
    str,
    int,
    bool,
    float,
    Dict[str, "JsonSafeType"],
    List["JsonSafeType"],
]


@runtime_checkable
class PydanticLike(Protocol):
    """Protocol for objects that expose a Pydantic-style ``model_dump`` method."""

    def model_dump(self) -> Dict[str, "JsonInputType"]: ...  # noqa: E704


JsonInputType = Union[
    None,
    str,
    int,
    bool,
    float,
    Decimal,
    datetime,
    date,
    Enum,
    Dict[str, "JsonInputType"],
    List["JsonInputType"],
    PydanticLike,
]


def convert_to_json_safe(data: JsonInputType) -> JsonSafeType:
    """Recursively convert a data structure to JSON-safe types.

    Handles:
    - ``datetime`` / ``date`` objects -> ISO-format strings
    - ``Decimal`` -> ``float``
    - ``StrEnum`` members -> their value
    - ``float`` NaN / Inf -> ``None``
    - Nested dicts, lists and tuples
    - Pydantic models (via ``.model_dump()``)
    """
    if data is None:
        return None

    # StrEnum members are also ``str``; unwrap them first.
    if isinstance(data, Enum):
        return convert_to_json_safe(data.value)

    if isinstance(data, (str, int, bool)):
        return data

    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            return None
        return data

    if isinstance(data, Decimal):
        if data.is_nan() or data.is_infinite():
            return None
        return float(data)

    # datetime MUST be checked before date because datetime is a subclass of date.
    if isinstance(data, datetime):
        return data.isoformat()

    if isinstance(data, date):
        return data.isoformat()

    if isinstance(data, dict):
        return {key: convert_to_json_safe(value) for key, value in data.items()}

    if isinstance(data, (list, tuple)):
        return [convert_to_json_safe(item) for item in data]

    if isinstance(data, PydanticLike):
        return convert_to_json_safe(data.model_dump())

    return str(data)
