"""
Service Template Models.

Templates and service types are owned by the backend.  A *mock* template is
a client-side placeholder for a label that has no backing template yet; it
is reconciled by name before persistence.
"""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

MOCK_TEMPLATE_PREFIX: str = "mock-"


class ServiceTemplate(BaseModel):
    """A reusable service definition (e.g. "Hotel", "Transfer")."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    description: str = ""
    category: str = ""

    @property
    def is_mock(self) -> bool:
        return self.id.startswith(MOCK_TEMPLATE_PREFIX)

    @classmethod
    def mock(cls, name: str, category: str = "", description: str = "") -> "ServiceTemplate":
        """Placeholder template for a label the server does not know yet."""
        return cls(
            id=f"{MOCK_TEMPLATE_PREFIX}{uuid.uuid4().hex}",
            name=name.strip(),
            category=category,
            description=description,
        )


class ServiceType(BaseModel):
    """A service category managed by administrators."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    description: Optional[str] = None
    active: bool = Field(default=True, validation_alias=AliasChoices("active", "is_active"))
