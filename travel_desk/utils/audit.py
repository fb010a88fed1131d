"""
Structured Audit Logging Utility.

Every server-side record created by the wizard (service templates, sale
services) is logged as one structured JSON audit line.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from travel_desk.logger import StructuredLogger

__all__ = ["AuditEvent", "log_audit_event"]

# Flat scalars only; nested structures should be modelled explicitly.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit trail entry."""

    timestamp: str
    action: str
    entity_type: str
    entity_id: str
    sale_id: Optional[str] = None
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    sale_id: Optional[str] = None,
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Validate and emit an audit event through *logger*.

    Args:
        logger: The logger instance to write to.
        action: What happened (e.g. ``"CREATE"``).
        entity_type: Type of entity affected (e.g. ``"ServiceTemplate"``,
            ``"SaleService"``).
        entity_id: Server id of the affected entity.
        sale_id: The sale the entity belongs to, when there is one.
        details: Optional additional context.

    Returns:
        The validated event, mostly useful to tests.
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        sale_id=sale_id,
        details=details or {},
    )
    logger.info(
        "AUDIT: %s",
        json.dumps(event.model_dump(), default=str),
        extra={"sale_id": sale_id} if sale_id else None,
    )
    return event
