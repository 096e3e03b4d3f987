"""Append-only audit trail.

Entries are written inside the same transaction as the change they describe.
If the append fails the enclosing unit of work rolls back with it. Nothing in
the service updates or deletes an existing entry.
"""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType
from ..models import AuditLog


def _serialize_details(details: Any) -> str | None:
    if details is None or isinstance(details, str):
        return details
    return json.dumps(details, default=str, sort_keys=True)


def record(
    db: Session,
    *,
    action: AuditAction,
    entity_type: EntityType,
    entity_id: UUID,
    details: Any = None,
    user_id: UUID | None = None,
    base_id: UUID | None = None,
) -> AuditLog:
    entry = AuditLog(
        action=AuditAction(action).value,
        entity_type=EntityType(entity_type).value,
        entity_id=entity_id,
        details=_serialize_details(details),
        user_id=user_id,
        base_id=base_id,
    )
    db.add(entry)
    db.flush()
    return entry
