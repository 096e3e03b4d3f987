"""Audit trail read model."""
from __future__ import annotations

from sqlalchemy.orm import Session

from ..config import settings
from ..constants import EntityType
from ..models import AuditLog
from ..policies import VIEW_AUDIT_LOGS
from ..security import Identity, apply_base_scope, enforce


def list_audit_logs_use_case(
    *,
    db: Session,
    current_user: Identity,
    entity_type: EntityType | None = None,
    limit: int | None = None,
) -> list[AuditLog]:
    """Newest entries first; base commanders only see entries about their own base."""
    enforce(VIEW_AUDIT_LOGS, current_user)
    page_size = min(limit or settings.AUDIT_LOG_LIMIT, settings.AUDIT_LOG_LIMIT)
    query = apply_base_scope(db.query(AuditLog), current_user, AuditLog.base_id)
    if entity_type is not None:
        query = query.filter(AuditLog.entity_type == EntityType(entity_type).value)
    return query.order_by(AuditLog.timestamp.desc()).limit(page_size).all()
