"""Audit log endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..constants import EntityType
from ..database import get_db
from ..schemas import AuditLogResponse
from ..security import Identity
from ..use_cases.audit_logs import list_audit_logs_use_case

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("", response_model=list[AuditLogResponse])
def get_audit_logs(
    entity_type: Optional[EntityType] = None,
    limit: Optional[int] = Query(None, ge=1),
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Recent audit entries, newest first."""
    return list_audit_logs_use_case(db=db, current_user=current_user, entity_type=entity_type, limit=limit)
