"""Personnel records."""
from __future__ import annotations

import logging
from types import SimpleNamespace
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType, Role
from ..database import unit_of_work
from ..domain_errors import ConflictError, validation_error
from ..models import MilitaryBase, Personnel, User
from ..policies import CREATE_PERSONNEL, UPDATE_PERSONNEL
from ..schemas import PersonnelCreate, PersonnelUpdate
from ..security import Identity, apply_base_scope, enforce, ensure_visible, in_base_scope, require_entity
from ..services import audit

logger = logging.getLogger(__name__)


def _ensure_user_linkable(db: Session, user_id: UUID, *, personnel_id: UUID | None = None) -> None:
    require_entity(db, User, entity_id=user_id, not_found="Linked user not found")
    query = db.query(Personnel.id).filter(Personnel.user_id == user_id)
    if personnel_id is not None:
        query = query.filter(Personnel.id != personnel_id)
    if query.first() is not None:
        raise ConflictError("User is already linked to another personnel record", details={"user_id": str(user_id)})


def list_personnel_use_case(*, db: Session, current_user: Identity) -> list[Personnel]:
    query = db.query(Personnel)
    if current_user.role == Role.PERSONNEL:
        query = query.filter(Personnel.user_id == current_user.id)
    else:
        query = apply_base_scope(query, current_user, Personnel.base_id)
    return query.order_by(Personnel.name.asc()).all()


def get_personnel_use_case(*, db: Session, current_user: Identity, personnel_id: UUID) -> Personnel:
    personnel = require_entity(db, Personnel, entity_id=personnel_id, not_found="Personnel not found")
    if current_user.role == Role.PERSONNEL:
        visible = personnel.user_id == current_user.id
    else:
        visible = in_base_scope(current_user, personnel.base_id)
    ensure_visible(visible, "Personnel not found")
    return personnel


def create_personnel_use_case(*, db: Session, current_user: Identity, payload: PersonnelCreate) -> Personnel:
    base_id = payload.base_id
    if base_id is None and not current_user.is_admin:
        base_id = current_user.base_id
    enforce(CREATE_PERSONNEL, current_user, SimpleNamespace(base_id=base_id))

    with unit_of_work(db):
        if base_id is not None:
            require_entity(db, MilitaryBase, entity_id=base_id, not_found="Base not found")
        if payload.user_id is not None:
            _ensure_user_linkable(db, payload.user_id)
        personnel = Personnel(name=payload.name, rank=payload.rank, user_id=payload.user_id, base_id=base_id)
        db.add(personnel)
        db.flush()
        audit.record(
            db,
            action=AuditAction.CREATE_PERSONNEL,
            entity_type=EntityType.PERSONNEL,
            entity_id=personnel.id,
            details={"name": personnel.name, "rank": personnel.rank},
            user_id=current_user.id,
            base_id=personnel.base_id,
        )

    logger.info("Personnel %s created by user %s", personnel.id, current_user.id)
    return personnel


def update_personnel_use_case(
    *,
    db: Session,
    current_user: Identity,
    personnel_id: UUID,
    payload: PersonnelUpdate,
) -> Personnel:
    changes = payload.model_dump(exclude_unset=True)

    with unit_of_work(db):
        personnel = require_entity(db, Personnel, entity_id=personnel_id, not_found="Personnel not found")
        enforce(UPDATE_PERSONNEL, current_user, personnel)
        if "base_id" in changes and changes["base_id"] != personnel.base_id:
            if not current_user.is_admin:
                raise validation_error("Only an administrator can move personnel between bases")
            if changes["base_id"] is not None:
                require_entity(db, MilitaryBase, entity_id=changes["base_id"], not_found="Base not found")
        if changes.get("user_id") is not None:
            _ensure_user_linkable(db, changes["user_id"], personnel_id=personnel.id)
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(personnel, field, value)
        db.flush()
        audit.record(
            db,
            action=AuditAction.UPDATE_PERSONNEL,
            entity_type=EntityType.PERSONNEL,
            entity_id=personnel.id,
            details=changes,
            user_id=current_user.id,
            base_id=personnel.base_id,
        )
    return personnel
