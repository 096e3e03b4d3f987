"""Base administration."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType
from ..database import unit_of_work
from ..domain_errors import ConflictError
from ..models import Asset, MilitaryBase, Personnel, Transfer, User
from ..policies import MANAGE_BASES
from ..schemas import BaseCreate, BaseUpdate
from ..security import Identity, enforce, ensure_visible, in_base_scope, require_entity
from ..services import audit

logger = logging.getLogger(__name__)


def list_bases_use_case(*, db: Session, current_user: Identity) -> list[MilitaryBase]:
    query = db.query(MilitaryBase)
    if not current_user.is_admin:
        if current_user.base_id is None:
            return []
        query = query.filter(MilitaryBase.id == current_user.base_id)
    return query.order_by(MilitaryBase.name.asc()).all()


def get_base_use_case(*, db: Session, current_user: Identity, base_id: UUID) -> MilitaryBase:
    base = require_entity(db, MilitaryBase, entity_id=base_id, not_found="Base not found")
    ensure_visible(in_base_scope(current_user, base.id), "Base not found")
    return base


def create_base_use_case(*, db: Session, current_user: Identity, payload: BaseCreate) -> MilitaryBase:
    enforce(MANAGE_BASES, current_user)
    with unit_of_work(db):
        base = MilitaryBase(name=payload.name, location=payload.location)
        db.add(base)
        db.flush()
        audit.record(
            db,
            action=AuditAction.CREATE_BASE,
            entity_type=EntityType.BASE,
            entity_id=base.id,
            details={"name": base.name},
            user_id=current_user.id,
            base_id=base.id,
        )
    logger.info("Base %s created by user %s", base.id, current_user.id)
    return base


def update_base_use_case(*, db: Session, current_user: Identity, base_id: UUID, payload: BaseUpdate) -> MilitaryBase:
    enforce(MANAGE_BASES, current_user)
    changes = payload.model_dump(exclude_unset=True)
    with unit_of_work(db):
        base = require_entity(db, MilitaryBase, entity_id=base_id, not_found="Base not found")
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(base, field, value)
        db.flush()
        audit.record(
            db,
            action=AuditAction.UPDATE_BASE,
            entity_type=EntityType.BASE,
            entity_id=base.id,
            details=changes,
            user_id=current_user.id,
            base_id=base.id,
        )
    return base


def delete_base_use_case(*, db: Session, current_user: Identity, base_id: UUID) -> None:
    enforce(MANAGE_BASES, current_user)
    with unit_of_work(db):
        base = require_entity(db, MilitaryBase, entity_id=base_id, not_found="Base not found")
        references = (
            ("users", db.query(User.id).filter(User.base_id == base.id)),
            ("personnel", db.query(Personnel.id).filter(Personnel.base_id == base.id)),
            ("assets", db.query(Asset.id).filter(Asset.base_id == base.id)),
            (
                "transfers",
                db.query(Transfer.id).filter((Transfer.from_base_id == base.id) | (Transfer.to_base_id == base.id)),
            ),
        )
        for label, query in references:
            if query.first() is not None:
                raise ConflictError("Base is still in use", details={"referenced_by": label})
        audit.record(
            db,
            action=AuditAction.DELETE_BASE,
            entity_type=EntityType.BASE,
            entity_id=base.id,
            details={"name": base.name},
            user_id=current_user.id,
            base_id=base.id,
        )
        db.delete(base)
    logger.info("Base %s deleted by user %s", base_id, current_user.id)
