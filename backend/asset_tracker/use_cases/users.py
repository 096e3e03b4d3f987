"""User administration (ADMIN only)."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..auth import get_password_hash, validate_new_password
from ..constants import AuditAction, EntityType, Role
from ..database import unit_of_work
from ..domain_errors import ConflictError, validation_error
from ..models import MilitaryBase, Personnel, User
from ..policies import MANAGE_USERS
from ..schemas import UserCreate, UserUpdate
from ..security import Identity, enforce, require_entity
from ..services import audit

logger = logging.getLogger(__name__)


def _validate_role_base(db: Session, role: Role, base_id: UUID | None) -> None:
    if role != Role.ADMIN and base_id is None:
        raise validation_error(f"Role {role.value} requires a base")
    if base_id is not None:
        require_entity(db, MilitaryBase, entity_id=base_id, not_found="Base not found")


def list_users_use_case(*, db: Session, current_user: Identity) -> list[User]:
    enforce(MANAGE_USERS, current_user)
    return db.query(User).order_by(User.username.asc()).all()


def create_user_use_case(*, db: Session, current_user: Identity, payload: UserCreate) -> User:
    enforce(MANAGE_USERS, current_user)
    validate_new_password(new_password=payload.password, username=payload.username)

    with unit_of_work(db):
        if db.query(User.id).filter(User.username == payload.username).first() is not None:
            raise ConflictError("Username already exists", details={"username": payload.username})
        _validate_role_base(db, payload.role, payload.base_id)
        user = User(
            username=payload.username,
            password_hash=get_password_hash(payload.password),
            full_name=payload.full_name,
            role=payload.role.value,
            base_id=payload.base_id,
            is_active=True,
        )
        db.add(user)
        db.flush()
        audit.record(
            db,
            action=AuditAction.CREATE_USER,
            entity_type=EntityType.USER,
            entity_id=user.id,
            details={"username": user.username, "role": user.role},
            user_id=current_user.id,
            base_id=user.base_id,
        )

    logger.info("User %s (%s) created by user %s", user.id, user.role, current_user.id)
    return user


def update_user_use_case(*, db: Session, current_user: Identity, user_id: UUID, payload: UserUpdate) -> User:
    enforce(MANAGE_USERS, current_user)
    changes = payload.model_dump(exclude_unset=True)

    with unit_of_work(db):
        user = require_entity(db, User, entity_id=user_id, not_found="User not found")
        role = Role(changes["role"]) if changes.get("role") is not None else Role(user.role)
        base_id = changes["base_id"] if "base_id" in changes else user.base_id
        _validate_role_base(db, role, base_id)

        user.role = role.value
        user.base_id = base_id
        if "full_name" in changes:
            user.full_name = changes["full_name"]
        if changes.get("is_active") is not None:
            if user.id == current_user.id and not changes["is_active"]:
                raise validation_error("You cannot deactivate your own account")
            user.is_active = changes["is_active"]
        if changes.get("password"):
            validate_new_password(new_password=changes["password"], username=user.username)
            user.password_hash = get_password_hash(changes["password"])
        db.flush()
        audit.record(
            db,
            action=AuditAction.UPDATE_USER,
            entity_type=EntityType.USER,
            entity_id=user.id,
            details={key: value for key, value in changes.items() if key != "password"},
            user_id=current_user.id,
            base_id=user.base_id,
        )
    return user


def delete_user_use_case(*, db: Session, current_user: Identity, user_id: UUID) -> User:
    """Deactivate a user and detach any personnel record linked to it.

    The row is kept so audit entries and workflow stamps still resolve.
    """
    enforce(MANAGE_USERS, current_user)
    if user_id == current_user.id:
        raise validation_error("You cannot delete your own account")

    with unit_of_work(db):
        user = require_entity(db, User, entity_id=user_id, not_found="User not found")
        unlinked = (
            db.query(Personnel)
            .filter(Personnel.user_id == user.id)
            .update({Personnel.user_id: None}, synchronize_session="fetch")
        )
        user.is_active = False
        db.flush()
        audit.record(
            db,
            action=AuditAction.DELETE_USER,
            entity_type=EntityType.USER,
            entity_id=user.id,
            details={"username": user.username, "unlinked_personnel": unlinked},
            user_id=current_user.id,
            base_id=user.base_id,
        )

    logger.info("User %s deactivated by user %s", user.id, current_user.id)
    return user
