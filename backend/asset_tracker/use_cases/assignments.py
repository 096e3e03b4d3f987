"""Issue and return of assets to personnel."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType, Role
from ..database import unit_of_work
from ..domain_errors import InvalidStateError
from ..models import Assignment, Personnel, utcnow
from ..policies import ISSUE_ASSETS, RECEIVE_RETURN
from ..schemas import AssignmentCreate
from ..security import Identity, apply_base_scope, enforce, require_entity
from ..services import audit, ledger

logger = logging.getLogger(__name__)


def open_assignment(
    db: Session,
    *,
    asset_id: UUID,
    personnel: Personnel,
    quantity: int,
    issued_by: UUID,
    request_id: UUID | None = None,
) -> Assignment:
    """Decrease stock and create the open assignment in the caller's unit of work."""
    ledger.decrease(db, asset_id, quantity)
    assignment = Assignment(
        asset_id=asset_id,
        personnel_id=personnel.id,
        quantity=quantity,
        issued_by=issued_by,
        request_id=request_id,
        issued_at=utcnow(),
    )
    db.add(assignment)
    db.flush()
    return assignment


def issue_asset_use_case(*, db: Session, current_user: Identity, payload: AssignmentCreate) -> Assignment:
    enforce(ISSUE_ASSETS, current_user)
    quantity = ledger.validate_quantity(payload.quantity)

    with unit_of_work(db):
        personnel = require_entity(db, Personnel, entity_id=payload.personnel_id, not_found="Personnel not found")
        enforce(ISSUE_ASSETS, current_user, personnel)
        asset = ledger.lock_asset(db, payload.asset_id)
        # The asset's base must be in scope as well.
        enforce(ISSUE_ASSETS, current_user, asset)
        ledger.ensure_stock(asset, quantity)

        assignment = open_assignment(
            db,
            asset_id=asset.id,
            personnel=personnel,
            quantity=quantity,
            issued_by=current_user.id,
        )
        audit.record(
            db,
            action=AuditAction.ISSUE_ASSET,
            entity_type=EntityType.ASSIGNMENT,
            entity_id=assignment.id,
            details={"asset": asset.name, "quantity": quantity, "personnel": personnel.name},
            user_id=current_user.id,
            base_id=personnel.base_id,
        )

    logger.info(
        "Assignment %s issued qty=%s to personnel %s by user %s",
        assignment.id, quantity, personnel.id, current_user.id,
    )
    return assignment


def return_assignment_use_case(*, db: Session, current_user: Identity, assignment_id: UUID) -> Assignment:
    with unit_of_work(db):
        assignment = require_entity(
            db, Assignment, entity_id=assignment_id, not_found="Assignment not found", for_update=True,
        )
        enforce(RECEIVE_RETURN, current_user, assignment)
        if not assignment.is_open:
            raise InvalidStateError("Assignment already returned", details={"assignment_id": str(assignment.id)})

        assignment.returned_at = utcnow()
        assignment.returned_to = current_user.id
        # Restores exactly what was issued, to the row it was issued from.
        ledger.increase(db, assignment.asset_id, assignment.quantity)
        audit.record(
            db,
            action=AuditAction.RETURN_ASSET,
            entity_type=EntityType.ASSIGNMENT,
            entity_id=assignment.id,
            details={"quantity": assignment.quantity},
            user_id=current_user.id,
            base_id=assignment.personnel.base_id if assignment.personnel is not None else None,
        )

    logger.info("Assignment %s returned by user %s", assignment.id, current_user.id)
    return assignment


def list_assignments_use_case(
    *,
    db: Session,
    current_user: Identity,
    include_returned: bool = False,
) -> list[Assignment]:
    query = db.query(Assignment).join(Personnel, Assignment.personnel_id == Personnel.id)
    if current_user.role == Role.PERSONNEL:
        query = query.filter(Personnel.user_id == current_user.id)
    else:
        query = apply_base_scope(query, current_user, Personnel.base_id)
    if not include_returned:
        query = query.filter(Assignment.returned_at.is_(None))
    return query.order_by(Assignment.issued_at.desc()).all()
