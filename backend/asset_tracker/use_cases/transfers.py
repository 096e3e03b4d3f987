"""Transfer workflow: PENDING -> APPROVED | REJECTED."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType, ReviewStatus
from ..database import unit_of_work
from ..domain_errors import InvalidStateError, validation_error
from ..models import Asset, MilitaryBase, Transfer, utcnow
from ..policies import REQUEST_TRANSFER, REVIEW_TRANSFER
from ..schemas import TransferCreate
from ..security import Identity, apply_base_scope, enforce, ensure_visible, in_base_scope, require_entity
from ..services import audit, ledger

logger = logging.getLogger(__name__)


def _ensure_pending(transfer: Transfer) -> None:
    if transfer.status != ReviewStatus.PENDING.value:
        raise InvalidStateError(
            f"Transfer is already {transfer.status.lower()}",
            details={"transfer_id": str(transfer.id), "status": transfer.status},
        )


def _execute_movement(db: Session, transfer: Transfer) -> Asset:
    """Move stock from the source asset row to the matching row at the destination."""
    source = ledger.decrease(db, transfer.asset_id, transfer.quantity)
    destination = ledger.find_or_create_at_base(
        db,
        name=source.name,
        equipment_type=source.equipment_type,
        condition=source.condition,
        base_id=transfer.to_base_id,
    )
    return ledger.increase(db, destination.id, transfer.quantity)


def create_transfer_use_case(*, db: Session, current_user: Identity, payload: TransferCreate) -> Transfer:
    enforce(REQUEST_TRANSFER, current_user, payload)
    quantity = ledger.validate_quantity(payload.quantity)
    if payload.from_base_id == payload.to_base_id:
        raise validation_error("Source and destination bases must differ")

    with unit_of_work(db):
        require_entity(db, MilitaryBase, entity_id=payload.from_base_id, not_found="Source base not found")
        require_entity(db, MilitaryBase, entity_id=payload.to_base_id, not_found="Destination base not found")
        asset = ledger.lock_asset(db, payload.asset_id)
        if asset.base_id != payload.from_base_id:
            raise validation_error(
                "Asset is not held at the source base",
                details={"asset_id": str(asset.id), "from_base_id": str(payload.from_base_id)},
            )
        ledger.ensure_stock(asset, quantity)

        transfer = Transfer(
            asset_id=asset.id,
            from_base_id=payload.from_base_id,
            to_base_id=payload.to_base_id,
            quantity=quantity,
            status=ReviewStatus.PENDING.value,
            requested_by=current_user.id,
        )
        db.add(transfer)
        db.flush()
        audit.record(
            db,
            action=AuditAction.TRANSFER_REQUEST,
            entity_type=EntityType.TRANSFER,
            entity_id=transfer.id,
            details={"asset": asset.name, "quantity": quantity, "to_base_id": payload.to_base_id},
            user_id=current_user.id,
            base_id=transfer.from_base_id,
        )

        # Transfers raised by an administrator need no second signature.
        if current_user.is_admin:
            transfer.status = ReviewStatus.APPROVED.value
            transfer.approved_by = current_user.id
            transfer.approved_at = utcnow()
            _execute_movement(db, transfer)
            audit.record(
                db,
                action=AuditAction.TRANSFER_APPROVED,
                entity_type=EntityType.TRANSFER,
                entity_id=transfer.id,
                details={"quantity": quantity, "auto_approved": True},
                user_id=current_user.id,
                base_id=transfer.to_base_id,
            )

    logger.info(
        "Transfer %s created status=%s by user %s", transfer.id, transfer.status, current_user.id,
    )
    return transfer


def approve_transfer_use_case(*, db: Session, current_user: Identity, transfer_id: UUID) -> Transfer:
    with unit_of_work(db):
        transfer = require_entity(db, Transfer, entity_id=transfer_id, not_found="Transfer not found", for_update=True)
        enforce(REVIEW_TRANSFER, current_user, transfer)
        _ensure_pending(transfer)

        transfer.status = ReviewStatus.APPROVED.value
        transfer.approved_by = current_user.id
        transfer.approved_at = utcnow()
        # decrease() re-checks stock under the row lock; stock may have moved since the request.
        _execute_movement(db, transfer)
        audit.record(
            db,
            action=AuditAction.TRANSFER_APPROVED,
            entity_type=EntityType.TRANSFER,
            entity_id=transfer.id,
            details={"quantity": transfer.quantity, "from_base_id": transfer.from_base_id},
            user_id=current_user.id,
            base_id=transfer.to_base_id,
        )

    logger.info("Transfer %s approved by user %s", transfer.id, current_user.id)
    return transfer


def reject_transfer_use_case(*, db: Session, current_user: Identity, transfer_id: UUID) -> Transfer:
    with unit_of_work(db):
        transfer = require_entity(db, Transfer, entity_id=transfer_id, not_found="Transfer not found", for_update=True)
        enforce(REVIEW_TRANSFER, current_user, transfer)
        _ensure_pending(transfer)

        transfer.status = ReviewStatus.REJECTED.value
        transfer.rejected_by = current_user.id
        transfer.rejected_at = utcnow()
        db.flush()
        audit.record(
            db,
            action=AuditAction.TRANSFER_REJECTED,
            entity_type=EntityType.TRANSFER,
            entity_id=transfer.id,
            details={"quantity": transfer.quantity},
            user_id=current_user.id,
            base_id=transfer.to_base_id,
        )

    logger.info("Transfer %s rejected by user %s", transfer.id, current_user.id)
    return transfer


def list_transfers_use_case(
    *,
    db: Session,
    current_user: Identity,
    status: ReviewStatus | None = None,
) -> list[Transfer]:
    query = apply_base_scope(db.query(Transfer), current_user, Transfer.from_base_id, Transfer.to_base_id)
    if status is not None:
        query = query.filter(Transfer.status == ReviewStatus(status).value)
    return query.order_by(Transfer.created_at.desc()).all()


def get_transfer_use_case(*, db: Session, current_user: Identity, transfer_id: UUID) -> Transfer:
    transfer = require_entity(db, Transfer, entity_id=transfer_id, not_found="Transfer not found")
    ensure_visible(in_base_scope(current_user, transfer.from_base_id, transfer.to_base_id), "Transfer not found")
    return transfer
