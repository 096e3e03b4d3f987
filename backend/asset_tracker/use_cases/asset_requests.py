"""Asset requests raised by personnel and reviewed by issuing staff."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType, ReviewStatus, Role
from ..database import unit_of_work
from ..domain_errors import InvalidStateError, NotFoundError
from ..models import Asset, AssetRequest, Assignment, Personnel, User, utcnow
from ..policies import APPROVE_REQUEST, REJECT_REQUEST, REQUEST_ASSETS
from ..schemas import AssetRequestCreate
from ..security import Identity, apply_base_scope, enforce, require_entity
from ..services import audit, ledger
from .assignments import open_assignment

logger = logging.getLogger(__name__)


def _lock_request(db: Session, request_id: UUID) -> AssetRequest:
    return require_entity(db, AssetRequest, entity_id=request_id, not_found="Request not found", for_update=True)


def _ensure_pending(request: AssetRequest) -> None:
    if request.status != ReviewStatus.PENDING.value:
        raise InvalidStateError(
            f"Request is already {request.status.lower()}",
            details={"request_id": str(request.id), "status": request.status},
        )


def create_request_use_case(*, db: Session, current_user: Identity, payload: AssetRequestCreate) -> AssetRequest:
    enforce(REQUEST_ASSETS, current_user)
    quantity = ledger.validate_quantity(payload.quantity)

    with unit_of_work(db):
        asset = require_entity(db, Asset, entity_id=payload.asset_id, not_found="Asset not found")
        request = AssetRequest(
            asset_id=asset.id,
            requested_by=current_user.id,
            quantity=quantity,
            reason=payload.reason,
            status=ReviewStatus.PENDING.value,
        )
        db.add(request)
        db.flush()
        audit.record(
            db,
            action=AuditAction.ASSET_REQUEST,
            entity_type=EntityType.ASSET_REQUEST,
            entity_id=request.id,
            details={"asset": asset.name, "quantity": quantity},
            user_id=current_user.id,
            base_id=current_user.base_id,
        )

    logger.info("Asset request %s created by user %s", request.id, current_user.id)
    return request


def approve_request_use_case(
    *,
    db: Session,
    current_user: Identity,
    request_id: UUID,
) -> tuple[AssetRequest, Assignment]:
    """Approve a pending request and issue the stock to the requester.

    The requester must have a linked personnel record; without one the
    approval fails and the request stays pending.
    """
    with unit_of_work(db):
        request = _lock_request(db, request_id)
        requester = require_entity(db, User, entity_id=request.requested_by, not_found="Requester not found")
        # Scope is the requester's base, not where the asset sits.
        enforce(APPROVE_REQUEST, current_user, requester)
        _ensure_pending(request)

        asset = ledger.lock_asset(db, request.asset_id)
        ledger.ensure_stock(asset, request.quantity)
        personnel = db.query(Personnel).filter(Personnel.user_id == requester.id).first()
        if personnel is None:
            raise NotFoundError(
                "No personnel record is linked to the requesting user",
                details={"user_id": str(requester.id)},
            )

        request.status = ReviewStatus.APPROVED.value
        request.reviewed_by = current_user.id
        request.reviewed_at = utcnow()
        assignment = open_assignment(
            db,
            asset_id=asset.id,
            personnel=personnel,
            quantity=request.quantity,
            issued_by=current_user.id,
            request_id=request.id,
        )
        audit.record(
            db,
            action=AuditAction.REQUEST_APPROVED,
            entity_type=EntityType.ASSET_REQUEST,
            entity_id=request.id,
            details={"assignment_id": assignment.id, "quantity": request.quantity},
            user_id=current_user.id,
            base_id=requester.base_id,
        )

    logger.info(
        "Asset request %s approved by user %s, assignment %s", request.id, current_user.id, assignment.id,
    )
    return request, assignment


def reject_request_use_case(
    *,
    db: Session,
    current_user: Identity,
    request_id: UUID,
    reason: str | None = None,
) -> AssetRequest:
    enforce(REJECT_REQUEST, current_user)

    with unit_of_work(db):
        request = _lock_request(db, request_id)
        _ensure_pending(request)
        request.status = ReviewStatus.REJECTED.value
        request.reviewed_by = current_user.id
        request.reviewed_at = utcnow()
        request.review_reason = reason
        db.flush()
        requester = db.get(User, request.requested_by)
        audit.record(
            db,
            action=AuditAction.REQUEST_REJECTED,
            entity_type=EntityType.ASSET_REQUEST,
            entity_id=request.id,
            details={"reason": reason},
            user_id=current_user.id,
            base_id=requester.base_id if requester is not None else None,
        )

    logger.info("Asset request %s rejected by user %s", request.id, current_user.id)
    return request


def list_requests_use_case(
    *,
    db: Session,
    current_user: Identity,
    status: ReviewStatus | None = None,
) -> list[AssetRequest]:
    query = db.query(AssetRequest)
    if current_user.role == Role.PERSONNEL:
        query = query.filter(AssetRequest.requested_by == current_user.id)
    else:
        query = query.join(User, AssetRequest.requested_by == User.id)
        query = apply_base_scope(query, current_user, User.base_id)
    if status is not None:
        query = query.filter(AssetRequest.status == ReviewStatus(status).value)
    return query.order_by(AssetRequest.created_at.desc()).all()
