"""Role-aware dashboard figures."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..constants import EquipmentType, ReviewStatus, Role
from ..models import Asset, AssetRequest, Assignment, Personnel, Purchase, Transfer, User
from ..schemas import AssignmentResponse, BaseDashboard, PersonnelDashboard
from ..security import Identity


def _sum_quantity(query) -> int:
    return int(query.scalar() or 0)


def _personnel_dashboard(db: Session, current_user: Identity) -> PersonnelDashboard:
    pending_requests = (
        db.query(func.count(AssetRequest.id))
        .filter(AssetRequest.requested_by == current_user.id, AssetRequest.status == ReviewStatus.PENDING.value)
        .scalar()
    )
    assignments = (
        db.query(Assignment)
        .join(Personnel, Assignment.personnel_id == Personnel.id)
        .filter(Personnel.user_id == current_user.id, Assignment.returned_at.is_(None))
        .order_by(Assignment.issued_at.desc())
        .all()
    )
    return PersonnelDashboard(
        open_assignments=len(assignments),
        pending_requests=int(pending_requests or 0),
        assignments=[AssignmentResponse.model_validate(item) for item in assignments],
    )


def _base_dashboard(
    db: Session,
    current_user: Identity,
    *,
    base_id: UUID | None,
    equipment_type: EquipmentType | None,
    start: datetime | None,
    end: datetime | None,
) -> BaseDashboard:
    effective_base = base_id if current_user.is_admin else current_user.base_id
    type_value = EquipmentType(equipment_type).value if equipment_type is not None else None
    if effective_base is None and not current_user.is_admin:
        # A non-admin without a base has nothing in scope.
        return BaseDashboard(
            base_id=None,
            equipment_type=type_value,
            opening_balance=0,
            closing_balance=0,
            net_movement=0,
            purchases=0,
            transfers_in=0,
            transfers_out=0,
            assigned=0,
            pending_transfers=0,
            pending_requests=0,
        )

    def scoped(query, asset_column, base_column, *, dated=None):
        query = query.join(Asset, Asset.id == asset_column)
        if effective_base is not None:
            query = query.filter(base_column == effective_base)
        if type_value is not None:
            query = query.filter(Asset.equipment_type == type_value)
        if dated is not None and start is not None:
            query = query.filter(dated >= start)
        if dated is not None and end is not None:
            query = query.filter(dated <= end)
        return query

    closing_query = db.query(func.sum(Asset.quantity))
    if effective_base is not None:
        closing_query = closing_query.filter(Asset.base_id == effective_base)
    if type_value is not None:
        closing_query = closing_query.filter(Asset.equipment_type == type_value)
    closing_balance = _sum_quantity(closing_query)

    assigned_query = (
        db.query(func.sum(Assignment.quantity))
        .select_from(Assignment)
        .join(Asset, Asset.id == Assignment.asset_id)
        .join(Personnel, Personnel.id == Assignment.personnel_id)
        .filter(Assignment.returned_at.is_(None))
    )
    if effective_base is not None:
        assigned_query = assigned_query.filter(Personnel.base_id == effective_base)
    if type_value is not None:
        assigned_query = assigned_query.filter(Asset.equipment_type == type_value)
    assigned = _sum_quantity(assigned_query)

    purchases = _sum_quantity(
        scoped(
            db.query(func.sum(Purchase.quantity)).select_from(Purchase),
            Purchase.asset_id,
            Purchase.base_id,
            dated=Purchase.created_at,
        )
    )
    approved = db.query(func.sum(Transfer.quantity)).select_from(Transfer).filter(
        Transfer.status == ReviewStatus.APPROVED.value,
    )
    transfers_in = _sum_quantity(scoped(approved, Transfer.asset_id, Transfer.to_base_id, dated=Transfer.approved_at))
    transfers_out = _sum_quantity(scoped(approved, Transfer.asset_id, Transfer.from_base_id, dated=Transfer.approved_at))
    if effective_base is None:
        # Organisation-wide view: inter-base moves cancel out.
        transfers_in = transfers_out = 0

    pending_transfers = 0
    if current_user.role in (Role.ADMIN, Role.BASE_COMMANDER):
        pending_query = db.query(func.count(Transfer.id)).filter(Transfer.status == ReviewStatus.PENDING.value)
        if current_user.role == Role.BASE_COMMANDER:
            pending_query = pending_query.filter(Transfer.to_base_id == current_user.base_id)
        pending_transfers = int(pending_query.scalar() or 0)

    pending_requests = 0
    if current_user.role in (Role.ADMIN, Role.LOGISTICS_OFFICER):
        request_query = db.query(func.count(AssetRequest.id)).filter(
            AssetRequest.status == ReviewStatus.PENDING.value,
        )
        if current_user.role == Role.LOGISTICS_OFFICER:
            request_query = request_query.join(User, User.id == AssetRequest.requested_by).filter(
                User.base_id == current_user.base_id,
            )
        pending_requests = int(request_query.scalar() or 0)

    net_movement = purchases + transfers_in - transfers_out
    return BaseDashboard(
        base_id=effective_base,
        equipment_type=type_value,
        opening_balance=closing_balance - net_movement,
        closing_balance=closing_balance,
        net_movement=net_movement,
        purchases=purchases,
        transfers_in=transfers_in,
        transfers_out=transfers_out,
        assigned=assigned,
        pending_transfers=pending_transfers,
        pending_requests=pending_requests,
    )


def get_dashboard_use_case(
    *,
    db: Session,
    current_user: Identity,
    base_id: UUID | None = None,
    equipment_type: EquipmentType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> PersonnelDashboard | BaseDashboard:
    if current_user.role == Role.PERSONNEL:
        return _personnel_dashboard(db, current_user)
    return _base_dashboard(
        db, current_user, base_id=base_id, equipment_type=equipment_type, start=start, end=end,
    )
