"""Maintenance records and damage reports."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, DamageSeverity, EntityType, Role
from ..database import unit_of_work
from ..domain_errors import validation_error
from ..models import Asset, Assignment, DamageReport, MaintenanceRecord
from ..policies import CREATE_MAINTENANCE, REPORT_DAMAGE, REPORT_OWN_DAMAGE, VIEW_INVENTORY
from ..schemas import DamageReportCreate, MaintenanceCreate
from ..security import Identity, apply_base_scope, enforce, require_entity
from ..services import audit, ledger

logger = logging.getLogger(__name__)


def create_maintenance_use_case(
    *,
    db: Session,
    current_user: Identity,
    payload: MaintenanceCreate,
) -> MaintenanceRecord:
    with unit_of_work(db):
        asset = require_entity(db, Asset, entity_id=payload.asset_id, not_found="Asset not found")
        enforce(CREATE_MAINTENANCE, current_user, asset)
        record = MaintenanceRecord(
            asset_id=asset.id,
            description=payload.description,
            maintenance_type=payload.maintenance_type,
            created_by=current_user.id,
        )
        db.add(record)
        db.flush()
        if payload.condition is not None:
            ledger.set_condition(db, asset.id, payload.condition.value)
        audit.record(
            db,
            action=AuditAction.CREATE_MAINTENANCE,
            entity_type=EntityType.MAINTENANCE,
            entity_id=record.id,
            details={
                "asset": asset.name,
                "maintenance_type": payload.maintenance_type,
                "condition": payload.condition.value if payload.condition else None,
            },
            user_id=current_user.id,
            base_id=asset.base_id,
        )

    logger.info("Maintenance %s recorded for asset %s by user %s", record.id, asset.id, current_user.id)
    return record


def list_maintenance_use_case(
    *,
    db: Session,
    current_user: Identity,
    asset_id: UUID | None = None,
) -> list[MaintenanceRecord]:
    enforce(VIEW_INVENTORY, current_user)
    query = db.query(MaintenanceRecord).join(Asset, MaintenanceRecord.asset_id == Asset.id)
    query = apply_base_scope(query, current_user, Asset.base_id)
    if asset_id is not None:
        query = query.filter(MaintenanceRecord.asset_id == asset_id)
    return query.order_by(MaintenanceRecord.created_at.desc()).all()


def report_damage_use_case(*, db: Session, current_user: Identity, payload: DamageReportCreate) -> DamageReport:
    """Staff report against any asset of their base; personnel only against their own assignment."""
    severity = DamageSeverity(payload.severity).value

    with unit_of_work(db):
        asset = require_entity(db, Asset, entity_id=payload.asset_id, not_found="Asset not found")
        assignment = None
        if payload.assignment_id is not None:
            assignment = require_entity(
                db, Assignment, entity_id=payload.assignment_id, not_found="Assignment not found",
            )
            if assignment.asset_id != asset.id:
                raise validation_error("Assignment does not cover this asset")

        if current_user.role == Role.PERSONNEL:
            enforce(REPORT_OWN_DAMAGE, current_user, assignment)
        else:
            enforce(REPORT_DAMAGE, current_user, asset)

        report = DamageReport(
            asset_id=asset.id,
            assignment_id=assignment.id if assignment is not None else None,
            description=payload.description,
            severity=severity,
            reported_by=current_user.id,
        )
        db.add(report)
        db.flush()
        audit.record(
            db,
            action=AuditAction.DAMAGE_REPORT,
            entity_type=EntityType.DAMAGE_REPORT,
            entity_id=report.id,
            details={"asset": asset.name, "severity": severity},
            user_id=current_user.id,
            base_id=asset.base_id,
        )

    logger.info("Damage report %s for asset %s by user %s", report.id, asset.id, current_user.id)
    return report


def list_damage_reports_use_case(*, db: Session, current_user: Identity) -> list[DamageReport]:
    query = db.query(DamageReport)
    if current_user.role == Role.PERSONNEL:
        query = query.filter(DamageReport.reported_by == current_user.id)
    else:
        query = query.join(Asset, DamageReport.asset_id == Asset.id)
        query = apply_base_scope(query, current_user, Asset.base_id)
    return query.order_by(DamageReport.reported_at.desc()).all()
