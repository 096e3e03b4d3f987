"""Maintenance and damage report endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas import DamageReportCreate, DamageReportResponse, MaintenanceCreate, MaintenanceResponse
from ..security import Identity
from ..use_cases.asset_history import (
    create_maintenance_use_case,
    list_damage_reports_use_case,
    list_maintenance_use_case,
    report_damage_use_case,
)

router = APIRouter(tags=["asset-history"])


@router.get("/maintenance", response_model=list[MaintenanceResponse])
def list_maintenance(
    asset_id: Optional[UUID] = None,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return list_maintenance_use_case(db=db, current_user=current_user, asset_id=asset_id)


@router.post("/maintenance", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
def create_maintenance(
    payload: MaintenanceCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return create_maintenance_use_case(db=db, current_user=current_user, payload=payload)


@router.get("/damage", response_model=list[DamageReportResponse])
def list_damage_reports(current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return list_damage_reports_use_case(db=db, current_user=current_user)


@router.post("/damage", response_model=DamageReportResponse, status_code=status.HTTP_201_CREATED)
def report_damage(
    payload: DamageReportCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return report_damage_use_case(db=db, current_user=current_user, payload=payload)
