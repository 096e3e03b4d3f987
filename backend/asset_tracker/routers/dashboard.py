"""Dashboard endpoint."""
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..constants import EquipmentType
from ..database import get_db
from ..schemas import BaseDashboard, PersonnelDashboard
from ..security import Identity
from ..use_cases.dashboard import get_dashboard_use_case

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=Union[BaseDashboard, PersonnelDashboard])
def get_dashboard(
    base_id: Optional[UUID] = None,
    equipment_type: Optional[EquipmentType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Balances and pending work for the caller's base (personnel get their own items)."""
    return get_dashboard_use_case(
        db=db,
        current_user=current_user,
        base_id=base_id,
        equipment_type=equipment_type,
        start=start_date,
        end=end_date,
    )
