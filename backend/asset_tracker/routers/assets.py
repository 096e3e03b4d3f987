"""Asset endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..constants import EquipmentType
from ..database import get_db
from ..schemas import AssetCreate, AssetResponse, AssetUpdate, ConditionUpdate
from ..security import Identity
from ..use_cases.assets import (
    create_asset_use_case,
    delete_asset_use_case,
    get_asset_use_case,
    list_assets_use_case,
    update_asset_use_case,
    update_condition_use_case,
)

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("", response_model=list[AssetResponse])
def list_assets(
    equipment_type: Optional[EquipmentType] = None,
    base_id: Optional[UUID] = None,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return list_assets_use_case(db=db, current_user=current_user, equipment_type=equipment_type, base_id=base_id)


@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(asset_id: UUID, current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return get_asset_use_case(db=db, current_user=current_user, asset_id=asset_id)


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
def create_asset(
    payload: AssetCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Create an asset row; an opening quantity is booked as a purchase."""
    return create_asset_use_case(db=db, current_user=current_user, payload=payload)


@router.put("/{asset_id}", response_model=AssetResponse)
def update_asset(
    asset_id: UUID,
    payload: AssetUpdate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return update_asset_use_case(db=db, current_user=current_user, asset_id=asset_id, payload=payload)


@router.patch("/{asset_id}/condition", response_model=AssetResponse)
def update_condition(
    asset_id: UUID,
    payload: ConditionUpdate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return update_condition_use_case(
        db=db, current_user=current_user, asset_id=asset_id, condition=payload.condition.value,
    )


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_asset(asset_id: UUID, current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    delete_asset_use_case(db=db, current_user=current_user, asset_id=asset_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
