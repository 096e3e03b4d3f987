"""Personnel endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas import PersonnelCreate, PersonnelResponse, PersonnelUpdate
from ..security import Identity
from ..use_cases.personnel import (
    create_personnel_use_case,
    get_personnel_use_case,
    list_personnel_use_case,
    update_personnel_use_case,
)

router = APIRouter(prefix="/personnel", tags=["personnel"])


@router.get("", response_model=list[PersonnelResponse])
def list_personnel(current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return list_personnel_use_case(db=db, current_user=current_user)


@router.get("/{personnel_id}", response_model=PersonnelResponse)
def get_personnel(
    personnel_id: UUID,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return get_personnel_use_case(db=db, current_user=current_user, personnel_id=personnel_id)


@router.post("", response_model=PersonnelResponse, status_code=status.HTTP_201_CREATED)
def create_personnel(
    payload: PersonnelCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return create_personnel_use_case(db=db, current_user=current_user, payload=payload)


@router.put("/{personnel_id}", response_model=PersonnelResponse)
def update_personnel(
    personnel_id: UUID,
    payload: PersonnelUpdate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return update_personnel_use_case(db=db, current_user=current_user, personnel_id=personnel_id, payload=payload)
