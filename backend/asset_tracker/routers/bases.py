"""Base endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas import BaseCreate, BaseResponse, BaseUpdate
from ..security import Identity
from ..use_cases.bases import (
    create_base_use_case,
    delete_base_use_case,
    get_base_use_case,
    list_bases_use_case,
    update_base_use_case,
)

router = APIRouter(prefix="/bases", tags=["bases"])


@router.get("", response_model=list[BaseResponse])
def list_bases(current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return list_bases_use_case(db=db, current_user=current_user)


@router.get("/{base_id}", response_model=BaseResponse)
def get_base(base_id: UUID, current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return get_base_use_case(db=db, current_user=current_user, base_id=base_id)


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def create_base(
    payload: BaseCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return create_base_use_case(db=db, current_user=current_user, payload=payload)


@router.put("/{base_id}", response_model=BaseResponse)
def update_base(
    base_id: UUID,
    payload: BaseUpdate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return update_base_use_case(db=db, current_user=current_user, base_id=base_id, payload=payload)


@router.delete("/{base_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_base(base_id: UUID, current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    delete_base_use_case(db=db, current_user=current_user, base_id=base_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
