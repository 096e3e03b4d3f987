"""User management endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas import UserCreate, UserResponse, UserUpdate
from ..security import Identity
from ..use_cases.users import (
    create_user_use_case,
    delete_user_use_case,
    list_users_use_case,
    update_user_use_case,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return list_users_use_case(db=db, current_user=current_user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return create_user_use_case(db=db, current_user=current_user, payload=payload)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return update_user_use_case(db=db, current_user=current_user, user_id=user_id, payload=payload)


@router.delete("/{user_id}", response_model=UserResponse)
def delete_user(user_id: UUID, current_user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Deactivate the user and unlink their personnel record."""
    return delete_user_use_case(db=db, current_user=current_user, user_id=user_id)
