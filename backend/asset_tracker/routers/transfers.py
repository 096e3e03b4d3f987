"""Transfer endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..constants import ReviewStatus
from ..database import get_db
from ..schemas import TransferCreate, TransferResponse
from ..security import Identity
from ..use_cases.transfers import (
    approve_transfer_use_case,
    create_transfer_use_case,
    get_transfer_use_case,
    list_transfers_use_case,
    reject_transfer_use_case,
)

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.get("", response_model=list[TransferResponse])
def list_transfers(
    status_filter: Optional[ReviewStatus] = Query(None, alias="status"),
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return list_transfers_use_case(db=db, current_user=current_user, status=status_filter)


@router.get("/{transfer_id}", response_model=TransferResponse)
def get_transfer(
    transfer_id: UUID,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return get_transfer_use_case(db=db, current_user=current_user, transfer_id=transfer_id)


@router.post("", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
def create_transfer(
    payload: TransferCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Request a transfer; administrator requests are approved and executed at once."""
    return create_transfer_use_case(db=db, current_user=current_user, payload=payload)


@router.post("/{transfer_id}/approve", response_model=TransferResponse)
def approve_transfer(
    transfer_id: UUID,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return approve_transfer_use_case(db=db, current_user=current_user, transfer_id=transfer_id)


@router.post("/{transfer_id}/reject", response_model=TransferResponse)
def reject_transfer(
    transfer_id: UUID,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return reject_transfer_use_case(db=db, current_user=current_user, transfer_id=transfer_id)
