"""Purchase endpoints."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas import PurchaseCreate, PurchaseResponse
from ..security import Identity
from ..use_cases.assets import create_purchase_use_case, list_purchases_use_case

router = APIRouter(prefix="/purchases", tags=["purchases"])


@router.get("", response_model=list[PurchaseResponse])
def list_purchases(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return list_purchases_use_case(db=db, current_user=current_user, start=start_date, end=end_date)


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: PurchaseCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return create_purchase_use_case(db=db, current_user=current_user, payload=payload)
