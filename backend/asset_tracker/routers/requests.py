"""Asset request endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..constants import ReviewStatus
from ..database import get_db
from ..schemas import (
    AssetRequestApproval,
    AssetRequestCreate,
    AssetRequestResponse,
    AssetRequestReview,
    AssignmentResponse,
)
from ..security import Identity
from ..use_cases.asset_requests import (
    approve_request_use_case,
    create_request_use_case,
    list_requests_use_case,
    reject_request_use_case,
)

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("", response_model=list[AssetRequestResponse])
def list_requests(
    status_filter: Optional[ReviewStatus] = Query(None, alias="status"),
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return list_requests_use_case(db=db, current_user=current_user, status=status_filter)


@router.post("", response_model=AssetRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: AssetRequestCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return create_request_use_case(db=db, current_user=current_user, payload=payload)


@router.post("/{request_id}/approve", response_model=AssetRequestApproval)
def approve_request(
    request_id: UUID,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Approve and issue: returns the request together with the new assignment."""
    request, assignment = approve_request_use_case(db=db, current_user=current_user, request_id=request_id)
    return AssetRequestApproval(
        request=AssetRequestResponse.model_validate(request),
        assignment=AssignmentResponse.model_validate(assignment),
    )


@router.post("/{request_id}/reject", response_model=AssetRequestResponse)
def reject_request(
    request_id: UUID,
    payload: Optional[AssetRequestReview] = None,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    reason = payload.reason if payload is not None else None
    return reject_request_use_case(db=db, current_user=current_user, request_id=request_id, reason=reason)
