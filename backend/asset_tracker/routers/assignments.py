"""Assignment endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import get_current_identity
from ..database import get_db
from ..schemas import AssignmentCreate, AssignmentResponse
from ..security import Identity
from ..use_cases.assignments import issue_asset_use_case, list_assignments_use_case, return_assignment_use_case

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("", response_model=list[AssignmentResponse])
def list_assignments(
    include_returned: bool = False,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return list_assignments_use_case(db=db, current_user=current_user, include_returned=include_returned)


@router.post("", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
def issue_asset(
    payload: AssignmentCreate,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return issue_asset_use_case(db=db, current_user=current_user, payload=payload)


@router.post("/{assignment_id}/return", response_model=AssignmentResponse)
def return_assignment(
    assignment_id: UUID,
    current_user: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return return_assignment_use_case(db=db, current_user=current_user, assignment_id=assignment_id)
