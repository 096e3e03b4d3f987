"""Auth endpoints."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import authenticate_user, create_access_token, get_current_user, token_claims_for
from ..config import settings
from ..database import get_db
from ..models import User
from ..permissions import get_role_permissions
from ..schemas import LoginRequest, PermissionsResponse, TokenResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username and password for an access token."""
    user = authenticate_user(db, username=payload.username, password=payload.password)
    token = create_access_token(token_claims_for(user))
    logger.info("User %s logged in", user.id)
    return TokenResponse(
        access_token=token,
        expires_in=int(settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES) * 60,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/permissions", response_model=PermissionsResponse)
def my_permissions(current_user: User = Depends(get_current_user)):
    """Capability map of the caller's role, for UI gating."""
    return PermissionsResponse(role=current_user.role, permissions=get_role_permissions(current_user.role))
