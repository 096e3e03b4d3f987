"""Authentication: password hashing, access tokens and the caller identity."""
from datetime import timedelta
from typing import Optional
import logging
import time
from uuid import UUID
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from .config import settings
from .database import get_db
from .domain_errors import UnauthenticatedError, validation_error
from .models import User
from .security import Identity, require_permission

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
logger = logging.getLogger(__name__)

# Bearer token scheme; a missing header is reported through UnauthenticatedError.
security = HTTPBearer(auto_error=False)

INVALID_CREDENTIALS = "Could not validate credentials"


def validate_new_password(*, new_password: str, username: str | None = None) -> None:
    """Server-side password policy validation."""
    if not new_password:
        raise validation_error("Password is required")

    pwd = new_password.strip("\n")
    if len(pwd) < settings.PASSWORD_MIN_LENGTH:
        raise validation_error(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
    if len(pwd) > settings.PASSWORD_MAX_LENGTH:
        raise validation_error(f"Password must be at most {settings.PASSWORD_MAX_LENGTH} characters")
    if username and pwd.lower() == username.lower():
        raise validation_error("Password must not match username")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Invalid/corrupted hash should not crash login flow.
        logger.exception("Password verification failed due to invalid hash format")
        return False


def get_password_hash(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    now = int(time.time())
    if expires_delta:
        exp = now + int(expires_delta.total_seconds())
    else:
        exp = now + int(settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    to_encode.update({"exp": exp, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def token_claims_for(user: User) -> dict:
    return {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "base_id": str(user.base_id) if user.base_id else None,
        "full_name": user.full_name,
    }


def decode_token(token: str) -> dict:
    """Decode JWT token, applying the configured leeway to exp and iat."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as exc:
        raise UnauthenticatedError(INVALID_CREDENTIALS) from exc

    now = int(time.time())
    try:
        exp_int = int(payload["exp"])
        iat_int = int(payload.get("iat", now))
    except (KeyError, TypeError, ValueError) as exc:
        raise UnauthenticatedError(INVALID_CREDENTIALS) from exc
    if now > exp_int + int(settings.JWT_LEEWAY_SECONDS):
        raise UnauthenticatedError("Token expired")
    # Reject tokens issued far in the future (clock skew / malicious tokens).
    if iat_int > now + int(settings.JWT_LEEWAY_SECONDS):
        raise UnauthenticatedError(INVALID_CREDENTIALS)
    return payload


def _parse_token_subject(payload: dict) -> UUID:
    """Parse and validate JWT subject as UUID."""
    sub = payload.get("sub")
    if not sub:
        raise UnauthenticatedError(INVALID_CREDENTIALS)
    try:
        return UUID(str(sub))
    except ValueError as exc:
        raise UnauthenticatedError(INVALID_CREDENTIALS) from exc


def authenticate_user(db: Session, *, username: str, password: str) -> User:
    """Resolve a username/password pair; the error does not reveal which one was wrong."""
    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for username=%s", username)
        raise UnauthenticatedError("Invalid username or password")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise UnauthenticatedError("Invalid token type")

    user_id = _parse_token_subject(payload)
    user = db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
    if user is None:
        raise UnauthenticatedError("User not found or inactive")
    return user


def get_current_identity(current_user: User = Depends(get_current_user)) -> Identity:
    """Identity built from the stored user row, so role and base changes apply immediately."""
    return Identity.from_user(current_user)


# Permission checks
class PermissionChecker:
    """Route dependency: require a matrix capability (no base scope)."""

    def __init__(self, required_permission: str):
        self.required_permission = required_permission

    def __call__(self, current_user: Identity = Depends(get_current_identity)) -> Identity:
        require_permission(current_user, self.required_permission)
        return current_user
