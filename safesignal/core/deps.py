"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from safesignal.core.security import decode_access_token
from safesignal.db.session import get_db
from safesignal.models.enums import AppRole
from safesignal.models.profile import Profile
from safesignal.services.auth_service import get_profile_by_email
from safesignal.services.role_service import has_role, is_operator

security = HTTPBearer(auto_error=False)


def get_current_profile(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Profile:
    """Require authenticated profile. Raises 401 if not authenticated."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # sub is email for our tokens
    profile = get_profile_by_email(db, payload["sub"])
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile is inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


def require_operator(
    db: Annotated[Session, Depends(get_db)],
    current_profile: Annotated[Profile, Depends(get_current_profile)],
) -> Profile:
    """Require admin or moderator role."""
    if not is_operator(db, current_profile.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to access this page.",
        )
    return current_profile


def require_admin(
    db: Annotated[Session, Depends(get_db)],
    current_profile: Annotated[Profile, Depends(get_current_profile)],
) -> Profile:
    """Require admin role."""
    if not has_role(db, current_profile.id, AppRole.admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can manage roles",
        )
    return current_profile
