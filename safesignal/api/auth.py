"""Auth and profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from safesignal.core.deps import get_current_profile
from safesignal.core.security import create_access_token
from safesignal.db.session import get_db
from safesignal.models.profile import Profile
from safesignal.schemas.auth import LoginRequest, ProfileMe, RegisterRequest, TokenResponse, UpdateProfileRequest
from safesignal.services.auth_service import authenticate_profile, create_profile, delete_profile, get_profile_by_email
from safesignal.services.role_service import get_roles

router = APIRouter(prefix="/auth", tags=["auth"])


def _profile_me(db: Session, profile: Profile) -> ProfileMe:
    me = ProfileMe.model_validate(profile)
    me.roles = sorted(get_roles(db, profile.id), key=lambda r: r.value)
    return me


@router.post("/register", response_model=ProfileMe)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Register a new profile with the default user role."""
    if get_profile_by_email(db, data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    profile = create_profile(db, data)
    return _profile_me(db, profile)


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Login and return access token."""
    profile = authenticate_profile(db, data.email, data.password)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    token = create_access_token(subject=profile.email)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=ProfileMe)
def me(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Get current authenticated profile with its roles."""
    return _profile_me(db, current_profile)


@router.put("/me", response_model=ProfileMe)
def update_me(
    data: UpdateProfileRequest,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Update current profile."""
    if data.full_name is not None:
        current_profile.full_name = data.full_name
    if data.phone_number is not None:
        current_profile.phone_number = data.phone_number
    if data.avatar_url is not None:
        current_profile.avatar_url = data.avatar_url
    db.commit()
    db.refresh(current_profile)
    return _profile_me(db, current_profile)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Delete current profile together with its contacts and alerts."""
    delete_profile(db, current_profile.id)
