"""Auth and profile service."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from safesignal.core.alert_policies import DEFAULT_ROLE
from safesignal.core.errors import NotFoundError, PersistenceError
from safesignal.core.security import hash_password, verify_password
from safesignal.models.alert import Alert
from safesignal.models.alert_notification import AlertNotification
from safesignal.models.emergency_contact import EmergencyContact
from safesignal.models.profile import Profile
from safesignal.models.user_role import UserRole
from safesignal.schemas.auth import RegisterRequest
from safesignal.services.role_service import grant_role

logger = logging.getLogger(__name__)


def get_profile_by_email(db: Session, email: str) -> Profile | None:
    """Get profile by email."""
    return db.execute(select(Profile).where(Profile.email == email)).scalar_one_or_none()


def get_profile(db: Session, profile_id: int) -> Profile:
    """Get profile by id or raise NotFoundError."""
    profile = db.get(Profile, profile_id)
    if not profile:
        raise NotFoundError("Profile", id=profile_id)
    return profile


def create_profile(db: Session, data: RegisterRequest) -> Profile:
    """Create a profile and grant it the default role.

    A concurrent registration of the same email loses on the unique index and
    surfaces as PersistenceError.
    """
    profile = Profile(
        email=data.email,
        hashed_password=hash_password(data.password),
        full_name=data.full_name,
        phone_number=data.phone_number,
    )
    try:
        db.add(profile)
        db.flush()
        grant_role(db, profile.id, DEFAULT_ROLE, commit=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(profile)
    logger.info("Profile created: id=%s", profile.id)
    return profile


def authenticate_profile(db: Session, email: str, password: str) -> Profile | None:
    """Authenticate profile by email and password."""
    profile = get_profile_by_email(db, email)
    if not profile or not verify_password(password, profile.hashed_password):
        return None
    if not profile.is_active:
        return None
    return profile


def delete_profile(db: Session, profile_id: int) -> None:
    """Delete a profile with its roles, contacts, alerts and their notifications.

    Rows are removed explicitly rather than relying on ON DELETE CASCADE so the
    outcome does not depend on the backend enforcing foreign keys.
    """
    profile = get_profile(db, profile_id)
    alert_ids = select(Alert.id).where(Alert.profile_id == profile_id)
    contact_ids = select(EmergencyContact.id).where(EmergencyContact.profile_id == profile_id)
    try:
        db.execute(delete(AlertNotification).where(AlertNotification.alert_id.in_(alert_ids)))
        # Other profiles' alerts never reference these contacts, but keep lookups tolerant.
        db.execute(
            update(AlertNotification)
            .where(AlertNotification.contact_id.in_(contact_ids))
            .values(contact_id=None)
        )
        db.execute(delete(Alert).where(Alert.profile_id == profile_id))
        db.execute(delete(EmergencyContact).where(EmergencyContact.profile_id == profile_id))
        db.execute(delete(UserRole).where(UserRole.profile_id == profile_id))
        db.delete(profile)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    logger.info("Profile deleted with its alerts and contacts: id=%s", profile_id)
