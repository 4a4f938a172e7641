"""Role lookups. A profile holds a set of roles, never a single one."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from safesignal.core.alert_policies import OPERATOR_ROLES
from safesignal.core.errors import PersistenceError
from safesignal.models.enums import AppRole
from safesignal.models.user_role import UserRole


def get_roles(db: Session, profile_id: int) -> set[AppRole]:
    """All roles held by a profile (possibly empty)."""
    result = db.execute(select(UserRole.role).where(UserRole.profile_id == profile_id))
    return set(result.scalars().all())


def get_roles_for_profiles(db: Session, profile_ids: list[int]) -> dict[int, set[AppRole]]:
    """Role sets for many profiles at once, keyed by profile id."""
    roles: dict[int, set[AppRole]] = {pid: set() for pid in profile_ids}
    if not profile_ids:
        return roles
    rows = db.execute(select(UserRole.profile_id, UserRole.role).where(UserRole.profile_id.in_(profile_ids)))
    for pid, role in rows:
        roles[pid].add(role)
    return roles


def has_role(db: Session, profile_id: int, role: AppRole) -> bool:
    stmt = select(UserRole.id).where(UserRole.profile_id == profile_id, UserRole.role == role).limit(1)
    return db.execute(stmt).first() is not None


def is_operator(db: Session, profile_id: int) -> bool:
    """True if the profile holds admin or moderator."""
    return bool(get_roles(db, profile_id) & OPERATOR_ROLES)


def get_operator_ids(db: Session) -> list[int]:
    """Profiles holding at least one operator role."""
    result = db.execute(
        select(UserRole.profile_id).where(UserRole.role.in_(list(OPERATOR_ROLES))).distinct()
    )
    return list(result.scalars().all())


def grant_role(db: Session, profile_id: int, role: AppRole, commit: bool = True) -> UserRole:
    """Grant a role. Granting one already held returns the existing row."""
    existing = db.execute(
        select(UserRole).where(UserRole.profile_id == profile_id, UserRole.role == role)
    ).scalar_one_or_none()
    if existing:
        return existing
    row = UserRole(profile_id=profile_id, role=role)
    db.add(row)
    if not commit:
        db.flush()
        return row
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(row)
    return row


def revoke_role(db: Session, profile_id: int, role: AppRole) -> bool:
    """Revoke a role. Returns False if the profile did not hold it."""
    try:
        result = db.execute(
            delete(UserRole).where(UserRole.profile_id == profile_id, UserRole.role == role)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    return result.rowcount > 0
