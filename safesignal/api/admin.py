"""Admin panel API. Operators see everything; only admins manage roles."""

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from safesignal.core.deps import require_admin, require_operator
from safesignal.db.session import get_db
from safesignal.models.alert import Alert
from safesignal.models.enums import AlertStatus, AppRole
from safesignal.models.profile import Profile
from safesignal.schemas.admin import AdminStats, AlertWithProfile, ProfileWithRoles, RoleGrantRequest
from safesignal.services.alert_service import get_alert_stats, list_active_alerts, list_alerts
from safesignal.services.auth_service import get_profile
from safesignal.services.role_service import get_roles, get_roles_for_profiles, grant_role, revoke_role

router = APIRouter(prefix="/admin", tags=["admin"])


def _with_profiles(db: Session, alerts: list[Alert]) -> list[AlertWithProfile]:
    profile_ids = {a.profile_id for a in alerts}
    profiles = {}
    if profile_ids:
        result = db.execute(select(Profile).where(Profile.id.in_(profile_ids)))
        profiles = {p.id: p for p in result.scalars().all()}
    enriched = []
    for alert in alerts:
        item = AlertWithProfile.model_validate(alert)
        owner = profiles.get(alert.profile_id)
        if owner:
            item.profile_name = owner.full_name
            item.profile_email = owner.email
            item.profile_phone = owner.phone_number
        enriched.append(item)
    return enriched


def _sorted_roles(roles: set[AppRole]) -> list[AppRole]:
    return sorted(roles, key=lambda r: r.value)


@router.get("/stats", response_model=AdminStats)
def stats(
    utc_offset_minutes: int = Query(default=0, ge=-840, le=840),
    db: Session = Depends(get_db),
    _: Profile = Depends(require_operator),
):
    """Overview counters. Pass the viewer's UTC offset to count "today" from local midnight."""
    now = datetime.now(timezone(timedelta(minutes=utc_offset_minutes)))
    return AdminStats(**get_alert_stats(db, now))


@router.get("/users", response_model=list[ProfileWithRoles])
def list_users(
    db: Session = Depends(get_db),
    _: Profile = Depends(require_operator),
):
    """All profiles, newest first, each with its full role set."""
    profiles = list(
        db.execute(select(Profile).order_by(Profile.created_at.desc(), Profile.id.desc())).scalars().all()
    )
    roles = get_roles_for_profiles(db, [p.id for p in profiles])
    return [
        ProfileWithRoles(
            id=p.id,
            email=p.email,
            full_name=p.full_name,
            phone_number=p.phone_number,
            created_at=p.created_at,
            roles=_sorted_roles(roles[p.id]),
        )
        for p in profiles
    ]


@router.get("/alerts", response_model=list[AlertWithProfile])
def all_alerts(
    status_filter: AlertStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    _: Profile = Depends(require_operator),
):
    """All alerts, newest first."""
    return _with_profiles(db, list_alerts(db, status_filter, limit))


@router.get("/alerts/active", response_model=list[AlertWithProfile])
def active_alerts(
    db: Session = Depends(get_db),
    _: Profile = Depends(require_operator),
):
    """Active alerts, oldest first."""
    return _with_profiles(db, list_active_alerts(db))


@router.post("/users/{profile_id}/roles", response_model=ProfileWithRoles)
def add_role(
    profile_id: int,
    data: RoleGrantRequest,
    db: Session = Depends(get_db),
    _: Profile = Depends(require_admin),
):
    profile = get_profile(db, profile_id)
    grant_role(db, profile.id, data.role)
    return ProfileWithRoles(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        phone_number=profile.phone_number,
        created_at=profile.created_at,
        roles=_sorted_roles(get_roles(db, profile.id)),
    )


@router.delete("/users/{profile_id}/roles/{role}", status_code=status.HTTP_204_NO_CONTENT)
def remove_role(
    profile_id: int,
    role: AppRole,
    db: Session = Depends(get_db),
    _: Profile = Depends(require_admin),
):
    get_profile(db, profile_id)
    if not revoke_role(db, profile_id, role):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not held")
