"""Alert lifecycle service.

States and transitions::

    active --resolve--> resolved     (owner or operator, sets resolved_at)
    active --cancel---> cancelled    (operator)
    active --escalate-> escalated    (operator)

resolved and cancelled are terminal. Whether escalated can still be resolved
or cancelled is decided by ``settings.escalated_alert_policy``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from safesignal.core.alert_policies import STATS_WEEK_DAYS
from safesignal.core.config import settings
from safesignal.core.errors import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
)
from safesignal.models.alert import Alert
from safesignal.models.enums import AlertStatus, TriggerMethod
from safesignal.models.profile import Profile
from safesignal.services.contact_service import list_contacts
from safesignal.services.dispatch_service import dispatch
from safesignal.services.geo_service import LocationReading, LocationSource, acquire_location
from safesignal.services.role_service import is_operator

logger = logging.getLogger(__name__)

RESOLVE = "resolve"
CANCEL = "cancel"
ESCALATE = "escalate"

_TARGET_STATUS = {
    RESOLVE: AlertStatus.resolved,
    CANCEL: AlertStatus.cancelled,
    ESCALATE: AlertStatus.escalated,
}


def allowed_transitions(status: AlertStatus, policy: str | None = None) -> frozenset[str]:
    """Operations permitted from `status` under the escalated-alert policy."""
    policy = policy or settings.escalated_alert_policy
    if status == AlertStatus.active:
        return frozenset({RESOLVE, CANCEL, ESCALATE})
    if status == AlertStatus.escalated and policy == "closable":
        return frozenset({RESOLVE, CANCEL})
    return frozenset()


def get_active_alert(db: Session, profile_id: int) -> Alert | None:
    stmt = select(Alert).where(Alert.profile_id == profile_id, Alert.status == AlertStatus.active)
    return db.execute(stmt).scalar_one_or_none()


def trigger_alert(
    db: Session,
    profile_id: int,
    trigger_method: TriggerMethod = TriggerMethod.tap,
    location: LocationReading | None = None,
    locate: LocationSource | None = None,
    address: str | None = None,
    notes: str | None = None,
    location_timeout: float | None = None,
) -> Alert:
    """Open an alert for a profile and fan out pending notifications.

    - `location` is a reading the caller already holds; otherwise `locate` is
      polled once, bounded by `location_timeout`. No fix means null coordinates.
    - Raises ConflictError while the profile already has an active alert.
    """
    if db.get(Profile, profile_id) is None:
        raise NotFoundError("Profile", id=profile_id)
    if get_active_alert(db, profile_id) is not None:
        raise ConflictError(profile_id)

    if location is None:
        location = acquire_location(locate, timeout=location_timeout)

    alert = Alert(
        profile_id=profile_id,
        status=AlertStatus.active,
        trigger_method=trigger_method,
        latitude=location.latitude if location else None,
        longitude=location.longitude if location else None,
        address=address,
        notes=notes,
        resolved_at=None,
    )
    try:
        db.add(alert)
        db.flush()
        dispatch(db, alert, list_contacts(db, profile_id), commit=False)
        db.commit()
    except IntegrityError as exc:
        # Lost the race against a concurrent trigger for the same profile.
        db.rollback()
        if get_active_alert(db, profile_id) is not None:
            raise ConflictError(profile_id) from exc
        raise PersistenceError(str(exc)) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc

    db.refresh(alert)
    logger.info(
        "Alert %s triggered by profile=%s method=%s located=%s",
        alert.id,
        profile_id,
        trigger_method.value,
        location is not None,
    )
    return alert


def get_alert(db: Session, alert_id: int) -> Alert:
    alert = db.get(Alert, alert_id)
    if not alert:
        raise NotFoundError("Alert", id=alert_id)
    return alert


def get_alert_for_actor(db: Session, alert_id: int, actor_id: int) -> Alert:
    """Get an alert the actor may view: their own, or any for operators."""
    alert = get_alert(db, alert_id)
    if alert.profile_id != actor_id and not is_operator(db, actor_id):
        raise AuthorizationError("view", alert_id=alert_id)
    return alert


def _source_states(operation: str) -> list[AlertStatus]:
    """Statuses from which `operation` is currently permitted."""
    return [status for status in AlertStatus if operation in allowed_transitions(status)]


def _transition(db: Session, alert_id: int, actor_id: int, operation: str) -> Alert:
    alert = get_alert(db, alert_id)

    operator = is_operator(db, actor_id)
    if operation == RESOLVE:
        permitted = operator or alert.profile_id == actor_id
    else:
        permitted = operator
    if not permitted:
        raise AuthorizationError(operation, alert_id=alert_id, actor_id=actor_id)

    if operation not in allowed_transitions(alert.status):
        raise InvalidTransitionError(operation, alert.status.value, alert_id=alert_id)

    previous = alert.status
    target = _TARGET_STATUS[operation]
    # Compare-and-set on the row: a concurrent transition that committed first wins.
    stmt = (
        update(Alert)
        .where(Alert.id == alert_id, Alert.status.in_(_source_states(operation)))
        .values(
            status=target,
            resolved_at=datetime.now(timezone.utc) if target == AlertStatus.resolved else None,
        )
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.rollback()
            db.refresh(alert)
            raise InvalidTransitionError(operation, alert.status.value, alert_id=alert_id)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(alert)
    logger.info(
        "Alert %s: %s -> %s by profile=%s",
        alert.id,
        previous.value,
        alert.status.value,
        actor_id,
    )
    return alert


def resolve_alert(db: Session, alert_id: int, actor_id: int) -> Alert:
    """Mark an alert resolved ("I'm safe"). Owner or operator."""
    return _transition(db, alert_id, actor_id, RESOLVE)


def cancel_alert(db: Session, alert_id: int, actor_id: int) -> Alert:
    """Dismiss an alert, e.g. a false alarm. Operators only."""
    return _transition(db, alert_id, actor_id, CANCEL)


def escalate_alert(db: Session, alert_id: int, actor_id: int) -> Alert:
    """Raise an alert's severity. Operators only. Does not close it."""
    return _transition(db, alert_id, actor_id, ESCALATE)


def list_my_alerts(db: Session, profile_id: int, limit: int | None = None) -> list[Alert]:
    """List a profile's alerts, newest first."""
    result = db.execute(
        select(Alert)
        .where(Alert.profile_id == profile_id)
        .order_by(Alert.created_at.desc(), Alert.id.desc())
        .limit(limit or settings.recent_alerts_limit)
    )
    return list(result.scalars().all())


def list_alerts(db: Session, status: AlertStatus | None = None, limit: int = 100) -> list[Alert]:
    """All alerts, newest first, optionally filtered by status."""
    stmt = select(Alert)
    if status is not None:
        stmt = stmt.where(Alert.status == status)
    result = db.execute(stmt.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit))
    return list(result.scalars().all())


def list_active_alerts(db: Session) -> list[Alert]:
    """Alerts currently awaiting help, oldest first."""
    result = db.execute(
        select(Alert)
        .where(Alert.status == AlertStatus.active)
        .order_by(Alert.created_at.asc(), Alert.id.asc())
    )
    return list(result.scalars().all())


def get_alert_stats(db: Session, now: datetime | None = None) -> dict[str, int]:
    """Counters for the admin overview.

    "Today" starts at midnight in `now`'s timezone, so a caller passing a
    viewer-local `now` gets local-day counts. Defaults to UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0).astimezone(timezone.utc)
    week_start = today_start - timedelta(days=STATS_WEEK_DAYS)

    def count(*criteria) -> int:
        return db.execute(select(func.count(Alert.id)).where(*criteria)).scalar_one()

    return {
        "total_users": db.execute(select(func.count(Profile.id))).scalar_one(),
        "total_alerts": count(),
        "active_alerts": count(Alert.status == AlertStatus.active),
        "resolved_alerts": count(Alert.status == AlertStatus.resolved),
        "alerts_today": count(Alert.created_at >= today_start),
        "alerts_this_week": count(Alert.created_at >= week_start),
    }
