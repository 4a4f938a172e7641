"""Alerts API: SOS trigger, status transitions, history."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from safesignal.api.events import ALERT_CREATED, ALERT_UPDATED, publish_alert_event
from safesignal.core.deps import get_current_profile
from safesignal.db.session import get_db
from safesignal.models.alert import Alert
from safesignal.models.emergency_contact import EmergencyContact
from safesignal.models.profile import Profile
from safesignal.schemas.alert import AlertDetailResponse, AlertResponse, AlertTriggerRequest, NotificationWithContact
from safesignal.services.alert_service import (
    cancel_alert,
    escalate_alert,
    get_alert_for_actor,
    list_my_alerts,
    resolve_alert,
    trigger_alert,
)
from safesignal.services.dispatch_service import list_notifications_for_alert
from safesignal.services.geo_service import LocationReading

router = APIRouter(prefix="/alerts", tags=["alerts"])


def _enrich_alert(alert: Alert, db: Session) -> AlertDetailResponse:
    """Add notifications with contact names. Deleted contacts show as None."""
    enriched = []
    for notification in list_notifications_for_alert(db, alert.id):
        contact = db.get(EmergencyContact, notification.contact_id) if notification.contact_id else None
        item = NotificationWithContact.model_validate(notification)
        item.contact_name = contact.contact_name if contact else None
        enriched.append(item)
    detail = AlertDetailResponse.model_validate(alert)
    detail.notifications = enriched
    return detail


@router.post("", response_model=AlertDetailResponse)
def trigger(
    data: AlertTriggerRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Send SOS. Coordinates are optional; emergency contacts are queued for notification."""
    location = None
    if data.latitude is not None and data.longitude is not None:
        location = LocationReading(latitude=data.latitude, longitude=data.longitude)
    alert = trigger_alert(
        db,
        current_profile.id,
        trigger_method=data.trigger_method,
        location=location,
        address=data.address,
        notes=data.notes,
    )
    publish_alert_event(background_tasks, db, ALERT_CREATED, alert)
    return _enrich_alert(alert, db)


@router.get("/me", response_model=list[AlertResponse])
def list_my_history(
    limit: int | None = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """List current profile's alerts, newest first."""
    return list_my_alerts(db, current_profile.id, limit)


@router.get("/{alert_id}", response_model=AlertDetailResponse)
def get_one(
    alert_id: int,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Alert with its notifications. Owner or operator."""
    alert = get_alert_for_actor(db, alert_id, current_profile.id)
    return _enrich_alert(alert, db)


@router.post("/{alert_id}/resolve", response_model=AlertResponse)
def resolve(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """I'm safe. Owner or operator."""
    alert = resolve_alert(db, alert_id, current_profile.id)
    publish_alert_event(background_tasks, db, ALERT_UPDATED, alert)
    return alert


@router.post("/{alert_id}/cancel", response_model=AlertResponse)
def cancel(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Dismiss a false alarm. Operators only."""
    alert = cancel_alert(db, alert_id, current_profile.id)
    publish_alert_event(background_tasks, db, ALERT_UPDATED, alert)
    return alert


@router.post("/{alert_id}/escalate", response_model=AlertResponse)
def escalate(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Mark an alert as escalated. Operators only."""
    alert = escalate_alert(db, alert_id, current_profile.id)
    publish_alert_event(background_tasks, db, ALERT_UPDATED, alert)
    return alert
