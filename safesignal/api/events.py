"""Realtime change notifications pushed after a successful commit.

Payloads only identify the changed row; clients re-query for the full state.
"""

from __future__ import annotations

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from safesignal.core.ws_manager import ws_manager
from safesignal.models.alert import Alert
from safesignal.models.alert_notification import AlertNotification
from safesignal.services.role_service import get_operator_ids

ALERT_CREATED = "alert.created"
ALERT_UPDATED = "alert.updated"
NOTIFICATION_UPDATED = "notification.updated"


def _audience(db: Session, alert: Alert) -> list[int]:
    """Alert owner plus every operator."""
    return [alert.profile_id, *get_operator_ids(db)]


def publish_alert_event(background_tasks: BackgroundTasks, db: Session, event: str, alert: Alert) -> None:
    data = {"alert_id": alert.id, "profile_id": alert.profile_id, "status": alert.status.value}
    background_tasks.add_task(ws_manager.send_to_profiles, _audience(db, alert), event, data)


def publish_notification_event(
    background_tasks: BackgroundTasks,
    db: Session,
    notification: AlertNotification,
) -> None:
    alert = db.get(Alert, notification.alert_id)
    if not alert:
        return
    data = {
        "notification_id": notification.id,
        "alert_id": notification.alert_id,
        "status": notification.status.value,
    }
    background_tasks.add_task(ws_manager.send_to_profiles, _audience(db, alert), NOTIFICATION_UPDATED, data)
