"""Delivery worker API: pending queue and status callbacks."""

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from safesignal.api.events import publish_notification_event
from safesignal.core.deps import require_operator
from safesignal.db.session import get_db
from safesignal.models.profile import Profile
from safesignal.schemas.alert import DeliveryStatusUpdate, NotificationResponse
from safesignal.services.dispatch_service import list_pending_notifications, update_delivery_status

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/pending", response_model=list[NotificationResponse])
def pending_queue(
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    _: Profile = Depends(require_operator),
):
    """Pending notifications, oldest first."""
    return list_pending_notifications(db, limit)


@router.post("/{notification_id}/status", response_model=NotificationResponse)
def report_status(
    notification_id: int,
    data: DeliveryStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    _: Profile = Depends(require_operator),
):
    """Record sent/failed for a pending notification."""
    notification = update_delivery_status(db, notification_id, data.status, data.sent_at)
    publish_notification_event(background_tasks, db, notification)
    return notification
