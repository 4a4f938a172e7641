"""Notification fan-out and delivery tracking.

Dispatch only records intent: one ``pending`` row per (alert, contact,
channel). Actual SMS/email transmission belongs to an external delivery worker
that drains ``list_pending_notifications`` and reports back through
``update_delivery_status``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from safesignal.core.alert_policies import CHANNEL_ORDER
from safesignal.core.errors import InvalidTransitionError, NotFoundError, PersistenceError
from safesignal.models.alert import Alert
from safesignal.models.alert_notification import AlertNotification
from safesignal.models.emergency_contact import EmergencyContact
from safesignal.models.enums import DeliveryStatus, NotificationChannel

logger = logging.getLogger(__name__)

_LIVE_STATUSES = (DeliveryStatus.pending, DeliveryStatus.sent)


def channels_for(contact: EmergencyContact) -> list[NotificationChannel]:
    """Enabled channels of a contact, in fan-out order."""
    enabled = {
        NotificationChannel.sms: contact.notify_by_sms,
        NotificationChannel.email: contact.notify_by_email and bool(contact.contact_email),
    }
    return [channel for channel in CHANNEL_ORDER if enabled[channel]]


def _live_targets(db: Session, alert_id: int) -> set[tuple[int | None, NotificationChannel]]:
    """(contact, channel) pairs that already have a pending or sent row."""
    rows = db.execute(
        select(AlertNotification.contact_id, AlertNotification.notification_type).where(
            AlertNotification.alert_id == alert_id,
            AlertNotification.status.in_(_LIVE_STATUSES),
        )
    )
    return {(contact_id, channel) for contact_id, channel in rows}


def dispatch(
    db: Session,
    alert: Alert,
    contacts: list[EmergencyContact],
    commit: bool = True,
) -> list[AlertNotification]:
    """Create pending notifications for every (contact, enabled channel).

    `contacts` must already be in priority order; rows are created in that
    order. Targets that already hold a pending or sent row are skipped, so the
    call is safe to repeat. Returns only the rows created by this call.
    """
    existing = _live_targets(db, alert.id)
    created: list[AlertNotification] = []
    for contact in contacts:
        for channel in channels_for(contact):
            if (contact.id, channel) in existing:
                continue
            notification = AlertNotification(
                alert_id=alert.id,
                contact_id=contact.id,
                notification_type=channel,
                status=DeliveryStatus.pending,
                sent_at=None,
            )
            db.add(notification)
            # Flush one by one so ids follow priority order.
            db.flush()
            existing.add((contact.id, channel))
            created.append(notification)

    if commit:
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(str(exc)) from exc
        for notification in created:
            db.refresh(notification)

    logger.info(
        "Dispatched alert=%s: %s new notification(s) for %s contact(s)",
        alert.id,
        len(created),
        len(contacts),
    )
    return created


def get_notification(db: Session, notification_id: int) -> AlertNotification:
    notification = db.get(AlertNotification, notification_id)
    if not notification:
        raise NotFoundError("Notification", id=notification_id)
    return notification


def update_delivery_status(
    db: Session,
    notification_id: int,
    status: DeliveryStatus,
    sent_at: datetime | None = None,
) -> AlertNotification:
    """Record the delivery outcome reported by the delivery worker.

    Only pending notifications can be finalised, to `sent` or `failed`. When
    two reports race, the first one to commit wins and the other raises
    InvalidTransitionError.
    """
    notification = get_notification(db, notification_id)
    if status == DeliveryStatus.pending:
        raise InvalidTransitionError("mark as pending", notification.status.value, notification_id=notification_id)
    if notification.status != DeliveryStatus.pending:
        raise InvalidTransitionError(
            f"mark as {status.value}",
            notification.status.value,
            notification_id=notification_id,
        )

    values = {"status": status}
    if status == DeliveryStatus.sent:
        values["sent_at"] = sent_at or datetime.now(timezone.utc)
    stmt = (
        update(AlertNotification)
        .where(AlertNotification.id == notification_id, AlertNotification.status == DeliveryStatus.pending)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    try:
        if db.execute(stmt).rowcount == 0:
            db.rollback()
            db.refresh(notification)
            raise InvalidTransitionError(
                f"mark as {status.value}",
                notification.status.value,
                notification_id=notification_id,
            )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(notification)
    logger.info("Notification %s -> %s", notification_id, status.value)
    return notification


def list_pending_notifications(db: Session, limit: int = 100) -> list[AlertNotification]:
    """Work queue for the delivery worker, oldest first."""
    result = db.execute(
        select(AlertNotification)
        .where(AlertNotification.status == DeliveryStatus.pending)
        .order_by(AlertNotification.created_at.asc(), AlertNotification.id.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


def list_notifications_for_alert(db: Session, alert_id: int) -> list[AlertNotification]:
    result = db.execute(
        select(AlertNotification)
        .where(AlertNotification.alert_id == alert_id)
        .order_by(AlertNotification.id.asc())
    )
    return list(result.scalars().all())
