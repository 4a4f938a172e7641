"""Notification dispatch tests: fan-out, idempotence, ordering, delivery status."""

from datetime import datetime, timezone

import pytest

from safesignal.core.errors import InvalidTransitionError, NotFoundError
from safesignal.models import (
    Alert,
    AlertNotification,
    AlertStatus,
    DeliveryStatus,
    EmergencyContact,
    NotificationChannel,
)
from safesignal.schemas.auth import RegisterRequest
from safesignal.services.auth_service import create_profile
from safesignal.services.contact_service import list_contacts
from safesignal.services.dispatch_service import (
    channels_for,
    dispatch,
    list_notifications_for_alert,
    list_pending_notifications,
    update_delivery_status,
)
from tests.conftest import TestingSessionLocal, unique_email


def _profile(db):
    return create_profile(db, RegisterRequest(email=unique_email("dsp"), password="pass"))


def _alert(db, profile_id):
    alert = Alert(profile_id=profile_id, status=AlertStatus.active)
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert


def _contact(db, profile_id, name, priority, sms=True, email=None, notify_email=None):
    c = EmergencyContact(
        profile_id=profile_id,
        contact_name=name,
        contact_phone="+15550005555",
        contact_email=email,
        notify_by_sms=sms,
        notify_by_email=(email is not None) if notify_email is None else notify_email,
        priority=priority,
    )
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def test_channels_for_contact():
    both = EmergencyContact(notify_by_sms=True, notify_by_email=True, contact_email="x@test.com")
    sms_only = EmergencyContact(notify_by_sms=True, notify_by_email=False, contact_email="x@test.com")
    no_address = EmergencyContact(notify_by_sms=False, notify_by_email=True, contact_email=None)

    assert channels_for(both) == [NotificationChannel.sms, NotificationChannel.email]
    assert channels_for(sms_only) == [NotificationChannel.sms]
    assert channels_for(no_address) == []


def test_dispatch_twice_creates_no_duplicates(db):
    profile = _profile(db)
    _contact(db, profile.id, "A", 1, email="a@test.com")
    _contact(db, profile.id, "B", 2)
    alert = _alert(db, profile.id)
    contacts = list_contacts(db, profile.id)

    first = dispatch(db, alert, contacts)
    second = dispatch(db, alert, contacts)

    assert len(first) == 3
    assert second == []
    rows = list_notifications_for_alert(db, alert.id)
    targets = [(n.contact_id, n.notification_type) for n in rows]
    assert len(targets) == len(set(targets)) == 3


def test_dispatch_follows_priority_order(db):
    """Priorities [3, 1, 2] fan out as 1, 2, 3; equal priorities keep creation order."""
    profile = _profile(db)
    p3 = _contact(db, profile.id, "P3", 3)
    p1 = _contact(db, profile.id, "P1", 1)
    p2 = _contact(db, profile.id, "P2", 2)
    p1_late = _contact(db, profile.id, "P1-late", 1)
    alert = _alert(db, profile.id)

    created = dispatch(db, alert, list_contacts(db, profile.id))

    assert [n.contact_id for n in created] == [p1.id, p1_late.id, p2.id, p3.id]
    assert [n.id for n in created] == sorted(n.id for n in created)


def test_failed_target_can_be_dispatched_again(db):
    profile = _profile(db)
    _contact(db, profile.id, "Flaky", 1)
    alert = _alert(db, profile.id)
    contacts = list_contacts(db, profile.id)

    (first,) = dispatch(db, alert, contacts)
    update_delivery_status(db, first.id, DeliveryStatus.failed)

    retry = dispatch(db, alert, contacts)
    assert len(retry) == 1
    assert retry[0].id != first.id
    assert retry[0].status == DeliveryStatus.pending


def test_sent_target_is_not_dispatched_again(db):
    profile = _profile(db)
    _contact(db, profile.id, "Reached", 1)
    alert = _alert(db, profile.id)
    contacts = list_contacts(db, profile.id)

    (first,) = dispatch(db, alert, contacts)
    update_delivery_status(db, first.id, DeliveryStatus.sent)
    assert dispatch(db, alert, contacts) == []


def test_contact_without_channels_gets_nothing(db):
    profile = _profile(db)
    _contact(db, profile.id, "Silent", 1, sms=False, email="s@test.com", notify_email=False)
    alert = _alert(db, profile.id)
    assert dispatch(db, alert, list_contacts(db, profile.id)) == []


def test_update_delivery_status_sent_sets_timestamp(db):
    profile = _profile(db)
    _contact(db, profile.id, "Ok", 1)
    alert = _alert(db, profile.id)
    (n,) = dispatch(db, alert, list_contacts(db, profile.id))
    when = datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)

    updated = update_delivery_status(db, n.id, DeliveryStatus.sent, when)

    assert updated.status == DeliveryStatus.sent
    assert updated.sent_at.replace(tzinfo=None) == when.replace(tzinfo=None)


def test_update_delivery_status_failed_leaves_sent_at_empty(db):
    profile = _profile(db)
    _contact(db, profile.id, "Bad", 1)
    alert = _alert(db, profile.id)
    (n,) = dispatch(db, alert, list_contacts(db, profile.id))

    updated = update_delivery_status(db, n.id, DeliveryStatus.failed)
    assert updated.status == DeliveryStatus.failed
    assert updated.sent_at is None


def test_update_delivery_status_only_from_pending(db):
    profile = _profile(db)
    _contact(db, profile.id, "Once", 1)
    alert = _alert(db, profile.id)
    (n,) = dispatch(db, alert, list_contacts(db, profile.id))
    update_delivery_status(db, n.id, DeliveryStatus.sent)

    with pytest.raises(InvalidTransitionError):
        update_delivery_status(db, n.id, DeliveryStatus.failed)
    with pytest.raises(InvalidTransitionError):
        update_delivery_status(db, n.id, DeliveryStatus.pending)


def test_update_delivery_status_unknown(db):
    with pytest.raises(NotFoundError):
        update_delivery_status(db, 987654321, DeliveryStatus.sent)


def test_pending_queue_is_fifo_and_excludes_finished(db):
    profile = _profile(db)
    _contact(db, profile.id, "Q1", 1)
    _contact(db, profile.id, "Q2", 2)
    alert = _alert(db, profile.id)
    first, second = dispatch(db, alert, list_contacts(db, profile.id))
    update_delivery_status(db, first.id, DeliveryStatus.sent)

    pending_ids = [n.id for n in list_pending_notifications(db, limit=500)]
    assert second.id in pending_ids
    assert first.id not in pending_ids
    assert pending_ids == sorted(pending_ids)


def test_stale_failed_report_cannot_overwrite_sent(db):
    """Two delivery reports race: the first to commit wins, the late one is rejected."""
    profile = _profile(db)
    _contact(db, profile.id, "Raced", 1)
    alert = _alert(db, profile.id)
    contacts = list_contacts(db, profile.id)
    (n,) = dispatch(db, alert, contacts)

    other = TestingSessionLocal()
    try:
        assert other.get(AlertNotification, n.id).status == DeliveryStatus.pending
        update_delivery_status(db, n.id, DeliveryStatus.sent)

        with pytest.raises(InvalidTransitionError) as exc_info:
            update_delivery_status(other, n.id, DeliveryStatus.failed)
        assert exc_info.value.details["current_status"] == "sent"
    finally:
        other.close()

    db.refresh(n)
    assert n.status == DeliveryStatus.sent
    assert n.sent_at is not None
    assert dispatch(db, alert, contacts) == []
