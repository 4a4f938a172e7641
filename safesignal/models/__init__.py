"""SQLAlchemy models."""

from __future__ import annotations

from safesignal.models.alert import Alert
from safesignal.models.alert_notification import AlertNotification
from safesignal.models.emergency_contact import EmergencyContact
from safesignal.models.enums import AlertStatus, AppRole, DeliveryStatus, NotificationChannel, TriggerMethod
from safesignal.models.profile import Profile
from safesignal.models.user_role import UserRole

__all__ = [
    "Alert",
    "AlertNotification",
    "AlertStatus",
    "AppRole",
    "DeliveryStatus",
    "EmergencyContact",
    "NotificationChannel",
    "Profile",
    "TriggerMethod",
    "UserRole",
]
