"""Closed value sets stored on alert rows."""

from __future__ import annotations

import enum


class AlertStatus(str, enum.Enum):
    active = "active"
    resolved = "resolved"
    cancelled = "cancelled"
    escalated = "escalated"


class TriggerMethod(str, enum.Enum):
    tap = "tap"
    gesture = "gesture"
    voice = "voice"


class NotificationChannel(str, enum.Enum):
    sms = "sms"
    email = "email"


class DeliveryStatus(str, enum.Enum):
    pending = "pending"
    sent = "sent"
    failed = "failed"


class AppRole(str, enum.Enum):
    admin = "admin"
    moderator = "moderator"
    user = "user"
