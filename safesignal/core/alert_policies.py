"""Alert lifecycle policy constants."""

from __future__ import annotations

from safesignal.models.enums import AppRole, NotificationChannel

# Roles allowed to act on other people's alerts
OPERATOR_ROLES = frozenset({AppRole.admin, AppRole.moderator})

# Role granted on registration
DEFAULT_ROLE = AppRole.user

# Fan-out order of channels for a single contact
CHANNEL_ORDER = (NotificationChannel.sms, NotificationChannel.email)

# Window used by the admin "this week" counter
STATS_WEEK_DAYS = 7
