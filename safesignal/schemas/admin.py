"""Admin panel schemas."""

from datetime import datetime

from pydantic import BaseModel

from safesignal.models.enums import AppRole
from safesignal.schemas.alert import AlertResponse


class AdminStats(BaseModel):
    total_users: int
    total_alerts: int
    active_alerts: int
    resolved_alerts: int
    alerts_today: int
    alerts_this_week: int


class ProfileWithRoles(BaseModel):
    id: int
    email: str
    full_name: str | None
    phone_number: str | None
    created_at: datetime
    roles: list[AppRole] = []


class AlertWithProfile(AlertResponse):
    profile_name: str | None = None
    profile_email: str = ""
    profile_phone: str | None = None


class RoleGrantRequest(BaseModel):
    role: AppRole
