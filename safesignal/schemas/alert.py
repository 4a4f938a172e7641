"""Alert and notification schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from safesignal.models.enums import AlertStatus, DeliveryStatus, NotificationChannel, TriggerMethod


class AlertTriggerRequest(BaseModel):
    """SOS trigger. Coordinates are optional: location may have been unavailable."""

    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    trigger_method: TriggerMethod = TriggerMethod.tap
    address: str | None = Field(default=None, max_length=512)
    notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_coordinates_pair(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


class NotificationResponse(BaseModel):
    id: int
    alert_id: int
    contact_id: int | None
    notification_type: NotificationChannel
    status: DeliveryStatus
    sent_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationWithContact(NotificationResponse):
    contact_name: str | None = None


class DeliveryStatusUpdate(BaseModel):
    """Callback from the delivery worker."""

    status: DeliveryStatus
    sent_at: datetime | None = None

    @model_validator(mode="after")
    def check_final_status(self):
        if self.status == DeliveryStatus.pending:
            raise ValueError("status must be sent or failed")
        return self


class AlertResponse(BaseModel):
    id: int
    profile_id: int
    status: AlertStatus
    latitude: float | None
    longitude: float | None
    address: str | None
    notes: str | None
    trigger_method: TriggerMethod
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None

    model_config = {"from_attributes": True}


class AlertDetailResponse(AlertResponse):
    notifications: list[NotificationWithContact] = []
