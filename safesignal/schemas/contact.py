"""Emergency contact schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ContactCreate(BaseModel):
    contact_name: str = Field(min_length=1, max_length=255)
    contact_phone: str = Field(min_length=3, max_length=32)
    contact_email: EmailStr | None = None
    notify_by_sms: bool = True
    notify_by_email: bool = False
    priority: int = Field(default=1, ge=1)


class ContactUpdate(BaseModel):
    contact_name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_phone: str | None = Field(default=None, min_length=3, max_length=32)
    contact_email: EmailStr | None = None
    notify_by_sms: bool | None = None
    notify_by_email: bool | None = None
    priority: int | None = Field(default=None, ge=1)


class ContactResponse(BaseModel):
    id: int
    profile_id: int
    contact_name: str
    contact_phone: str
    contact_email: str | None
    notify_by_sms: bool
    notify_by_email: bool
    priority: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
