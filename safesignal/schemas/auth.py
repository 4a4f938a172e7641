"""Auth and profile schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from safesignal.models.enums import AppRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=4)
    full_name: str | None = None
    phone_number: str | None = Field(default=None, max_length=32)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileMe(BaseModel):
    id: int
    email: str
    full_name: str | None
    phone_number: str | None
    avatar_url: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    roles: list[AppRole] = []

    model_config = {"from_attributes": True}


class UpdateProfileRequest(BaseModel):
    full_name: str | None = None
    phone_number: str | None = Field(default=None, max_length=32)
    avatar_url: str | None = Field(default=None, max_length=512)
