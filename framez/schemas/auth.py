"""Schemas for authentication input and the viewer's cached profile."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..constants import MIN_PASSWORD_LENGTH


class UserProfile(BaseModel):
    """Read-only copy of the signed-in user's ``users`` row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: str = ""
    avatar_url: str | None = None
    created_at: datetime | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class RegisterRequest(LoginRequest):
    display_name: str = Field(..., min_length=1, max_length=50)


__all__ = ["UserProfile", "LoginRequest", "RegisterRequest"]
