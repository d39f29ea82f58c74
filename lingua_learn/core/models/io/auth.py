"""
Authentication I/O models.

Requests for login, registration and admin invites, and the public view of
a user account.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from lingua_learn.core.database.entities import UserRole


class UserRead(BaseModel):
    """Public view of a user; never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    avatar: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)
    password_confirmation: str
    invite_token: Optional[str] = None

    @field_validator("password_confirmation")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("The password confirmation does not match.")
        return value


class AuthTokenRead(BaseModel):
    token: str
    user: UserRead
    redirect_url: Optional[str] = None


class InviteCreate(BaseModel):
    email: EmailStr


class InviteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    invited_by: Optional[int] = None
    expires_at: datetime
    created_at: datetime


class RoleUpdate(BaseModel):
    role: UserRole
