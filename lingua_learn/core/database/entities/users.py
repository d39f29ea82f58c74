"""
User, access token and admin invite entity models.

Users authenticate either with an email/password pair or through Google
OAuth. API access is granted with personal access tokens whose secrets are
stored hashed. Admin accounts are created through single-use invites.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class UserRole(str, Enum):
    """Role of a platform user."""

    USER = "user"
    ADMIN = "admin"


class User(Base, table=True):
    """Platform account.

    ``password`` holds the passlib hash and is empty for accounts that only
    ever signed in with Google.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    password: Optional[str] = Field(default=None, description="Password hash")
    role: str = Field(default=UserRole.USER.value, index=True)
    google_id: Optional[str] = Field(default=None, unique=True, index=True)
    avatar: Optional[str] = Field(default=None)
    last_login_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class PersonalAccessToken(Base, table=True):
    """Bearer token issued to a user.

    Table: personal_access_tokens
    """

    __tablename__ = "personal_access_tokens"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    name: str = Field(max_length=255)
    token: str = Field(max_length=64, unique=True, description="SHA-256 hex digest of the token secret")
    last_used_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class AdminInvite(Base, table=True):
    """Single-use invitation that grants the admin role on registration.

    Table: admin_invites
    """

    __tablename__ = "admin_invites"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    token: str = Field(max_length=32, unique=True, index=True)
    invited_by: Optional[int] = Field(default=None, foreign_key="users.id")
    expires_at: datetime
    used_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at < (now or utc_now())

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        return self.used_at is None and not self.is_expired(now)
