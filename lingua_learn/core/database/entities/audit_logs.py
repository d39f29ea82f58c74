"""
Audit log entity model.

Content services write one row per authoring action with the before/after
values of the changed row and the request context that caused it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class AuditAction(str, Enum):
    """Recorded audit actions."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    STATUS_UPDATED = "status_updated"
    IMPORTED = "imported"
    EXPORTED = "exported"
    REORDERED = "reordered"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class AuditLog(Base, table=True):
    """Authoring action on an auditable row.

    Table: audit_logs
    """

    __tablename__ = "audit_logs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    action: str = Field(max_length=50, index=True)
    area: str = Field(max_length=50, index=True)
    auditable_type: str = Field(max_length=100, index=True)
    auditable_id: Optional[int] = Field(default=None, index=True)
    old_values: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    new_values: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    meta_data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None)
    is_system_action: bool = Field(default=False)
    status: str = Field(default=AuditStatus.SUCCESS.value)
    performed_at: datetime = Field(default_factory=utc_now, index=True)

    def get_changes(self) -> Dict[str, Dict[str, Any]]:
        """Return ``{key: {"old": ..., "new": ...}}`` for every key whose value differs."""
        old = self.old_values or {}
        new = self.new_values or {}
        changes: Dict[str, Dict[str, Any]] = {}
        for key in dict.fromkeys([*old, *new]):
            if old.get(key) != new.get(key):
                changes[key] = {"old": old.get(key), "new": new.get(key)}
        return changes

    def describe(self, user_name: Optional[str] = None) -> str:
        actor = user_name or "System"
        return f"{actor} {self.action} {self.area} #{self.auditable_id}"
