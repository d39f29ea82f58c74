"""
Admin I/O models: audit logs, bulk content actions and content import.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    action: str
    area: str
    auditable_type: str
    auditable_id: Optional[int] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    meta_data: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_system_action: bool
    status: str
    performed_at: datetime


class BulkIds(BaseModel):
    ids: List[int] = Field(min_length=1)


class BulkResult(BaseModel):
    id: int
    success: bool
    message: str


class ContentImport(BaseModel):
    document: Dict[str, Any]
