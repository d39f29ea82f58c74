"""
Audit log queries for the admin area.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select

from lingua_learn.core.database import Page, paginate
from lingua_learn.core.database.entities import AuditLog, User

from .content_tree import get_or_404


class AuditLogQuery:
    def __init__(self, session) -> None:
        self.session = session

    async def list(
        self,
        action: Optional[str] = None,
        area: Optional[str] = None,
        user_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        auditable_type: Optional[str] = None,
        auditable_id: Optional[int] = None,
        page: int = 1,
        per_page: int = 15,
    ) -> Page:
        stmt = select(AuditLog)
        if action:
            stmt = stmt.where(AuditLog.action == action)
        if area:
            stmt = stmt.where(AuditLog.area == area)
        if user_id is not None:
            stmt = stmt.where(AuditLog.user_id == user_id)
        if date_from is not None:
            stmt = stmt.where(AuditLog.performed_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(AuditLog.performed_at <= date_to)
        if auditable_type:
            stmt = stmt.where(AuditLog.auditable_type == auditable_type)
        if auditable_id is not None:
            stmt = stmt.where(AuditLog.auditable_id == auditable_id)
        stmt = stmt.order_by(AuditLog.performed_at.desc(), AuditLog.id.desc())
        return await paginate(self.session, stmt, page, per_page)

    async def get(self, log_id: int) -> AuditLog:
        return await get_or_404(self.session, AuditLog, log_id, "Audit log")

    async def user_names(self, logs: Iterable[AuditLog]) -> Dict[int, str]:
        ids = {log.user_id for log in logs if log.user_id is not None}
        if not ids:
            return {}
        result = await self.session.execute(select(User.id, User.name).where(User.id.in_(ids)))
        return {user_id: name for user_id, name in result.all()}

    async def present(self, logs: List[AuditLog]) -> List[Dict[str, Any]]:
        """Logs with the acting user's name, a description and the changed keys."""
        names = await self.user_names(logs)
        items = []
        for log in logs:
            data = log.model_dump()
            user_name = names.get(log.user_id) if log.user_id is not None else None
            data["user_name"] = user_name
            data["description"] = log.describe(user_name)
            data["changes"] = log.get_changes()
            items.append(data)
        return items
