"""
Common service base.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database.entities import User

from .audit import AuditService, RequestContext


class BaseService:
    """Holds the session, the acting user and an audit writer."""

    def __init__(
        self,
        session: AsyncSession,
        actor: Optional[User] = None,
        context: Optional[RequestContext] = None,
    ) -> None:
        self.session = session
        self.actor = actor
        self.context = context
        self.audit = AuditService(session, actor, context)
