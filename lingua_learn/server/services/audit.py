"""
Audit trail recording.

Content services call :class:`AuditService` for every create, update and
delete. The audit row is added to the caller's session so it is committed
(or rolled back) together with the change it describes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from lingua_learn.core.database.entities import AuditAction, AuditLog, AuditStatus, User
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.monitoring import log_content_change

logger = get_logger(__name__)

_SNAPSHOT_EXCLUDE = {"password", "created_at", "updated_at"}


@dataclass(frozen=True)
class RequestContext:
    """Client details captured from the HTTP request."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def snapshot(entity: Optional[SQLModel], exclude: Iterable[str] = ()) -> Optional[Dict[str, Any]]:
    """JSON-safe dump of an entity's columns for ``old_values``/``new_values``."""
    if entity is None:
        return None
    return entity.model_dump(mode="json", exclude=_SNAPSHOT_EXCLUDE | set(exclude))


class AuditService:
    """Writes :class:`AuditLog` rows on behalf of the acting user."""

    def __init__(
        self,
        session: AsyncSession,
        actor: Optional[User] = None,
        context: Optional[RequestContext] = None,
    ) -> None:
        self.session = session
        self.actor = actor
        self.context = context or RequestContext()

    def record(
        self,
        action: AuditAction | str,
        area: str,
        auditable_id: Optional[int],
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        meta_data: Optional[Dict[str, Any]] = None,
        auditable_type: Optional[str] = None,
        status: AuditStatus = AuditStatus.SUCCESS,
    ) -> AuditLog:
        """Stage an audit row on the session (the caller commits)."""
        action_value = action.value if isinstance(action, AuditAction) else action
        entry = AuditLog(
            user_id=self.actor.id if self.actor else None,
            action=action_value,
            area=area,
            auditable_type=auditable_type or area,
            auditable_id=auditable_id,
            old_values=old_values,
            new_values=new_values,
            meta_data=meta_data,
            ip_address=self.context.ip_address,
            user_agent=self.context.user_agent,
            is_system_action=self.actor is None,
            status=status.value,
        )
        self.session.add(entry)
        logger.debug(f"Audit {action_value} {area}#{auditable_id} by user {entry.user_id}")
        log_content_change(action_value, area, auditable_id, entry.user_id)
        return entry

    def created(self, area: str, entity: SQLModel, **kwargs: Any) -> AuditLog:
        return self.record(AuditAction.CREATED, area, getattr(entity, "id", None), new_values=snapshot(entity), **kwargs)

    def updated(self, area: str, entity: SQLModel, old_values: Optional[Dict[str, Any]], **kwargs: Any) -> AuditLog:
        return self.record(
            AuditAction.UPDATED, area, getattr(entity, "id", None), old_values=old_values, new_values=snapshot(entity), **kwargs
        )

    def deleted(self, area: str, old_values: Optional[Dict[str, Any]], entity_id: Optional[int], **kwargs: Any) -> AuditLog:
        return self.record(AuditAction.DELETED, area, entity_id, old_values=old_values, **kwargs)
