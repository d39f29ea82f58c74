"""
Learning Path Service.

Listing, publication and deletion of learning paths. Status changes are
audited with their own action (``published``, ``archived`` or
``status_updated``) so the dashboard can show them distinctly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select

from lingua_learn.core.database import Page, paginate, utc_now
from lingua_learn.core.database.entities import AuditAction, ContentStatus, LearningPath, Unit
from lingua_learn.core.errors import ContentRuleError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.content import LearningPathCreate, LearningPathUpdate

from .audit import snapshot
from .base import BaseService
from .content_tree import children, delete_learning_path_tree, get_or_404

logger = get_logger(__name__)

AREA = "learning_path"

_STATUS_ACTIONS = {
    ContentStatus.PUBLISHED.value: AuditAction.PUBLISHED,
    ContentStatus.ARCHIVED.value: AuditAction.ARCHIVED,
}


def apply_status(path: LearningPath, status: str) -> None:
    """Set ``status`` and stamp ``published_at`` on (re)publication."""
    path.status = status
    if status == ContentStatus.PUBLISHED.value:
        path.published_at = utc_now()


class LearningPathService(BaseService):
    async def list(
        self,
        status: Optional[str] = None,
        target_level: Optional[str] = None,
        page: int = 1,
        per_page: int = 15,
    ) -> Page:
        stmt = select(LearningPath)
        if status:
            stmt = stmt.where(LearningPath.status == status)
        if target_level:
            stmt = stmt.where(LearningPath.target_level == target_level)
        stmt = stmt.order_by(LearningPath.created_at.desc(), LearningPath.id.desc())
        return await paginate(self.session, stmt, page, per_page)

    async def with_units(self, path: LearningPath) -> Dict[str, Any]:
        data = path.model_dump()
        data["units"] = await children(self.session, Unit, "learning_path_id", path.id)
        return data

    async def show(self, path_id: int) -> Dict[str, Any]:
        return await self.with_units(await get_or_404(self.session, LearningPath, path_id))

    async def by_level(self, level: str) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(LearningPath)
            .where(LearningPath.target_level == level, LearningPath.status == ContentStatus.PUBLISHED.value)
            .order_by(LearningPath.title, LearningPath.id)
        )
        return [await self.with_units(path) for path in result.scalars().all()]

    async def create(self, payload: LearningPathCreate) -> LearningPath:
        path = LearningPath(title=payload.title, description=payload.description, target_level=payload.target_level)
        apply_status(path, payload.status.value)
        self.session.add(path)
        await self.session.flush()
        self.audit.created(AREA, path)
        await self.session.commit()
        await self.session.refresh(path)
        logger.info(f"Created learning path {path.id} '{path.title}'")
        return path

    async def update(self, path_id: int, payload: LearningPathUpdate) -> LearningPath:
        path = await get_or_404(self.session, LearningPath, path_id)
        old_values = snapshot(path)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(path, field, value)
        path.updated_at = utc_now()
        self.audit.updated(AREA, path, old_values)
        await self.session.commit()
        await self.session.refresh(path)
        return path

    async def update_status(self, path_id: int, status: str) -> LearningPath:
        path = await get_or_404(self.session, LearningPath, path_id)
        old_values = snapshot(path)
        apply_status(path, status)
        path.updated_at = utc_now()
        action = _STATUS_ACTIONS.get(status, AuditAction.STATUS_UPDATED)
        self.audit.record(action, AREA, path.id, old_values=old_values, new_values=snapshot(path))
        await self.session.commit()
        await self.session.refresh(path)
        logger.info(f"Learning path {path.id} status -> {status}")
        return path

    async def delete(self, path_id: int) -> None:
        path = await get_or_404(self.session, LearningPath, path_id)
        if path.is_published:
            raise ContentRuleError("Cannot delete a published learning path.")
        old_values = snapshot(path)
        await delete_learning_path_tree(self.session, path.id)
        self.audit.deleted(AREA, old_values, path_id)
        await self.session.commit()
        logger.info(f"Deleted learning path {path_id}")
