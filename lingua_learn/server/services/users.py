"""
User administration: listing, role changes and removal.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, or_, select, update

from lingua_learn.core.database import Page, paginate, utc_now
from lingua_learn.core.database.entities import (
    AdminInvite,
    AuditLog,
    ExerciseAttempt,
    PersonalAccessToken,
    QuizAttempt,
    User,
    UserProgress,
    UserRole,
)
from lingua_learn.core.errors import ContentRuleError
from lingua_learn.core.logging_config import get_logger

from .audit import snapshot
from .base import BaseService
from .content_tree import get_or_404

logger = get_logger(__name__)

AREA = "user"


class UserAdminService(BaseService):
    async def list(self, role: Optional[str] = None, search: Optional[str] = None, page: int = 1, per_page: int = 15) -> Page:
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        return await paginate(self.session, stmt.order_by(User.created_at.desc(), User.id.desc()), page, per_page)

    async def get(self, user_id: int) -> User:
        return await get_or_404(self.session, User, user_id, "User")

    async def update_role(self, user_id: int, role: UserRole) -> User:
        user = await self.get(user_id)
        if self.actor is not None and user.id == self.actor.id and role != UserRole.ADMIN:
            raise ContentRuleError("You cannot remove your own admin role.")
        old_values = snapshot(user)
        user.role = role.value
        user.updated_at = utc_now()
        self.audit.updated(AREA, user, old_values, meta_data={"role": role.value})
        await self.session.commit()
        await self.session.refresh(user)
        logger.info(f"User {user.id} role -> {role.value}")
        return user

    async def delete(self, user_id: int) -> None:
        user = await self.get(user_id)
        if self.actor is not None and user.id == self.actor.id:
            raise ContentRuleError("You cannot delete your own account.")
        old_values = snapshot(user)
        for model in (PersonalAccessToken, UserProgress, ExerciseAttempt, QuizAttempt):
            await self.session.execute(delete(model).where(model.user_id == user_id))
        await self.session.execute(
            update(AdminInvite).where(AdminInvite.invited_by == user_id).values(invited_by=None)
        )
        await self.session.execute(update(AuditLog).where(AuditLog.user_id == user_id).values(user_id=None))
        await self.session.delete(user)
        self.audit.deleted(AREA, old_values, user_id)
        await self.session.commit()
        logger.info(f"Deleted user {user_id}")

    async def roles(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(select(User.role, func.count(User.id)).group_by(User.role))
        counts = dict(result.all())
        return [{"name": role.value, "users_count": counts.get(role.value, 0)} for role in UserRole]
