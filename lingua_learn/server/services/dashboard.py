"""
Dashboard Service.

Aggregate figures for the admin dashboard and analytics pages. Time windows
are counted back from "now" in UTC.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List

from sqlalchemy import func, select

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import (
    AuditLog,
    ContentStatus,
    Exercise,
    ExerciseAttempt,
    LearningPath,
    Lesson,
    ProgressStatus,
    Quiz,
    QuizAttempt,
    TrackableType,
    Unit,
    User,
    UserProgress,
)
from lingua_learn.core.database.entities.media import format_bytes

from .audit_logs import AuditLogQuery
from .media import MediaService

WINDOW_DAYS = 30
TOP_N = 5


class DashboardService:
    def __init__(self, session) -> None:
        self.session = session

    async def _count(self, model, *conditions) -> int:
        result = await self.session.execute(select(func.count()).select_from(model).where(*conditions))
        return int(result.scalar_one())

    async def content_stats(self) -> Dict[str, Any]:
        statuses = await self.session.execute(select(LearningPath.status, func.count(LearningPath.id)).group_by(LearningPath.status))
        by_status = dict(statuses.all())
        return {
            "learning_paths": {
                "total": sum(by_status.values()),
                "published": by_status.get(ContentStatus.PUBLISHED.value, 0),
                "draft": by_status.get(ContentStatus.DRAFT.value, 0),
                "archived": by_status.get(ContentStatus.ARCHIVED.value, 0),
            },
            "units": await self._count(Unit),
            "lessons": await self._count(Lesson),
            "exercises": await self._count(Exercise),
            "quizzes": await self._count(Quiz),
        }

    async def summary(self) -> Dict[str, Any]:
        since = utc_now() - timedelta(days=WINDOW_DAYS)
        completed = await self._count(
            UserProgress, UserProgress.status == ProgressStatus.COMPLETED.value, UserProgress.updated_at >= since
        )
        in_progress = await self._count(
            UserProgress, UserProgress.status == ProgressStatus.IN_PROGRESS.value, UserProgress.updated_at >= since
        )
        tracked = completed + in_progress
        storage = await MediaService(self.session).storage_used()
        return {
            "content_stats": await self.content_stats(),
            "progress_stats": {
                "completed": completed,
                "in_progress": in_progress,
                "completion_rate": round(completed / tracked * 100, 2) if tracked else 0.0,
            },
            "system_stats": {
                "total_users": await self._count(User),
                "active_users": await self._count(User, User.last_login_at >= since),
                "new_users": await self._count(User, User.created_at >= since),
                "storage_used": {"bytes": storage, "formatted": format_bytes(storage)},
            },
            "last_updated": utc_now(),
        }

    async def recent_activity(self, limit: int = 10) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(AuditLog).order_by(AuditLog.performed_at.desc(), AuditLog.id.desc()).limit(limit)
        )
        logs = list(result.scalars().all())
        return await AuditLogQuery(self.session).present(logs)

    async def engagement_stats(self) -> Dict[str, Any]:
        lesson_rows = await self.session.execute(
            select(Lesson.id, Lesson.title, func.count(UserProgress.id).label("activity"))
            .join(
                UserProgress,
                (UserProgress.trackable_id == Lesson.id) & (UserProgress.trackable_type == TrackableType.LESSON.value),
            )
            .group_by(Lesson.id, Lesson.title)
            .order_by(func.count(UserProgress.id).desc(), Lesson.id)
            .limit(TOP_N)
        )
        most_active = [{"id": lesson_id, "title": title, "activity": activity} for lesson_id, title, activity in lesson_rows.all()]

        completion_rates = []
        paths = await self.session.execute(select(LearningPath).order_by(LearningPath.id))
        for path in paths.scalars().all():
            rows = await self.session.execute(
                select(UserProgress.status, func.count(UserProgress.id))
                .where(
                    UserProgress.trackable_type == TrackableType.LEARNING_PATH.value,
                    UserProgress.trackable_id == path.id,
                )
                .group_by(UserProgress.status)
            )
            counts = dict(rows.all())
            total = sum(counts.values())
            done = counts.get(ProgressStatus.COMPLETED.value, 0)
            completion_rates.append(
                {
                    "learning_path_id": path.id,
                    "title": path.title,
                    "learners": total,
                    "completed": done,
                    "completion_rate": round(done / total * 100, 2) if total else 0.0,
                }
            )
        return {"most_active": most_active, "completion_rates": completion_rates}

    async def analytics(self) -> Dict[str, Any]:
        today = utc_now().date()
        start = today - timedelta(days=WINDOW_DAYS - 1)
        users = await self.session.execute(select(User.created_at).where(User.created_at >= utc_now() - timedelta(days=WINDOW_DAYS)))
        per_day: Dict[date, int] = {start + timedelta(days=offset): 0 for offset in range(WINDOW_DAYS)}
        for (created_at,) in users.all():
            if created_at.date() in per_day:
                per_day[created_at.date()] += 1

        total_attempts = await self._count(ExerciseAttempt)
        correct_attempts = await self._count(ExerciseAttempt, ExerciseAttempt.is_correct.is_(True))
        quiz_attempts = await self._count(QuizAttempt)
        quiz_passed = await self._count(QuizAttempt, QuizAttempt.passed.is_(True))

        popular = await self.session.execute(
            select(LearningPath.id, LearningPath.title, func.count(UserProgress.id).label("learners"))
            .join(
                UserProgress,
                (UserProgress.trackable_id == LearningPath.id)
                & (UserProgress.trackable_type == TrackableType.LEARNING_PATH.value),
            )
            .group_by(LearningPath.id, LearningPath.title)
            .order_by(func.count(UserProgress.id).desc(), LearningPath.id)
            .limit(TOP_N)
        )
        return {
            "user_growth": [{"date": day.isoformat(), "count": count} for day, count in per_day.items()],
            "attempts": {
                "total": total_attempts,
                "correct": correct_attempts,
                "correct_rate": round(correct_attempts / total_attempts * 100, 2) if total_attempts else 0.0,
            },
            "quiz_pass_rate": round(quiz_passed / quiz_attempts * 100, 2) if quiz_attempts else 0.0,
            "popular_paths": [{"id": path_id, "title": title, "learners": learners} for path_id, title, learners in popular.all()],
        }
