"""
Progress Service.

Stores per-user progress rows and derives completion for sections, lessons,
units and learning paths:

- a section with exercises is completed when every exercise is completed; a
  section without exercises follows its own progress row
- a lesson is completed when it has at least one section and all of them are
  completed
- a unit's completion is the share of completed lessons, a path's the share
  of units at 100 %
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import Page, paginate
from lingua_learn.core.database.entities import (
    Exercise,
    LearningPath,
    Lesson,
    ProgressStatus,
    Quiz,
    Section,
    TrackableType,
    Unit,
    UserProgress,
)
from lingua_learn.core.errors import ContentRuleError, NotFoundError
from lingua_learn.core.logging_config import get_logger

from .content_tree import children, get_or_404

logger = get_logger(__name__)

_TRACKABLE_MODELS = {
    TrackableType.LEARNING_PATH.value: LearningPath,
    TrackableType.UNIT.value: Unit,
    TrackableType.LESSON.value: Lesson,
    TrackableType.SECTION.value: Section,
    TrackableType.EXERCISE.value: Exercise,
    TrackableType.QUIZ.value: Quiz,
}


def parse_trackable_type(value: str) -> str:
    if value not in _TRACKABLE_MODELS:
        raise ContentRuleError("Invalid content type")
    return value


async def get_or_create_progress(session: AsyncSession, user_id: int, trackable_type: str, trackable_id: int) -> UserProgress:
    """Fetch the progress row or stage a new ``not_started`` one on the session."""
    result = await session.execute(
        select(UserProgress).where(
            UserProgress.user_id == user_id,
            UserProgress.trackable_type == trackable_type,
            UserProgress.trackable_id == trackable_id,
        )
    )
    progress = result.scalars().first()
    if progress is None:
        progress = UserProgress(
            user_id=user_id,
            trackable_type=trackable_type,
            trackable_id=trackable_id,
            status=ProgressStatus.NOT_STARTED.value,
            meta_data={},
        )
        session.add(progress)
    return progress


def _percentage(done: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(done / total * 100, 2)


def _status_for_percentage(percentage: float, started: bool) -> str:
    if percentage >= 100:
        return ProgressStatus.COMPLETED.value
    if percentage > 0 or started:
        return ProgressStatus.IN_PROGRESS.value
    return ProgressStatus.NOT_STARTED.value


class ProgressService:
    def __init__(self, session: AsyncSession, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    async def _rows(self, trackable_type: str, ids: Iterable[int]) -> Dict[int, UserProgress]:
        ids = list(ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(UserProgress).where(
                UserProgress.user_id == self.user_id,
                UserProgress.trackable_type == trackable_type,
                UserProgress.trackable_id.in_(ids),
            )
        )
        return {row.trackable_id: row for row in result.scalars().all()}

    @staticmethod
    def _status_of(row: Optional[UserProgress]) -> str:
        return row.status if row is not None else ProgressStatus.NOT_STARTED.value

    # ------------------------------------------------------------------
    # Completion roll-up
    # ------------------------------------------------------------------

    async def section_completed(self, section: Section) -> bool:
        exercises = await children(self.session, Exercise, "section_id", section.id)
        if not exercises:
            own = await self._rows(TrackableType.SECTION.value, [section.id])
            return own.get(section.id) is not None and own[section.id].is_completed
        rows = await self._rows(TrackableType.EXERCISE.value, [exercise.id for exercise in exercises])
        return all(rows.get(exercise.id) is not None and rows[exercise.id].is_completed for exercise in exercises)

    async def section_started(self, section: Section) -> bool:
        """Whether any exercise of ``section`` has a progress row."""
        exercises = await children(self.session, Exercise, "section_id", section.id)
        return bool(await self._rows(TrackableType.EXERCISE.value, [exercise.id for exercise in exercises]))

    async def lesson_completed(self, lesson: Lesson) -> bool:
        sections = await children(self.session, Section, "lesson_id", lesson.id)
        if not sections:
            return False
        for section in sections:
            if not await self.section_completed(section):
                return False
        return True

    async def unit_percentage(self, unit: Unit) -> float:
        lessons = await children(self.session, Lesson, "unit_id", unit.id)
        done = 0
        for lesson in lessons:
            if await self.lesson_completed(lesson):
                done += 1
        return _percentage(done, len(lessons))

    async def path_percentage(self, path: LearningPath) -> float:
        units = await children(self.session, Unit, "learning_path_id", path.id)
        done = 0
        for unit in units:
            if await self.unit_percentage(unit) >= 100:
                done += 1
        return _percentage(done, len(units))

    # ------------------------------------------------------------------
    # Progress views
    # ------------------------------------------------------------------

    async def learning_path_progress(self, path_id: int) -> Dict[str, Any]:
        path = await get_or_404(self.session, LearningPath, path_id)
        units = await children(self.session, Unit, "learning_path_id", path.id)
        unit_rows = await self._rows(TrackableType.UNIT.value, [unit.id for unit in units])
        items: List[Dict[str, Any]] = []
        completed_units = 0
        for unit in units:
            percentage = await self.unit_percentage(unit)
            if percentage >= 100:
                completed_units += 1
            items.append(
                {
                    "unit_id": unit.id,
                    "title": unit.title,
                    "status": _status_for_percentage(percentage, unit.id in unit_rows),
                    "completion_percentage": percentage,
                }
            )
        own = (await self._rows(TrackableType.LEARNING_PATH.value, [path.id])).get(path.id)
        percentage = _percentage(completed_units, len(units))
        return {
            "status": _status_for_percentage(percentage, own is not None) if units else self._status_of(own),
            "completion_percentage": percentage,
            "units": items,
        }

    async def unit_progress(self, unit_id: int) -> Dict[str, Any]:
        unit = await get_or_404(self.session, Unit, unit_id)
        lessons = await children(self.session, Lesson, "unit_id", unit.id)
        lesson_rows = await self._rows(TrackableType.LESSON.value, [lesson.id for lesson in lessons])
        items: List[Dict[str, Any]] = []
        done = 0
        for lesson in lessons:
            completed = await self.lesson_completed(lesson)
            done += int(completed)
            row = lesson_rows.get(lesson.id)
            status = ProgressStatus.COMPLETED.value if completed else self._status_of(row)
            if status == ProgressStatus.COMPLETED.value and not completed:
                status = ProgressStatus.IN_PROGRESS.value
            items.append({"lesson_id": lesson.id, "title": lesson.title, "status": status, "completed": completed})
        own = (await self._rows(TrackableType.UNIT.value, [unit.id])).get(unit.id)
        percentage = _percentage(done, len(lessons))
        return {
            "status": _status_for_percentage(percentage, own is not None),
            "completion_percentage": percentage,
            "lessons": items,
        }

    async def lesson_progress(self, lesson_id: int) -> Dict[str, Any]:
        lesson = await get_or_404(self.session, Lesson, lesson_id)
        sections = await children(self.session, Section, "lesson_id", lesson.id)
        section_rows = await self._rows(TrackableType.SECTION.value, [section.id for section in sections])
        items: List[Dict[str, Any]] = []
        for section in sections:
            completed = await self.section_completed(section)
            row = section_rows.get(section.id)
            status = ProgressStatus.COMPLETED.value if completed else self._status_of(row)
            if status == ProgressStatus.COMPLETED.value and not completed:
                status = ProgressStatus.IN_PROGRESS.value
            elif status == ProgressStatus.NOT_STARTED.value and await self.section_started(section):
                status = ProgressStatus.IN_PROGRESS.value
            items.append({"section_id": section.id, "title": section.title, "status": status, "completed": completed})
        completed = bool(sections) and all(item["completed"] for item in items)
        own = (await self._rows(TrackableType.LESSON.value, [lesson.id])).get(lesson.id)
        if completed:
            status = ProgressStatus.COMPLETED.value
        elif own is not None or any(item["status"] != ProgressStatus.NOT_STARTED.value for item in items):
            status = ProgressStatus.IN_PROGRESS.value
        else:
            status = ProgressStatus.NOT_STARTED.value
        return {"status": status, "completed": completed, "sections": items}

    async def section_progress(self, section_id: int) -> Dict[str, Any]:
        section = await get_or_404(self.session, Section, section_id)
        exercises = await children(self.session, Exercise, "section_id", section.id)
        rows = await self._rows(TrackableType.EXERCISE.value, [exercise.id for exercise in exercises])
        items = []
        for exercise in exercises:
            row = rows.get(exercise.id)
            meta = row.meta_data if row is not None else {}
            items.append(
                {
                    "exercise_id": exercise.id,
                    "status": self._status_of(row),
                    "attempts": meta.get("attempts", 0),
                    "best_score": meta.get("best_score"),
                }
            )
        completed = await self.section_completed(section)
        own = (await self._rows(TrackableType.SECTION.value, [section.id])).get(section.id)
        if completed:
            status = ProgressStatus.COMPLETED.value
        elif rows or own is not None:
            status = ProgressStatus.IN_PROGRESS.value
        else:
            status = ProgressStatus.NOT_STARTED.value
        return {"status": status, "completed": completed, "exercises": items}

    # ------------------------------------------------------------------
    # Raw rows
    # ------------------------------------------------------------------

    async def list(self, trackable_type: Optional[str] = None, page: int = 1, per_page: int = 15) -> Page:
        stmt = select(UserProgress).where(UserProgress.user_id == self.user_id)
        if trackable_type:
            stmt = stmt.where(UserProgress.trackable_type == parse_trackable_type(trackable_type))
        stmt = stmt.order_by(UserProgress.updated_at.desc(), UserProgress.id.desc())
        return await paginate(self.session, stmt, page, per_page)

    async def get(self, trackable_type: str, trackable_id: int) -> UserProgress:
        trackable_type = parse_trackable_type(trackable_type)
        row = (await self._rows(trackable_type, [trackable_id])).get(trackable_id)
        if row is None:
            raise NotFoundError("Progress not found")
        return row

    async def upsert(self, trackable_type: str, trackable_id: int, status: str, meta_data: Optional[Dict[str, Any]] = None) -> UserProgress:
        trackable_type = parse_trackable_type(trackable_type)
        await get_or_404(self.session, _TRACKABLE_MODELS[trackable_type], trackable_id)
        progress = await get_or_create_progress(self.session, self.user_id, trackable_type, trackable_id)
        progress.set_status(status)
        if meta_data:
            progress.merge_meta(**meta_data)
        await self.session.commit()
        await self.session.refresh(progress)
        logger.debug(f"User {self.user_id} progress on {trackable_type}#{trackable_id} -> {status}")
        return progress
