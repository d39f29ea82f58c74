"""
Section Service.

Sections carry their exercises inline on create and update using the same
``_remove``/``id``/new protocol as lesson vocabulary. Nested exercises go
through the same content validation as standalone ones.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import Exercise, Lesson, Section
from lingua_learn.core.errors import ValidationFailedError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.content import ExercisePayload, SectionCreate, SectionUpdate

from .audit import snapshot
from .base import BaseService
from .content_tree import children, delete_exercise_rows, delete_section_tree, ensure_not_published, get_or_404
from .exercises import ExerciseService, exercise_content_errors, exercise_ordering
from .ordering import SiblingOrdering

logger = get_logger(__name__)

AREA = "section"
section_ordering = SiblingOrdering(Section, "lesson_id", "section")


def _nested_errors(index: int, exercise_type: Optional[str], content: Any) -> Dict[str, List[str]]:
    errors = exercise_content_errors(exercise_type or "", content)
    return {f"exercises.{index}.{key}": messages for key, messages in errors.items()}


async def sync_exercises(session, section_id: int, items: List[ExercisePayload]) -> None:
    """Apply the remove/update/create protocol for nested exercises."""
    existing = {exercise.id: exercise for exercise in await children(session, Exercise, "section_id", section_id)}
    errors: Dict[str, List[str]] = {}
    for index, payload in enumerate(items):
        if payload.id is not None and payload.id not in existing:
            errors[f"exercises.{index}.id"] = ["The selected exercise is invalid."]
        elif payload.id is not None and not payload.remove:
            current = existing[payload.id]
            if payload.type is not None or payload.content is not None:
                errors.update(
                    _nested_errors(
                        index,
                        payload.type.value if payload.type else current.type,
                        payload.content if payload.content is not None else current.content,
                    )
                )
        elif payload.id is None and not payload.remove:
            errors.update(_nested_errors(index, payload.type.value if payload.type else None, payload.content))
    if errors:
        raise ValidationFailedError(errors)

    for payload in items:
        if payload.id is not None and payload.remove:
            removed = existing.pop(payload.id, None)
            if removed is None:
                continue
            await delete_exercise_rows(session, Exercise.id == removed.id)
            await exercise_ordering.close_gap(session, section_id, removed.order)
        elif payload.id is not None:
            exercise = existing[payload.id]
            if payload.type is not None:
                exercise.type = payload.type.value
            if payload.content is not None:
                exercise.content = payload.content
            if payload.order is not None:
                await exercise_ordering.move(session, exercise, payload.order)
        elif not payload.remove:
            exercise = Exercise(section_id=section_id, type=payload.type.value, content=payload.content)
            await exercise_ordering.place(session, exercise, payload.order)
            session.add(exercise)
        await session.flush()


class SectionService(BaseService):
    async def list_for_lesson(self, lesson_id: int, with_exercises: bool = False) -> List[Dict[str, Any]]:
        await get_or_404(self.session, Lesson, lesson_id)
        items = []
        for section in await children(self.session, Section, "lesson_id", lesson_id):
            data = section.model_dump()
            if with_exercises:
                exercises = await children(self.session, Exercise, "section_id", section.id)
                data["exercises"] = [ExerciseService.present(exercise) for exercise in exercises]
            items.append(data)
        return items

    async def show(self, section_id: int, include_answers: bool = False) -> Dict[str, Any]:
        section = await get_or_404(self.session, Section, section_id)
        data = section.model_dump()
        exercises = await children(self.session, Exercise, "section_id", section.id)
        data["exercises"] = [ExerciseService.present(exercise, include_answers) for exercise in exercises]
        return data

    async def create(self, payload: SectionCreate) -> Dict[str, Any]:
        await get_or_404(self.session, Lesson, payload.lesson_id)
        section = Section(lesson_id=payload.lesson_id, title=payload.title, content=payload.content)
        await section_ordering.place(self.session, section, payload.order)
        self.session.add(section)
        await self.session.flush()
        if payload.exercises:
            await sync_exercises(self.session, section.id, payload.exercises)
        self.audit.created(AREA, section)
        await self.session.commit()
        await self.session.refresh(section)
        logger.info(f"Created section {section.id} in lesson {section.lesson_id}")
        return await self.show(section.id, include_answers=True)

    async def update(self, section_id: int, payload: SectionUpdate) -> Dict[str, Any]:
        section = await get_or_404(self.session, Section, section_id)
        old_values = snapshot(section)
        values = payload.model_dump(exclude_unset=True, exclude={"exercises"})
        new_order: Optional[int] = values.pop("order", None)
        for field, value in values.items():
            setattr(section, field, value)
        if new_order is not None:
            await section_ordering.move(self.session, section, new_order)
        if payload.exercises is not None:
            await sync_exercises(self.session, section.id, payload.exercises)
        section.updated_at = utc_now()
        self.audit.updated(AREA, section, old_values)
        await self.session.commit()
        await self.session.refresh(section)
        return await self.show(section.id, include_answers=True)

    async def delete(self, section_id: int) -> None:
        section = await get_or_404(self.session, Section, section_id)
        await ensure_not_published(self.session, section, "section")
        old_values = snapshot(section)
        lesson_id, order = section.lesson_id, section.order
        await delete_section_tree(self.session, section.id)
        await section_ordering.close_gap(self.session, lesson_id, order)
        self.audit.deleted(AREA, old_values, section_id)
        await self.session.commit()
        logger.info(f"Deleted section {section_id}")

    async def reorder(self, lesson_id: int, ids: List[int]) -> List[Section]:
        await get_or_404(self.session, Lesson, lesson_id)
        ordered = await section_ordering.reorder(self.session, lesson_id, ids)
        self.audit.record("reordered", "lesson", lesson_id, new_values={"sections": list(ids)})
        await self.session.commit()
        return ordered

