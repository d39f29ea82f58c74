"""
Content tree helpers.

Lookups that walk the learning path → unit → lesson → section → exercise
hierarchy, the "published path" guard used by every delete, and the deep
copy and cascade delete routines shared by the content services.
"""

from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from lingua_learn.core.database.entities import (
    Exercise,
    ExerciseAttempt,
    GuideBookEntry,
    LearningPath,
    Lesson,
    Quiz,
    QuizAttempt,
    QuizQuestion,
    Section,
    Unit,
    VocabularyItem,
)
from lingua_learn.core.errors import ContentRuleError, NotFoundError

EntityType = TypeVar("EntityType", bound=SQLModel)

_LABELS = {
    LearningPath: "Learning path",
    Unit: "Unit",
    Lesson: "Lesson",
    Section: "Section",
    Exercise: "Exercise",
    VocabularyItem: "Vocabulary item",
    GuideBookEntry: "Guide book entry",
    Quiz: "Quiz",
    QuizQuestion: "Quiz question",
}

_CLONE_EXCLUDE = {"id", "created_at", "updated_at"}


async def get_or_404(session: AsyncSession, model: Type[EntityType], entity_id: int, label: Optional[str] = None) -> EntityType:
    entity = await session.get(model, entity_id)
    if entity is None:
        raise NotFoundError.for_entity(label or _LABELS.get(model, model.__name__), entity_id)
    return entity


async def children(session: AsyncSession, model: Type[EntityType], parent_field: str, parent_id: int) -> List[EntityType]:
    """Children of ``parent_id`` ordered by ``order`` (or id for unordered models)."""
    column = getattr(model, parent_field)
    ordering = [model.order, model.id] if hasattr(model, "order") else [model.id]
    result = await session.execute(select(model).where(column == parent_id).order_by(*ordering))
    return list(result.scalars().all())


async def learning_path_of(session: AsyncSession, entity: Any) -> Optional[LearningPath]:
    """Walk up from any content row to its learning path."""
    if isinstance(entity, LearningPath):
        return entity
    if isinstance(entity, Exercise):
        entity = await session.get(Section, entity.section_id)
    if isinstance(entity, Section):
        entity = await session.get(Lesson, entity.lesson_id)
    if isinstance(entity, VocabularyItem):
        entity = await session.get(Lesson, entity.lesson_id)
    if isinstance(entity, Lesson):
        entity = await session.get(Unit, entity.unit_id)
    if isinstance(entity, GuideBookEntry):
        entity = await session.get(Unit, entity.unit_id)
    if isinstance(entity, Unit):
        return await session.get(LearningPath, entity.learning_path_id)
    return None


async def ensure_not_published(session: AsyncSession, entity: Any, noun: str) -> None:
    """Refuse to delete content that belongs to a published learning path."""
    path = await learning_path_of(session, entity)
    if path is not None and path.is_published:
        raise ContentRuleError(f"Cannot delete a {noun} from a published learning path.")


# ----------------------------------------------------------------------
# Cascade deletes
# ----------------------------------------------------------------------


async def delete_exercise_rows(session: AsyncSession, *conditions: Any) -> None:
    """Delete the exercises matching ``conditions`` together with their attempts."""
    ids = select(Exercise.id).where(*conditions)
    await session.execute(delete(ExerciseAttempt).where(ExerciseAttempt.exercise_id.in_(ids)))
    await session.execute(delete(Exercise).where(*conditions))


async def delete_section_tree(session: AsyncSession, section_id: int) -> None:
    await delete_exercise_rows(session, Exercise.section_id == section_id)
    await session.execute(delete(Section).where(Section.id == section_id))


async def delete_quiz_tree(session: AsyncSession, quiz_id: int) -> None:
    await session.execute(delete(QuizAttempt).where(QuizAttempt.quiz_id == quiz_id))
    await session.execute(delete(QuizQuestion).where(QuizQuestion.quiz_id == quiz_id))
    await session.execute(delete(Quiz).where(Quiz.id == quiz_id))


async def delete_lesson_tree(session: AsyncSession, lesson_id: int) -> None:
    for section in await children(session, Section, "lesson_id", lesson_id):
        await delete_section_tree(session, section.id)
    for quiz in await children(session, Quiz, "lesson_id", lesson_id):
        await delete_quiz_tree(session, quiz.id)
    await session.execute(delete(VocabularyItem).where(VocabularyItem.lesson_id == lesson_id))
    await session.execute(delete(Lesson).where(Lesson.id == lesson_id))


async def delete_unit_tree(session: AsyncSession, unit_id: int) -> None:
    for lesson in await children(session, Lesson, "unit_id", unit_id):
        await delete_lesson_tree(session, lesson.id)
    for quiz in await children(session, Quiz, "unit_id", unit_id):
        await delete_quiz_tree(session, quiz.id)
    await session.execute(delete(GuideBookEntry).where(GuideBookEntry.unit_id == unit_id))
    await session.execute(delete(Unit).where(Unit.id == unit_id))


async def delete_learning_path_tree(session: AsyncSession, path_id: int) -> None:
    for unit in await children(session, Unit, "learning_path_id", path_id):
        await delete_unit_tree(session, unit.id)
    await session.execute(delete(LearningPath).where(LearningPath.id == path_id))


# ----------------------------------------------------------------------
# Deep copies
# ----------------------------------------------------------------------


def copy_row(entity: EntityType, **overrides: Any) -> EntityType:
    values = entity.model_dump(exclude=_CLONE_EXCLUDE)
    values.update(overrides)
    return type(entity)(**values)


async def clone_section(session: AsyncSession, section: Section, lesson_id: int, order: Optional[int] = None) -> Section:
    copy = copy_row(section, lesson_id=lesson_id, order=section.order if order is None else order)
    session.add(copy)
    await session.flush()
    for exercise in await children(session, Exercise, "section_id", section.id):
        session.add(copy_row(exercise, section_id=copy.id, content=dict(exercise.content or {})))
    return copy


async def clone_lesson(session: AsyncSession, lesson: Lesson, unit_id: int, order: Optional[int] = None, title: Optional[str] = None) -> Lesson:
    copy = copy_row(lesson, unit_id=unit_id, order=lesson.order if order is None else order, title=title or lesson.title)
    session.add(copy)
    await session.flush()
    for section in await children(session, Section, "lesson_id", lesson.id):
        await clone_section(session, section, copy.id)
    for item in await children(session, VocabularyItem, "lesson_id", lesson.id):
        session.add(copy_row(item, lesson_id=copy.id))
    await session.flush()
    return copy


async def clone_unit(session: AsyncSession, unit: Unit, order: int, title: str) -> Unit:
    copy = copy_row(unit, order=order, title=title)
    session.add(copy)
    await session.flush()
    for lesson in await children(session, Lesson, "unit_id", unit.id):
        await clone_lesson(session, lesson, copy.id)
    await session.flush()
    return copy
