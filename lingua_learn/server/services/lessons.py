"""
Lesson Service.

Lessons are stored together with their vocabulary. Create and update accept
a ``vocabulary_items`` list where each entry is handled by its shape:

- ``{"id": 3, "_remove": true}`` deletes item 3
- ``{"id": 3, "word": ...}`` updates item 3
- ``{"word": ..., "translation": ...}`` creates a new item
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import delete

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import Lesson, Quiz, Section, Unit, VocabularyItem
from lingua_learn.core.errors import ValidationFailedError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.content import LessonCreate, LessonUpdate, VocabularyItemPayload

from .audit import snapshot
from .base import BaseService
from .content_tree import children, clone_lesson, delete_lesson_tree, ensure_not_published, get_or_404
from .ordering import SiblingOrdering
from .units import neighbour_ids

logger = get_logger(__name__)

AREA = "lesson"
lesson_ordering = SiblingOrdering(Lesson, "unit_id", "lesson")


async def sync_vocabulary(session, lesson_id: int, items: List[VocabularyItemPayload]) -> None:
    """Apply the remove/update/create protocol for nested vocabulary items."""
    existing = {item.id: item for item in await children(session, VocabularyItem, "lesson_id", lesson_id)}
    for index, payload in enumerate(items):
        if payload.id is not None and payload.id not in existing:
            raise ValidationFailedError.single(
                f"vocabulary_items.{index}.id", "The selected vocabulary item is invalid."
            )
        if payload.id is not None and payload.remove:
            await session.execute(delete(VocabularyItem).where(VocabularyItem.id == payload.id))
            continue
        if payload.id is not None:
            item = existing[payload.id]
            for field in ("word", "translation", "example"):
                value = getattr(payload, field)
                if value is not None:
                    setattr(item, field, value)
            continue
        if payload.remove:
            continue
        if not payload.word or not payload.translation:
            raise ValidationFailedError.single(
                f"vocabulary_items.{index}", "A new vocabulary item needs a word and a translation."
            )
        session.add(
            VocabularyItem(lesson_id=lesson_id, word=payload.word, translation=payload.translation, example=payload.example)
        )
    await session.flush()


class LessonService(BaseService):
    async def list_for_unit(
        self, unit_id: int, with_sections: bool = False, with_vocabulary: bool = False
    ) -> List[Dict[str, Any]]:
        await get_or_404(self.session, Unit, unit_id)
        items = []
        for lesson in await children(self.session, Lesson, "unit_id", unit_id):
            data = lesson.model_dump()
            if with_sections:
                data["sections"] = await children(self.session, Section, "lesson_id", lesson.id)
            if with_vocabulary:
                data["vocabulary_items"] = await children(self.session, VocabularyItem, "lesson_id", lesson.id)
            items.append(data)
        return items

    async def show(self, lesson_id: int) -> Dict[str, Any]:
        lesson = await get_or_404(self.session, Lesson, lesson_id)
        data = lesson.model_dump()
        data["sections"] = await children(self.session, Section, "lesson_id", lesson.id)
        data["vocabulary_items"] = await children(self.session, VocabularyItem, "lesson_id", lesson.id)
        data["quizzes"] = await children(self.session, Quiz, "lesson_id", lesson.id)
        neighbours = await neighbour_ids(self.session, Lesson, "unit_id", lesson)
        data["next_lesson_id"] = neighbours["next"]
        data["previous_lesson_id"] = neighbours["previous"]
        return data

    async def vocabulary(self, lesson_id: int) -> List[VocabularyItem]:
        await get_or_404(self.session, Lesson, lesson_id)
        return await children(self.session, VocabularyItem, "lesson_id", lesson_id)

    async def _detail(self, lesson: Lesson) -> Dict[str, Any]:
        data = lesson.model_dump()
        data["vocabulary_items"] = await children(self.session, VocabularyItem, "lesson_id", lesson.id)
        return data

    async def create(self, payload: LessonCreate) -> Dict[str, Any]:
        await get_or_404(self.session, Unit, payload.unit_id)
        lesson = Lesson(unit_id=payload.unit_id, title=payload.title, description=payload.description)
        await lesson_ordering.place(self.session, lesson, payload.order)
        self.session.add(lesson)
        await self.session.flush()
        if payload.vocabulary_items:
            await sync_vocabulary(self.session, lesson.id, payload.vocabulary_items)
        self.audit.created(AREA, lesson)
        await self.session.commit()
        await self.session.refresh(lesson)
        logger.info(f"Created lesson {lesson.id} in unit {lesson.unit_id}")
        return await self._detail(lesson)

    async def update(self, lesson_id: int, payload: LessonUpdate) -> Dict[str, Any]:
        lesson = await get_or_404(self.session, Lesson, lesson_id)
        old_values = snapshot(lesson)
        values = payload.model_dump(exclude_unset=True, exclude={"vocabulary_items"})
        new_order: Optional[int] = values.pop("order", None)
        for field, value in values.items():
            setattr(lesson, field, value)
        if new_order is not None:
            await lesson_ordering.move(self.session, lesson, new_order)
        if payload.vocabulary_items is not None:
            await sync_vocabulary(self.session, lesson.id, payload.vocabulary_items)
        lesson.updated_at = utc_now()
        self.audit.updated(AREA, lesson, old_values)
        await self.session.commit()
        await self.session.refresh(lesson)
        return await self._detail(lesson)

    async def delete(self, lesson_id: int) -> None:
        lesson = await get_or_404(self.session, Lesson, lesson_id)
        await ensure_not_published(self.session, lesson, "lesson")
        old_values = snapshot(lesson)
        unit_id, order = lesson.unit_id, lesson.order
        await delete_lesson_tree(self.session, lesson.id)
        await lesson_ordering.close_gap(self.session, unit_id, order)
        self.audit.deleted(AREA, old_values, lesson_id)
        await self.session.commit()
        logger.info(f"Deleted lesson {lesson_id}")

    async def clone(self, lesson_id: int) -> Lesson:
        lesson = await get_or_404(self.session, Lesson, lesson_id)
        order = await lesson_ordering.next_order(self.session, lesson.unit_id)
        copy = await clone_lesson(self.session, lesson, lesson.unit_id, order, f"{lesson.title} (Copy)")
        self.audit.created(AREA, copy, meta_data={"cloned_from": lesson.id})
        await self.session.commit()
        await self.session.refresh(copy)
        return copy

    async def reorder(self, unit_id: int, ids: List[int]) -> List[Lesson]:
        await get_or_404(self.session, Unit, unit_id)
        ordered = await lesson_ordering.reorder(self.session, unit_id, ids)
        self.audit.record("reordered", "unit", unit_id, new_values={"lessons": list(ids)})
        await self.session.commit()
        return ordered
