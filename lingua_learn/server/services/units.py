"""
Unit Service.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import GuideBookEntry, LearningPath, Lesson, Quiz, Unit
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.content import UnitCreate, UnitUpdate

from .audit import snapshot
from .base import BaseService
from .content_tree import children, clone_unit, delete_unit_tree, ensure_not_published, get_or_404
from .ordering import SiblingOrdering

logger = get_logger(__name__)

AREA = "unit"
unit_ordering = SiblingOrdering(Unit, "learning_path_id", "unit")


async def neighbour_ids(session, model, parent_field: str, entity) -> Dict[str, Optional[int]]:
    """Ids of the previous and next siblings of ``entity`` by ``order``."""
    parent = getattr(model, parent_field) == getattr(entity, parent_field)
    previous = await session.execute(
        select(model.id).where(parent, model.order < entity.order).order_by(model.order.desc()).limit(1)
    )
    following = await session.execute(
        select(model.id).where(parent, model.order > entity.order).order_by(model.order).limit(1)
    )
    return {"previous": previous.scalar(), "next": following.scalar()}


class UnitService(BaseService):
    async def list_for_path(
        self,
        path_id: int,
        with_lessons: bool = False,
        with_quizzes: bool = False,
        with_guide: bool = False,
    ) -> List[Dict[str, Any]]:
        await get_or_404(self.session, LearningPath, path_id)
        items = []
        for unit in await children(self.session, Unit, "learning_path_id", path_id):
            data = unit.model_dump()
            if with_lessons:
                data["lessons"] = await children(self.session, Lesson, "unit_id", unit.id)
            if with_quizzes:
                data["quizzes"] = await children(self.session, Quiz, "unit_id", unit.id)
            if with_guide:
                data["guide_book_entries"] = await children(self.session, GuideBookEntry, "unit_id", unit.id)
            items.append(data)
        return items

    async def show(self, unit_id: int) -> Dict[str, Any]:
        unit = await get_or_404(self.session, Unit, unit_id)
        data = unit.model_dump()
        data["lessons"] = await children(self.session, Lesson, "unit_id", unit.id)
        neighbours = await neighbour_ids(self.session, Unit, "learning_path_id", unit)
        data["next_unit_id"] = neighbours["next"]
        data["previous_unit_id"] = neighbours["previous"]
        return data

    async def guide_book(self, unit_id: int) -> List[GuideBookEntry]:
        await get_or_404(self.session, Unit, unit_id)
        return await children(self.session, GuideBookEntry, "unit_id", unit_id)

    async def create(self, payload: UnitCreate) -> Unit:
        await get_or_404(self.session, LearningPath, payload.learning_path_id)
        unit = Unit(learning_path_id=payload.learning_path_id, title=payload.title, description=payload.description)
        await unit_ordering.place(self.session, unit, payload.order)
        self.session.add(unit)
        await self.session.flush()
        self.audit.created(AREA, unit)
        await self.session.commit()
        await self.session.refresh(unit)
        logger.info(f"Created unit {unit.id} at position {unit.order} of learning path {unit.learning_path_id}")
        return unit

    async def update(self, unit_id: int, payload: UnitUpdate) -> Unit:
        unit = await get_or_404(self.session, Unit, unit_id)
        old_values = snapshot(unit)
        values = payload.model_dump(exclude_unset=True)
        new_order = values.pop("order", None)
        for field, value in values.items():
            setattr(unit, field, value)
        if new_order is not None:
            await unit_ordering.move(self.session, unit, new_order)
        unit.updated_at = utc_now()
        self.audit.updated(AREA, unit, old_values)
        await self.session.commit()
        await self.session.refresh(unit)
        return unit

    async def delete(self, unit_id: int) -> None:
        unit = await get_or_404(self.session, Unit, unit_id)
        await ensure_not_published(self.session, unit, "unit")
        old_values = snapshot(unit)
        path_id, order = unit.learning_path_id, unit.order
        await delete_unit_tree(self.session, unit.id)
        await unit_ordering.close_gap(self.session, path_id, order)
        self.audit.deleted(AREA, old_values, unit_id)
        await self.session.commit()
        logger.info(f"Deleted unit {unit_id}")

    async def clone(self, unit_id: int) -> Unit:
        unit = await get_or_404(self.session, Unit, unit_id)
        order = await unit_ordering.next_order(self.session, unit.learning_path_id)
        copy = await clone_unit(self.session, unit, order, f"{unit.title} (Copy)")
        self.audit.created(AREA, copy, meta_data={"cloned_from": unit.id})
        await self.session.commit()
        await self.session.refresh(copy)
        logger.info(f"Cloned unit {unit.id} into {copy.id}")
        return copy

    async def reorder(self, path_id: int, ids: List[int]) -> List[Unit]:
        await get_or_404(self.session, LearningPath, path_id)
        ordered = await unit_ordering.reorder(self.session, path_id, ids)
        self.audit.record("reordered", "learning_path", path_id, new_values={"units": list(ids)})
        await self.session.commit()
        return ordered
