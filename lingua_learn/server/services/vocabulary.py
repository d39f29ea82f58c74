"""
Vocabulary and guide book services.
"""

from __future__ import annotations

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import GuideBookEntry, Lesson, Unit, VocabularyItem
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.content import (
    GuideBookEntryCreate,
    GuideBookEntryUpdate,
    VocabularyItemCreate,
    VocabularyItemUpdate,
)

from .audit import snapshot
from .base import BaseService
from .content_tree import ensure_not_published, get_or_404

logger = get_logger(__name__)


class VocabularyService(BaseService):
    area = "vocabulary_item"

    async def get(self, item_id: int) -> VocabularyItem:
        return await get_or_404(self.session, VocabularyItem, item_id)

    async def create(self, payload: VocabularyItemCreate) -> VocabularyItem:
        await get_or_404(self.session, Lesson, payload.lesson_id)
        item = VocabularyItem(**payload.model_dump())
        self.session.add(item)
        await self.session.flush()
        self.audit.created(self.area, item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def update(self, item_id: int, payload: VocabularyItemUpdate) -> VocabularyItem:
        item = await self.get(item_id)
        old_values = snapshot(item)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(item, field, value)
        item.updated_at = utc_now()
        self.audit.updated(self.area, item, old_values)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def delete(self, item_id: int) -> None:
        item = await self.get(item_id)
        await ensure_not_published(self.session, item, "vocabulary item")
        old_values = snapshot(item)
        await self.session.delete(item)
        self.audit.deleted(self.area, old_values, item_id)
        await self.session.commit()


class GuideBookService(BaseService):
    area = "guide_book_entry"

    async def get(self, entry_id: int) -> GuideBookEntry:
        return await get_or_404(self.session, GuideBookEntry, entry_id)

    async def create(self, payload: GuideBookEntryCreate) -> GuideBookEntry:
        await get_or_404(self.session, Unit, payload.unit_id)
        entry = GuideBookEntry(**payload.model_dump())
        self.session.add(entry)
        await self.session.flush()
        self.audit.created(self.area, entry)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def update(self, entry_id: int, payload: GuideBookEntryUpdate) -> GuideBookEntry:
        entry = await self.get(entry_id)
        old_values = snapshot(entry)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(entry, field, value)
        entry.updated_at = utc_now()
        self.audit.updated(self.area, entry, old_values)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def delete(self, entry_id: int) -> None:
        entry = await self.get(entry_id)
        await ensure_not_published(self.session, entry, "guide book entry")
        old_values = snapshot(entry)
        await self.session.delete(entry)
        self.audit.deleted(self.area, old_values, entry_id)
        await self.session.commit()
        logger.info(f"Deleted guide book entry {entry_id}")
