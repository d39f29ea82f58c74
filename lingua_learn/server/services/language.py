"""
Language Service.

Admin management of words and sentences. A sentence is stored with its word
links (``sentence_words``) and translations; replacing either list on update
rewrites the rows.
"""

from __future__ import annotations

from collections import Counter, deque
from typing import Any, Deque, Dict, List, Optional

from sqlalchemy import delete, select

from lingua_learn.core.database import Page, paginate, utc_now
from lingua_learn.core.database.entities import MediaFile, Sentence, SentenceTranslation, SentenceWord, Word
from lingua_learn.core.errors import ContentRuleError, ValidationFailedError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.language import (
    SentenceCreate,
    SentenceUpdate,
    SentenceWordPayload,
    TranslationPayload,
    WordCreate,
    WordUpdate,
)

from .audit import snapshot
from .base import BaseService
from .content_tree import get_or_404

logger = get_logger(__name__)


class WordService(BaseService):
    area = "word"

    async def list(self, language: Optional[str] = None, search: Optional[str] = None, page: int = 1, per_page: int = 15) -> Page:
        stmt = select(Word)
        if language:
            stmt = stmt.where(Word.language == language)
        if search:
            stmt = stmt.where(Word.text.ilike(f"%{search}%"))
        return await paginate(self.session, stmt.order_by(Word.text, Word.id), page, per_page)

    async def get(self, word_id: int) -> Word:
        return await get_or_404(self.session, Word, word_id, "Word")

    async def create(self, payload: WordCreate) -> Word:
        word = Word(**payload.model_dump())
        self.session.add(word)
        await self.session.flush()
        self.audit.created(self.area, word)
        await self.session.commit()
        await self.session.refresh(word)
        return word

    async def update(self, word_id: int, payload: WordUpdate) -> Word:
        word = await self.get(word_id)
        old_values = snapshot(word)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(word, field, value)
        word.updated_at = utc_now()
        self.audit.updated(self.area, word, old_values)
        await self.session.commit()
        await self.session.refresh(word)
        return word

    async def delete(self, word_id: int) -> None:
        word = await self.get(word_id)
        used = await self.session.execute(select(SentenceWord.id).where(SentenceWord.word_id == word_id).limit(1))
        if used.scalar() is not None:
            raise ContentRuleError("Cannot delete a word that is used in a sentence.")
        old_values = snapshot(word)
        await self.session.delete(word)
        self.audit.deleted(self.area, old_values, word_id)
        await self.session.commit()


class SentenceService(BaseService):
    area = "sentence"

    async def list(self, language: Optional[str] = None, difficulty_level: Optional[str] = None, page: int = 1, per_page: int = 15) -> Page:
        stmt = select(Sentence)
        if language:
            stmt = stmt.where(Sentence.language == language)
        if difficulty_level:
            stmt = stmt.where(Sentence.difficulty_level == difficulty_level)
        return await paginate(self.session, stmt.order_by(Sentence.id.desc()), page, per_page)

    async def get(self, sentence_id: int) -> Sentence:
        return await get_or_404(self.session, Sentence, sentence_id, "Sentence")

    async def links(self, sentence_id: int) -> List[SentenceWord]:
        result = await self.session.execute(
            select(SentenceWord).where(SentenceWord.sentence_id == sentence_id).order_by(SentenceWord.position)
        )
        return list(result.scalars().all())

    async def detail(self, sentence_id: int) -> Dict[str, Any]:
        sentence = await self.get(sentence_id)
        rows = await self.session.execute(
            select(SentenceWord, Word)
            .join(Word, Word.id == SentenceWord.word_id)
            .where(SentenceWord.sentence_id == sentence.id)
            .order_by(SentenceWord.position)
        )
        translations = await self.session.execute(
            select(SentenceTranslation).where(SentenceTranslation.sentence_id == sentence.id).order_by(SentenceTranslation.id)
        )
        media = await self.session.execute(
            select(MediaFile)
            .where(MediaFile.model_type == "sentence", MediaFile.model_id == sentence.id)
            .order_by(MediaFile.collection_name, MediaFile.order)
        )
        data = sentence.model_dump()
        data["words"] = [
            {
                "id": word.id,
                "text": word.text,
                "translation": word.translation,
                "position": link.position,
                "start_time": link.start_time,
                "end_time": link.end_time,
            }
            for link, word in rows.all()
        ]
        data["translations"] = list(translations.scalars().all())
        data["audio"] = [{"id": item.id, "collection": item.collection_name, "url": item.url} for item in media.scalars().all()]
        return data

    async def _replace_words(self, sentence_id: int, words: List[SentenceWordPayload]) -> None:
        positions = [item.position for item in words]
        if len(set(positions)) != len(positions):
            raise ValidationFailedError.single("words", "Word positions must be unique.")
        word_ids = {item.word_id for item in words}
        if word_ids:
            found = await self.session.execute(select(Word.id).where(Word.id.in_(word_ids)))
            missing = word_ids - set(found.scalars().all())
            if missing:
                raise ValidationFailedError.single("words", f"Unknown word ids: {sorted(missing)}.")
        await self.session.execute(delete(SentenceWord).where(SentenceWord.sentence_id == sentence_id))
        await self.session.flush()
        for item in words:
            self.session.add(SentenceWord(sentence_id=sentence_id, word_id=item.word_id, position=item.position))

    async def _replace_translations(self, sentence_id: int, translations: List[TranslationPayload]) -> None:
        await self.session.execute(delete(SentenceTranslation).where(SentenceTranslation.sentence_id == sentence_id))
        for item in translations:
            self.session.add(SentenceTranslation(sentence_id=sentence_id, language=item.language, text=item.text))

    async def create(self, payload: SentenceCreate) -> Dict[str, Any]:
        sentence = Sentence(text=payload.text, language=payload.language, difficulty_level=payload.difficulty_level)
        self.session.add(sentence)
        await self.session.flush()
        await self._replace_words(sentence.id, payload.words)
        await self._replace_translations(sentence.id, payload.translations)
        self.audit.created(self.area, sentence)
        await self.session.commit()
        return await self.detail(sentence.id)

    async def update(self, sentence_id: int, payload: SentenceUpdate) -> Dict[str, Any]:
        sentence = await self.get(sentence_id)
        old_values = snapshot(sentence)
        for field, value in payload.model_dump(exclude_unset=True, exclude={"words", "translations"}).items():
            setattr(sentence, field, value)
        if payload.words is not None:
            await self._replace_words(sentence.id, payload.words)
        if payload.translations is not None:
            await self._replace_translations(sentence.id, payload.translations)
        sentence.updated_at = utc_now()
        self.audit.updated(self.area, sentence, old_values)
        await self.session.commit()
        return await self.detail(sentence.id)

    async def delete(self, sentence_id: int) -> None:
        sentence = await self.get(sentence_id)
        old_values = snapshot(sentence)
        await self.session.execute(delete(SentenceWord).where(SentenceWord.sentence_id == sentence_id))
        await self.session.execute(delete(SentenceTranslation).where(SentenceTranslation.sentence_id == sentence_id))
        await self.session.delete(sentence)
        self.audit.deleted(self.area, old_values, sentence_id)
        await self.session.commit()

    async def reorder_words(self, sentence_id: int, word_ids: List[int]) -> List[SentenceWord]:
        """Give the sentence's words positions 1..n following ``word_ids``.

        ``word_ids`` lists every word of the sentence once per occurrence. The
        occurrences of a repeated word keep their relative order. Positions
        are first parked at negative values so the unique
        (sentence_id, position) constraint holds at every step.
        """
        await self.get(sentence_id)
        links = await self.links(sentence_id)
        if Counter(word_ids) != Counter(link.word_id for link in links):
            raise ContentRuleError("Invalid word IDs provided.")
        occurrences: Dict[int, Deque[SentenceWord]] = {}
        for link in links:
            occurrences.setdefault(link.word_id, deque()).append(link)
        for index, link in enumerate(links, start=1):
            link.position = -index
        await self.session.flush()
        for position, word_id in enumerate(word_ids, start=1):
            occurrences[word_id].popleft().position = position
        await self.session.flush()
        self.audit.record("reordered", self.area, sentence_id, new_values={"words": list(word_ids)})
        await self.session.commit()
        return await self.links(sentence_id)

    async def word_timings(self, sentence_id: int) -> List[Dict[str, Any]]:
        await self.get(sentence_id)
        rows = await self.session.execute(
            select(SentenceWord, Word)
            .join(Word, Word.id == SentenceWord.word_id)
            .where(SentenceWord.sentence_id == sentence_id)
            .order_by(SentenceWord.position)
        )
        return [
            {
                "id": word.id,
                "text": word.text,
                "position": link.position,
                "start_time": link.start_time,
                "end_time": link.end_time,
                "metadata": link.meta_data,
            }
            for link, word in rows.all()
        ]
