"""
Language entity models: words, sentences, translations and word timings.

``SentenceWord`` links a word to a position inside a sentence and optionally
stores where the word is spoken in the sentence recording.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Field

from ..base import Base, utc_now

MAX_WORD_DURATION = 10.0


class Word(Base, table=True):
    """Dictionary word.

    Table: words
    """

    __tablename__ = "words"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    text: str = Field(max_length=255, index=True)
    language: str = Field(max_length=10, index=True)
    translation: Optional[str] = Field(default=None, max_length=255)
    part_of_speech: Optional[str] = Field(default=None, max_length=50)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class Sentence(Base, table=True):
    """Example sentence built from words.

    Table: sentences
    """

    __tablename__ = "sentences"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    text: str
    language: str = Field(max_length=10, index=True)
    difficulty_level: Optional[str] = Field(default=None, max_length=50)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class SentenceTranslation(Base, table=True):
    """Translation of a sentence into another language.

    Table: sentence_translations
    """

    __tablename__ = "sentence_translations"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    sentence_id: int = Field(foreign_key="sentences.id", index=True)
    language: str = Field(max_length=10)
    text: str


class SentenceWord(Base, table=True):
    """Word at a position of a sentence, with its audio timing.

    Table: sentence_words
    """

    __tablename__ = "sentence_words"
    __table_args__ = (
        UniqueConstraint("sentence_id", "position", name="uq_sentence_words_position"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    sentence_id: int = Field(foreign_key="sentences.id", index=True)
    word_id: int = Field(foreign_key="words.id", index=True)
    position: int
    start_time: Optional[float] = Field(default=None)
    end_time: Optional[float] = Field(default=None)
    meta_data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    @property
    def has_timing(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def duration(self) -> Optional[float]:
        if not self.has_timing:
            return None
        return self.end_time - self.start_time

    def timing_errors(self, neighbours: Iterable["SentenceWord"] = ()) -> List[str]:
        """Check this word's timing against itself and the words next to it.

        Args:
            neighbours: Other words of the same sentence; only those at
                ``position - 1`` and ``position + 1`` with timings are compared.

        Returns:
            Human readable problems, empty when the timing is valid.
        """
        if not self.has_timing:
            return ["Word has no timing."]
        errors: List[str] = []
        if self.start_time < 0:
            errors.append("Start time cannot be negative.")
        if self.end_time <= self.start_time:
            errors.append("End time must be greater than start time.")
        elif self.end_time - self.start_time > MAX_WORD_DURATION:
            errors.append(f"Word duration cannot exceed {MAX_WORD_DURATION:g} seconds.")
        for other in neighbours:
            if not other.has_timing or other.id == self.id:
                continue
            if other.position == self.position - 1 and other.end_time > self.start_time:
                errors.append("Word timing overlaps with previous word.")
            elif other.position == self.position + 1 and other.start_time < self.end_time:
                errors.append("Word timing overlaps with next word.")
        return errors

    def validate_timing(self, neighbours: Iterable["SentenceWord"] = ()) -> bool:
        return not self.timing_errors(neighbours)
