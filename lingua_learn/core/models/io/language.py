"""
Language I/O models: words, sentences, translations and word timings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WordCreate(BaseModel):
    text: str = Field(min_length=1, max_length=255)
    language: str = Field(min_length=2, max_length=10)
    translation: Optional[str] = Field(default=None, max_length=255)
    part_of_speech: Optional[str] = Field(default=None, max_length=50)


class WordUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1, max_length=255)
    language: Optional[str] = Field(default=None, min_length=2, max_length=10)
    translation: Optional[str] = Field(default=None, max_length=255)
    part_of_speech: Optional[str] = Field(default=None, max_length=50)


class WordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    language: str
    translation: Optional[str] = None
    part_of_speech: Optional[str] = None
    created_at: datetime


class SentenceWordPayload(BaseModel):
    word_id: int
    position: int = Field(ge=1)


class TranslationPayload(BaseModel):
    language: str = Field(min_length=2, max_length=10)
    text: str = Field(min_length=1)


class SentenceCreate(BaseModel):
    text: str = Field(min_length=1)
    language: str = Field(min_length=2, max_length=10)
    difficulty_level: Optional[str] = Field(default=None, max_length=50)
    words: List[SentenceWordPayload] = Field(default_factory=list)
    translations: List[TranslationPayload] = Field(default_factory=list)


class SentenceUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1)
    language: Optional[str] = Field(default=None, min_length=2, max_length=10)
    difficulty_level: Optional[str] = Field(default=None, max_length=50)
    words: Optional[List[SentenceWordPayload]] = None
    translations: Optional[List[TranslationPayload]] = None


class SentenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    language: str
    difficulty_level: Optional[str] = None
    created_at: datetime


class SentenceWordsReorder(BaseModel):
    words: List[int] = Field(min_length=1)


class WordTimingsUpdate(BaseModel):
    """Raw timing payload; field level rules are applied by the timing validator
    so that every problem is reported under its ``timings.{i}.*`` key."""

    timings: Any = None
    audio_duration: Any = None
