"""
Content hierarchy I/O models.

Create/update/read schemas for learning paths, units, lessons, sections,
exercises, vocabulary items and guide book entries, plus reorder requests.
Nested child payloads use ``_remove`` to request deletion of an existing
child.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from lingua_learn.core.database.entities import ContentStatus, ExerciseType


class LearningPathCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    target_level: Optional[str] = Field(default=None, max_length=50)
    status: ContentStatus = ContentStatus.DRAFT


class LearningPathUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    target_level: Optional[str] = Field(default=None, max_length=50)
    review_status: Optional[str] = None


class StatusUpdate(BaseModel):
    status: ContentStatus


class LearningPathRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    target_level: Optional[str] = None
    status: str
    review_status: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UnitCreate(BaseModel):
    learning_path_id: int
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)


class UnitUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)


class UnitRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    learning_path_id: int
    title: str
    description: Optional[str] = None
    order: int
    created_at: datetime
    updated_at: datetime


class VocabularyItemPayload(BaseModel):
    """Nested vocabulary item on lesson create/update."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    word: Optional[str] = Field(default=None, max_length=255)
    translation: Optional[str] = Field(default=None, max_length=255)
    example: Optional[str] = None
    remove: bool = Field(default=False, alias="_remove")


class LessonCreate(BaseModel):
    unit_id: int
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)
    vocabulary_items: List[VocabularyItemPayload] = Field(default_factory=list)


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)
    vocabulary_items: Optional[List[VocabularyItemPayload]] = None


class LessonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unit_id: int
    title: str
    description: Optional[str] = None
    order: int
    created_at: datetime
    updated_at: datetime


class ExercisePayload(BaseModel):
    """Nested exercise on section create/update."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    type: Optional[ExerciseType] = None
    content: Optional[Dict[str, Any]] = None
    order: Optional[int] = Field(default=None, ge=1)
    remove: bool = Field(default=False, alias="_remove")


class SectionCreate(BaseModel):
    lesson_id: int
    title: str = Field(min_length=1, max_length=255)
    content: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)
    exercises: List[ExercisePayload] = Field(default_factory=list)


class SectionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=1)
    exercises: Optional[List[ExercisePayload]] = None


class SectionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    title: str
    content: Optional[str] = None
    order: int
    created_at: datetime
    updated_at: datetime


class ExerciseCreate(BaseModel):
    section_id: int
    type: ExerciseType
    content: Dict[str, Any]
    order: Optional[int] = Field(default=None, ge=1)


class ExerciseUpdate(BaseModel):
    type: Optional[ExerciseType] = None
    content: Optional[Dict[str, Any]] = None
    order: Optional[int] = Field(default=None, ge=1)


class ExerciseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    section_id: int
    type: str
    content: Dict[str, Any]
    order: int
    created_at: datetime
    updated_at: datetime


class VocabularyItemCreate(BaseModel):
    lesson_id: int
    word: str = Field(min_length=1, max_length=255)
    translation: str = Field(min_length=1, max_length=255)
    example: Optional[str] = None


class VocabularyItemUpdate(BaseModel):
    word: Optional[str] = Field(default=None, min_length=1, max_length=255)
    translation: Optional[str] = Field(default=None, min_length=1, max_length=255)
    example: Optional[str] = None


class VocabularyItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    word: str
    translation: str
    example: Optional[str] = None


class GuideBookEntryCreate(BaseModel):
    unit_id: int
    topic: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)


class GuideBookEntryUpdate(BaseModel):
    topic: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)


class GuideBookEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unit_id: int
    topic: str
    content: str


class UnitReorder(BaseModel):
    units: List[int] = Field(min_length=1)


class LessonReorder(BaseModel):
    lessons: List[int] = Field(min_length=1)


class SectionReorder(BaseModel):
    sections: List[int] = Field(min_length=1)


class ExerciseReorder(BaseModel):
    exercises: List[int] = Field(min_length=1)
