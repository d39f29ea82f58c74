"""
Content hierarchy entity models.

Learning paths contain units, units contain lessons, lessons contain sections
and sections contain exercises. Every child carries an ``order`` that is kept
dense (1..n) among its siblings by the ordering service. Lessons also own
vocabulary items and units own guide book entries.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class ContentStatus(str, Enum):
    """Publication status of a learning path."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ExerciseType(str, Enum):
    """Supported exercise types."""

    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    MATCHING = "matching"
    WRITING = "writing"
    SPEAKING = "speaking"


# Keys that reveal the solution and are stripped before exercises reach learners.
ANSWER_KEYS = ("answers", "correct", "correct_answer")


class LearningPath(Base, table=True):
    """Top-level course.

    Table: learning_paths
    """

    __tablename__ = "learning_paths"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    target_level: Optional[str] = Field(default=None, max_length=50, index=True)
    status: str = Field(default=ContentStatus.DRAFT.value, index=True)
    review_status: Optional[str] = Field(default=None)
    published_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED.value


class Unit(Base, table=True):
    """Ordered chapter of a learning path.

    Table: units
    """

    __tablename__ = "units"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    learning_path_id: int = Field(foreign_key="learning_paths.id", index=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class Lesson(Base, table=True):
    """Ordered lesson of a unit.

    Table: lessons
    """

    __tablename__ = "lessons"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="units.id", index=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class Section(Base, table=True):
    """Ordered section of a lesson.

    Table: sections
    """

    __tablename__ = "sections"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    lesson_id: int = Field(foreign_key="lessons.id", index=True)
    title: str = Field(max_length=255)
    content: Optional[str] = Field(default=None)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class Exercise(Base, table=True):
    """Ordered exercise of a section.

    ``content`` is type specific, see ``lingua_learn.server.services.exercises``
    for the accepted shapes.

    Table: exercises
    """

    __tablename__ = "exercises"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    section_id: int = Field(foreign_key="sections.id", index=True)
    type: str = Field(max_length=50)
    content: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def check_answer(self, answer: Any) -> bool:
        """Grade ``answer`` against the stored solution.

        Writing and speaking exercises always return False; they are
        reviewed manually.
        """
        content = self.content or {}
        if self.type == ExerciseType.MULTIPLE_CHOICE.value:
            return answer == content.get("correct")
        if self.type == ExerciseType.FILL_BLANK.value:
            return _check_fill_blank(answer, content.get("correct") or [])
        if self.type == ExerciseType.MATCHING.value:
            expected = content.get("correct")
            if not isinstance(expected, dict):
                expected = dict(zip(content.get("items") or [], content.get("matches") or []))
            return isinstance(answer, dict) and len(answer) == len(expected) and answer == expected
        return False

    def hint(self) -> Any:
        """Return the correct answer, or None for manually reviewed types."""
        if self.type in (ExerciseType.WRITING.value, ExerciseType.SPEAKING.value):
            return None
        content = self.content or {}
        if self.type == ExerciseType.MATCHING.value and not isinstance(content.get("correct"), dict):
            return dict(zip(content.get("items") or [], content.get("matches") or []))
        return content.get("correct")

    def learner_content(self) -> Dict[str, Any]:
        return {key: value for key, value in (self.content or {}).items() if key not in ANSWER_KEYS}


def _normalise(value: Any) -> str:
    return str(value).strip().lower()


def _check_fill_blank(answer: Any, correct: Any) -> bool:
    accepted = correct if isinstance(correct, list) else [correct]
    if isinstance(answer, list):
        if len(answer) != len(accepted):
            return False
        return all(_normalise(given) == _normalise(expected) for given, expected in zip(answer, accepted))
    if answer is None:
        return False
    return any(_normalise(answer) == _normalise(expected) for expected in accepted)


class VocabularyItem(Base, table=True):
    """Word introduced by a lesson.

    Table: vocabulary_items
    """

    __tablename__ = "vocabulary_items"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    lesson_id: int = Field(foreign_key="lessons.id", index=True)
    word: str = Field(max_length=255)
    translation: str = Field(max_length=255)
    example: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class GuideBookEntry(Base, table=True):
    """Grammar or culture note attached to a unit.

    Table: guide_book_entries
    """

    __tablename__ = "guide_book_entries"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="units.id", index=True)
    topic: str = Field(max_length=255)
    content: str

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
