"""
Learner progress and exercise attempt entity models.

``UserProgress`` is a polymorphic row keyed by (user, trackable type,
trackable id); ``meta_data`` carries counters such as ``attempts``,
``time_spent``, ``last_score`` and ``best_score``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Field

from ..base import Base, utc_now


class TrackableType(str, Enum):
    """Kinds of content progress can be recorded against."""

    LEARNING_PATH = "learning_path"
    UNIT = "unit"
    LESSON = "lesson"
    SECTION = "section"
    EXERCISE = "exercise"
    QUIZ = "quiz"


class ProgressStatus(str, Enum):
    """Progress state of a learner on one trackable."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class UserProgress(Base, table=True):
    """Progress of one user on one piece of content.

    Table: user_progress
    """

    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "trackable_type", "trackable_id", name="uq_user_progress_trackable"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    trackable_type: str = Field(max_length=50, index=True)
    trackable_id: int = Field(index=True)
    status: str = Field(default=ProgressStatus.NOT_STARTED.value, index=True)
    meta_data: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    completed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED.value

    def set_status(self, status: str) -> None:
        """Apply ``status``; ``completed_at`` is stamped once and never cleared."""
        self.status = status
        if status == ProgressStatus.COMPLETED.value and self.completed_at is None:
            self.completed_at = utc_now()

    def merge_meta(self, **values: Any) -> None:
        # Reassign so the JSON column is flagged dirty.
        self.meta_data = {**(self.meta_data or {}), **values}


class ExerciseAttempt(Base, table=True):
    """One submitted answer to an exercise.

    Table: exercise_attempts
    """

    __tablename__ = "exercise_attempts"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    exercise_id: int = Field(foreign_key="exercises.id", index=True)
    answer: Any = Field(default=None, sa_type=JSON)
    is_correct: bool = Field(default=False)
    time_spent: Optional[int] = Field(default=None, description="Seconds spent on the attempt")
    created_at: datetime = Field(default_factory=utc_now, index=True)
