"""
Quiz, quiz question and quiz attempt entity models.

A quiz belongs to a unit or a lesson. Its score is the percentage of
questions answered correctly; a score at or above ``passing_score`` passes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class QuestionType(str, Enum):
    """Supported quiz question types."""

    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"


class Quiz(Base, table=True):
    """Assessment attached to a unit or a lesson.

    Table: quizzes
    """

    __tablename__ = "quizzes"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: Optional[int] = Field(default=None, foreign_key="units.id", index=True)
    lesson_id: Optional[int] = Field(default=None, foreign_key="lessons.id", index=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    passing_score: int = Field(default=70, ge=0, le=100)
    time_limit: Optional[int] = Field(default=None, description="Time limit in minutes")
    is_published: bool = Field(default=False)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class QuizQuestion(Base, table=True):
    """Question of a quiz.

    ``correct_answer`` is ``{"value": ...}`` for single choice, true/false
    and short answer questions (short answers may add ``alternatives``) and
    ``{"values": [...]}`` for multiple choice questions.

    Table: quiz_questions
    """

    __tablename__ = "quiz_questions"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quizzes.id", index=True)
    question: str
    type: str = Field(max_length=50)
    options: List[Any] = Field(default_factory=list, sa_type=JSON)
    correct_answer: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    explanation: Optional[str] = Field(default=None)
    points: int = Field(default=1)
    order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_correct(self, answer: Any) -> bool:
        expected = self.correct_answer or {}
        if self.type == QuestionType.SINGLE_CHOICE.value:
            return answer == expected.get("value")
        if self.type == QuestionType.MULTIPLE_CHOICE.value:
            if not isinstance(answer, list):
                return False
            try:
                return sorted(answer) == sorted(expected.get("values") or [])
            except TypeError:
                return False
        if self.type == QuestionType.TRUE_FALSE.value:
            return _as_bool(answer) is not None and _as_bool(answer) == _as_bool(expected.get("value"))
        if self.type == QuestionType.SHORT_ANSWER.value:
            if answer is None:
                return False
            given = str(answer).strip().lower()
            accepted = [expected.get("value"), *(expected.get("alternatives") or [])]
            return any(given == str(value).strip().lower() for value in accepted if value is not None)
        return False


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return None


class QuizAttempt(Base, table=True):
    """One graded quiz submission.

    Table: quiz_attempts
    """

    __tablename__ = "quiz_attempts"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    quiz_id: int = Field(foreign_key="quizzes.id", index=True)
    answers: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    score: float = Field(default=0.0)
    passed: bool = Field(default=False)
    question_results: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    time_spent: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)
