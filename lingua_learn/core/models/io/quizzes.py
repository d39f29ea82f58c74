"""
Quiz I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lingua_learn.core.database.entities import QuestionType


class QuizCreate(BaseModel):
    unit_id: Optional[int] = None
    lesson_id: Optional[int] = None
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    passing_score: int = Field(default=70, ge=0, le=100)
    time_limit: Optional[int] = Field(default=None, ge=1)
    is_published: bool = False
    order: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _has_parent(self) -> "QuizCreate":
        if self.unit_id is None and self.lesson_id is None:
            raise ValueError("A quiz must belong to a unit or a lesson.")
        return self


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)
    time_limit: Optional[int] = Field(default=None, ge=1)
    is_published: Optional[bool] = None
    order: Optional[int] = Field(default=None, ge=1)


class QuizRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unit_id: Optional[int] = None
    lesson_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    passing_score: int
    time_limit: Optional[int] = None
    is_published: bool
    order: int
    created_at: datetime
    updated_at: datetime


class QuizQuestionCreate(BaseModel):
    question: str = Field(min_length=1)
    type: QuestionType
    options: List[Any] = Field(default_factory=list)
    correct_answer: Dict[str, Any]
    explanation: Optional[str] = None
    points: int = Field(default=1, ge=1)
    order: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _answer_matches_type(self) -> "QuizQuestionCreate":
        if self.type == QuestionType.MULTIPLE_CHOICE:
            if not isinstance(self.correct_answer.get("values"), list):
                raise ValueError("Multiple choice questions need correct_answer.values as a list.")
        elif "value" not in self.correct_answer:
            raise ValueError("correct_answer.value is required.")
        if self.type in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE) and len(self.options) < 2:
            raise ValueError("Choice questions need at least two options.")
        return self


class QuizQuestionUpdate(BaseModel):
    question: Optional[str] = Field(default=None, min_length=1)
    type: Optional[QuestionType] = None
    options: Optional[List[Any]] = None
    correct_answer: Optional[Dict[str, Any]] = None
    explanation: Optional[str] = None
    points: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=1)


class QuizQuestionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    question: str
    type: str
    options: List[Any] = Field(default_factory=list)
    correct_answer: Dict[str, Any] = Field(default_factory=dict)
    explanation: Optional[str] = None
    points: int
    order: int


class QuizQuestionPublic(BaseModel):
    """Question as shown to learners, without the answer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    type: str
    options: List[Any] = Field(default_factory=list)
    points: int
    order: int


class QuizSubmit(BaseModel):
    answers: Dict[str, Any]
    time_spent: Optional[int] = Field(default=None, ge=0)


class QuizAttemptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    score: float
    passed: bool
    time_spent: Optional[int] = None
    question_results: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime
