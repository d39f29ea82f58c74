"""
Progress and attempt I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from lingua_learn.core.database.entities import ProgressStatus


class ProgressUpdate(BaseModel):
    status: ProgressStatus
    meta_data: Optional[Dict[str, Any]] = None


class ProgressRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    trackable_type: str
    trackable_id: int
    status: str
    meta_data: Dict[str, Any] = Field(default_factory=dict)
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ExerciseAttemptRequest(BaseModel):
    answer: Any
    time_spent: Optional[int] = Field(default=None, ge=0)


class ExerciseAttemptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_id: int
    answer: Any = None
    is_correct: bool
    time_spent: Optional[int] = None
    created_at: datetime
