"""
Exercise Service.

Validates type-specific exercise content, keeps exercise order dense within
a section, and grades learner attempts. Grading writes the attempt and the
learner's exercise progress in the same transaction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import (
    Exercise,
    ExerciseAttempt,
    ExerciseType,
    ProgressStatus,
    Section,
    TrackableType,
    User,
)
from lingua_learn.core.errors import ValidationFailedError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.content import ExerciseCreate, ExerciseUpdate
from lingua_learn.core.monitoring import log_attempt

from .audit import snapshot
from .base import BaseService
from .content_tree import children, copy_row, delete_exercise_rows, ensure_not_published, get_or_404
from .ordering import SiblingOrdering
from .progress import get_or_create_progress

logger = get_logger(__name__)

AREA = "exercise"
exercise_ordering = SiblingOrdering(Exercise, "section_id", "exercise")

MANUAL_REVIEW_TYPES = (ExerciseType.WRITING.value, ExerciseType.SPEAKING.value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def exercise_content_errors(exercise_type: str, content: Any) -> Dict[str, List[str]]:
    """Return ``{"content.<field>": [messages]}`` for every rule ``content`` breaks."""
    errors: Dict[str, List[str]] = {}

    def add(field: str, message: str) -> None:
        errors.setdefault(f"content.{field}", []).append(message)

    if not isinstance(content, dict):
        return {"content": ["The content must be an object."]}

    if exercise_type == ExerciseType.MULTIPLE_CHOICE.value:
        if not isinstance(content.get("question"), str) or not content["question"].strip():
            add("question", "The question field is required.")
        options = content.get("options")
        if not isinstance(options, list) or len(options) < 2:
            add("options", "At least two options are required.")
        if "correct" not in content:
            add("correct", "The correct answer is required.")
        elif isinstance(options, list) and content["correct"] not in options:
            add("correct", "The correct answer must be one of the options.")

    elif exercise_type == ExerciseType.FILL_BLANK.value:
        if not isinstance(content.get("text"), str) or not content["text"].strip():
            add("text", "The text field is required.")
        blanks = content.get("blanks")
        if not isinstance(blanks, list) or len(blanks) < 1:
            add("blanks", "At least one blank is required.")
        if not isinstance(content.get("correct"), list):
            add("correct", "The correct answers must be a list.")

    elif exercise_type == ExerciseType.MATCHING.value:
        items = content.get("items")
        matches = content.get("matches")
        if not isinstance(items, list) or len(items) < 2:
            add("items", "At least two items are required.")
        if not isinstance(matches, list):
            add("matches", "The matches field must be a list.")
        elif isinstance(items, list) and len(matches) != len(items):
            add("matches", "The number of matches must equal the number of items.")

    elif exercise_type == ExerciseType.WRITING.value:
        if not isinstance(content.get("prompt"), str) or not content["prompt"].strip():
            add("prompt", "The prompt field is required.")
        min_words = content.get("min_words")
        max_words = content.get("max_words")
        if not isinstance(min_words, int) or isinstance(min_words, bool) or min_words < 1:
            add("min_words", "The minimum word count must be at least 1.")
        if not isinstance(max_words, int) or isinstance(max_words, bool):
            add("max_words", "The maximum word count is required.")
        elif isinstance(min_words, int) and max_words <= min_words:
            add("max_words", "The maximum word count must be greater than the minimum.")

    elif exercise_type == ExerciseType.SPEAKING.value:
        if not isinstance(content.get("prompt"), str) or not content["prompt"].strip():
            add("prompt", "The prompt field is required.")
        duration = content.get("duration")
        if not _is_number(duration) or not 5 <= duration <= 300:
            add("duration", "The duration must be between 5 and 300 seconds.")

    else:
        errors["type"] = ["The selected type is invalid."]

    return errors


def validate_exercise_content(exercise_type: str, content: Any) -> None:
    errors = exercise_content_errors(exercise_type, content)
    if errors:
        raise ValidationFailedError(errors)


class ExerciseService(BaseService):
    """Admin authoring and learner grading for exercises."""

    async def list_for_section(self, section_id: int, include_answers: bool = False) -> List[Dict[str, Any]]:
        await get_or_404(self.session, Section, section_id)
        exercises = await children(self.session, Exercise, "section_id", section_id)
        return [self.present(exercise, include_answers) for exercise in exercises]

    @staticmethod
    def present(exercise: Exercise, include_answers: bool = False) -> Dict[str, Any]:
        return {
            "id": exercise.id,
            "section_id": exercise.section_id,
            "type": exercise.type,
            "content": dict(exercise.content or {}) if include_answers else exercise.learner_content(),
            "order": exercise.order,
        }

    async def create(self, payload: ExerciseCreate) -> Exercise:
        await get_or_404(self.session, Section, payload.section_id)
        validate_exercise_content(payload.type.value, payload.content)
        exercise = Exercise(section_id=payload.section_id, type=payload.type.value, content=payload.content)
        await exercise_ordering.place(self.session, exercise, payload.order)
        self.session.add(exercise)
        await self.session.flush()
        self.audit.created(AREA, exercise)
        await self.session.commit()
        await self.session.refresh(exercise)
        logger.info(f"Created exercise {exercise.id} in section {exercise.section_id}")
        return exercise

    async def update(self, exercise_id: int, payload: ExerciseUpdate) -> Exercise:
        exercise = await get_or_404(self.session, Exercise, exercise_id)
        old_values = snapshot(exercise)
        exercise_type = payload.type.value if payload.type else exercise.type
        if payload.type is not None or payload.content is not None:
            content = payload.content if payload.content is not None else exercise.content
            validate_exercise_content(exercise_type, content)
            exercise.type = exercise_type
            exercise.content = content
        if payload.order is not None:
            await exercise_ordering.move(self.session, exercise, payload.order)
        exercise.updated_at = utc_now()
        self.audit.updated(AREA, exercise, old_values)
        await self.session.commit()
        await self.session.refresh(exercise)
        return exercise

    async def delete(self, exercise_id: int) -> None:
        exercise = await get_or_404(self.session, Exercise, exercise_id)
        await ensure_not_published(self.session, exercise, "exercise")
        old_values = snapshot(exercise)
        section_id, order = exercise.section_id, exercise.order
        await delete_exercise_rows(self.session, Exercise.id == exercise_id)
        await exercise_ordering.close_gap(self.session, section_id, order)
        self.audit.deleted(AREA, old_values, exercise_id)
        await self.session.commit()
        logger.info(f"Deleted exercise {exercise_id}")

    async def clone(self, exercise_id: int) -> Exercise:
        exercise = await get_or_404(self.session, Exercise, exercise_id)
        order = await exercise_ordering.next_order(self.session, exercise.section_id)
        copy = copy_row(exercise, order=order, content=dict(exercise.content or {}))
        self.session.add(copy)
        await self.session.flush()
        self.audit.created(AREA, copy, meta_data={"cloned_from": exercise.id})
        await self.session.commit()
        await self.session.refresh(copy)
        return copy

    async def reorder(self, section_id: int, ids: List[int]) -> List[Exercise]:
        await get_or_404(self.session, Section, section_id)
        ordered = await exercise_ordering.reorder(self.session, section_id, ids)
        self.audit.record("reordered", "section", section_id, new_values={"exercises": list(ids)})
        await self.session.commit()
        return ordered

    # ------------------------------------------------------------------
    # Attempts
    # ------------------------------------------------------------------

    async def attempt(self, user: User, exercise_id: int, answer: Any, time_spent: Optional[int] = None) -> Dict[str, Any]:
        """Grade ``answer`` and record the attempt and progress atomically."""
        exercise = await get_or_404(self.session, Exercise, exercise_id)
        correct = exercise.check_answer(answer)

        self.session.add(
            ExerciseAttempt(
                user_id=user.id,
                exercise_id=exercise.id,
                answer=answer,
                is_correct=correct,
                time_spent=time_spent,
            )
        )

        progress = await get_or_create_progress(self.session, user.id, TrackableType.EXERCISE.value, exercise.id)
        meta = progress.meta_data or {}
        attempts = int(meta.get("attempts", 0)) + 1
        if not progress.is_completed:
            progress.set_status(ProgressStatus.COMPLETED.value if correct else ProgressStatus.FAILED.value)
        progress.merge_meta(
            attempts=attempts,
            last_attempt_at=utc_now().isoformat(),
            correct=correct,
            time_spent=int(meta.get("time_spent", 0)) + (time_spent or 0),
        )
        await self.session.commit()
        log_attempt("exercise", exercise.id, user.id, correct)

        if correct:
            feedback = "Correct!"
        elif exercise.type in MANUAL_REVIEW_TYPES:
            feedback = "Your answer has been submitted for review."
        else:
            feedback = "Incorrect. Try again."
        result: Dict[str, Any] = {"correct": correct, "feedback": feedback, "attempts": attempts}
        if not correct:
            result["correct_answer"] = exercise.hint()
        return result

    async def attempts(self, user: User, exercise_id: int) -> List[ExerciseAttempt]:
        await get_or_404(self.session, Exercise, exercise_id)
        result = await self.session.execute(
            select(ExerciseAttempt)
            .where(ExerciseAttempt.user_id == user.id, ExerciseAttempt.exercise_id == exercise_id)
            .order_by(ExerciseAttempt.created_at.desc(), ExerciseAttempt.id.desc())
        )
        return list(result.scalars().all())
