"""
Quiz Service.

Authoring of quizzes and their questions, grading of submissions and the
per-learner and per-quiz statistics built from ``quiz_attempts``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from lingua_learn.core.database import utc_now
from lingua_learn.core.database.entities import (
    Lesson,
    ProgressStatus,
    Quiz,
    QuizAttempt,
    QuizQuestion,
    TrackableType,
    Unit,
    User,
)
from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.models.io.quizzes import QuizCreate, QuizQuestionCreate, QuizQuestionUpdate, QuizUpdate
from lingua_learn.core.monitoring import log_attempt

from .audit import snapshot
from .base import BaseService
from .content_tree import children, delete_quiz_tree, get_or_404
from .progress import get_or_create_progress

logger = get_logger(__name__)

AREA = "quiz"


def calculate_score(questions: List[QuizQuestion], answers: Dict[str, Any]) -> float:
    """Percentage of ``questions`` answered correctly, rounded to 2 decimals."""
    if not questions:
        return 0.0
    correct = sum(1 for question in questions if question.is_correct(_answer_for(answers, question.id)))
    return round(correct / len(questions) * 100, 2)


def _answer_for(answers: Dict[str, Any], question_id: int) -> Any:
    if str(question_id) in answers:
        return answers[str(question_id)]
    return answers.get(question_id)


def _average(values: List[float]) -> Optional[float]:
    return round(sum(values) / len(values), 2) if values else None


class QuizService(BaseService):
    async def questions(self, quiz_id: int) -> List[QuizQuestion]:
        return await children(self.session, QuizQuestion, "quiz_id", quiz_id)

    @staticmethod
    def _parent_filter(quiz: Quiz):
        if quiz.unit_id is not None:
            return Quiz.unit_id == quiz.unit_id
        return Quiz.lesson_id == quiz.lesson_id

    # ------------------------------------------------------------------
    # Authoring
    # ------------------------------------------------------------------

    async def list(self, unit_id: Optional[int] = None, lesson_id: Optional[int] = None) -> List[Quiz]:
        stmt = select(Quiz)
        if unit_id is not None:
            stmt = stmt.where(Quiz.unit_id == unit_id)
        if lesson_id is not None:
            stmt = stmt.where(Quiz.lesson_id == lesson_id)
        result = await self.session.execute(stmt.order_by(Quiz.order, Quiz.id))
        return list(result.scalars().all())

    async def detail(self, quiz_id: int) -> Dict[str, Any]:
        quiz = await get_or_404(self.session, Quiz, quiz_id)
        data = quiz.model_dump()
        data["questions"] = await self.questions(quiz.id)
        return data

    async def create(self, payload: QuizCreate) -> Quiz:
        if payload.unit_id is not None:
            await get_or_404(self.session, Unit, payload.unit_id)
        if payload.lesson_id is not None:
            await get_or_404(self.session, Lesson, payload.lesson_id)
        quiz = Quiz(**payload.model_dump(exclude={"order"}))
        if payload.order is None:
            result = await self.session.execute(select(func.max(Quiz.order)).where(self._parent_filter(quiz)))
            quiz.order = (result.scalar() or 0) + 1
        else:
            quiz.order = payload.order
        self.session.add(quiz)
        await self.session.flush()
        self.audit.created(AREA, quiz)
        await self.session.commit()
        await self.session.refresh(quiz)
        logger.info(f"Created quiz {quiz.id} '{quiz.title}'")
        return quiz

    async def update(self, quiz_id: int, payload: QuizUpdate) -> Quiz:
        quiz = await get_or_404(self.session, Quiz, quiz_id)
        old_values = snapshot(quiz)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(quiz, field, value)
        quiz.updated_at = utc_now()
        self.audit.updated(AREA, quiz, old_values)
        await self.session.commit()
        await self.session.refresh(quiz)
        return quiz

    async def delete(self, quiz_id: int) -> None:
        quiz = await get_or_404(self.session, Quiz, quiz_id)
        old_values = snapshot(quiz)
        await delete_quiz_tree(self.session, quiz.id)
        self.audit.deleted(AREA, old_values, quiz_id)
        await self.session.commit()
        logger.info(f"Deleted quiz {quiz_id}")

    async def add_question(self, quiz_id: int, payload: QuizQuestionCreate) -> QuizQuestion:
        await get_or_404(self.session, Quiz, quiz_id)
        question = QuizQuestion(quiz_id=quiz_id, **payload.model_dump(exclude={"order", "type"}), type=payload.type.value)
        if payload.order is None:
            result = await self.session.execute(select(func.max(QuizQuestion.order)).where(QuizQuestion.quiz_id == quiz_id))
            question.order = (result.scalar() or 0) + 1
        else:
            question.order = payload.order
        self.session.add(question)
        await self.session.flush()
        self.audit.created("quiz_question", question)
        await self.session.commit()
        await self.session.refresh(question)
        return question

    async def update_question(self, question_id: int, payload: QuizQuestionUpdate) -> QuizQuestion:
        question = await get_or_404(self.session, QuizQuestion, question_id)
        old_values = snapshot(question)
        values = payload.model_dump(exclude_unset=True)
        if payload.type is not None:
            values["type"] = payload.type.value
        for field, value in values.items():
            setattr(question, field, value)
        question.updated_at = utc_now()
        self.audit.updated("quiz_question", question, old_values)
        await self.session.commit()
        await self.session.refresh(question)
        return question

    async def delete_question(self, question_id: int) -> None:
        question = await get_or_404(self.session, QuizQuestion, question_id)
        old_values = snapshot(question)
        await self.session.delete(question)
        self.audit.deleted("quiz_question", old_values, question_id)
        await self.session.commit()

    # ------------------------------------------------------------------
    # Learners
    # ------------------------------------------------------------------

    async def public_view(self, quiz_id: int, user: Optional[User] = None) -> Dict[str, Any]:
        """Quiz with answer-free questions, plus the learner's record when known."""
        quiz = await get_or_404(self.session, Quiz, quiz_id)
        questions = await self.questions(quiz.id)
        data: Dict[str, Any] = {
            "quiz": quiz,
            "questions": [
                {
                    "id": question.id,
                    "question": question.question,
                    "type": question.type,
                    "options": question.options,
                    "points": question.points,
                    "order": question.order,
                }
                for question in questions
            ],
        }
        if user is not None:
            scores = await self._user_scores(quiz.id, user.id)
            data["attempt_count"] = len(scores)
            data["best_score"] = max(scores) if scores else None
        return data

    async def _user_attempts(self, quiz_id: int, user_id: int) -> List[QuizAttempt]:
        result = await self.session.execute(
            select(QuizAttempt)
            .where(QuizAttempt.quiz_id == quiz_id, QuizAttempt.user_id == user_id)
            .order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())
        )
        return list(result.scalars().all())

    async def _user_scores(self, quiz_id: int, user_id: int) -> List[float]:
        return [attempt.score for attempt in await self._user_attempts(quiz_id, user_id)]

    async def submit(self, user: User, quiz_id: int, answers: Dict[str, Any], time_spent: Optional[int] = None) -> Dict[str, Any]:
        """Grade a submission and record the attempt and progress atomically."""
        quiz = await get_or_404(self.session, Quiz, quiz_id)
        questions = await self.questions(quiz.id)
        score = calculate_score(questions, answers)
        passed = score >= quiz.passing_score

        results = []
        feedback = []
        for question in questions:
            answer = _answer_for(answers, question.id)
            correct = question.is_correct(answer)
            results.append({"question_id": question.id, "correct": correct, "answer": answer, "points": question.points})
            item = {"question_id": question.id, "correct": correct, "explanation": question.explanation}
            if not correct:
                item["correct_answer"] = question.correct_answer
            feedback.append(item)

        self.session.add(
            QuizAttempt(
                user_id=user.id,
                quiz_id=quiz.id,
                answers=answers,
                score=score,
                passed=passed,
                question_results=results,
                time_spent=time_spent,
            )
        )

        progress = await get_or_create_progress(self.session, user.id, TrackableType.QUIZ.value, quiz.id)
        meta = progress.meta_data or {}
        best = meta.get("best_score")
        progress.set_status(ProgressStatus.COMPLETED.value if passed else ProgressStatus.FAILED.value)
        progress.merge_meta(
            attempts=int(meta.get("attempts", 0)) + 1,
            last_attempt_at=utc_now().isoformat(),
            best_score=score if best is None else max(best, score),
            latest_score=score,
            passed=passed,
        )
        next_quiz = await self._next_quiz(quiz) if passed else None
        await self.session.commit()
        log_attempt("quiz", quiz.id, user.id, passed, score)

        return {
            "score": score,
            "passed": passed,
            "required_score": quiz.passing_score,
            "feedback": feedback,
            "next_quiz": {"id": next_quiz.id, "title": next_quiz.title} if next_quiz else None,
        }

    async def _next_quiz(self, quiz: Quiz) -> Optional[Quiz]:
        result = await self.session.execute(
            select(Quiz)
            .where(self._parent_filter(quiz), Quiz.order > quiz.order, Quiz.is_published.is_(True))
            .order_by(Quiz.order, Quiz.id)
            .limit(1)
        )
        return result.scalars().first()

    async def history(self, user: User, quiz_id: int) -> Dict[str, Any]:
        await get_or_404(self.session, Quiz, quiz_id)
        attempts = await self._user_attempts(quiz_id, user.id)
        scores = [attempt.score for attempt in attempts]
        return {
            "attempts": [
                {
                    "id": attempt.id,
                    "attempt_date": attempt.created_at,
                    "score": attempt.score,
                    "passed": attempt.passed,
                    "time_spent": attempt.time_spent,
                    "answers": attempt.answers,
                }
                for attempt in attempts
            ],
            "stats": {
                "average_score": _average(scores),
                "best_score": max(scores) if scores else None,
                "total_attempts": len(attempts),
                "pass_rate": round(sum(1 for a in attempts if a.passed) / len(attempts) * 100, 2) if attempts else 0.0,
            },
        }

    async def statistics(self, quiz_id: int) -> Dict[str, Any]:
        await get_or_404(self.session, Quiz, quiz_id)
        result = await self.session.execute(select(QuizAttempt).where(QuizAttempt.quiz_id == quiz_id))
        attempts = list(result.scalars().all())
        question_stats = []
        for question in await self.questions(quiz_id):
            outcomes = [
                item.get("correct")
                for attempt in attempts
                for item in attempt.question_results or []
                if item.get("question_id") == question.id
            ]
            correct = sum(1 for outcome in outcomes if outcome)
            question_stats.append(
                {
                    "question_id": question.id,
                    "question": question.question,
                    "total_answers": len(outcomes),
                    "correct_answers": correct,
                    "correct_rate": round(correct / len(outcomes) * 100, 2) if outcomes else 0.0,
                }
            )
        return {
            "total_attempts": len(attempts),
            "average_score": _average([attempt.score for attempt in attempts]),
            "pass_rate": round(sum(1 for a in attempts if a.passed) / len(attempts) * 100, 2) if attempts else 0.0,
            "question_stats": question_stats,
        }
