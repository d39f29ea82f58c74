"""
Quiz Endpoints.

Learners read quizzes (without answers), submit them and see their history;
admins manage quizzes and questions and read aggregate statistics.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.quizzes import (
    QuizCreate,
    QuizQuestionCreate,
    QuizQuestionRead,
    QuizQuestionUpdate,
    QuizRead,
    QuizSubmit,
    QuizUpdate,
)
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_current_user, get_optional_user, get_request_context, require_admin
from lingua_learn.server.services.quizzes import QuizService

router = APIRouter(tags=["quizzes"])
question_router = APIRouter(tags=["quizzes"])


@router.get("", summary="List Quizzes", description="Quizzes of a unit or lesson, in order.")
async def list_quizzes(
    unit_id: Optional[int] = Query(default=None),
    lesson_id: Optional[int] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    quizzes = await QuizService(session).list(unit_id, lesson_id)
    return success_response([QuizRead.model_validate(quiz) for quiz in quizzes])


@router.get(
    "/{quiz_id}",
    summary="Get Quiz",
    description="A quiz with its questions, without answers. Signed-in learners also get their attempt count and best score.",
)
async def get_quiz(
    quiz_id: int,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await QuizService(session).public_view(quiz_id, user))


@router.post(
    "/{quiz_id}/submit",
    summary="Submit Quiz",
    description="Grade the answers (keyed by question id), record the attempt and update progress.",
    responses={200: {"description": "Quiz graded"}, 404: {"description": "Quiz not found"}},
)
async def submit_quiz(
    quiz_id: int,
    payload: QuizSubmit,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    result = await QuizService(session, user).submit(user, quiz_id, payload.answers, payload.time_spent)
    return success_response(result)


@router.get("/{quiz_id}/history", summary="Quiz History", description="The current user's attempts with summary stats.")
async def quiz_history(
    quiz_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await QuizService(session, user).history(user, quiz_id))


@router.get("/{quiz_id}/statistics", summary="Quiz Statistics", description="Aggregate results of all learners.")
async def quiz_statistics(
    quiz_id: int,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await QuizService(session, admin).statistics(quiz_id))


@router.post("", status_code=201, summary="Create Quiz")
async def create_quiz(
    payload: QuizCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    quiz = await QuizService(session, admin, context).create(payload)
    return created_response(QuizRead.model_validate(quiz), "Quiz created successfully")


@router.put("/{quiz_id}", summary="Update Quiz")
async def update_quiz(
    quiz_id: int,
    payload: QuizUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    quiz = await QuizService(session, admin, context).update(quiz_id, payload)
    return success_response(QuizRead.model_validate(quiz), "Quiz updated successfully")


@router.delete("/{quiz_id}", status_code=204, summary="Delete Quiz")
async def delete_quiz(
    quiz_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await QuizService(session, admin, context).delete(quiz_id)
    return no_content_response()


@router.get("/{quiz_id}/questions", summary="List Quiz Questions", description="Questions with their answers (admin).")
async def list_questions(
    quiz_id: int,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    detail = await QuizService(session, admin).detail(quiz_id)
    return success_response([QuizQuestionRead.model_validate(question) for question in detail["questions"]])


@router.post("/{quiz_id}/questions", status_code=201, summary="Add Quiz Question")
async def add_question(
    quiz_id: int,
    payload: QuizQuestionCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    question = await QuizService(session, admin, context).add_question(quiz_id, payload)
    return created_response(QuizQuestionRead.model_validate(question), "Question created successfully")


@question_router.put("/{question_id}", summary="Update Quiz Question")
async def update_question(
    question_id: int,
    payload: QuizQuestionUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    question = await QuizService(session, admin, context).update_question(question_id, payload)
    return success_response(QuizQuestionRead.model_validate(question), "Question updated successfully")


@question_router.delete("/{question_id}", status_code=204, summary="Delete Quiz Question")
async def delete_question(
    question_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await QuizService(session, admin, context).delete_question(question_id)
    return no_content_response()
