"""
Exercise Endpoints.

Admins author exercises; learners submit attempts and read their history.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.content import ExerciseCreate, ExerciseUpdate
from lingua_learn.core.models.io.progress import ExerciseAttemptRead, ExerciseAttemptRequest
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_current_user, get_request_context, require_admin
from lingua_learn.server.services.exercises import ExerciseService

router = APIRouter(tags=["exercises"])


@router.post(
    "",
    status_code=201,
    summary="Create Exercise",
    description="Create an exercise. The content is validated against the rules of its type.",
    responses={201: {"description": "Exercise created"}, 422: {"description": "Invalid exercise content"}},
)
async def create_exercise(
    payload: ExerciseCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    exercise = await ExerciseService(session, admin, context).create(payload)
    return created_response(exercise, "Exercise created successfully")


@router.put("/{exercise_id}", summary="Update Exercise")
async def update_exercise(
    exercise_id: int,
    payload: ExerciseUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    exercise = await ExerciseService(session, admin, context).update(exercise_id, payload)
    return success_response(exercise, "Exercise updated successfully")


@router.delete("/{exercise_id}", status_code=204, summary="Delete Exercise")
async def delete_exercise(
    exercise_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await ExerciseService(session, admin, context).delete(exercise_id)
    return no_content_response()


@router.post("/{exercise_id}/clone", status_code=201, summary="Clone Exercise")
async def clone_exercise(
    exercise_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    exercise = await ExerciseService(session, admin, context).clone(exercise_id)
    return created_response(exercise, "Exercise cloned successfully")


@router.post(
    "/{exercise_id}/attempt",
    summary="Submit Exercise Attempt",
    description="Grade an answer, record the attempt and update the learner's progress.",
    responses={200: {"description": "Attempt graded"}, 404: {"description": "Exercise not found"}},
)
async def attempt_exercise(
    exercise_id: int,
    payload: ExerciseAttemptRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Submit an answer.

    The response contains ``correct``, ``feedback`` and the running number of
    ``attempts``; ``correct_answer`` is only included for wrong answers.
    """
    result = await ExerciseService(session, user).attempt(user, exercise_id, payload.answer, payload.time_spent)
    return success_response(result)


@router.get("/{exercise_id}/attempts", summary="Exercise Attempt History")
async def exercise_attempts(
    exercise_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    attempts = await ExerciseService(session, user).attempts(user, exercise_id)
    return success_response([ExerciseAttemptRead.model_validate(attempt) for attempt in attempts])
