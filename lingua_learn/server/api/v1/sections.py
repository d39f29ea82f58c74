"""
Section Endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.content import ExerciseReorder, SectionCreate, SectionUpdate
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_current_user, get_optional_user, get_request_context, require_admin
from lingua_learn.server.services.exercises import ExerciseService
from lingua_learn.server.services.progress import ProgressService
from lingua_learn.server.services.sections import SectionService

router = APIRouter(tags=["sections"])


def _is_admin(user: Optional[User]) -> bool:
    return user is not None and user.is_admin


@router.get(
    "/{section_id}",
    summary="Get Section",
    description="A section with its exercises. Answers are only included for admins.",
)
async def get_section(
    section_id: int,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await SectionService(session).show(section_id, include_answers=_is_admin(user)))


@router.get(
    "/{section_id}/exercises",
    summary="List Exercises of a Section",
    description="Exercises in order. Learners never receive the answer keys.",
)
async def list_exercises(
    section_id: int,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await ExerciseService(session).list_for_section(section_id, include_answers=_is_admin(user)))


@router.get("/{section_id}/progress", summary="Section Progress")
async def section_progress(
    section_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await ProgressService(session, user.id).section_progress(section_id))


@router.post(
    "",
    status_code=201,
    summary="Create Section",
    description="Create a section, optionally with exercises.",
    responses={201: {"description": "Section created"}, 422: {"description": "Invalid exercise content"}},
)
async def create_section(
    payload: SectionCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    section = await SectionService(session, admin, context).create(payload)
    return created_response(section, "Section created successfully")


@router.put("/{section_id}", summary="Update Section")
async def update_section(
    section_id: int,
    payload: SectionUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    section = await SectionService(session, admin, context).update(section_id, payload)
    return success_response(section, "Section updated successfully")


@router.delete("/{section_id}", status_code=204, summary="Delete Section")
async def delete_section(
    section_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await SectionService(session, admin, context).delete(section_id)
    return no_content_response()


@router.post("/{section_id}/exercises/reorder", summary="Reorder Exercises")
async def reorder_exercises(
    section_id: int,
    payload: ExerciseReorder,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    exercises = await ExerciseService(session, admin, context).reorder(section_id, payload.exercises)
    return success_response(exercises, "Exercises reordered successfully")
