"""
Lesson Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.content import LessonCreate, LessonUpdate, SectionReorder
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_current_user, get_request_context, require_admin
from lingua_learn.server.services.lessons import LessonService
from lingua_learn.server.services.progress import ProgressService
from lingua_learn.server.services.sections import SectionService

router = APIRouter(tags=["lessons"])


@router.get(
    "/{lesson_id}",
    summary="Get Lesson",
    description="A lesson with its sections, vocabulary and the ids of the neighbouring lessons.",
    responses={200: {"description": "Lesson found"}, 404: {"description": "Lesson not found"}},
)
async def get_lesson(lesson_id: int, session: AsyncSession = Depends(get_session)):
    return success_response(await LessonService(session).show(lesson_id))


@router.get("/{lesson_id}/sections", summary="List Sections of a Lesson")
async def list_sections(
    lesson_id: int,
    with_exercises: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await SectionService(session).list_for_lesson(lesson_id, with_exercises))


@router.get("/{lesson_id}/vocabulary", summary="Lesson Vocabulary")
async def lesson_vocabulary(lesson_id: int, session: AsyncSession = Depends(get_session)):
    return success_response(await LessonService(session).vocabulary(lesson_id))


@router.get("/{lesson_id}/progress", summary="Lesson Progress")
async def lesson_progress(
    lesson_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await ProgressService(session, user.id).lesson_progress(lesson_id))


@router.post(
    "",
    status_code=201,
    summary="Create Lesson",
    description="Create a lesson, optionally with vocabulary items.",
    responses={201: {"description": "Lesson created"}, 404: {"description": "Unit not found"}},
)
async def create_lesson(
    payload: LessonCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    lesson = await LessonService(session, admin, context).create(payload)
    return created_response(lesson, "Lesson created successfully")


@router.put(
    "/{lesson_id}",
    summary="Update Lesson",
    description="Update a lesson. ``vocabulary_items`` entries are removed (``_remove``), updated (``id``) or created.",
)
async def update_lesson(
    lesson_id: int,
    payload: LessonUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    lesson = await LessonService(session, admin, context).update(lesson_id, payload)
    return success_response(lesson, "Lesson updated successfully")


@router.delete("/{lesson_id}", status_code=204, summary="Delete Lesson")
async def delete_lesson(
    lesson_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await LessonService(session, admin, context).delete(lesson_id)
    return no_content_response()


@router.post("/{lesson_id}/clone", status_code=201, summary="Clone Lesson")
async def clone_lesson(
    lesson_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    lesson = await LessonService(session, admin, context).clone(lesson_id)
    return created_response(lesson, "Lesson cloned successfully")


@router.post("/{lesson_id}/sections/reorder", summary="Reorder Sections")
async def reorder_sections(
    lesson_id: int,
    payload: SectionReorder,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    sections = await SectionService(session, admin, context).reorder(lesson_id, payload.sections)
    return success_response(sections, "Sections reordered successfully")
