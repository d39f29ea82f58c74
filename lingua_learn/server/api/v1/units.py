"""
Unit Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.content import LessonReorder, UnitCreate, UnitUpdate
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_current_user, get_request_context, require_admin
from lingua_learn.server.services.lessons import LessonService
from lingua_learn.server.services.progress import ProgressService
from lingua_learn.server.services.units import UnitService

router = APIRouter(tags=["units"])


@router.get(
    "/{unit_id}",
    summary="Get Unit",
    description="A unit with its lessons and the ids of the neighbouring units.",
    responses={200: {"description": "Unit found"}, 404: {"description": "Unit not found"}},
)
async def get_unit(unit_id: int, session: AsyncSession = Depends(get_session)):
    return success_response(await UnitService(session).show(unit_id))


@router.get("/{unit_id}/lessons", summary="List Lessons of a Unit")
async def list_lessons(
    unit_id: int,
    with_sections: bool = Query(default=False),
    with_vocabulary: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await LessonService(session).list_for_unit(unit_id, with_sections, with_vocabulary))


@router.get("/{unit_id}/guide-book", summary="Unit Guide Book")
async def unit_guide_book(unit_id: int, session: AsyncSession = Depends(get_session)):
    return success_response(await UnitService(session).guide_book(unit_id))


@router.get("/{unit_id}/progress", summary="Unit Progress")
async def unit_progress(
    unit_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await ProgressService(session, user.id).unit_progress(unit_id))


@router.post(
    "",
    status_code=201,
    summary="Create Unit",
    description="Create a unit. Without an order it is appended; with one, later units move down.",
    responses={201: {"description": "Unit created"}, 404: {"description": "Learning path not found"}},
)
async def create_unit(
    payload: UnitCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    unit = await UnitService(session, admin, context).create(payload)
    return created_response(unit, "Unit created successfully")


@router.put("/{unit_id}", summary="Update Unit")
async def update_unit(
    unit_id: int,
    payload: UnitUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    unit = await UnitService(session, admin, context).update(unit_id, payload)
    return success_response(unit, "Unit updated successfully")


@router.delete(
    "/{unit_id}",
    status_code=204,
    summary="Delete Unit",
    responses={204: {"description": "Deleted"}, 400: {"description": "Learning path is published"}},
)
async def delete_unit(
    unit_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await UnitService(session, admin, context).delete(unit_id)
    return no_content_response()


@router.post(
    "/{unit_id}/clone",
    status_code=201,
    summary="Clone Unit",
    description="Deep copy a unit with its lessons, sections, exercises and vocabulary to the end of its path.",
)
async def clone_unit(
    unit_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    unit = await UnitService(session, admin, context).clone(unit_id)
    return created_response(unit, "Unit cloned successfully")


@router.post("/{unit_id}/lessons/reorder", summary="Reorder Lessons")
async def reorder_lessons(
    unit_id: int,
    payload: LessonReorder,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    lessons = await LessonService(session, admin, context).reorder(unit_id, payload.lessons)
    return success_response(lessons, "Lessons reordered successfully")
