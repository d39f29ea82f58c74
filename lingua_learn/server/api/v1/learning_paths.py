"""
Learning Path Endpoints.

Public browsing of learning paths plus the admin operations that create,
edit, publish and delete them. Unit ordering within a path is changed via
``POST /learning-paths/{id}/units/reorder``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.content import LearningPathCreate, LearningPathUpdate, StatusUpdate, UnitReorder
from lingua_learn.server.api.responses import created_response, no_content_response, paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_current_user, get_request_context, require_admin
from lingua_learn.server.services.learning_paths import LearningPathService
from lingua_learn.server.services.progress import ProgressService
from lingua_learn.server.services.units import UnitService

router = APIRouter(tags=["learning-paths"])


@router.get(
    "",
    summary="List Learning Paths",
    description="Paginated learning paths, optionally filtered by status and target level.",
)
async def list_learning_paths(
    status: Optional[str] = Query(default=None),
    target_level: Optional[str] = Query(default=None),
    with_units: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    session: AsyncSession = Depends(get_session),
):
    service = LearningPathService(session)
    result = await service.list(status=status, target_level=target_level, page=page, per_page=per_page)
    if with_units:
        result = replace(result, items=[await service.with_units(path) for path in result.items])
    return paginated_response(result)


@router.get(
    "/level/{level}",
    summary="Learning Paths by Level",
    description="Published learning paths for a target level, each with its units.",
)
async def learning_paths_by_level(level: str, session: AsyncSession = Depends(get_session)):
    return success_response(await LearningPathService(session).by_level(level))


@router.get(
    "/{path_id}",
    summary="Get Learning Path",
    description="A learning path with its units ordered by position.",
    responses={200: {"description": "Learning path found"}, 404: {"description": "Learning path not found"}},
)
async def get_learning_path(path_id: int, session: AsyncSession = Depends(get_session)):
    return success_response(await LearningPathService(session).show(path_id))


@router.get(
    "/{path_id}/units",
    summary="List Units of a Learning Path",
    description="Units in order; lessons, quizzes and guide book entries are included on request.",
)
async def list_units(
    path_id: int,
    with_lessons: bool = Query(default=False),
    with_quizzes: bool = Query(default=False),
    with_guide: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    units = await UnitService(session).list_for_path(path_id, with_lessons, with_quizzes, with_guide)
    return success_response(units)


@router.get(
    "/{path_id}/progress",
    summary="Learning Path Progress",
    description="Completion of the learning path and each of its units for the current user.",
)
async def learning_path_progress(
    path_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await ProgressService(session, user.id).learning_path_progress(path_id))


@router.post(
    "",
    status_code=201,
    summary="Create Learning Path",
    description="Create a learning path. New paths are drafts unless a status is given.",
    responses={201: {"description": "Learning path created"}, 422: {"description": "Validation failed"}},
)
async def create_learning_path(
    payload: LearningPathCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    path = await LearningPathService(session, admin, context).create(payload)
    return created_response(path, "Learning path created successfully")


@router.put("/{path_id}", summary="Update Learning Path", description="Partially update a learning path.")
async def update_learning_path(
    path_id: int,
    payload: LearningPathUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    path = await LearningPathService(session, admin, context).update(path_id, payload)
    return success_response(path, "Learning path updated successfully")


@router.patch(
    "/{path_id}/status",
    summary="Change Learning Path Status",
    description="Move a learning path between draft, published and archived.",
)
async def update_learning_path_status(
    path_id: int,
    payload: StatusUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    path = await LearningPathService(session, admin, context).update_status(path_id, payload.status.value)
    return success_response(path, "Learning path status updated successfully")


@router.delete(
    "/{path_id}",
    status_code=204,
    summary="Delete Learning Path",
    description="Delete a learning path and all of its content. Published paths cannot be deleted.",
    responses={204: {"description": "Deleted"}, 400: {"description": "Learning path is published"}},
)
async def delete_learning_path(
    path_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await LearningPathService(session, admin, context).delete(path_id)
    return no_content_response()


@router.post(
    "/{path_id}/units/reorder",
    summary="Reorder Units",
    description="Assign unit positions 1..n following the given list of unit ids.",
    responses={200: {"description": "Units reordered"}, 400: {"description": "Invalid unit IDs provided."}},
)
async def reorder_units(
    path_id: int,
    payload: UnitReorder,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    units = await UnitService(session, admin, context).reorder(path_id, payload.units)
    return success_response(units, "Units reordered successfully")
