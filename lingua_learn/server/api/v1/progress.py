"""
Progress Endpoints.

Raw access to the current user's progress rows. ``{trackable_type}`` is one
of learning_path, unit, lesson, section, exercise or quiz.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.progress import ProgressRead, ProgressUpdate
from lingua_learn.server.api.responses import paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.deps import get_current_user
from lingua_learn.server.services.progress import ProgressService

router = APIRouter(tags=["progress"])


@router.get("", summary="List Progress", description="The current user's progress rows, newest first.")
async def list_progress(
    type: Optional[str] = Query(default=None, description="Only rows of this content type"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    result = await ProgressService(session, user.id).list(type, page, per_page)
    return paginated_response(result, transform=ProgressRead.model_validate)


@router.get(
    "/{trackable_type}/{trackable_id}",
    summary="Get Progress",
    responses={
        200: {"description": "Progress found"},
        400: {"description": "Invalid content type"},
        404: {"description": "Progress not found"},
    },
)
async def get_progress(
    trackable_type: str,
    trackable_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    row = await ProgressService(session, user.id).get(trackable_type, trackable_id)
    return success_response(ProgressRead.model_validate(row))


@router.post(
    "/{trackable_type}/{trackable_id}",
    summary="Update Progress",
    description="Create or update the current user's progress on a content item.",
    responses={
        200: {"description": "Progress saved"},
        400: {"description": "Invalid content type"},
        404: {"description": "Content not found"},
    },
)
async def update_progress(
    trackable_type: str,
    trackable_id: int,
    payload: ProgressUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    row = await ProgressService(session, user.id).upsert(
        trackable_type, trackable_id, payload.status.value, payload.meta_data
    )
    return success_response(ProgressRead.model_validate(row), "Progress updated successfully")
