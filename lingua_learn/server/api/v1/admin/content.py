"""
Admin Content Management Endpoints.

Learning paths by status, bulk status changes and the nested JSON document
used for export, preview and import. The fixed paths are declared before
``/{status}`` so they are matched first.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.admin import BulkIds, ContentImport
from lingua_learn.core.models.io.content import LearningPathRead
from lingua_learn.server.api.responses import created_response, paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.content_transfer import ContentTransferService
from lingua_learn.server.services.deps import get_request_context, require_admin

router = APIRouter(tags=["admin-content"])


@router.post("/bulk-publish", summary="Bulk Publish Learning Paths")
async def bulk_publish(
    payload: BulkIds,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    results = await ContentTransferService(session, admin, context).bulk_publish(payload.ids)
    return success_response(results, "Bulk publish completed")


@router.post("/bulk-archive", summary="Bulk Archive Learning Paths")
async def bulk_archive(
    payload: BulkIds,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    results = await ContentTransferService(session, admin, context).bulk_archive(payload.ids)
    return success_response(results, "Bulk archive completed")


@router.post(
    "/bulk-delete",
    summary="Bulk Delete Learning Paths",
    description="Published paths are refused per item; the others are deleted with their whole tree.",
)
async def bulk_delete(
    payload: BulkIds,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    results = await ContentTransferService(session, admin, context).bulk_delete(payload.ids)
    return success_response(results, "Bulk delete completed")


@router.get("/export/{learning_path_id}", summary="Export Learning Path")
async def export_learning_path(
    learning_path_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    document = await ContentTransferService(session, admin, context).export(learning_path_id)
    return success_response(document)


@router.get("/preview/{learning_path_id}", summary="Preview Learning Path")
async def preview_learning_path(
    learning_path_id: int,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await ContentTransferService(session, admin).document(learning_path_id))


@router.post(
    "/import",
    status_code=201,
    summary="Import Learning Path",
    description="Create a draft learning path from an exported document in one transaction.",
    responses={201: {"description": "Learning path imported"}, 422: {"description": "Malformed document"}},
)
async def import_learning_path(
    payload: ContentImport,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    path = await ContentTransferService(session, admin, context).import_document(payload.document)
    return created_response(LearningPathRead.model_validate(path), "Content imported successfully")


@router.get(
    "/{status}",
    summary="List Learning Paths By Status",
    responses={200: {"description": "Learning paths"}, 404: {"description": "Unknown status"}},
)
async def list_by_status(
    status: str,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    result = await ContentTransferService(session).by_status(status, page, per_page)
    return paginated_response(result, transform=LearningPathRead.model_validate)
