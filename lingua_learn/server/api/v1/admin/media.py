"""
Admin Media Endpoints.

Upload, list, delete and reorder files attached to content rows.
"""

from __future__ import annotations

import json
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.errors import ValidationFailedError
from lingua_learn.core.models.io.media import MediaRead, MediaReorder
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.deps import require_admin
from lingua_learn.server.services.media import MediaService

router = APIRouter(tags=["admin-media"])


def _custom_properties(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationFailedError.single("custom_properties", "The custom properties must be valid JSON.")
    if not isinstance(value, dict):
        raise ValidationFailedError.single("custom_properties", "The custom properties must be a JSON object.")
    return value


@router.post(
    "",
    status_code=201,
    summary="Upload Media",
    description="Attach a file to a content row in the given collection.",
    responses={
        201: {"description": "Media stored"},
        415: {"description": "The collection does not accept this file type"},
        422: {"description": "Empty, oversized or malformed upload"},
    },
)
async def upload_media(
    file: UploadFile = File(...),
    model_type: str = Form(...),
    model_id: int = Form(...),
    collection_name: str = Form(default="default"),
    custom_properties: Optional[str] = Form(default=None),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    properties = _custom_properties(custom_properties)
    service = MediaService(session)
    media = await service.add_media(model_type, model_id, file, collection_name, properties)
    await service.commit()
    await session.refresh(media)
    return created_response(MediaRead.from_entity(media), "Media uploaded successfully")


@router.get("", summary="List Media")
async def list_media(
    model_type: Optional[str] = Query(default=None),
    model_id: Optional[int] = Query(default=None),
    collection_name: Optional[str] = Query(default=None),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    media = await MediaService(session).list(model_type, model_id, collection_name)
    return success_response([MediaRead.from_entity(item) for item in media])


@router.delete("/{media_id}", status_code=204, summary="Delete Media")
async def delete_media(media_id: int, admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    service = MediaService(session)
    await service.delete_media(await service.get(media_id))
    await service.commit()
    return no_content_response()


@router.post(
    "/reorder",
    summary="Reorder Media",
    description="Set ``order`` 1..n following the given list of media ids.",
    responses={200: {"description": "Media reordered"}, 400: {"description": "Unknown or duplicate media ids"}},
)
async def reorder_media(
    payload: MediaReorder,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    media = await MediaService(session).update_order(payload.media)
    await session.commit()
    return success_response([{"id": item.id, "order": item.order} for item in media], "Media reordered successfully")
