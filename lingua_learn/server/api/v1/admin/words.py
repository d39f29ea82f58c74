"""
Admin Word Endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.language import WordCreate, WordRead, WordUpdate
from lingua_learn.server.api.responses import created_response, no_content_response, paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.audio_processing import AudioProcessingService
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_request_context, require_admin
from lingua_learn.server.services.language import WordService

router = APIRouter(tags=["admin-words"])


@router.get("", summary="List Words")
async def list_words(
    language: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    result = await WordService(session).list(language, search, page, per_page)
    return paginated_response(result, transform=WordRead.model_validate)


@router.get("/{word_id}", summary="Get Word")
async def get_word(word_id: int, admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(WordRead.model_validate(await WordService(session).get(word_id)))


@router.post("", status_code=201, summary="Create Word")
async def create_word(
    payload: WordCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    word = await WordService(session, admin, context).create(payload)
    return created_response(WordRead.model_validate(word), "Word created successfully")


@router.put("/{word_id}", summary="Update Word")
async def update_word(
    word_id: int,
    payload: WordUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    word = await WordService(session, admin, context).update(word_id, payload)
    return success_response(WordRead.model_validate(word), "Word updated successfully")


@router.delete("/{word_id}", status_code=204, summary="Delete Word")
async def delete_word(
    word_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await WordService(session, admin, context).delete(word_id)
    return no_content_response()


@router.post(
    "/{word_id}/audio",
    status_code=201,
    summary="Upload Word Pronunciation",
    description="Store a pronunciation recording for the word, optionally for a specific language.",
    responses={
        201: {"description": "Audio stored"},
        415: {"description": "Unsupported audio type"},
        422: {"description": "Audio could not be analysed"},
    },
)
async def upload_word_audio(
    word_id: int,
    file: UploadFile = File(...),
    language: Optional[str] = Form(default=None),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    word = await WordService(session).get(word_id)
    data = await file.read()
    result = await AudioProcessingService(session).process_word_audio(
        word, data, file.filename or "audio.mp3", file.content_type, language
    )
    return created_response(result, "Audio uploaded successfully")
