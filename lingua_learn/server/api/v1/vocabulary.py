"""
Vocabulary and Guide Book Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.content import (
    GuideBookEntryCreate,
    GuideBookEntryRead,
    GuideBookEntryUpdate,
    VocabularyItemCreate,
    VocabularyItemRead,
    VocabularyItemUpdate,
)
from lingua_learn.server.api.responses import created_response, no_content_response, success_response
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_request_context, require_admin
from lingua_learn.server.services.vocabulary import GuideBookService, VocabularyService

vocabulary_router = APIRouter(tags=["vocabulary"])
guide_book_router = APIRouter(tags=["guide-book"])


@vocabulary_router.get("/{item_id}", summary="Get Vocabulary Item")
async def get_vocabulary_item(item_id: int, session: AsyncSession = Depends(get_session)):
    item = await VocabularyService(session).get(item_id)
    return success_response(VocabularyItemRead.model_validate(item))


@vocabulary_router.post("", status_code=201, summary="Create Vocabulary Item")
async def create_vocabulary_item(
    payload: VocabularyItemCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    item = await VocabularyService(session, admin, context).create(payload)
    return created_response(VocabularyItemRead.model_validate(item), "Vocabulary item created successfully")


@vocabulary_router.put("/{item_id}", summary="Update Vocabulary Item")
async def update_vocabulary_item(
    item_id: int,
    payload: VocabularyItemUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    item = await VocabularyService(session, admin, context).update(item_id, payload)
    return success_response(VocabularyItemRead.model_validate(item), "Vocabulary item updated successfully")


@vocabulary_router.delete("/{item_id}", status_code=204, summary="Delete Vocabulary Item")
async def delete_vocabulary_item(
    item_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await VocabularyService(session, admin, context).delete(item_id)
    return no_content_response()


@guide_book_router.get("/{entry_id}", summary="Get Guide Book Entry")
async def get_guide_book_entry(entry_id: int, session: AsyncSession = Depends(get_session)):
    entry = await GuideBookService(session).get(entry_id)
    return success_response(GuideBookEntryRead.model_validate(entry))


@guide_book_router.post("", status_code=201, summary="Create Guide Book Entry")
async def create_guide_book_entry(
    payload: GuideBookEntryCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    entry = await GuideBookService(session, admin, context).create(payload)
    return created_response(GuideBookEntryRead.model_validate(entry), "Guide book entry created successfully")


@guide_book_router.put("/{entry_id}", summary="Update Guide Book Entry")
async def update_guide_book_entry(
    entry_id: int,
    payload: GuideBookEntryUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    entry = await GuideBookService(session, admin, context).update(entry_id, payload)
    return success_response(GuideBookEntryRead.model_validate(entry), "Guide book entry updated successfully")


@guide_book_router.delete("/{entry_id}", status_code=204, summary="Delete Guide Book Entry")
async def delete_guide_book_entry(
    entry_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await GuideBookService(session, admin, context).delete(entry_id)
    return no_content_response()
