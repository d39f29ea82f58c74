"""
Admin Sentence Endpoints.

Sentence CRUD, word ordering, word timings and pronunciation audio.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.core.models.io.language import (
    SentenceCreate,
    SentenceRead,
    SentenceUpdate,
    SentenceWordsReorder,
    WordTimingsUpdate,
)
from lingua_learn.server.api.responses import created_response, no_content_response, paginated_response, success_response
from lingua_learn.server.core import constant
from lingua_learn.server.services.audio_processing import (
    AudioProcessingService,
    generate_waveform_data,
    temporary_audio_file,
)
from lingua_learn.server.services.audit import RequestContext
from lingua_learn.server.services.deps import get_request_context, require_admin
from lingua_learn.server.services.language import SentenceService
from lingua_learn.server.services.word_timings import timing_stats, validate_word_timings

router = APIRouter(tags=["admin-sentences"])


@router.get("", summary="List Sentences")
async def list_sentences(
    language: Optional[str] = Query(default=None),
    difficulty_level: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=constant.DEFAULT_PER_PAGE, ge=1, le=constant.MAX_PER_PAGE),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    result = await SentenceService(session).list(language, difficulty_level, page, per_page)
    return paginated_response(result, transform=SentenceRead.model_validate)


@router.get("/{sentence_id}", summary="Get Sentence", description="A sentence with its words, translations and audio.")
async def get_sentence(sentence_id: int, admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(await SentenceService(session).detail(sentence_id))


@router.post("", status_code=201, summary="Create Sentence")
async def create_sentence(
    payload: SentenceCreate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    sentence = await SentenceService(session, admin, context).create(payload)
    return created_response(sentence, "Sentence created successfully")


@router.put("/{sentence_id}", summary="Update Sentence")
async def update_sentence(
    sentence_id: int,
    payload: SentenceUpdate,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    sentence = await SentenceService(session, admin, context).update(sentence_id, payload)
    return success_response(sentence, "Sentence updated successfully")


@router.delete("/{sentence_id}", status_code=204, summary="Delete Sentence")
async def delete_sentence(
    sentence_id: int,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    await SentenceService(session, admin, context).delete(sentence_id)
    return no_content_response()


@router.post(
    "/{sentence_id}/words/reorder",
    summary="Reorder Sentence Words",
    description="Set word positions 1..n following the given word ids, listing a repeated word once per occurrence.",
)
async def reorder_sentence_words(
    sentence_id: int,
    payload: SentenceWordsReorder,
    admin: User = Depends(require_admin),
    context: RequestContext = Depends(get_request_context),
    session: AsyncSession = Depends(get_session),
):
    links = await SentenceService(session, admin, context).reorder_words(sentence_id, payload.words)
    return success_response(
        [{"word_id": link.word_id, "position": link.position} for link in links], "Words reordered successfully"
    )


@router.get("/{sentence_id}/word-timings", summary="Get Word Timings")
async def get_word_timings(
    sentence_id: int,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await SentenceService(session).word_timings(sentence_id))


@router.put(
    "/{sentence_id}/word-timings",
    summary="Update Word Timings",
    description="Validate and store where each word is spoken in the sentence recording.",
    responses={200: {"description": "Timings saved"}, 422: {"description": "Timing validation failed"}},
)
async def update_word_timings(
    sentence_id: int,
    payload: WordTimingsUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Replace the word timings of a sentence.

    Every timing names a ``word_id`` of the sentence with ``start_time`` and
    ``end_time`` in seconds and optional ``metadata`` (``emphasis``,
    ``pause_after``, ``pronunciation_notes``). All problems are reported at
    once, keyed by the timing's index in the request.
    """
    service = SentenceService(session, admin)
    sentence = await service.get(sentence_id)
    links = await service.links(sentence_id)
    validate_word_timings(payload.timings, payload.audio_duration, [link.word_id for link in links], len(links))
    stats = await AudioProcessingService(session).update_word_timings(sentence, payload.timings, payload.audio_duration)
    return success_response(
        {"stats": stats, "timing_stats": timing_stats(payload.timings, payload.audio_duration)},
        "Word timings updated successfully",
    )


@router.post(
    "/{sentence_id}/audio",
    status_code=201,
    summary="Upload Sentence Audio",
    description="Store the normal or slow recording of a sentence.",
    responses={
        201: {"description": "Audio stored"},
        415: {"description": "Unsupported audio type"},
        422: {"description": "Audio could not be analysed"},
    },
)
async def upload_sentence_audio(
    sentence_id: int,
    file: UploadFile = File(...),
    is_slow: bool = Form(default=False),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    sentence = await SentenceService(session).get(sentence_id)
    data = await file.read()
    result = await AudioProcessingService(session).process_sentence_audio(
        sentence, data, file.filename or "audio.mp3", file.content_type, is_slow
    )
    return created_response(result, "Audio uploaded successfully")


@router.post(
    "/{sentence_id}/waveform",
    summary="Generate Waveform",
    description="Render waveform amplitudes (0..1) for an uploaded recording.",
    responses={200: {"description": "Waveform generated"}, 422: {"description": "Audio could not be decoded"}},
)
async def sentence_waveform(
    sentence_id: int,
    file: UploadFile = File(...),
    samples: int = Form(default=100, ge=1, le=2000),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    await SentenceService(session).get(sentence_id)
    data = await file.read()
    with temporary_audio_file(data, file.filename) as path:
        waveform = await run_in_threadpool(generate_waveform_data, path, samples)
    return success_response({"waveform": waveform})
