"""
Media Service.

Stores uploaded files on the local media disk and records them as
:class:`MediaFile` rows attached to any model. Files are deduplicated per
collection by SHA-256: an upload whose bytes already exist in the collection
gets a new row that points at the existing file.

File changes follow the database transaction: a file written for a new row
is removed again when the commit fails, and a file whose last row was
deleted is only unlinked once that deletion is committed. Callers finish
with :meth:`MediaService.commit` instead of committing the session directly.
"""

from __future__ import annotations

import hashlib
import os
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy import func, select

from lingua_learn.core.database.entities import MediaFile
from lingua_learn.core.errors import ContentRuleError, UnsupportedMediaTypeError, ValidationFailedError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.server.core.config import settings

from .content_tree import get_or_404

logger = get_logger(__name__)

AUDIO_MIME_TYPES = ("audio/mpeg", "audio/wav", "audio/x-wav", "audio/mp3")


def accepts(collection: str, mime_type: Optional[str]) -> bool:
    """Whether ``collection`` takes files of ``mime_type``."""
    mime_type = (mime_type or "").lower()
    if collection.startswith("pronunciation") or collection == "slow_pronunciation":
        return mime_type in AUDIO_MIME_TYPES
    if collection == "images":
        return mime_type.startswith("image/")
    if collection == "videos":
        return mime_type.startswith("video/")
    return True


def _safe_name(file_name: str) -> str:
    return os.path.basename(file_name.replace("\\", "/")) or "file"


class MediaService:
    def __init__(self, session, root: Optional[str] = None) -> None:
        self.session = session
        media = settings.media
        self.root = Path(root or media.root)
        self.disk = media.disk
        self.cdn_url = media.cdn_url
        self.max_upload_bytes = media.max_upload_bytes
        self._written: List[Path] = []
        self._doomed: List[Path] = []

    def absolute_path(self, media: MediaFile) -> Path:
        return self.root / media.path

    async def commit(self) -> None:
        """Commit the session, then settle the files touched since the last commit.

        Raises:
            Exception: Whatever the commit raised; new files are removed first.
        """
        try:
            await self.session.commit()
        except Exception:
            self.discard_written()
            raise
        doomed, self._doomed = self._doomed, []
        self._written = []
        for target in doomed:
            if target.exists():
                target.unlink()
                logger.info(f"Removed media file {target}")

    def discard_written(self) -> None:
        """Remove files written since the last commit and forget pending removals."""
        written, self._written = self._written, []
        self._doomed = []
        for target in written:
            if target.exists():
                target.unlink()
                logger.warning(f"Discarded uncommitted media file {target}")

    async def add_media(
        self,
        model_type: str,
        model_id: int,
        upload: UploadFile,
        collection: str,
        custom_properties: Optional[Dict[str, Any]] = None,
        file_name: Optional[str] = None,
    ) -> MediaFile:
        data = await upload.read()
        return await self.add_media_bytes(
            model_type,
            model_id,
            data,
            collection,
            mime_type=upload.content_type,
            original_name=upload.filename or "file",
            custom_properties=custom_properties,
            file_name=file_name,
        )

    async def add_media_bytes(
        self,
        model_type: str,
        model_id: int,
        data: bytes,
        collection: str,
        mime_type: Optional[str],
        original_name: str,
        custom_properties: Optional[Dict[str, Any]] = None,
        file_name: Optional[str] = None,
    ) -> MediaFile:
        """Store ``data`` in ``collection`` for the given model and flush the row.

        Raises:
            UnsupportedMediaTypeError: The collection does not take ``mime_type``.
            ValidationFailedError: The file is empty or too large.
        """
        if not accepts(collection, mime_type):
            raise UnsupportedMediaTypeError(f"The {collection} collection does not accept {mime_type or 'unknown'} files.")
        if not data:
            raise ValidationFailedError.single("file", "The uploaded file is empty.")
        if len(data) > self.max_upload_bytes:
            raise ValidationFailedError.single("file", "The uploaded file is too large.")

        file_name = _safe_name(file_name or original_name)
        file_hash = hashlib.sha256(data).hexdigest()
        result = await self.session.execute(
            select(MediaFile.path)
            .where(MediaFile.collection_name == collection, MediaFile.file_hash == file_hash)
            .limit(1)
        )
        order_result = await self.session.execute(
            select(func.max(MediaFile.order)).where(
                MediaFile.model_type == model_type,
                MediaFile.model_id == model_id,
                MediaFile.collection_name == collection,
            )
        )
        path = result.scalar()
        if path is None:
            path = f"{collection}/{uuid.uuid4().hex}_{file_name}"
            target = self.root / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            self._written.append(target)
            logger.info(f"Stored {len(data)} bytes at {target}")
        else:
            reused = self.root / path
            if reused in self._doomed:
                self._doomed.remove(reused)
            logger.debug(f"Reusing stored file {path} for duplicate upload")

        media = MediaFile(
            model_type=model_type,
            model_id=model_id,
            collection_name=collection,
            name=Path(original_name).stem or file_name,
            file_name=file_name,
            mime_type=mime_type,
            disk=self.disk,
            path=path,
            cdn_url=self.cdn_url,
            size=len(data),
            file_hash=file_hash,
            custom_properties=custom_properties or {},
            order=(order_result.scalar() or 0) + 1,
        )
        self.session.add(media)
        try:
            await self.session.flush()
        except Exception:
            self.discard_written()
            raise
        return media

    async def list(
        self,
        model_type: Optional[str] = None,
        model_id: Optional[int] = None,
        collection_name: Optional[str] = None,
    ) -> List[MediaFile]:
        stmt = select(MediaFile)
        if model_type:
            stmt = stmt.where(MediaFile.model_type == model_type)
        if model_id is not None:
            stmt = stmt.where(MediaFile.model_id == model_id)
        if collection_name:
            stmt = stmt.where(MediaFile.collection_name == collection_name)
        result = await self.session.execute(stmt.order_by(MediaFile.collection_name, MediaFile.order, MediaFile.id))
        return list(result.scalars().all())

    async def get(self, media_id: int) -> MediaFile:
        return await get_or_404(self.session, MediaFile, media_id, "Media")

    async def delete_media(self, media: MediaFile) -> None:
        """Delete the row; its file is removed on :meth:`commit` once nothing else points at it."""
        await self.session.delete(media)
        await self.session.flush()
        result = await self.session.execute(select(func.count()).select_from(MediaFile).where(MediaFile.path == media.path))
        if result.scalar_one() == 0:
            self._doomed.append(self.absolute_path(media))

    async def update_order(self, ids: List[int]) -> List[MediaFile]:
        if len(set(ids)) != len(ids):
            raise ContentRuleError("Invalid media IDs provided.")
        result = await self.session.execute(select(MediaFile).where(MediaFile.id.in_(ids)))
        by_id = {media.id: media for media in result.scalars().all()}
        if len(by_id) != len(ids):
            raise ContentRuleError("Invalid media IDs provided.")
        for position, media_id in enumerate(ids, start=1):
            by_id[media_id].order = position
        await self.session.flush()
        return [by_id[media_id] for media_id in ids]

    async def storage_used(self) -> int:
        result = await self.session.execute(select(func.coalesce(func.sum(MediaFile.size), 0)))
        return int(result.scalar_one())
