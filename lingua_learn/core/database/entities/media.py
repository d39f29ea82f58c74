"""
Media file entity model.

Media rows attach uploaded files to any model (``model_type``/``model_id``)
inside a named collection. Several rows may point at the same stored file
when identical bytes are uploaded twice to a collection.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class MediaFile(Base, table=True):
    """Stored upload attached to a model.

    Table: media_files
    """

    __tablename__ = "media_files"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    model_type: str = Field(max_length=100, index=True)
    model_id: int = Field(index=True)
    collection_name: str = Field(max_length=100, index=True)
    name: str = Field(max_length=255)
    file_name: str = Field(max_length=255)
    mime_type: Optional[str] = Field(default=None, max_length=100)
    disk: str = Field(default="local", max_length=50)
    path: str = Field(max_length=500, index=True)
    cdn_url: Optional[str] = Field(default=None, max_length=500)
    size: int = Field(default=0)
    file_hash: Optional[str] = Field(default=None, max_length=64, index=True)
    custom_properties: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    order: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def url(self) -> str:
        if self.cdn_url:
            return f"{self.cdn_url.rstrip('/')}/{self.path}"
        from lingua_learn.server.core.config import settings

        return f"{settings.media.url.rstrip('/')}/{self.path}"

    @property
    def is_image(self) -> bool:
        return (self.mime_type or "").startswith("image/")

    @property
    def is_audio(self) -> bool:
        return (self.mime_type or "").startswith("audio/")

    @property
    def is_video(self) -> bool:
        return (self.mime_type or "").startswith("video/")

    @property
    def extension(self) -> str:
        return PurePosixPath(self.file_name).suffix.lstrip(".").lower()

    @property
    def human_readable_size(self) -> str:
        return format_bytes(self.size)


def format_bytes(size: float) -> str:
    """Render ``size`` in B/KB/MB/GB/TB with two decimals (e.g. ``1.50 KB``)."""
    value = float(max(size, 0))
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {_SIZE_UNITS[unit]}"
