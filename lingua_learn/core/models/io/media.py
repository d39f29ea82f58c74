"""
Media I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from lingua_learn.core.database.entities import MediaFile


class MediaRead(BaseModel):
    id: int
    model_type: str
    model_id: int
    collection_name: str
    name: str
    file_name: str
    mime_type: Optional[str] = None
    size: int
    human_readable_size: str
    url: str
    custom_properties: Dict[str, Any] = Field(default_factory=dict)
    order: int
    created_at: datetime

    @classmethod
    def from_entity(cls, media: MediaFile) -> "MediaRead":
        return cls(
            id=media.id,
            model_type=media.model_type,
            model_id=media.model_id,
            collection_name=media.collection_name,
            name=media.name,
            file_name=media.file_name,
            mime_type=media.mime_type,
            size=media.size,
            human_readable_size=media.human_readable_size,
            url=media.url,
            custom_properties=media.custom_properties or {},
            order=media.order,
            created_at=media.created_at,
        )


class MediaReorder(BaseModel):
    media: List[int] = Field(min_length=1)
