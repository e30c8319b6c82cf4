"""Upload schemas."""
from pydantic import BaseModel
from datetime import datetime
from uuid import UUID
from typing import Optional


class UploadResult(BaseModel):
    """Outcome of ingesting one photo."""
    upload_id: UUID
    photo_id: Optional[UUID] = None
    file_key: str
    thumbnail_key: str
    size_bytes: int
    mime_type: str
    dominant_color: str
    acquired_at: datetime
    acquired_at_source: str
    dominant_color_source: str


class UploadPhotoResponse(UploadResult):
    message: str = "Photo uploaded"


class BulkUploadResponse(BaseModel):
    message: str
    photos: list[UploadResult]


class AvatarUploadResponse(BaseModel):
    avatar_key: str
    url: str


class PresignedUrlResponse(BaseModel):
    url: str
    expires_in: int
