"""Photo schemas for API requests and responses."""
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from uuid import UUID
from typing import Optional


class PhotoSort(str, Enum):
    acquired_at = "acquired_at"
    created_at = "created_at"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class PhotoCreate(BaseModel):
    """Internal: metadata persisted after an upload stored the objects."""
    id: Optional[UUID] = Field(None, description="Upload id; re-sending the same id returns the existing row")
    album_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    file_key: str = Field(..., min_length=1, max_length=500)
    thumbnail_key: Optional[str] = Field(None, max_length=500)
    size_bytes: int = Field(..., ge=0)
    mime_type: str = Field(..., max_length=100)
    dominant_color: str = Field(..., pattern="^#[0-9a-fA-F]{6}$")
    acquired_at: datetime


class PhotoUpdate(BaseModel):
    """Schema for updating photo metadata."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class PhotoResponse(BaseModel):
    """Photo response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    album_id: UUID
    title: str
    description: Optional[str] = None
    file_key: str
    thumbnail_key: Optional[str] = None
    size_bytes: int
    mime_type: str
    dominant_color: str
    acquired_at: datetime
    created_at: datetime


class SharedPhotoResponse(PhotoResponse):
    """Photo in a shared album, with signed URLs for anonymous viewers."""
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class PhotoListResponse(BaseModel):
    """Paginated list of photos."""
    items: list[PhotoResponse]
    total: int
    page: int
    size: int
    pages: int


class SharedPhotoListResponse(BaseModel):
    items: list[SharedPhotoResponse]
    total: int
    page: int
    size: int
    pages: int


class PhotoCountResponse(BaseModel):
    album_id: UUID
    count: int
