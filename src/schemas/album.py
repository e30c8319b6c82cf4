"""Album schemas."""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from uuid import UUID
from typing import Optional


class AlbumCreate(BaseModel):
    """Schema for creating an album."""
    title: str = Field(..., min_length=1, max_length=255, description="Album title")
    description: Optional[str] = Field(None, max_length=1000, description="Album description")


class AlbumUpdate(BaseModel):
    """Schema for updating an album; omitted fields are left untouched."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class AlbumThumbnailUpdate(BaseModel):
    thumbnail_key: str = Field(..., min_length=1, max_length=500)


class AlbumResponse(BaseModel):
    """Schema for album response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    is_public: bool
    public_token: Optional[str] = None
    thumbnail_key: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SharedAlbumResponse(BaseModel):
    """Public view of a shared album (no owner id)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    thumbnail_key: Optional[str] = None
    created_at: datetime


class AlbumListResponse(BaseModel):
    """Paginated list of albums."""
    items: list[AlbumResponse]
    total: int
    page: int
    size: int
    pages: int


class AlbumShareResponse(BaseModel):
    token: str
    url: str
