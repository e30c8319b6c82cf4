"""Photo repository for database operations.

No ownership checks happen here: callers must have established that the
requesting user owns the album before reaching this layer.
"""
from sqlalchemy.orm import Session
from typing import List, Tuple
from uuid import UUID
from datetime import datetime, timezone

from src.repositories.base import BaseRepository
from src.models.photo import Photo
from src.schemas.photo import PhotoCreate, PhotoUpdate, PhotoSort, SortOrder


class PhotoRepository(BaseRepository[Photo]):
    """Repository for photo database operations."""

    def __init__(self, db: Session):
        super().__init__(Photo, db)

    def create_photo(self, photo_data: PhotoCreate) -> Photo:
        """
        Create new photo record.

        When the payload carries an id that already exists, the existing row
        is returned so a repeated upload attempt does not duplicate it.

        Args:
            photo_data: Metadata produced by the upload pipeline

        Returns:
            Created (or previously created) Photo instance
        """
        if photo_data.id is not None:
            existing = self.get(photo_data.id)
            if existing:
                return existing

        photo_dict = photo_data.model_dump(exclude_none=True)
        photo_dict['acquired_at'] = _naive_utc(photo_data.acquired_at)
        return self.create(photo_dict)

    def list_by_album(
        self,
        album_id: UUID,
        page: int = 1,
        limit: int = 20,
        sort: PhotoSort = PhotoSort.acquired_at,
        order: SortOrder = SortOrder.desc,
    ) -> Tuple[List[Photo], int]:
        """
        Get photos in an album with pagination.

        Args:
            album_id: Album UUID
            page: 1-based page number
            limit: Maximum records to return
            sort: acquired_at or created_at
            order: asc or desc

        Returns:
            Tuple of (photos list, total count)
        """
        query = self.db.query(Photo).filter(Photo.album_id == album_id)
        return self.paginate(
            query,
            page=page,
            limit=limit,
            order_by=PhotoSort(sort).value,
            order_desc=SortOrder(order) == SortOrder.desc,
        )

    def update_photo(self, photo: Photo, photo_data: PhotoUpdate) -> Photo:
        """Only title and description are editable."""
        return self.update(photo, photo_data.model_dump(exclude_unset=True))

    def count_by_album(self, album_id: UUID) -> int:
        return self.count(filters={'album_id': album_id})


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
