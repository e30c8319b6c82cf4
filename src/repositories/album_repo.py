"""Album repository extending base repository."""
from sqlalchemy.orm import Session
from typing import Optional, List, Tuple
from uuid import UUID
import secrets

from src.app.exceptions import NotFoundError
from src.repositories.base import BaseRepository
from src.models.album import Album
from src.schemas.album import AlbumCreate, AlbumUpdate


class AlbumRepository(BaseRepository[Album]):
    """Repository for album database operations."""

    def __init__(self, db: Session):
        super().__init__(Album, db)

    @staticmethod
    def generate_public_token() -> str:
        """32 random bytes, hex encoded (64 chars)."""
        return secrets.token_hex(32)

    def create_album(self, album_data: AlbumCreate, user_id: UUID) -> Album:
        """
        Create new private album.

        Args:
            album_data: Album creation data
            user_id: UUID of the owner

        Returns:
            Created Album instance
        """
        album_dict = album_data.model_dump()
        album_dict['user_id'] = user_id
        album_dict['is_public'] = False
        return self.create(album_dict)

    def list_by_owner(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Album], int]:
        """
        Get albums owned by a user, newest first.

        Args:
            user_id: Owner UUID
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (list of albums, total count)
        """
        query = self.db.query(Album).filter(Album.user_id == user_id)
        return self.paginate(query, page=page, limit=limit, order_by='created_at', order_desc=True)

    def get_owned(self, album_id: UUID, user_id: UUID) -> Album:
        """
        Get an album that belongs to ``user_id``.

        Absence and foreign ownership are reported identically so callers
        cannot probe for other users' albums.

        Raises:
            NotFoundError: album missing or owned by someone else
        """
        album = self.db.query(Album).filter(
            Album.id == album_id,
            Album.user_id == user_id,
        ).first()
        if not album:
            raise NotFoundError('Album not found')
        return album

    def update_album(self, album: Album, album_data: AlbumUpdate) -> Album:
        """Partial update: only fields present in the request are written."""
        return self.update(album, album_data.model_dump(exclude_unset=True))

    def share(self, album: Album) -> str:
        """
        Make an album public and return its token.

        Re-sharing an already public album returns the current token
        rather than rotating it.
        """
        if not album.public_token:
            token = self.generate_public_token()
            while self.get_by_field('public_token', token):
                token = self.generate_public_token()
            self.update(album, {'public_token': token, 'is_public': True})
        return album.public_token

    def unshare(self, album: Album) -> Album:
        return self.update(album, {'public_token': None, 'is_public': False})

    def get_by_public_token(self, token: str) -> Optional[Album]:
        """Only albums currently flagged public are returned."""
        return self.db.query(Album).filter(
            Album.public_token == token,
            Album.is_public.is_(True),
        ).first()

    def set_thumbnail(self, album: Album, thumbnail_key: Optional[str]) -> Album:
        return self.update(album, {'thumbnail_key': thumbnail_key})

    def clear_thumbnail(self, album: Album) -> Album:
        return self.set_thumbnail(album, None)
