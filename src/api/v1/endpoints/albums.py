"""Album API endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from src.api.deps import Principal, get_current_principal, get_db, get_photos_client
from src.app.config import settings
from src.app.exceptions import AppError, BadRequestError, NotFoundError
from src.repositories.album_repo import AlbumRepository
from src.repositories.base import total_pages
from src.schemas.album import (
    AlbumCreate,
    AlbumListResponse,
    AlbumResponse,
    AlbumShareResponse,
    AlbumThumbnailUpdate,
    AlbumUpdate,
    SharedAlbumResponse,
)
from src.services.clients.services import PhotosClient

logger = logging.getLogger(__name__)

router = APIRouter()


def share_url(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/shared/{token}"


@router.get("", response_model=AlbumListResponse)
def list_albums(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Page size"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """List the caller's albums, newest first."""
    albums, total = AlbumRepository(db).list_by_owner(principal.user_id, page=page, limit=limit)
    return AlbumListResponse(
        items=albums,
        total=total,
        page=page,
        size=limit,
        pages=total_pages(total, limit),
    )


@router.post("", response_model=AlbumResponse, status_code=status.HTTP_201_CREATED)
def create_album(
    album_data: AlbumCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Create a new private album.

    - **title**: Album title (required)
    - **description**: Optional description
    """
    return AlbumRepository(db).create_album(album_data, principal.user_id)


@router.get("/shared/{token}", response_model=SharedAlbumResponse)
def get_shared_album(token: str, db: Session = Depends(get_db)):
    """Public view of a shared album. No authentication."""
    album = AlbumRepository(db).get_by_public_token(token)
    if not album:
        raise NotFoundError("Album not found")
    return album


@router.get("/{album_id}", response_model=AlbumResponse)
def get_album(
    album_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return AlbumRepository(db).get_owned(album_id, principal.user_id)


@router.patch("/{album_id}", response_model=AlbumResponse)
def update_album(
    album_id: UUID,
    album_data: AlbumUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Update title and/or description; omitted fields are kept."""
    repo = AlbumRepository(db)
    album = repo.get_owned(album_id, principal.user_id)
    return repo.update_album(album, album_data)


@router.delete("/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_album(
    album_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    photos_client: PhotosClient = Depends(get_photos_client),
):
    """
    Delete an empty album.

    Albums that still hold photos are refused with 400. If the photos
    service cannot answer the album is deleted anyway and its photo
    rows go with it through the foreign-key cascade.
    """
    repo = AlbumRepository(db)
    album = repo.get_owned(album_id, principal.user_id)

    try:
        photo_count = photos_client.count_by_album(album.id, principal.user_id, principal.email)
    except AppError as exc:
        logger.warning(f"Photo count failed for album {album.id} ({exc.status_code}), deleting anyway: {exc.detail}")
        photo_count = 0

    if photo_count > 0:
        raise BadRequestError("Album contains photos. Delete them first.")

    repo.delete(album)
    logger.info(f"Album deleted: {album_id}")


@router.post("/{album_id}/share", response_model=AlbumShareResponse)
def share_album(
    album_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Make the album public. Sharing twice returns the same token."""
    repo = AlbumRepository(db)
    album = repo.get_owned(album_id, principal.user_id)
    token = repo.share(album)
    return AlbumShareResponse(token=token, url=share_url(token))


@router.delete("/{album_id}/share", status_code=status.HTTP_204_NO_CONTENT)
def unshare_album(
    album_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    repo = AlbumRepository(db)
    album = repo.get_owned(album_id, principal.user_id)
    repo.unshare(album)


@router.patch("/{album_id}/thumbnail", response_model=AlbumResponse)
def set_album_thumbnail(
    album_id: UUID,
    payload: AlbumThumbnailUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Use one of the album's stored objects as its cover."""
    repo = AlbumRepository(db)
    album = repo.get_owned(album_id, principal.user_id)
    if not payload.thumbnail_key.startswith(f"{principal.user_id}/{album.id}/"):
        raise BadRequestError("Thumbnail must belong to this album")
    return repo.set_thumbnail(album, payload.thumbnail_key)


@router.delete("/{album_id}/thumbnail", response_model=AlbumResponse)
def clear_album_thumbnail(
    album_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    repo = AlbumRepository(db)
    album = repo.get_owned(album_id, principal.user_id)
    return repo.clear_thumbnail(album)
