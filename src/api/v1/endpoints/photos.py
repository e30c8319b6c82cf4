"""Photo API endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from src.api.deps import (
    Principal,
    get_albums_client,
    get_current_principal,
    get_db,
    get_storage,
    require_internal,
)
from src.app.exceptions import AppError, NotFoundError
from src.models.photo import Photo
from src.repositories.base import total_pages
from src.repositories.photo_repo import PhotoRepository
from src.schemas.photo import (
    PhotoCountResponse,
    PhotoCreate,
    PhotoListResponse,
    PhotoResponse,
    PhotoSort,
    PhotoUpdate,
    SharedPhotoListResponse,
    SharedPhotoResponse,
    SortOrder,
)
from src.services.clients.services import AlbumsClient
from src.services.storage.s3 import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


def ensure_album_owner(albums_client: AlbumsClient, album_id: UUID, principal: Principal) -> dict:
    """Ask the albums service whether the caller owns the album (404 otherwise)."""
    return albums_client.get_owned_album(album_id, principal.user_id, principal.email)


def get_owned_photo(
    photo_id: UUID,
    principal: Principal,
    db: Session,
    albums_client: AlbumsClient,
) -> Photo:
    photo = PhotoRepository(db).get(photo_id)
    if not photo:
        raise NotFoundError("Photo not found")
    try:
        ensure_album_owner(albums_client, photo.album_id, principal)
    except NotFoundError:
        raise NotFoundError("Photo not found")
    return photo


@router.post(
    "",
    response_model=PhotoResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_internal)],
)
def create_photo(photo_data: PhotoCreate, db: Session = Depends(get_db)):
    """
    Persist metadata for objects the upload service already stored.

    Internal only. Re-sending the same id returns the existing record.
    """
    return PhotoRepository(db).create_photo(photo_data)


@router.get("/album/{album_id}", response_model=PhotoListResponse)
def list_album_photos(
    album_id: UUID,
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Page size"),
    sort: PhotoSort = Query(PhotoSort.acquired_at),
    order: SortOrder = Query(SortOrder.desc),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    albums_client: AlbumsClient = Depends(get_albums_client),
):
    """
    List photos in one of the caller's albums.

    - **sort**: acquired_at (default) or created_at
    - **order**: desc (default) or asc
    """
    ensure_album_owner(albums_client, album_id, principal)
    photos, total = PhotoRepository(db).list_by_album(album_id, page=page, limit=limit, sort=sort, order=order)
    return PhotoListResponse(
        items=photos,
        total=total,
        page=page,
        size=limit,
        pages=total_pages(total, limit),
    )


@router.get(
    "/album/{album_id}/count",
    response_model=PhotoCountResponse,
    dependencies=[Depends(require_internal)],
)
def count_album_photos(album_id: UUID, db: Session = Depends(get_db)):
    """Internal only: used by the albums service before deleting an album."""
    return PhotoCountResponse(album_id=album_id, count=PhotoRepository(db).count_by_album(album_id))


@router.get("/shared/{token}", response_model=SharedPhotoListResponse)
def list_shared_photos(
    token: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort: PhotoSort = Query(PhotoSort.acquired_at),
    order: SortOrder = Query(SortOrder.desc),
    db: Session = Depends(get_db),
    albums_client: AlbumsClient = Depends(get_albums_client),
    storage: StorageService = Depends(get_storage),
):
    """Photos of a publicly shared album, each with signed URLs. No authentication."""
    album = albums_client.get_shared_album(token)
    photos, total = PhotoRepository(db).list_by_album(
        UUID(album["id"]), page=page, limit=limit, sort=sort, order=order
    )
    items = []
    for photo in photos:
        item = SharedPhotoResponse.model_validate(photo)
        item.url = storage.generate_presigned_url(photo.file_key)
        if photo.thumbnail_key:
            item.thumbnail_url = storage.generate_presigned_url(photo.thumbnail_key)
        items.append(item)

    return SharedPhotoListResponse(
        items=items,
        total=total,
        page=page,
        size=limit,
        pages=total_pages(total, limit),
    )


@router.get("/{photo_id}", response_model=PhotoResponse)
def get_photo(
    photo_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    albums_client: AlbumsClient = Depends(get_albums_client),
):
    return get_owned_photo(photo_id, principal, db, albums_client)


@router.patch("/{photo_id}", response_model=PhotoResponse)
def update_photo(
    photo_id: UUID,
    photo_data: PhotoUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    albums_client: AlbumsClient = Depends(get_albums_client),
):
    """Only title and description can change."""
    photo = get_owned_photo(photo_id, principal, db, albums_client)
    return PhotoRepository(db).update_photo(photo, photo_data)


@router.delete("/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_photo(
    photo_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    albums_client: AlbumsClient = Depends(get_albums_client),
    storage: StorageService = Depends(get_storage),
):
    """Delete the record, then its stored objects (best effort)."""
    photo = get_owned_photo(photo_id, principal, db, albums_client)
    keys = [key for key in (photo.file_key, photo.thumbnail_key) if key]

    PhotoRepository(db).delete(photo)

    for key in keys:
        try:
            storage.delete_object(key)
        except AppError as exc:
            logger.error(f"Photo {photo_id} deleted but object {key} was not: {exc.detail}")
    logger.info(f"Photo deleted: {photo_id}")
