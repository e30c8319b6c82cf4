"""Upload API endpoints: photo ingest, avatars and signed download URLs."""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status

from src.api.deps import (
    Principal,
    get_albums_client,
    get_current_principal,
    get_storage,
    get_upload_orchestrator,
)
from src.app.config import settings
from src.app.exceptions import BadRequestError, NotFoundError, PayloadTooLargeError
from src.schemas.upload import (
    AvatarUploadResponse,
    BulkUploadResponse,
    PresignedUrlResponse,
    UploadPhotoResponse,
)
from src.services.clients.services import AlbumsClient
from src.services.image.processor import sniff_mime_type
from src.services.storage.s3 import StorageService, key_belongs_to
from src.services.upload.orchestrator import UploadOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def read_upload(upload: UploadFile) -> bytes:
    """Read an uploaded file, refusing anything over MAX_UPLOAD_SIZE_BYTES."""
    limit = settings.MAX_UPLOAD_SIZE_BYTES
    data = upload.file.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLargeError(f"File {upload.filename} exceeds {limit // (1024 * 1024)}MB")
    if not data:
        raise BadRequestError("File is required")
    return data


@router.post("/photo/{album_id}", response_model=UploadPhotoResponse, status_code=status.HTTP_201_CREATED)
def upload_photo(
    album_id: UUID,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    albums_client: AlbumsClient = Depends(get_albums_client),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
):
    """
    Upload one photo into an album the caller owns.

    - Max 10MB; jpeg, png, gif or webp
    - Capture time and dominant colour are read from the image when possible
    """
    data = read_upload(file)
    albums_client.get_owned_album(album_id, principal.user_id, principal.email)

    result = orchestrator.ingest_photo(principal.user_id, principal.email, album_id, data, file.filename)
    return UploadPhotoResponse(**result.model_dump())


@router.post("/photos/{album_id}", response_model=BulkUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_photos(
    album_id: UUID,
    files: List[UploadFile] = File(...),
    principal: Principal = Depends(get_current_principal),
    albums_client: AlbumsClient = Depends(get_albums_client),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
):
    """Upload up to 50 photos. Every file is size- and type-checked before any is stored."""
    if not files:
        raise BadRequestError("At least one file is required")
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise BadRequestError(f"At most {settings.MAX_FILES_PER_UPLOAD} files per upload")

    payloads = [(upload.filename, read_upload(upload)) for upload in files]
    for _, data in payloads:
        sniff_mime_type(data)
    albums_client.get_owned_album(album_id, principal.user_id, principal.email)

    results = [
        orchestrator.ingest_photo(principal.user_id, principal.email, album_id, data, filename)
        for filename, data in payloads
    ]
    return BulkUploadResponse(message=f"{len(results)} photos uploaded", photos=results)


@router.post("/avatar", response_model=AvatarUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_avatar(
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
    storage: StorageService = Depends(get_storage),
):
    """Replace the caller's avatar and point their profile at it."""
    data = read_upload(file)
    key = orchestrator.ingest_avatar(principal.user_id, principal.email, data)
    return AvatarUploadResponse(avatar_key=key, url=storage.generate_presigned_url(key))


@router.get("/presigned/{key:path}", response_model=PresignedUrlResponse)
def get_presigned_url(
    key: str,
    principal: Principal = Depends(get_current_principal),
    storage: StorageService = Depends(get_storage),
):
    """Signed GET URL for one of the caller's own objects; anything else is a 404."""
    if not key_belongs_to(key, principal.user_id):
        raise NotFoundError("Object not found")
    return PresignedUrlResponse(
        url=storage.generate_presigned_url(key),
        expires_in=settings.PRESIGNED_URL_EXPIRE_SECONDS,
    )
