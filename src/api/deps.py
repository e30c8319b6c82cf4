"""Dependencies for API endpoints."""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.app.exceptions import UnauthorizedError
from src.core.security import ACCESS_TOKEN_TYPE, decode_token, is_valid_internal_token
from src.db.base import get_db  # noqa: F401  re-exported for endpoint modules
from src.services.clients.services import AlbumsClient, AuthClient, PhotosClient
from src.services.image.processor import ImageProcessor
from src.services.storage.s3 import StorageService
from src.services.upload.orchestrator import UploadOrchestrator

security = HTTPBearer(auto_error=False)

CREDENTIALS_ERROR = "Could not validate credentials"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as seen by a backend service."""
    user_id: UUID
    email: str


def _parse_user_id(raw: Optional[str]) -> UUID:
    try:
        return UUID(str(raw))
    except (TypeError, ValueError):
        raise UnauthorizedError(CREDENTIALS_ERROR)


async def get_current_principal(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_internal_token: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """
    Resolve the caller.

    Identity headers are honoured only alongside a valid internal token;
    otherwise a bearer access token is required.
    """
    if x_user_id and is_valid_internal_token(x_internal_token):
        return Principal(user_id=_parse_user_id(x_user_id), email=x_user_email or "")

    if credentials is None:
        raise UnauthorizedError(CREDENTIALS_ERROR)

    payload = decode_token(credentials.credentials, expected_type=ACCESS_TOKEN_TYPE)
    if payload is None:
        raise UnauthorizedError(CREDENTIALS_ERROR)

    return Principal(user_id=_parse_user_id(payload.get("sub")), email=payload.get("email", ""))


async def require_internal(x_internal_token: Optional[str] = Header(None)) -> None:
    """Only sibling services holding the shared secret may call the route."""
    if not is_valid_internal_token(x_internal_token):
        raise UnauthorizedError("Internal access only")


@lru_cache
def get_storage() -> StorageService:
    return StorageService()


@lru_cache
def get_image_processor() -> ImageProcessor:
    return ImageProcessor()


@lru_cache
def get_albums_client() -> AlbumsClient:
    return AlbumsClient()


@lru_cache
def get_photos_client() -> PhotosClient:
    return PhotosClient()


@lru_cache
def get_auth_client() -> AuthClient:
    return AuthClient()


def get_upload_orchestrator(
    storage: StorageService = Depends(get_storage),
    processor: ImageProcessor = Depends(get_image_processor),
    photos_client: PhotosClient = Depends(get_photos_client),
    auth_client: AuthClient = Depends(get_auth_client),
) -> UploadOrchestrator:
    return UploadOrchestrator(storage, processor, photos_client, auth_client)
