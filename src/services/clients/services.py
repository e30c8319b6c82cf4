"""Typed clients for the auth, albums and photos services."""
from typing import Optional
from uuid import UUID

import httpx

from src.app.config import settings
from src.app.exceptions import NotFoundError, UpstreamError
from src.services.clients.base import ServiceClient, internal_headers


class AlbumsClient(ServiceClient):
    service_name = "albums"

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        super().__init__(base_url or settings.ALBUMS_SERVICE_URL, client)

    def get_owned_album(self, album_id: UUID, user_id, email: str) -> dict:
        """
        Fetch an album as its owner.

        Raises:
            NotFoundError: album missing or owned by someone else
        """
        try:
            return self.request("GET", f"/albums/{album_id}", headers=internal_headers(user_id, email))
        except UpstreamError as exc:
            if exc.status_code == 404:
                raise NotFoundError("Album not found")
            raise

    def get_shared_album(self, token: str) -> dict:
        try:
            return self.request("GET", f"/albums/shared/{token}")
        except UpstreamError as exc:
            if exc.status_code == 404:
                raise NotFoundError("Album not found")
            raise


class PhotosClient(ServiceClient):
    service_name = "photos"

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        super().__init__(base_url or settings.PHOTOS_SERVICE_URL, client)

    def create_photo(self, payload: dict, user_id, email: str) -> dict:
        return self.request("POST", "/photos", json=payload, headers=internal_headers(user_id, email))

    def count_by_album(self, album_id: UUID, user_id, email: str) -> int:
        body = self.request(
            "GET",
            f"/photos/album/{album_id}/count",
            headers=internal_headers(user_id, email),
        )
        return int(body["count"])


class AuthClient(ServiceClient):
    service_name = "auth"

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        super().__init__(base_url or settings.AUTH_SERVICE_URL, client)

    def update_profile(self, user_id, email: str, **fields) -> dict:
        return self.request("PATCH", "/auth/profile", json=fields, headers=internal_headers(user_id, email))
