from fastapi import APIRouter

from src.api.v1.endpoints import albums, auth, photos, uploads

SERVICE_ROUTERS = {
    "auth": (auth.router, "/auth", ["authentication"]),
    "albums": (albums.router, "/albums", ["albums"]),
    "photos": (photos.router, "/photos", ["photos"]),
    "upload": (uploads.router, "/upload", ["uploads"]),
}


def build_service_router(*services: str) -> APIRouter:
    """Router exposing the given backend services at their root paths."""
    api_router = APIRouter()
    for service in services:
        router, prefix, tags = SERVICE_ROUTERS[service]
        api_router.include_router(router, prefix=prefix, tags=tags)
    return api_router
