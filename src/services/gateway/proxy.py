"""Path-based reverse proxy in front of the backend services."""
import logging
from typing import Mapping, Optional

import httpx

from src.app.config import settings
from src.app.exceptions import InternalServiceError, ServiceUnavailableError

logger = logging.getLogger(__name__)

# Client headers passed upstream; authorization only reaches the auth service
FORWARDED_HEADERS = ("content-type", "accept", "user-agent")
AUTH_ONLY_HEADERS = ("authorization",)

# Identity headers only the gateway itself may set
IDENTITY_HEADERS = ("x-user-id", "x-user-email", "x-internal-token")

BODYLESS_METHODS = {"GET", "DELETE", "HEAD", "OPTIONS"}

PROTECTED_SERVICES = {"albums", "photos", "upload"}
PROTECTED_AUTH_PATHS = {"auth/me", "auth/profile"}
PUBLIC_PREFIXES = ("albums/shared/", "photos/shared/")


def split_service(path: str) -> tuple[str, str]:
    """``albums/123/share`` -> (``albums``, ``/albums/123/share``)."""
    clean = path.strip("/")
    service = clean.split("/", 1)[0]
    return service, f"/{clean}"


def requires_auth(path: str) -> bool:
    """
    True when the route needs an authenticated caller.

    Public: ``auth/*`` except me/profile, ``albums/shared/*`` and ``photos/shared/*``.
    """
    clean = path.strip("/")
    service = clean.split("/", 1)[0]
    if service == "auth":
        return clean in PROTECTED_AUTH_PATHS
    if clean.startswith(PUBLIC_PREFIXES):
        return False
    return service in PROTECTED_SERVICES


def build_upstream_headers(
    incoming: Mapping[str, str],
    service: str,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
) -> dict[str, str]:
    """
    Copy the allow-listed client headers and, for an authenticated caller,
    add the identity headers the services trust.
    """
    allowed = FORWARDED_HEADERS + (AUTH_ONLY_HEADERS if service == "auth" else ())
    headers = {}
    for name in allowed:
        value = incoming.get(name)
        if value is not None:
            headers[name] = value

    if user_id is not None:
        headers["x-user-id"] = str(user_id)
        headers["x-user-email"] = email or ""
        headers["x-internal-token"] = settings.INTERNAL_SERVICE_TOKEN
    return headers


class GatewayProxy:
    """Forwards one request to a named service and hands back the raw response."""

    def __init__(
        self,
        service_urls: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.service_urls = dict(service_urls or settings.SERVICE_URLS)
        self._client = client or httpx.AsyncClient(timeout=settings.SERVICE_TIMEOUT_SECONDS)

    def service_url(self, service: str) -> str:
        base_url = self.service_urls.get(service)
        if not base_url:
            raise InternalServiceError(f"Service {service} not found")
        return base_url.rstrip("/")

    async def forward(
        self,
        service: str,
        path: str,
        method: str,
        query: str = "",
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        Raises:
            InternalServiceError: ``service`` is not in the service map
            ServiceUnavailableError: the upstream could not be reached
        """
        url = f"{self.service_url(service)}{path}"
        if query:
            url = f"{url}?{query}"

        method = method.upper()
        content = None if method in BODYLESS_METHODS else body

        try:
            response = await self._client.request(method, url, content=content, headers=dict(headers or {}))
        except httpx.HTTPError as exc:
            logger.error(f"Upstream {service} unreachable for {method} {path}: {exc}")
            raise ServiceUnavailableError("Service unavailable")

        logger.debug(f"{method} {path} -> {service} {response.status_code}")
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
