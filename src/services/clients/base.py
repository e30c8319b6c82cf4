"""Synchronous HTTP client for calls between services."""
import logging
from typing import Any, Optional

import httpx

from src.app.config import settings
from src.app.exceptions import ServiceUnavailableError, UpstreamError

logger = logging.getLogger(__name__)


def internal_headers(user_id=None, email: Optional[str] = None) -> dict[str, str]:
    """Headers a trusted caller attaches so the callee accepts the caller's identity."""
    headers = {"x-internal-token": settings.INTERNAL_SERVICE_TOKEN}
    if user_id is not None:
        headers["x-user-id"] = str(user_id)
    if email is not None:
        headers["x-user-email"] = email
    return headers


class ServiceClient:
    """
    Base client bound to one sibling service.

    Errors are surfaced, never retried:
      - transport failures raise ServiceUnavailableError (503)
      - non-2xx answers raise UpstreamError carrying the upstream status and detail
    """

    service_name = "service"

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=settings.SERVICE_TIMEOUT_SECONDS)

    def request(self, method: str, path: str, *, headers: Optional[dict] = None, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(f"{self.service_name} unreachable: {method} {url}: {exc}")
            raise ServiceUnavailableError(f"{self.service_name} service unavailable")

        if response.status_code == 204:
            return None
        if response.is_error:
            raise UpstreamError(response.status_code, _error_detail(response))
        return response.json()

    def close(self) -> None:
        self._client.close()


def _error_detail(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body
