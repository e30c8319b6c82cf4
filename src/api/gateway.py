"""Gateway routes: authenticate at the edge and forward to the owning service."""
import logging

from fastapi import APIRouter, Request, Response

from src.app.exceptions import UnauthorizedError
from src.core.security import ACCESS_TOKEN_TYPE, decode_token
from src.services.gateway.proxy import (
    GatewayProxy,
    build_upstream_headers,
    requires_auth,
    split_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def get_gateway_proxy(request: Request) -> GatewayProxy:
    proxy = getattr(request.app.state, "gateway_proxy", None)
    if proxy is None:
        proxy = GatewayProxy()
        request.app.state.gateway_proxy = proxy
    return proxy


def authenticate(request: Request) -> dict:
    """Claims of the bearer access token, or 401."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError("Unauthorized")
    payload = decode_token(token.strip(), expected_type=ACCESS_TOKEN_TYPE)
    if payload is None:
        raise UnauthorizedError("Unauthorized")
    return payload


@router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy(path: str, request: Request) -> Response:
    service, upstream_path = split_service(path)
    gateway = get_gateway_proxy(request)
    # Unknown service names fail before any auth decision
    gateway.service_url(service)

    user_id = email = None
    if requires_auth(path):
        claims = authenticate(request)
        user_id, email = claims["sub"], claims.get("email")

    headers = build_upstream_headers(request.headers, service, user_id, email)
    upstream = await gateway.forward(
        service,
        upstream_path,
        request.method,
        query=request.url.query,
        body=await request.body(),
        headers=headers,
    )

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type"),
    )
