# core/rate_limiter.py
import logging
from typing import Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import HTTPException, Request, status

from src.app.config import settings

logger = logging.getLogger(__name__)

try:
    r = redis.from_url(settings.REDIS_URL, decode_responses=True) if settings.REDIS_URL else None
except (RedisError, ValueError):
    r = None  # Allow app to start even if Redis is unavailable


def _rate_key(scope: str, identifier: str) -> str:
    return f"rate_limit:{scope}:{identifier}"


def get_client_ip(request: Request) -> str:
    """Extract client IP address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def hit(scope: str, identifier: str, max_calls: int, period: int) -> Tuple[bool, Optional[int]]:
    """
    Count one call in a fixed window.
    Returns (allowed, retry_after_seconds_or_None).
    """
    if r is None:
        return True, None  # Allow if Redis is not available

    key = _rate_key(scope, identifier)
    try:
        current = await r.incr(key)
        if current == 1:
            # first increment, set expiry for the window
            await r.expire(key, period)

        if current > max_calls:
            ttl = await r.ttl(key)
            return False, ttl if ttl and ttl > 0 else period
    except RedisError as exc:
        logger.warning(f"Rate limiter unavailable, allowing request: {exc}")
        return True, None
    return True, None


class RateLimit:
    """
    FastAPI dependency enforcing a per-client fixed-window limit.

    Args:
        scope: unique key namespace
        max_calls: allowed calls per window (defaults to AUTH_RATE_LIMIT)
        period: window in seconds (defaults to AUTH_RATE_LIMIT_WINDOW_SECS)
    """

    def __init__(self, scope: str, max_calls: Optional[int] = None, period: Optional[int] = None):
        self.scope = scope
        self.max_calls = max_calls or settings.AUTH_RATE_LIMIT
        self.period = period or settings.AUTH_RATE_LIMIT_WINDOW_SECS

    async def __call__(self, request: Request) -> None:
        allowed, retry_after = await hit(self.scope, get_client_ip(request), self.max_calls, self.period)
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Retry after {retry_after}s",
                headers={"Retry-After": str(retry_after)},
            )
