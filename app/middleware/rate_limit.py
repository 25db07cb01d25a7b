"""
Taste Palette API - Rate Limiting Middleware.

Per-route rate limits using SlowAPI with Redis storage.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from settings import settings


logger = logging.getLogger(__name__)


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key identifier from request.

    Uses user ID if authenticated, otherwise IP address.

    Args:
        request: FastAPI request object.

    Returns:
        str: User ID or IP address for rate limiting.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_user_identifier,
    storage_uri=settings.redis_url_with_auth,
    default_limits=["60/minute"],
    enabled=settings.ENV != "testing"
)


def auth_limit() -> str:
    """Rate limit for credential endpoints (signup/login/reset)."""
    return "5/minute"


def scan_limit() -> str:
    """Rate limit for menu scans, on top of plan quotas."""
    if settings.ENV in ("testing", "development"):
        return "1000/hour"
    return "20/hour"


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Render rate limit errors in the standard error envelope.

    Args:
        request: FastAPI request object.
        exc: RateLimitExceeded exception.

    Returns:
        JSONResponse: 429 Too Many Requests.
    """
    logger.warning(f"Rate limit exceeded for {get_user_identifier(request)}: {exc.detail}")
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "message": "Too many requests. Please slow down."},
        headers={"Retry-After": "60"}
    )
