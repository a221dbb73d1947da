"""
Rate limiting for the authentication endpoints.

Register and login are throttled per client IP so passwords cannot be
brute forced. The limit comes from ``AUTH_RATE_LIMIT`` and the whole
limiter can be switched off with ``RATE_LIMIT_ENABLED=false``.
"""

import logging

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from poiquery.core.config import settings
from poiquery.middleware.error_handler import error_response

logger = logging.getLogger(__name__)


def get_ip_address(request: Request) -> str:
    """
    Client IP used as the rate limit key.

    X-Forwarded-For can be spoofed by clients; only trust it behind a
    proxy you control.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


limiter = Limiter(
    key_func=get_ip_address,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri="memory://",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return 429 with the standard error body."""
    logger.warning(
        f"Rate limit exceeded: {get_ip_address(request)} on {request.url.path}"
    )
    return error_response(
        request, 429, "Rate limit exceeded", {"limit": str(exc.detail)}
    )
