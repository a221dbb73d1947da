"""Security headers added to every HTTP response."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all HTTP responses.

    API responses are also marked as non-cacheable since they carry
    ciphertext coordinates and bearer-protected data.
    """

    def __init__(self, app: ASGIApp, api_prefix: str = "/api"):
        super().__init__(app)
        self.api_prefix = api_prefix.rstrip("/") + "/"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Only meaningful once TLS terminates here
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        if request.url.path.startswith(self.api_prefix):
            response.headers["Cache-Control"] = "no-store, no-cache, max-age=0"
            response.headers["Pragma"] = "no-cache"

        return response
