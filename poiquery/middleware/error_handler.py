"""Global error handling middleware.

This module provides centralized exception handling with
structured JSON responses and request tracking. Every error
body has the shape ``{"error": ..., "request_id": ...}``, plus
``details`` when there is extra context.
"""

import logging
import time
import traceback
import uuid
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from poiquery.core.exceptions import AppException

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Build the JSON error body shared by every handler."""
    request_id = getattr(request.state, "request_id", "unknown")
    content: Dict[str, Any] = {"error": message, "request_id": request_id}
    if details:
        content["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={"X-Request-ID": request_id},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for catching and formatting all exceptions.

    Assigns a request id, logs method, path, status and duration,
    and converts anything that escapes the route handlers into a
    structured JSON response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Process request and handle any exceptions.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            Response from handler or error response.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        try:
            response = await call_next(request)
        except AppException as exc:
            logger.warning(f"Application error: {exc.message} (request_id={request_id})")
            return error_response(request, exc.status_code, exc.message, exc.details)
        except Exception as exc:
            logger.error(
                f"Unhandled exception: {exc} (request_id={request_id})\n"
                f"{traceback.format_exc()}"
            )
            return error_response(request, 500, "Internal server error")

        response.headers["X-Request-ID"] = request_id
        duration_ms = round((time.time() - start_time) * 1000, 2)
        message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration_ms}ms (request_id={request_id})"
        )
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)
        return response


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Validation error"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the FastAPI app.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        """Handle AppException with structured response."""
        if exc.status_code >= 500:
            logger.error(f"Application error: {exc.message}")
        return error_response(request, exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report malformed bodies and parameters as 400 instead of 422."""
        errors = [
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        return error_response(
            request, 400, _describe_validation_error(exc), {"errors": errors}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Give framework errors (unknown route, wrong method) the same body."""
        return error_response(request, exc.status_code, str(exc.detail))
