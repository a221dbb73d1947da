"""FastAPI application entry point.

This module initializes the FastAPI application with logging,
CORS, middleware, rate limiting and route registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from poiquery import __version__
from poiquery.api.endpoints import health
from poiquery.api.router import api_router
from poiquery.core.config import settings
from poiquery.core.logging import setup_logging
from poiquery.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from poiquery.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from poiquery.middleware.security import SecurityHeadersMiddleware
from poiquery.services.database import get_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    logger.info("Starting POI Query API...")
    logger.info(f"Environment: {settings.APP_ENV}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    yield

    logger.info("Shutting down POI Query API...")
    # Only dispose an engine that was actually created
    if get_engine.cache_info().currsize:
        await get_engine().dispose()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    setup_logging()

    app = FastAPI(
        title="POI Query API",
        description=(
            "Manage locations of interest whose coordinates are encrypted "
            "by the client, and search them by encrypted center and radius."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, api_prefix=settings.API_PREFIX)

    # Outermost, so every response carries X-Request-ID
    app.add_middleware(ErrorHandlerMiddleware)

    setup_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


# Create the application instance
app = create_application()
