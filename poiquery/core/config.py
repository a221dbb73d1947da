"""Application configuration using Pydantic Settings.

This module provides type-safe environment variable management
with validation and computed properties for database URIs.
"""

import logging
import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        APP_ENV: Application environment (development, staging, production).
        DEBUG: Enable debug mode.
        API_PREFIX: Prefix for all API routes.
        POSTGRES_USER: PostgreSQL username.
        POSTGRES_PASSWORD: PostgreSQL password.
        POSTGRES_DB: PostgreSQL database name.
        POSTGRES_HOST: PostgreSQL host address.
        POSTGRES_PORT: PostgreSQL port number.
        DATABASE_URL: Full async database URL, overrides the POSTGRES_* values.
        CORS_ORIGINS: Comma-separated list of allowed CORS origins.
        JWT_SECRET_KEY: HMAC secret used to sign bearer tokens.
        JWT_ALGORITHM: JWT signing algorithm.
        JWT_EXPIRATION_HOURS: Bearer token lifetime.
        BCRYPT_ROUNDS: bcrypt work factor for password hashes.
        ENCRYPTION_PASSPHRASE: Passphrase shared by every client for coordinates.
        DEFAULT_SEARCH_RADIUS_METERS: Radius used when a query carries none.
        SEARCH_HISTORY_LIMIT: Maximum history entries returned per user.
        DEFAULT_PAGE_SIZE: Page size for POI listing when none is given.
        MAX_PAGE_SIZE: Upper bound for the POI listing page size.
        RATE_LIMIT_ENABLED: Toggle rate limiting on auth endpoints.
        AUTH_RATE_LIMIT: slowapi limit string for register/login.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Database
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "poiquery"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Auth
    JWT_SECRET_KEY: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    # Coordinate cipher
    ENCRYPTION_PASSPHRASE: str = "your-private-key"

    # Search and listing
    DEFAULT_SEARCH_RADIUS_METERS: float = 10000.0
    SEARCH_HISTORY_LIMIT: int = 50
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "10/minute"

    @model_validator(mode="after")
    def _ensure_jwt_secret(self) -> "Settings":
        if not self.JWT_SECRET_KEY:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)
            logger.warning(
                "JWT_SECRET_KEY not set; generated a temporary key. "
                "Tokens will not survive a restart."
            )
        return self

    @computed_field  # type: ignore[misc]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the async database URI.

        Returns:
            Async database connection string for SQLAlchemy.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance.
    """
    return Settings()


settings = get_settings()
