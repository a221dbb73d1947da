"""Request/response schemas for registration, login and profile."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from poiquery.core.validators import validate_email
from poiquery.models.user import UserRole
from poiquery.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Body of POST /auth/register."""

    email: str
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.USER

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return validate_email(value)


class LoginRequest(CamelModel):
    """Body of POST /auth/login."""

    email: str
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserResponse(CamelModel):
    """Public view of a user; the password hash is never included."""

    id: str
    email: str
    role: UserRole
    created_at: datetime
    last_login: Optional[datetime] = None


class AuthResponse(CamelModel):
    """Returned by register and login."""

    user: UserResponse
    token: str
