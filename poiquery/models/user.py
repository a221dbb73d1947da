"""User model.

Users carry a role that gates POI management. The role is fixed at
registration; only last_login changes afterwards.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from poiquery.models.base import Base, generate_uuid, utcnow


class UserRole(str, enum.Enum):
    """Roles a user can hold."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """An account that can search POIs and, as admin, manage them.

    Attributes:
        id: Primary key (UUID string).
        email: Unique, lower-cased login email.
        password_hash: bcrypt hash, never serialized.
        role: Either "admin" or "user".
        created_at: Registration timestamp.
        last_login: Timestamp of the most recent successful login.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.USER.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=True
    )
