"""Point of interest model.

Coordinates are stored exactly as the client sent them: ciphertext
strings. The server only decrypts them while running a search.
"""

from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from poiquery.models.base import Base, TimestampMixin, generate_uuid


class POI(Base, TimestampMixin):
    """A named location with encrypted coordinates.

    Attributes:
        id: Primary key (UUID string), also the pagination cursor.
        encrypted_lat: Ciphertext latitude.
        encrypted_lng: Ciphertext longitude.
        name: Display name (plaintext).
        description: Optional free text.
        category: Optional category label.
        created_by: Id of the admin that created the record.
        updated_by: Id of the admin that last updated the record.
    """

    __tablename__ = "pois"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    encrypted_lat: Mapped[str] = mapped_column(Text, nullable=False)
    encrypted_lng: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_by: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    updated_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
