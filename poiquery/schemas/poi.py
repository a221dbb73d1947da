"""Request/response schemas for POI management."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from poiquery.core.validators import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH, sanitize_text_input
from poiquery.schemas.common import CamelModel

MAX_CATEGORY_LENGTH = 100


class POICreate(CamelModel):
    """Fields an admin supplies when adding a POI.

    Coordinates arrive already encrypted by the client.
    """

    encrypted_lat: str = Field(..., min_length=1)
    encrypted_lng: str = Field(..., min_length=1)
    name: str
    description: Optional[str] = None
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _clean_name(cls, value: str) -> str:
        return sanitize_text_input(value, max_length=MAX_NAME_LENGTH, allow_empty=False)

    @field_validator("description")
    @classmethod
    def _clean_description(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text_input(value, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("category")
    @classmethod
    def _clean_category(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text_input(value, max_length=MAX_CATEGORY_LENGTH)


class POIUpdate(CamelModel):
    """Partial update; only fields present in the body are changed."""

    encrypted_lat: Optional[str] = Field(None, min_length=1)
    encrypted_lng: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None

    @field_validator("encrypted_lat", "encrypted_lng", "name")
    @classmethod
    def _not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("name")
    @classmethod
    def _clean_name(cls, value: str) -> str:
        return sanitize_text_input(value, max_length=MAX_NAME_LENGTH, allow_empty=False)

    @field_validator("description")
    @classmethod
    def _clean_description(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text_input(value, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("category")
    @classmethod
    def _clean_category(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text_input(value, max_length=MAX_CATEGORY_LENGTH)


class BulkPOICreate(CamelModel):
    """Body of POST /pois/bulk."""

    pois: List[POICreate]


class POIResponse(CamelModel):
    """A stored POI as returned to clients; coordinates stay encrypted."""

    id: str
    encrypted_lat: str
    encrypted_lng: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime
    created_by: str
    updated_at: datetime
    updated_by: Optional[str] = None


class POIPage(CamelModel):
    """One page of the admin POI listing.

    Attributes:
        pois: Records on this page, ordered by id.
        last_doc: Cursor to pass as ``lastDoc`` for the next page.
        has_more: True when the page is full; the next page may still be empty.
    """

    pois: List[POIResponse]
    last_doc: Optional[str] = None
    has_more: bool


class DeleteResponse(CamelModel):
    success: bool
