"""Request/response schemas for the geo-filter search."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from poiquery.schemas.common import CamelModel
from poiquery.schemas.poi import POIResponse


class SearchQuery(CamelModel):
    """An encrypted search request.

    Attributes:
        encrypted_lat: Ciphertext latitude of the search center.
        encrypted_lng: Ciphertext longitude of the search center.
        encrypted_radius: Ciphertext radius in meters; defaults server-side.
    """

    encrypted_lat: str = Field(..., min_length=1)
    encrypted_lng: str = Field(..., min_length=1)
    encrypted_radius: Optional[str] = None


class SearchResult(POIResponse):
    """A POI within the search radius.

    ``distance`` is in kilometers, while the request radius is in meters.
    """

    distance: Optional[float] = None


class SearchHistoryEntry(CamelModel):
    id: str
    user_id: str
    query: SearchQuery
    timestamp: datetime
