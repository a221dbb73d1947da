"""
Geo-Filter Search
=================

Finds POIs within a radius of an encrypted search center.

The server decrypts the query, loads every stored POI, decrypts each
one and keeps those whose Haversine distance is within the radius.
There is no spatial index; the cost is linear in the table size.

Units
-----
The radius is in meters on the way in. The ``distance`` attached to
each result is in kilometers.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from poiquery.core.exceptions import DecryptionError, InvalidRadiusException, ValidationException
from poiquery.models.poi import POI
from poiquery.schemas.search import SearchQuery, SearchResult
from poiquery.services.cipher import CoordinateCipher
from poiquery.services.geo import haversine_meters, meters_to_kilometers
from poiquery.services.history import SearchHistoryRecorder
from poiquery.services.poi_store import POIStore

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Tallies for one search, logged as a summary."""

    total: int = 0
    processed: int = 0
    skipped_invalid: int = 0
    within_radius: int = 0


def _reported_kilometers(distance_m: float, radius_meters: float) -> float:
    # Keep distance * 1000 <= radius_meters for every kept record
    distance_km = meters_to_kilometers(distance_m)
    if distance_km * 1000 > radius_meters:
        distance_km = math.nextafter(distance_km, 0.0)
    return distance_km


def _distance_key(result: SearchResult) -> float:
    return result.distance if result.distance is not None else math.inf


def filter_by_distance(
    pois: Iterable[POI],
    center: Tuple[float, float],
    radius_meters: float,
    cipher: CoordinateCipher,
) -> Tuple[List[SearchResult], SearchStats]:
    """
    Keep the POIs within radius_meters of center, nearest first.

    POIs whose coordinates cannot be decrypted are skipped and counted.

    Args:
        pois: Candidate records with encrypted coordinates.
        center: Plaintext (lat, lng) of the search center.
        radius_meters: Inclusive search radius in meters.
        cipher: Cipher used to decrypt each candidate.

    Returns:
        Tuple of (results sorted by ascending distance in km, stats).
    """
    stats = SearchStats()
    results: List[SearchResult] = []
    center_lat, center_lng = center

    for poi in pois:
        stats.total += 1
        try:
            lat, lng = cipher.decrypt(poi.encrypted_lat, poi.encrypted_lng)
        except DecryptionError as e:
            stats.skipped_invalid += 1
            logger.debug(f"Skipping POI {poi.id}: {e.message}")
            continue
        stats.processed += 1

        distance_m = haversine_meters(center_lat, center_lng, lat, lng)
        if distance_m <= radius_meters:
            stats.within_radius += 1
            result = SearchResult.model_validate(poi)
            result.distance = _reported_kilometers(distance_m, radius_meters)
            results.append(result)

    results.sort(key=_distance_key)
    return results, stats


class GeoSearchService:
    """
    Runs an encrypted radius search for one caller.

    Attributes:
        store: Source of the candidate POIs.
        cipher: Shared coordinate cipher.
        history: Records each query before it runs.
        default_radius_meters: Radius used when the query has none.
    """

    def __init__(
        self,
        store: POIStore,
        cipher: CoordinateCipher,
        history: SearchHistoryRecorder,
        default_radius_meters: float = 10000.0,
    ) -> None:
        self.store = store
        self.cipher = cipher
        self.history = history
        self.default_radius_meters = default_radius_meters

    def decrypt_parameters(self, query: SearchQuery) -> Tuple[Tuple[float, float], float]:
        """
        Decrypt the search center and radius.

        Returns:
            Tuple of ((lat, lng), radius_meters).

        Raises:
            ValidationException: If the center or radius cannot be decrypted.
            InvalidRadiusException: If the radius is not positive.
        """
        try:
            center = self.cipher.decrypt(query.encrypted_lat, query.encrypted_lng)
            radius: Optional[float] = None
            if query.encrypted_radius:
                radius = self.cipher.decrypt_scalar(query.encrypted_radius)
        except DecryptionError as e:
            logger.warning(f"Search parameters could not be decrypted: {e.message}")
            raise ValidationException("Invalid search parameters")

        if radius is None:
            radius = self.default_radius_meters
        if radius <= 0:
            raise InvalidRadiusException()
        return center, radius

    async def search(self, query: SearchQuery, caller_id: str) -> List[SearchResult]:
        """
        Record the query, then return every POI within its radius.

        Args:
            query: Encrypted center and optional encrypted radius.
            caller_id: Id of the authenticated caller.

        Returns:
            Matching POIs sorted by ascending distance (km).
        """
        await self.history.record(caller_id, query)

        center, radius = self.decrypt_parameters(query)
        pois = await self.store.scan_all()
        results, stats = filter_by_distance(pois, center, radius, self.cipher)

        logger.info(
            f"Search summary: total={stats.total} processed={stats.processed} "
            f"skipped_invalid={stats.skipped_invalid} "
            f"within_radius={stats.within_radius} returned={len(results)}"
        )
        if stats.total and stats.skipped_invalid == stats.total:
            logger.warning(
                f"All {stats.total} POIs failed decryption; check ENCRYPTION_PASSPHRASE"
            )
        return results
