"""
POI Query API Client
====================

A ``requests`` based client that performs the client half of the
protocol: coordinates and radius are encrypted before they leave the
machine, and search results are decrypted after they come back.

Usage:
    client = POIQueryClient("http://localhost:8000")
    client.login("admin@example.com", "secret123")

    client.add_poi(40.7128, -74.0060, name="City Hall")
    for hit in client.search(40.7128, -74.0060, radius_meters=1000):
        print(hit.name, hit.lat, hit.lng, hit.distance)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from poiquery.core.config import settings
from poiquery.core.exceptions import DecryptionError
from poiquery.core.validators import validate_radius
from poiquery.services.cipher import CoordinateCipher

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class APIError(Exception):
    """Base exception for API errors"""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[dict] = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


class AuthenticationError(APIError):
    """401 Unauthenticated"""


class AuthorizationError(APIError):
    """403 Admin role required"""


class NotFoundError(APIError):
    """404 Not Found"""


class ValidationError(APIError):
    """400 Bad Request"""


class RateLimitError(APIError):
    """429 Too Many Requests"""


class ServerError(APIError):
    """5xx Server Error"""


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class SearchHit:
    """A search result with its coordinates decrypted locally."""

    id: str
    name: str
    lat: Optional[float]
    lng: Optional[float]
    distance: Optional[float]
    encrypted_lat: str
    encrypted_lng: str
    description: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], cipher: CoordinateCipher) -> "SearchHit":
        """Build a hit from an API result, decrypting its coordinates."""
        try:
            lat, lng = cipher.decrypt(data["encryptedLat"], data["encryptedLng"])
        except DecryptionError as e:
            logger.warning(f"Could not decrypt result {data.get('id')}: {e.message}")
            lat, lng = None, None
        return cls(
            id=data["id"],
            name=data["name"],
            lat=lat,
            lng=lng,
            distance=data.get("distance"),
            encrypted_lat=data["encryptedLat"],
            encrypted_lng=data["encryptedLng"],
            description=data.get("description"),
            category=data.get("category"),
        )


# =============================================================================
# API CLIENT
# =============================================================================

class POIQueryClient:
    """
    Client for the POI Query API.

    Every call is attempted once. Network errors raise APIError and HTTP
    errors are mapped to the exception classes above.

    Attributes:
        base_url: Server root, e.g. ``http://localhost:8000``.
        cipher: Cipher sharing the server's passphrase.
        token: Bearer token set by login or register.
    """

    def __init__(
        self,
        base_url: str,
        passphrase: Optional[str] = None,
        api_prefix: str = "/api",
        timeout: int = 30,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API base URL (e.g., 'http://localhost:8000')
            passphrase: Shared coordinate passphrase; defaults to the
                configured ENCRYPTION_PASSPHRASE
            api_prefix: Path prefix of the API routes
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix
        self.cipher = CoordinateCipher(passphrase or settings.ENCRYPTION_PASSPHRASE)
        self.timeout = timeout
        self.token: Optional[str] = None

        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _set_token(self, token: Optional[str]) -> None:
        self.token = token
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        else:
            self.session.headers.pop("Authorization", None)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        data: Optional[Any] = None,
        api: bool = True,
    ) -> Any:
        """
        Make a single API request and map failures to exceptions.

        Each request is sent exactly once; network errors are raised as
        APIError without another attempt.

        Args:
            method: HTTP method.
            path: Route path below the API prefix (or the root when api is False).
            params: Query string parameters.
            data: JSON body.
            api: Prefix the path with the API prefix.

        Returns:
            Decoded JSON body.
        """
        url = f"{self.base_url}{self.api_prefix if api else ''}{path}"
        logger.debug(f"Request: {method} {url}")
        try:
            response = self.session.request(
                method, url, params=params, json=data, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request {method} {url} failed: {e}")
            raise APIError(f"Network error: {e}")

        logger.debug(f"Response: {response.status_code}")
        self._handle_error(response)
        if response.status_code == 204:
            return {}
        return response.json()

    def _handle_error(self, response: requests.Response) -> None:
        """
        Map an HTTP error response to an exception.

        - 400: ValidationError
        - 401: AuthenticationError
        - 403: AuthorizationError
        - 404: NotFoundError
        - 429: RateLimitError
        - 5xx: ServerError
        """
        if response.status_code < 400:
            return

        body = None
        try:
            body = response.json()
            message = body.get("error", str(body))
        except ValueError:
            message = response.text or f"HTTP {response.status_code}"

        error_classes = {
            400: ValidationError,
            401: AuthenticationError,
            403: AuthorizationError,
            404: NotFoundError,
            429: RateLimitError,
        }
        if response.status_code >= 500:
            error_class = ServerError
        else:
            error_class = error_classes.get(response.status_code, APIError)
        raise error_class(message, status_code=response.status_code, response=body)

    # =========================================================================
    # HEALTH
    # =========================================================================

    def health_check(self) -> Dict[str, Any]:
        """Check API health"""
        return self._request("GET", "/health", api=False)

    # =========================================================================
    # AUTH
    # =========================================================================

    def register(self, email: str, password: str, role: str = "user") -> Dict[str, Any]:
        """Create an account and keep its token for later calls."""
        body = self._request(
            "POST", "/auth/register",
            data={"email": email, "password": password, "role": role},
        )
        self._set_token(body["token"])
        return body["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and keep the token for later calls."""
        body = self._request("POST", "/auth/login", data={"email": email, "password": password})
        self._set_token(body["token"])
        return body["user"]

    def logout(self) -> None:
        self._request("POST", "/auth/logout")
        self._set_token(None)

    def profile(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/profile")

    # =========================================================================
    # POIS
    # =========================================================================

    def encrypt_poi(
        self,
        lat: float,
        lng: float,
        name: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build a POI payload with encrypted coordinates."""
        encrypted_lat, encrypted_lng = self.cipher.encrypt(lat, lng)
        payload: Dict[str, Any] = {
            "encryptedLat": encrypted_lat,
            "encryptedLng": encrypted_lng,
            "name": name,
        }
        if description is not None:
            payload["description"] = description
        if category is not None:
            payload["category"] = category
        return payload

    def add_poi(
        self,
        lat: float,
        lng: float,
        name: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Encrypt the coordinates and store a POI (admin only)."""
        payload = self.encrypt_poi(lat, lng, name, description, category)
        return self._request("POST", "/pois", data=payload)

    def bulk_add_pois(self, payloads: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Store already encrypted POI payloads in one transaction (admin only)."""
        return self._request("POST", "/pois/bulk", data={"pois": payloads})

    def update_poi(
        self,
        poi_id: str,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        **fields: Any,
    ) -> Dict[str, Any]:
        """
        Update a POI (admin only).

        Coordinates must be given together; they are re-encrypted.
        Other keyword arguments (name, description, category) are sent as is.
        """
        if (lat is None) != (lng is None):
            raise ValueError("lat and lng must be updated together")

        payload: Dict[str, Any] = dict(fields)
        if lat is not None:
            payload["encryptedLat"], payload["encryptedLng"] = self.cipher.encrypt(lat, lng)
        return self._request("PUT", f"/pois/{poi_id}", data=payload)

    def delete_poi(self, poi_id: str) -> bool:
        return self._request("DELETE", f"/pois/{poi_id}")["success"]

    def list_pois(
        self,
        page_size: Optional[int] = None,
        last_doc: Optional[str] = None,
    ) -> Dict[str, Any]:
        """One page of POIs: ``{"pois", "lastDoc", "hasMore"}`` (admin only)."""
        params: Dict[str, Any] = {}
        if page_size is not None:
            params["pageSize"] = page_size
        if last_doc:
            params["lastDoc"] = last_doc
        return self._request("GET", "/pois", params=params)

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search(
        self,
        lat: float,
        lng: float,
        radius_meters: Optional[float] = None,
    ) -> List[SearchHit]:
        """
        Search around a point; the server never sees the plaintext query.

        Args:
            lat: Center latitude.
            lng: Center longitude.
            radius_meters: Radius in meters; the server default applies when omitted.
                Must be positive.

        Returns:
            Hits nearest first, coordinates decrypted, distance in km.
        """
        encrypted_lat, encrypted_lng = self.cipher.encrypt(lat, lng)
        query: Dict[str, Any] = {"encryptedLat": encrypted_lat, "encryptedLng": encrypted_lng}
        if radius_meters is not None:
            query["encryptedRadius"] = self.cipher.encrypt_scalar(validate_radius(radius_meters))

        results = self._request("POST", "/search", data=query)
        return [SearchHit.from_dict(result, self.cipher) for result in results]

    def search_history(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/search/history")
