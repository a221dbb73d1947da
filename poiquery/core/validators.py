"""
Input validation helpers shared by schemas, the cipher and the CSV importer.

All validators raise ValueError so they can be used directly inside
pydantic field validators; callers outside pydantic translate the
ValueError into a ValidationException.
"""

import math
import re
from typing import Any, Optional, Tuple

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


# =============================================================================
# COORDINATE VALIDATION
# =============================================================================

def _as_finite_number(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number, got {type(value).__name__}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{label} must be a finite number")
    return number


def validate_latitude(lat: float) -> float:
    """
    Validate latitude coordinate.

    Latitude: North/South position (-90 to 90), 0 = Equator.

    Args:
        lat: Latitude in decimal degrees

    Returns:
        float: Validated latitude

    Raises:
        ValueError: If latitude is invalid
    """
    lat = _as_finite_number(lat, "Latitude")
    if lat < -90 or lat > 90:
        raise ValueError(f"Latitude must be between -90 and 90, got {lat}")
    return lat


def validate_longitude(lng: float) -> float:
    """Validate longitude coordinate."""
    lng = _as_finite_number(lng, "Longitude")
    if lng < -180 or lng > 180:
        raise ValueError(f"Longitude must be between -180 and 180, got {lng}")
    return lng


def validate_coordinates(lat: float, lng: float) -> Tuple[float, float]:
    """
    Validate coordinate pair.

    Args:
        lat: Latitude
        lng: Longitude

    Returns:
        tuple: (validated_lat, validated_lng)

    Raises:
        ValueError: If coordinates are invalid
    """
    return (validate_latitude(lat), validate_longitude(lng))


def validate_radius(radius: float) -> float:
    """A search radius in meters must be finite and strictly positive."""
    radius = _as_finite_number(radius, "Radius")
    if radius <= 0:
        raise ValueError(f"Radius must be greater than zero, got {radius}")
    return radius


# =============================================================================
# TEXT INPUT
# =============================================================================

def sanitize_text_input(
    text: Optional[str],
    max_length: int = MAX_NAME_LENGTH,
    allow_empty: bool = True,
) -> Optional[str]:
    """
    Strip surrounding whitespace and control characters, enforce a length limit.

    Args:
        text: Raw user input
        max_length: Maximum accepted length after stripping
        allow_empty: Whether an empty string is acceptable

    Returns:
        Cleaned text, or None when the input is None

    Raises:
        ValueError: If the text is too long, or empty when not allowed
    """
    if text is None:
        return None

    cleaned = "".join(ch for ch in text if ch in "\n\t" or ord(ch) >= 32).strip()

    if not cleaned and not allow_empty:
        raise ValueError("Value cannot be empty")
    if len(cleaned) > max_length:
        raise ValueError(f"Value too long (max {max_length} characters)")

    return cleaned


# =============================================================================
# EMAIL VALIDATION
# =============================================================================

def validate_email(email: str) -> str:
    """
    Validate email address format.

    Basic format check only (local-part@domain); the address is
    normalized to lower case.

    Args:
        email: Email address to validate

    Returns:
        str: Validated and normalized email

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        raise ValueError("Email cannot be empty")

    email = email.strip().lower()

    if len(email) > 254:
        raise ValueError("Email too long (max 254 characters)")

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email
