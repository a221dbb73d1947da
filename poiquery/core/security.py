"""
Password hashing and bearer token helpers.

Authentication vs Authorization:
- AUTHENTICATION: "Who are you?" - the JWT proves the caller's user id.
- AUTHORIZATION: "What can you do?" - decided by looking the user up again
  in the users table, never by trusting the role claim inside the token.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from poiquery.core.config import settings
from poiquery.core.exceptions import UnauthenticatedException

logger = logging.getLogger(__name__)


# =============================================================================
# PASSWORD HASHING
# =============================================================================

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """
    Hash a password for storage.

    Args:
        password: Plain text password

    Returns:
        str: bcrypt hash ("$2b$12$..."), salt embedded
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Password to verify
        hashed_password: Hash from database

    Returns:
        bool: True if password matches
    """
    return pwd_context.verify(plain_password, hashed_password)


# =============================================================================
# JWT TOKEN AUTHENTICATION
# =============================================================================

def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create JWT access token.

    The token contains:
    - sub: the user id
    - role: informational only, see get_current_user_id
    - exp / iat: expiry and issue timestamps

    Args:
        data: Payload data (sub, role)
        expires_delta: Token lifetime (default JWT_EXPIRATION_HOURS)

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta is not None:
        expire = now + expires_delta
    else:
        expire = now + timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    to_encode.update({
        "exp": expire,
        "iat": now,
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify JWT token.

    Verification checks the signature and the expiry.

    Args:
        token: JWT token string

    Returns:
        dict: Decoded payload

    Raises:
        UnauthenticatedException: If the token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        logger.info("JWT verification failed: token expired")
        raise UnauthenticatedException("Token expired")
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise UnauthenticatedException("Invalid token")

    if not payload.get("sub"):
        raise UnauthenticatedException("Invalid token")

    return payload
