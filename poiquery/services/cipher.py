"""
Coordinate Cipher
=================

Symmetric encryption of latitude, longitude and radius values with one
static passphrase shared by every client and the server.

Wire format
-----------
Ciphertexts use the OpenSSL "salted" envelope produced by CryptoJS's
``AES.encrypt(text, passphrase)``, so browser clients and this service
can read each other's values::

    base64( b"Salted__" || salt[8] || AES-256-CBC( PKCS7( utf8(text) ) ) )

Key and IV are derived from passphrase + salt with OpenSSL's
``EVP_BytesToKey`` (MD5, one iteration). A fresh random salt is drawn per
encryption, so the same coordinate never encrypts to the same string twice.

SECURITY WARNING:
-----------------
This is NOT predicate or order-preserving encryption. Range and equality
tests cannot be evaluated on the ciphertext; the server holds the same
passphrase and decrypts every stored coordinate on every search. The
"privacy" the product advertises does not hold against the server.
A real fix needs an order-revealing or predicate scheme (for example
geohash-bucketed range tokens) and a re-confirmed threat model.

Example Usage:
-------------
```python
cipher = CoordinateCipher("your-private-key")
ct_lat, ct_lng = cipher.encrypt(40.7128, -74.0060)
lat, lng = cipher.decrypt(ct_lat, ct_lng)
ct_radius = cipher.encrypt_scalar(1000)
```
"""

import base64
import binascii
import hashlib
import logging
import math
import os
from typing import Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from poiquery.core.exceptions import DecryptionError, ValidationException
from poiquery.core.validators import validate_coordinates

# IMPORTANT: Never log the passphrase, derived keys or plaintext coordinates
logger = logging.getLogger(__name__)

SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32  # AES-256
IV_SIZE = 16
BLOCK_SIZE_BITS = 128


def evp_bytes_to_key(
    passphrase: bytes,
    salt: bytes,
    key_len: int = KEY_SIZE,
    iv_len: int = IV_SIZE,
) -> Tuple[bytes, bytes]:
    """
    Derive an AES key and IV the way OpenSSL's EVP_BytesToKey does.

    D_i = MD5(D_{i-1} || passphrase || salt), concatenated until
    key_len + iv_len bytes are available.

    Args:
        passphrase: Shared passphrase bytes.
        salt: 8-byte salt taken from the ciphertext envelope.
        key_len: Key length in bytes.
        iv_len: IV length in bytes.

    Returns:
        Tuple of (key, iv).
    """
    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


def format_number(value: float) -> str:
    """Shortest decimal text for a number; integral values drop the ``.0``."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


class CoordinateCipher:
    """
    Encrypts and decrypts coordinate values with a shared passphrase.

    One instance is built per process and shared by every request; it
    holds no per-request state.

    Attributes:
        _passphrase: UTF-8 encoded shared passphrase.
    """

    def __init__(self, passphrase: str) -> None:
        """
        Args:
            passphrase: Passphrase shared with every client.

        Raises:
            ValueError: If the passphrase is empty.
        """
        if not passphrase:
            raise ValueError("Encryption passphrase must not be empty")
        self._passphrase = passphrase.encode("utf-8")

    # -------------------------------------------------------------------------
    # Text level
    # -------------------------------------------------------------------------

    def encrypt_text(self, plaintext: str) -> str:
        """Encrypt a string into the salted base64 envelope."""
        salt = os.urandom(SALT_SIZE)
        key, iv = evp_bytes_to_key(self._passphrase, salt)

        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return base64.b64encode(SALT_HEADER + salt + ciphertext).decode("ascii")

    def decrypt_text(self, token: str) -> str:
        """
        Decrypt a salted base64 envelope back into a string.

        Args:
            token: Ciphertext produced by encrypt_text or CryptoJS.

        Returns:
            The decrypted text.

        Raises:
            DecryptionError: If the envelope is malformed or the key is wrong.
        """
        if not isinstance(token, str) or not token.strip():
            raise DecryptionError("Ciphertext is empty")

        try:
            raw = base64.b64decode(token.strip(), validate=True)
        except (binascii.Error, ValueError):
            raise DecryptionError("Ciphertext is not valid base64")

        header_len = len(SALT_HEADER) + SALT_SIZE
        if not raw.startswith(SALT_HEADER) or len(raw) < header_len + IV_SIZE:
            raise DecryptionError("Ciphertext is missing the salt header")

        salt = raw[len(SALT_HEADER):header_len]
        body = raw[header_len:]
        if len(body) % IV_SIZE:
            raise DecryptionError("Ciphertext length is not a multiple of the block size")

        key, iv = evp_bytes_to_key(self._passphrase, salt)
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        try:
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            # Wrong passphrase almost always surfaces here
            raise DecryptionError("Wrong key or corrupted ciphertext")

    # -------------------------------------------------------------------------
    # Numbers
    # -------------------------------------------------------------------------

    def _decrypt_number(self, token: str, label: str) -> float:
        text = self.decrypt_text(token)
        try:
            value = float(text.strip())
        except ValueError:
            raise DecryptionError(f"{label} is not numeric after decryption")
        if not math.isfinite(value):
            raise DecryptionError(f"{label} is not a finite number after decryption")
        return value

    def encrypt(self, lat: float, lng: float) -> Tuple[str, str]:
        """
        Encrypt a latitude/longitude pair.

        Args:
            lat: Latitude in decimal degrees (-90 to 90).
            lng: Longitude in decimal degrees (-180 to 180).

        Returns:
            Tuple of (encrypted_lat, encrypted_lng).

        Raises:
            ValidationException: If the coordinates are out of range.
        """
        try:
            lat, lng = validate_coordinates(lat, lng)
        except ValueError as e:
            raise ValidationException(str(e))
        return self.encrypt_text(format_number(lat)), self.encrypt_text(format_number(lng))

    def decrypt(self, encrypted_lat: str, encrypted_lng: str) -> Tuple[float, float]:
        """
        Decrypt a latitude/longitude pair.

        Args:
            encrypted_lat: Ciphertext latitude.
            encrypted_lng: Ciphertext longitude.

        Returns:
            Tuple of (lat, lng).

        Raises:
            DecryptionError: If either value is unreadable, non-numeric or
                out of range.
        """
        lat = self._decrypt_number(encrypted_lat, "Latitude")
        lng = self._decrypt_number(encrypted_lng, "Longitude")
        try:
            return validate_coordinates(lat, lng)
        except ValueError:
            raise DecryptionError("Invalid coordinates after decryption")

    def encrypt_scalar(self, value: float) -> str:
        """Encrypt a single number, typically a radius in meters."""
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValidationException("Value to encrypt must be a finite number")
        return self.encrypt_text(format_number(value))

    def decrypt_scalar(self, token: str) -> float:
        """
        Decrypt a single number.

        Positivity of a radius is the caller's concern.

        Raises:
            DecryptionError: If the value is unreadable or non-numeric.
        """
        return self._decrypt_number(token, "Value")
