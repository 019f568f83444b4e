# src/dealpin/utils/hash.py
"""Hashing helpers: SHA-256 for derivations and bcrypt for stored PINs."""

from __future__ import annotations

import hashlib
import secrets

import bcrypt

# bcrypt silently ignores input past this many bytes
BCRYPT_MAX_INPUT_BYTES = 72


class InternalHashingError(Exception):
    """Raised when the underlying hash primitive rejects its input."""


def sha256_hexdigest(data: str) -> str:
    """Return the hexadecimal SHA-256 digest of a UTF-8 string."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def generate_salt(num_bytes: int = 16) -> str:
    """Return a hex-encoded random salt of `num_bytes` bytes."""
    if num_bytes < 16:
        raise ValueError("Salt must be at least 16 bytes")
    return secrets.token_hex(num_bytes)


def adaptive_hash(secret: str, rounds: int) -> str:
    """Hash `secret` with bcrypt at the given cost.

    Args:
        secret: Plaintext to hash (already salted by the caller).
        rounds: bcrypt log2 work factor.

    Returns:
        The bcrypt hash as a text string.

    Raises:
        InternalHashingError: If bcrypt rejects the input or cost.
    """
    encoded = secret.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_INPUT_BYTES:
        raise InternalHashingError("Input exceeds bcrypt's 72 byte limit")
    try:
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")
    except ValueError as err:
        raise InternalHashingError(str(err)) from err


def adaptive_verify(secret: str, hashed: str) -> bool:
    """Return True if `secret` matches the bcrypt hash `hashed`.

    Raises:
        InternalHashingError: If the stored hash is malformed.
    """
    if not isinstance(hashed, str):
        raise InternalHashingError("Stored hash must be a string")
    encoded = secret.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_INPUT_BYTES:
        raise InternalHashingError("Input exceeds bcrypt's 72 byte limit")
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError as err:
        raise InternalHashingError(str(err)) from err
