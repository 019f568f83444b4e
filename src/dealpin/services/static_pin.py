"""Static PIN hashing and verification.

Vendor-chosen PINs are stored as `bcrypt(pin + salt)` with an expiry.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from dealpin.core.pin_format import clean_pin, validate_pin_format
from dealpin.core.settings import settings
from dealpin.schemas.pin import PinErrorKind, PinSecurityResult, PinValidationResult
from dealpin.utils.hash import (
    InternalHashingError,
    adaptive_hash,
    adaptive_verify,
    generate_salt,
)

logger = logging.getLogger(__name__)

EXPIRED_MESSAGE = "PIN has expired. Please request a new PIN from the vendor."


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class StaticPinService:
    """Hash and verify vendor-set static PINs."""

    def __init__(
        self,
        rounds: int | None = None,
        expiry_days: int | None = None,
        salt_bytes: int | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._rounds = rounds if rounds is not None else settings.bcrypt_rounds
        self._expiry = timedelta(
            days=expiry_days if expiry_days is not None else settings.pin_expiry_days
        )
        self._salt_bytes = salt_bytes if salt_bytes is not None else settings.salt_bytes
        self._max_workers = max(
            1, max_workers if max_workers is not None else settings.hash_max_workers
        )
        self._semaphore: asyncio.Semaphore | None = None

    def hash_pin(self, pin: str, now: datetime | None = None) -> PinSecurityResult:
        """Validate and hash a PIN for storage.

        Args:
            pin: Plaintext PIN chosen by the vendor.
            now: Creation time; defaults to the current UTC time.

        Returns:
            A `PinSecurityResult` holding the hash, salt and expiry on success.
        """
        validation = validate_pin_format(pin)
        if not validation.is_valid:
            return PinSecurityResult(
                success=False,
                message=validation.message,
                error=PinErrorKind.FORMAT,
            )

        created_at = _as_utc(now) if now is not None else datetime.now(UTC)
        try:
            salt = generate_salt(self._salt_bytes)
            hashed_pin = adaptive_hash(clean_pin(pin) + salt, self._rounds)
        except (InternalHashingError, ValueError):
            logger.error("Static PIN hashing failed", exc_info=True)
            return PinSecurityResult(
                success=False,
                message="Failed to hash PIN",
                error=PinErrorKind.INTERNAL,
            )

        return PinSecurityResult(
            success=True,
            message="PIN hashed successfully",
            hashed_pin=hashed_pin,
            salt=salt,
            expires_at=created_at + self._expiry,
        )

    def verify_pin(
        self,
        pin: str,
        hashed_pin: str,
        salt: str,
        expires_at: datetime | None = None,
        now: datetime | None = None,
    ) -> PinValidationResult:
        """Verify a submitted PIN against a stored credential.

        Expired credentials are rejected before any hashing work is done.
        """
        current = _as_utc(now) if now is not None else datetime.now(UTC)
        if expires_at is not None and current > _as_utc(expires_at):
            return PinValidationResult(
                is_valid=False,
                message=EXPIRED_MESSAGE,
                error=PinErrorKind.EXPIRED,
            )

        validation = validate_pin_format(pin)
        if not validation.is_valid:
            return validation

        try:
            is_match = adaptive_verify(clean_pin(pin) + salt, hashed_pin)
        except (InternalHashingError, TypeError):
            logger.error("Static PIN verification failed", exc_info=True)
            return PinValidationResult(
                is_valid=False,
                message="PIN verification failed",
                error=PinErrorKind.INTERNAL,
            )

        if is_match:
            return PinValidationResult(is_valid=True, message="PIN verified successfully")
        return PinValidationResult(
            is_valid=False,
            message="Invalid PIN",
            error=PinErrorKind.MISMATCH,
        )

    # --- Worker pool helpers --------------------------------------------------------
    def _get_semaphore(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_workers)
        return self._semaphore

    async def hash_pin_async(self, pin: str, now: datetime | None = None) -> PinSecurityResult:
        """Run `hash_pin` on a worker thread, bounded by the pool size."""
        async with self._get_semaphore():
            return await asyncio.to_thread(self.hash_pin, pin, now)

    async def verify_pin_async(
        self,
        pin: str,
        hashed_pin: str,
        salt: str,
        expires_at: datetime | None = None,
        now: datetime | None = None,
    ) -> PinValidationResult:
        """Run `verify_pin` on a worker thread, bounded by the pool size."""
        async with self._get_semaphore():
            return await asyncio.to_thread(
                self.verify_pin, pin, hashed_pin, salt, expires_at, now
            )

    @property
    def max_workers(self) -> int:
        """Return the number of concurrent hashing jobs allowed."""
        return self._max_workers


def get_static_pin_service() -> StaticPinService:
    """Return a static PIN service configured from settings."""
    return StaticPinService()


def hash_pin(pin: str) -> PinSecurityResult:
    """Hash a static PIN with the default service."""
    return get_static_pin_service().hash_pin(pin)


def verify_pin(
    pin: str,
    hashed_pin: str,
    salt: str,
    expires_at: datetime | None = None,
) -> PinValidationResult:
    """Verify a static PIN with the default service."""
    return get_static_pin_service().verify_pin(pin, hashed_pin, salt, expires_at)
