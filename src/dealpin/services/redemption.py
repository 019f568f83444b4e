"""Redemption-time PIN verification.

Ties the core together for a single submission: format check, throttle,
rotating PIN, static PIN, then the attempt is recorded.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from dealpin.core.pin_format import validate_pin_format
from dealpin.schemas.pin import (
    DealPinConfig,
    PinCredential,
    PinErrorKind,
    PinSecurityResult,
    PinStatus,
    RedemptionResult,
)
from dealpin.services.attempts import AttemptLog, attempt_scope, get_attempt_log
from dealpin.services.generator import generate_secure_pin
from dealpin.services.rotating_pin import RotatingPinService, get_rotating_pin_service
from dealpin.services.static_pin import StaticPinService, get_static_pin_service
from dealpin.services.throttle import check_rate_limit

logger = logging.getLogger(__name__)


class RedemptionVerifier:
    """Verify PINs submitted at redemption and keep the attempt history."""

    def __init__(
        self,
        attempt_log: AttemptLog | None = None,
        static_service: StaticPinService | None = None,
        rotating_service: RotatingPinService | None = None,
    ) -> None:
        self._attempts = attempt_log or get_attempt_log()
        self._static = static_service or get_static_pin_service()
        self._rotating = rotating_service or get_rotating_pin_service()

    def verify(
        self,
        deal: DealPinConfig,
        pin: str,
        user_id: int | None = None,
        ip_address: str | None = None,
        now: datetime | None = None,
    ) -> RedemptionResult:
        """Check a submitted PIN for a deal.

        Args:
            deal: The deal's PIN policy and stored credential.
            pin: The PIN typed by the customer.
            user_id: Submitting user, used to scope throttling.
            ip_address: Submitting address, used to scope throttling.
            now: Evaluation time; defaults to the current UTC time.

        Returns:
            A `RedemptionResult`. Rate-limited submissions are not recorded.
        """
        current = now if now is not None else datetime.now(UTC)
        scope = attempt_scope(deal.deal_id, user_id, ip_address)

        validation = validate_pin_format(pin)
        if not validation.is_valid:
            self._attempts.record(scope, False, at=current)
            logger.info("Rejected malformed PIN for deal %s", deal.deal_id)
            return RedemptionResult(
                verified=False,
                message=validation.message,
                error=PinErrorKind.FORMAT,
            )

        rate_limit = check_rate_limit(self._attempts.history(scope, now=current), now=current)
        if not rate_limit.allowed:
            logger.warning("PIN attempts throttled for deal %s", deal.deal_id)
            return RedemptionResult(
                verified=False,
                message=rate_limit.message,
                error=PinErrorKind.RATE_LIMITED,
                next_attempt_at=rate_limit.next_attempt_at,
            )

        result = self._check(deal, pin, current)
        self._attempts.record(scope, result.verified, at=current)
        if result.verified:
            logger.info("PIN verified for deal %s via %s", deal.deal_id, result.method)
        else:
            logger.warning("PIN verification failed for deal %s: %s", deal.deal_id, result.error)
        return result

    def _check(self, deal: DealPinConfig, pin: str, now: datetime) -> RedemptionResult:
        if deal.rotating_enabled and self._rotating.verify(deal.deal_id, pin, now=now):
            return RedemptionResult(
                verified=True,
                message="Rotating PIN verified successfully",
                method="rotating",
            )

        credential = deal.credential
        if credential is None:
            return RedemptionResult(
                verified=False,
                message="Invalid PIN",
                error=PinErrorKind.MISMATCH,
            )

        outcome = self._static.verify_pin(
            pin,
            credential.hashed_pin,
            credential.salt,
            credential.expires_at,
            now=now,
        )
        return RedemptionResult(
            verified=outcome.is_valid,
            message=outcome.message,
            method="static" if outcome.is_valid else None,
            error=outcome.error,
        )

    def issue_deal_pin(self, pin: str | None = None) -> tuple[str, PinSecurityResult]:
        """Hash a vendor PIN for storage, generating one when none is given.

        Returns:
            The plaintext PIN (to show the vendor once) and the hashing result.
        """
        plain_pin = pin if pin else generate_secure_pin()
        result = self._static.hash_pin(plain_pin)
        if not result.success:
            logger.info("Refused to issue deal PIN: %s", result.message)
        return plain_pin, result

    @staticmethod
    def pin_status(
        credential: PinCredential | None,
        now: datetime | None = None,
    ) -> PinStatus:
        """Summarize a stored credential without exposing it."""
        if credential is None:
            return PinStatus(has_pin=False, is_secure=False)
        current = now if now is not None else datetime.now(UTC)
        expires_at = credential.expires_at
        if expires_at is not None and expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        return PinStatus(
            has_pin=True,
            is_secure=bool(credential.salt),
            created_at=credential.created_at,
            expires_at=credential.expires_at,
            is_expired=expires_at is not None and current > expires_at,
        )


def get_redemption_verifier() -> RedemptionVerifier:
    """Return a redemption verifier wired to the default services."""
    return RedemptionVerifier()
