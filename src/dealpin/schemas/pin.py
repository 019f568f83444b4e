"""Schemas for PIN security results and records."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class PinErrorKind(str, Enum):
    """Why a PIN operation did not succeed."""

    FORMAT = "format"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


class PinValidationResult(BaseModel):
    """Outcome of a format check or a PIN verification."""

    is_valid: bool
    message: str
    error: PinErrorKind | None = None


class PinSecurityResult(BaseModel):
    """Outcome of hashing a static PIN for storage."""

    success: bool
    message: str
    hashed_pin: str | None = None
    salt: str | None = None
    expires_at: datetime | None = None
    error: PinErrorKind | None = None


class PinCredential(BaseModel):
    """A static PIN at rest, as persisted by the caller."""

    hashed_pin: str
    salt: str
    expires_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_result(cls, result: PinSecurityResult) -> PinCredential:
        """Build a credential from a successful hashing result."""
        if not result.success or result.hashed_pin is None or result.salt is None:
            raise ValueError("Cannot build a credential from a failed hash result")
        return cls(
            hashed_pin=result.hashed_pin,
            salt=result.salt,
            expires_at=result.expires_at,
        )


class RotatingPinResult(BaseModel):
    """The rotating PIN for the current window plus countdown fields."""

    current_pin: str
    next_rotation_at: datetime
    rotation_interval: int = Field(..., description="Rotation interval in minutes.")
    is_active: bool = True


class AttemptRecord(BaseModel):
    """A single historical PIN attempt."""

    attempted_at: datetime
    success: bool


class RateLimitResult(BaseModel):
    """Allow/deny decision from the attempt throttle."""

    allowed: bool
    message: str
    next_attempt_at: datetime | None = None
    error: PinErrorKind | None = None


class RedemptionResult(BaseModel):
    """Outcome of a full redemption PIN check."""

    verified: bool
    message: str
    method: Literal["rotating", "static"] | None = None
    error: PinErrorKind | None = None
    next_attempt_at: datetime | None = None


class PinStatus(BaseModel):
    """Non-sensitive summary of a deal's static PIN."""

    has_pin: bool
    is_secure: bool
    created_at: datetime | None = None
    expires_at: datetime | None = None
    is_expired: bool = False


class DealPinConfig(BaseModel):
    """PIN policy for one deal, supplied by the deal-configuration layer."""

    deal_id: int
    credential: PinCredential | None = None
    rotating_enabled: bool = True
