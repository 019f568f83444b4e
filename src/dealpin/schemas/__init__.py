"""Pydantic schemas for the PIN security core."""

from .pin import (
    AttemptRecord,
    DealPinConfig,
    PinCredential,
    PinErrorKind,
    PinSecurityResult,
    PinStatus,
    PinValidationResult,
    RateLimitResult,
    RedemptionResult,
    RotatingPinResult,
)

__all__ = [
    "AttemptRecord",
    "DealPinConfig",
    "PinCredential",
    "PinErrorKind",
    "PinSecurityResult",
    "PinStatus",
    "PinValidationResult",
    "RateLimitResult",
    "RedemptionResult",
    "RotatingPinResult",
]
