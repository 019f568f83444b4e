# src/dealpin/services/__init__.py
"""PIN security services."""

from .attempts import AttemptLog, attempt_scope
from .generator import generate_secure_pin
from .redemption import RedemptionVerifier
from .rotating_pin import (
    RotatingPinService,
    derive_rotating_pin,
    generate_rotating_pin,
    verify_rotating_pin,
)
from .static_pin import StaticPinService, hash_pin, verify_pin
from .throttle import check_rate_limit

__all__ = [
    "AttemptLog",
    "RedemptionVerifier",
    "RotatingPinService",
    "StaticPinService",
    "attempt_scope",
    "check_rate_limit",
    "derive_rotating_pin",
    "generate_rotating_pin",
    "generate_secure_pin",
    "hash_pin",
    "verify_pin",
    "verify_rotating_pin",
]
