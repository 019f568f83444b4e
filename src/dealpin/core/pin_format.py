"""PIN format and complexity rules.

Every PIN the core accepts, stores or emits passes through this check.
"""
from __future__ import annotations

import re
from typing import Any, Final

from dealpin.schemas.pin import PinErrorKind, PinValidationResult

PIN_LENGTH: Final[int] = 4
MIN_UNIQUE_DIGITS: Final[int] = 2

_DIGITS_ONLY = re.compile(r"[0-9]+")
_WEAK_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"(\d)\1{2,}"),  # 111, 2222
    re.compile(r"1234|4321"),
    re.compile(r"0123|3210"),
)


def clean_pin(candidate: Any) -> str:
    """Return the candidate as a stripped string; None reads as empty."""
    if candidate is None:
        return ""
    return str(candidate).strip()


def validate_pin_format(candidate: Any) -> PinValidationResult:
    """Check a candidate PIN's length, digits, diversity and weak patterns.

    Args:
        candidate: The submitted PIN. Non-string values are coerced.

    Returns:
        A `PinValidationResult`; the first failing rule decides the message.
    """
    pin = clean_pin(candidate)

    if len(pin) != PIN_LENGTH:
        return _invalid(f"PIN must be exactly {PIN_LENGTH} digits")

    if not _DIGITS_ONLY.fullmatch(pin):
        return _invalid("PIN must contain only numbers")

    if len(set(pin)) < MIN_UNIQUE_DIGITS:
        return _invalid(f"PIN must contain at least {MIN_UNIQUE_DIGITS} different digits")

    for pattern in _WEAK_PATTERNS:
        if pattern.search(pin):
            return _invalid("PIN cannot contain repeated or sequential patterns")

    return PinValidationResult(is_valid=True, message="PIN is valid")


def is_valid_pin(candidate: Any) -> bool:
    """Shorthand for `validate_pin_format(candidate).is_valid`."""
    return validate_pin_format(candidate).is_valid


def _invalid(message: str) -> PinValidationResult:
    return PinValidationResult(is_valid=False, message=message, error=PinErrorKind.FORMAT)
