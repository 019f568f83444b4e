"""Secure random PIN generation."""

from __future__ import annotations

import secrets

from dealpin.core.pin_format import PIN_LENGTH, is_valid_pin
from dealpin.core.settings import settings


def _random_digits(count: int) -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(count))


def generate_secure_pin(max_attempts: int | None = None) -> str:
    """Return a random PIN that passes the format rules.

    Samples independent digits until a candidate is valid. After
    `max_attempts` rejections it falls back to "1" plus three random digits,
    still re-checked, so the result is always valid.
    """
    limit = settings.secure_pin_max_attempts if max_attempts is None else max_attempts
    for _ in range(limit):
        pin = _random_digits(PIN_LENGTH)
        if is_valid_pin(pin):
            return pin

    while True:
        pin = "1" + _random_digits(PIN_LENGTH - 1)
        if is_valid_pin(pin):
            return pin
