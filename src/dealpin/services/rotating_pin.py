"""Time-rotating PINs derived without stored state.

The PIN for a deal is a pure function of the deal id and the current
rotation window, so any process can recompute it independently. It is an
operational control that proves presence at the counter; deal ids and time
are public, so it is not a secret in the cryptographic sense.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Final

from dealpin.core.pin_format import clean_pin, is_valid_pin
from dealpin.core.settings import settings
from dealpin.schemas.pin import RotatingPinResult
from dealpin.utils.hash import sha256_hexdigest

EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)
_PIN_MODULUS: Final[int] = 10_000
_HEX_PREFIX_CHARS: Final[int] = 8


def _now_ms(now: datetime | None) -> int:
    current = now if now is not None else datetime.now(UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    return (current - EPOCH) // timedelta(milliseconds=1)


def window_index_at(now: datetime | None = None, window_ms: int | None = None) -> int:
    """Return the rotation window index containing `now`."""
    window = window_ms or settings.rotation_window_ms
    return _now_ms(now) // window


def _pin_from_seed(seed: str) -> str:
    value = int(sha256_hexdigest(seed)[:_HEX_PREFIX_CHARS], 16)
    return str(value % _PIN_MODULUS).zfill(4)


def derive_rotating_pin(entity_id: int, window_index: int, max_offset: int | None = None) -> str:
    """Derive the PIN for an entity in a given rotation window.

    Args:
        entity_id: Deal or vendor identifier.
        window_index: `floor(now_ms / window_ms)` for the target window.
        max_offset: Cap on re-derivations when a candidate is too weak.

    Returns:
        A 4-digit PIN. Re-derivation walks `seed + "1"`, `seed + "2"`, ...
        until a candidate passes the format rules, so the result is
        reproducible for the same inputs.
    """
    limit = settings.rotation_max_offset if max_offset is None else max_offset
    seed = f"{entity_id}-{window_index}"
    pin = _pin_from_seed(seed)
    offset = 0
    while not is_valid_pin(pin) and offset < limit:
        offset += 1
        pin = _pin_from_seed(f"{seed}{offset}")
    return pin


class RotatingPinService:
    """Generate and verify rotating PINs for deals."""

    def __init__(self, interval_minutes: int | None = None) -> None:
        self._interval_minutes = (
            interval_minutes
            if interval_minutes is not None
            else settings.rotation_interval_minutes
        )
        if self._interval_minutes <= 0:
            raise ValueError("Rotation interval must be positive")

    @property
    def window_ms(self) -> int:
        """Return the rotation window length in milliseconds."""
        return self._interval_minutes * 60 * 1000

    def generate(self, entity_id: int, now: datetime | None = None) -> RotatingPinResult:
        """Return the current PIN for `entity_id` and when it next rotates."""
        window_index = _now_ms(now) // self.window_ms
        next_rotation_ms = (window_index + 1) * self.window_ms
        return RotatingPinResult(
            current_pin=derive_rotating_pin(entity_id, window_index),
            next_rotation_at=EPOCH + timedelta(milliseconds=next_rotation_ms),
            rotation_interval=self._interval_minutes,
            is_active=True,
        )

    def verify(self, entity_id: int, input_pin: str, now: datetime | None = None) -> bool:
        """Return True if `input_pin` is the current or previous window's PIN.

        The previous window is accepted as a grace period for customers who
        read the PIN just before a rotation. Nothing older is accepted.
        """
        candidate = clean_pin(input_pin)
        if not candidate:
            return False
        window_index = _now_ms(now) // self.window_ms
        for index in (window_index, window_index - 1):
            expected = derive_rotating_pin(entity_id, index)
            if secrets.compare_digest(expected.encode(), candidate.encode()):
                return True
        return False

    @property
    def rotation_interval(self) -> int:
        """Return the rotation interval in minutes."""
        return self._interval_minutes


def get_rotating_pin_service() -> RotatingPinService:
    """Return a rotating PIN service configured from settings."""
    return RotatingPinService()


def generate_rotating_pin(entity_id: int, now: datetime | None = None) -> RotatingPinResult:
    """Return the current rotating PIN for `entity_id`."""
    return get_rotating_pin_service().generate(entity_id, now)


def verify_rotating_pin(entity_id: int, input_pin: str, now: datetime | None = None) -> bool:
    """Return True if `input_pin` is valid for the current or previous window."""
    return get_rotating_pin_service().verify(entity_id, input_pin, now)
