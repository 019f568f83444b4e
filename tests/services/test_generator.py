"""Tests for secure PIN generation."""

from __future__ import annotations

import itertools

import pytest

from dealpin.core.pin_format import is_valid_pin
from dealpin.services import generator
from dealpin.services.generator import generate_secure_pin

SAMPLE_SIZE = 10_000


def test_every_generated_pin_is_valid() -> None:
    pins = [generate_secure_pin() for _ in range(SAMPLE_SIZE)]
    assert all(is_valid_pin(pin) for pin in pins)
    # Sanity check that output is not stuck on one value
    assert len(set(pins)) > 1000


def test_fallback_after_exhausted_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    """A source that only yields weak PINs still terminates with a valid PIN."""
    weak_then_good = itertools.chain([1] * 4 * 5, itertools.cycle([8, 2, 9]))
    monkeypatch.setattr(generator.secrets, "randbelow", lambda _n: next(weak_then_good))

    pin = generate_secure_pin(max_attempts=5)

    assert pin == "1829"


def test_fallback_is_revalidated(monkeypatch: pytest.MonkeyPatch) -> None:
    digits = itertools.chain([0] * 4 * 3, [1, 1, 1], [0, 0, 0], [5, 0, 7])
    monkeypatch.setattr(generator.secrets, "randbelow", lambda _n: next(digits))

    # "1111" and "1000" are both rejected before "1507" is accepted
    assert generate_secure_pin(max_attempts=3) == "1507"
