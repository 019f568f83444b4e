# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest

os.environ.setdefault("PIN_BCRYPT_ROUNDS", "4")
os.environ.pop("PIN_REDIS_URL", None)

from dealpin.core.settings import Settings
from dealpin.services import attempts as attempts_module
from dealpin.services.attempts import AttemptLog
from dealpin.services.rotating_pin import EPOCH, window_index_at
from dealpin.services.static_pin import StaticPinService

FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)
WINDOW_MS = 30 * 60 * 1000


def window_start(index: int) -> datetime:
    """Return the first instant of rotation window `index`."""
    return EPOCH + timedelta(milliseconds=index * WINDOW_MS)


def window_end(index: int) -> datetime:
    """Return the last millisecond of rotation window `index`."""
    return window_start(index + 1) - timedelta(milliseconds=1)


@pytest.fixture(autouse=True)
def clear_attempt_cache() -> Iterator[None]:
    attempts_module._ATTEMPT_CACHE.clear()
    try:
        yield
    finally:
        attempts_module._ATTEMPT_CACHE.clear()


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def current_window() -> int:
    return window_index_at(FIXED_NOW)


@pytest.fixture()
def static_service() -> StaticPinService:
    """A static PIN service with the cheapest bcrypt cost."""
    return StaticPinService(rounds=4)


@pytest.fixture()
def attempt_log() -> AttemptLog:
    """An attempt log that keeps history in-process."""
    return AttemptLog(redis_url="")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Provide a Settings instance aligned with runtime configuration."""
    return Settings()
