"""Tests for PIN security settings."""

import pytest

from dealpin.core.settings import Settings


def test_defaults_match_production_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PIN_BCRYPT_ROUNDS", "PIN_ROTATION_INTERVAL_MINUTES", "PIN_REDIS_URL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)

    assert settings.bcrypt_rounds == 12
    assert settings.pin_expiry_days == 90
    assert settings.rotation_interval_minutes == 30
    assert settings.rotation_window_ms == 30 * 60 * 1000
    assert settings.max_failed_per_hour == 5
    assert settings.max_attempts_per_day == 10
    assert settings.lockout_hours == 1
    assert settings.redis_url is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PIN_ROTATION_INTERVAL_MINUTES", "15")
    monkeypatch.setenv("PIN_MAX_FAILED_PER_HOUR", "3")
    settings = Settings(_env_file=None)

    assert settings.rotation_interval_minutes == 15
    assert settings.rotation_window_ms == 15 * 60 * 1000
    assert settings.max_failed_per_hour == 3


def test_conftest_lowers_bcrypt_cost(test_settings: Settings) -> None:
    assert test_settings.bcrypt_rounds == 4
