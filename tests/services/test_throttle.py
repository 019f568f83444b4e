"""Tests for the attempt throttle."""

from __future__ import annotations

import random
from datetime import timedelta

from dealpin.schemas.pin import AttemptRecord, PinErrorKind
from dealpin.services.throttle import check_rate_limit
from tests.conftest import FIXED_NOW


def _attempt(minutes_ago: float, success: bool = False) -> AttemptRecord:
    return AttemptRecord(attempted_at=FIXED_NOW - timedelta(minutes=minutes_ago), success=success)


def test_empty_history_is_allowed() -> None:
    result = check_rate_limit([], now=FIXED_NOW)
    assert result.allowed is True
    assert result.message == "PIN attempt allowed"
    assert result.next_attempt_at is None
    assert result.error is None


def test_five_failures_in_an_hour_deny() -> None:
    attempts = [_attempt(m) for m in (50, 40, 30, 20, 10)]
    random.Random(7).shuffle(attempts)

    result = check_rate_limit(attempts, now=FIXED_NOW)

    assert result.allowed is False
    assert result.error is PinErrorKind.RATE_LIMITED
    # Lockout rolls from the oldest failure, not from now
    assert result.next_attempt_at == FIXED_NOW - timedelta(minutes=50) + timedelta(hours=1)
    assert result.message.startswith("Too many failed PIN attempts. Please try again after ")
    assert result.message.endswith(f"{result.next_attempt_at.strftime('%H:%M:%S')}.")


def test_four_failures_and_a_success_allow() -> None:
    attempts = [_attempt(m) for m in (50, 40, 30, 20)] + [_attempt(5, success=True)]
    result = check_rate_limit(attempts, now=FIXED_NOW)
    assert result.allowed is True


def test_failures_older_than_an_hour_do_not_count() -> None:
    attempts = [_attempt(m) for m in (61, 70, 80)] + [_attempt(m) for m in (30, 20)]
    result = check_rate_limit(attempts, now=FIXED_NOW)
    assert result.allowed is True


def test_hour_boundary_is_exclusive() -> None:
    attempts = [_attempt(60)] + [_attempt(m) for m in (40, 30, 20, 10)]
    assert check_rate_limit(attempts, now=FIXED_NOW).allowed is True


def test_daily_limit_counts_every_outcome() -> None:
    attempts = [_attempt(60 * h, success=True) for h in range(2, 8)]
    attempts += [_attempt(60 * h) for h in range(8, 12)]
    attempts.append(_attempt(30))
    attempts = attempts[:10]

    result = check_rate_limit(attempts, now=FIXED_NOW)

    assert result.allowed is False
    assert result.error is PinErrorKind.RATE_LIMITED
    assert result.message == "Daily PIN attempt limit exceeded. Please try again tomorrow."
    # 24 hours after the start of the trailing day window
    assert result.next_attempt_at == FIXED_NOW


def test_daily_retry_time_ignores_attempt_order() -> None:
    attempts = [_attempt(60 * h + 1, success=True) for h in range(2, 12)]
    random.Random(3).shuffle(attempts)

    result = check_rate_limit(attempts, now=FIXED_NOW)

    assert result.allowed is False
    assert result.next_attempt_at == FIXED_NOW


def test_nine_attempts_in_a_day_allow() -> None:
    attempts = [_attempt(60 * h, success=h % 2 == 0) for h in range(2, 11)]
    assert check_rate_limit(attempts, now=FIXED_NOW).allowed is True


def test_attempts_older_than_a_day_are_ignored() -> None:
    attempts = [_attempt(60 * 25 + m) for m in range(20)]
    assert check_rate_limit(attempts, now=FIXED_NOW).allowed is True


def test_hourly_rule_wins_over_daily_rule() -> None:
    attempts = [_attempt(m) for m in (50, 40, 30, 20, 10)]
    attempts += [_attempt(60 * h, success=True) for h in range(2, 8)]
    result = check_rate_limit(attempts, now=FIXED_NOW)
    assert result.message.startswith("Too many failed PIN attempts")


def test_naive_timestamps_are_read_as_utc() -> None:
    attempts = [
        AttemptRecord(
            attempted_at=(FIXED_NOW - timedelta(minutes=m)).replace(tzinfo=None),
            success=False,
        )
        for m in (50, 40, 30, 20, 10)
    ]
    result = check_rate_limit(attempts, now=FIXED_NOW)
    assert result.allowed is False


def test_custom_thresholds() -> None:
    attempts = [_attempt(m) for m in (30, 20)]
    result = check_rate_limit(attempts, now=FIXED_NOW, max_failed_per_hour=2, lockout_hours=2)
    assert result.allowed is False
    assert result.next_attempt_at == FIXED_NOW - timedelta(minutes=30) + timedelta(hours=2)


def test_accepts_any_iterable() -> None:
    attempts = (_attempt(m) for m in (50, 40, 30, 20, 10))
    assert check_rate_limit(attempts, now=FIXED_NOW).allowed is False
