"""Attempt throttling over a caller-supplied attempt history.

The throttle never reads or writes storage. Callers pass in the attempts for
whatever scope they throttle on (user and deal, terminal, IP) and append the
new attempt themselves afterwards.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from dealpin.core.settings import settings
from dealpin.schemas.pin import AttemptRecord, PinErrorKind, RateLimitResult

ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(hours=24)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def check_rate_limit(
    attempts: Iterable[AttemptRecord],
    now: datetime | None = None,
    *,
    max_failed_per_hour: int | None = None,
    max_attempts_per_day: int | None = None,
    lockout_hours: int | None = None,
) -> RateLimitResult:
    """Decide whether another PIN attempt is allowed.

    Args:
        attempts: Historical attempts in any order.
        now: Evaluation time; defaults to the current UTC time.
        max_failed_per_hour: Failed attempts in the trailing hour that trigger a lockout.
        max_attempts_per_day: Attempts of any outcome in the trailing 24 hours allowed.
        lockout_hours: Lockout measured from the oldest failure in the hour window.

    Returns:
        A `RateLimitResult`. When denied, `next_attempt_at` says when the
        scope becomes eligible again.
    """
    hourly_limit = (
        settings.max_failed_per_hour if max_failed_per_hour is None else max_failed_per_hour
    )
    daily_limit = (
        settings.max_attempts_per_day if max_attempts_per_day is None else max_attempts_per_day
    )
    lockout = timedelta(hours=settings.lockout_hours if lockout_hours is None else lockout_hours)

    current = _as_utc(now) if now is not None else datetime.now(UTC)
    one_hour_ago = current - ONE_HOUR
    one_day_ago = current - ONE_DAY

    stamped = [(_as_utc(a.attempted_at), a.success) for a in attempts]
    last_day = [at for at, _ in stamped if at > one_day_ago]
    failed_last_hour = [at for at, success in stamped if at > one_hour_ago and not success]

    if failed_last_hour and len(failed_last_hour) >= hourly_limit:
        next_attempt_at = min(failed_last_hour) + lockout
        return RateLimitResult(
            allowed=False,
            message=(
                "Too many failed PIN attempts. Please try again after "
                f"{next_attempt_at.strftime('%H:%M:%S')}."
            ),
            next_attempt_at=next_attempt_at,
            error=PinErrorKind.RATE_LIMITED,
        )

    if last_day and len(last_day) >= daily_limit:
        next_attempt_at = one_day_ago + ONE_DAY
        return RateLimitResult(
            allowed=False,
            message="Daily PIN attempt limit exceeded. Please try again tomorrow.",
            next_attempt_at=next_attempt_at,
            error=PinErrorKind.RATE_LIMITED,
        )

    return RateLimitResult(allowed=True, message="PIN attempt allowed")
