"""Attempt history storage for PIN throttling.

This adapter sits beside the pure core: the throttle only ever receives the
snapshot returned by `AttemptLog.history`. Redis holds the history when
configured; an in-process cache is used otherwise or when Redis fails.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Any, Final

import redis

from dealpin.core.settings import settings
from dealpin.schemas.pin import AttemptRecord

logger = logging.getLogger(__name__)

HISTORY_WINDOW: Final[timedelta] = timedelta(hours=24)
_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)


def attempt_scope(
    deal_id: int,
    user_id: int | None = None,
    ip_address: str | None = None,
) -> str:
    """Return the storage key for a deal, optionally narrowed by user and IP."""
    user_part = str(user_id) if user_id is not None else "*"
    ip_part = ip_address or "*"
    return f"{deal_id}:{user_part}:{ip_part}"


def _to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) // timedelta(milliseconds=1)


def _from_ms(value: float) -> datetime:
    return _EPOCH + timedelta(milliseconds=int(value))


class AttemptLog:
    """Record PIN attempts and return the trailing 24h history per scope."""

    def __init__(self, redis_url: str | None = None, client: Any | None = None) -> None:
        self._redis: Any | None = client
        url = redis_url if redis_url is not None else settings.redis_url
        if self._redis is None and url:
            try:
                self._redis = redis.from_url(url)  # type: ignore[no-untyped-call]
            except ValueError:
                logger.warning("Invalid PIN attempt log Redis URL; using in-process storage")
                self._redis = None
        self._ttl_seconds = settings.attempt_ttl_seconds

    @property
    def uses_redis(self) -> bool:
        """Return True while attempts are stored in Redis."""
        return self._redis is not None

    def _disable_redis(self, err: Exception) -> None:
        logger.warning("PIN attempt log falling back to in-process storage: %s", err)
        self._redis = None

    def record(self, scope: str, success: bool, at: datetime | None = None) -> AttemptRecord:
        """Append an attempt to the scope's history."""
        attempted_at = at if at is not None else datetime.now(UTC)
        if attempted_at.tzinfo is None:
            attempted_at = attempted_at.replace(tzinfo=UTC)
        record = AttemptRecord(attempted_at=attempted_at, success=success)

        if self._redis is not None:
            key = f"pinattempts:{scope}"
            member = f"{uuid.uuid4().hex}:{int(success)}"
            try:
                pipe = self._redis.pipeline()
                pipe.zadd(key, {member: _to_ms(attempted_at)})
                pipe.expire(key, int(self._ttl_seconds))
                pipe.execute()
                return record
            except redis.RedisError as err:
                self._disable_redis(err)

        with _CACHE_LOCK:
            _ATTEMPT_CACHE[scope].append(record)
        return record

    def history(self, scope: str, now: datetime | None = None) -> list[AttemptRecord]:
        """Return attempts from the trailing 24 hours, newest first."""
        current = now if now is not None else datetime.now(UTC)
        cutoff_ms = _to_ms(current - HISTORY_WINDOW)

        if self._redis is not None:
            key = f"pinattempts:{scope}"
            try:
                self._redis.zremrangebyscore(key, "-inf", cutoff_ms)
                rows = self._redis.zrangebyscore(key, f"({cutoff_ms}", "+inf", withscores=True)
            except redis.RedisError as err:
                self._disable_redis(err)
            else:
                records = []
                for member, score in rows:
                    text = member.decode() if isinstance(member, bytes) else str(member)
                    records.append(
                        AttemptRecord(attempted_at=_from_ms(score), success=text.endswith(":1"))
                    )
                records.sort(key=lambda r: r.attempted_at, reverse=True)
                return records

        cutoff = _from_ms(cutoff_ms)
        with _CACHE_LOCK:
            entries = _ATTEMPT_CACHE.get(scope, [])
            kept = [r for r in entries if r.attempted_at > cutoff]
            if entries:
                _ATTEMPT_CACHE[scope] = kept
        return sorted(kept, key=lambda r: r.attempted_at, reverse=True)

    def clear(self, scope: str) -> None:
        """Forget every attempt recorded for a scope."""
        if self._redis is not None:
            try:
                self._redis.delete(f"pinattempts:{scope}")
                return
            except redis.RedisError as err:
                self._disable_redis(err)
        with _CACHE_LOCK:
            _ATTEMPT_CACHE.pop(scope, None)


_ATTEMPT_CACHE: dict[str, list[AttemptRecord]] = defaultdict(list)
_CACHE_LOCK = Lock()


def get_attempt_log() -> AttemptLog:
    """Return an attempt log configured from settings."""
    return AttemptLog()
