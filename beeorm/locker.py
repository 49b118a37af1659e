"""Distributed locks obtained through a lock client."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol

from beeorm.query_logger import SOURCE_REDIS, fill_log_fields, get_now


class LockHandle(Protocol):
    def release(self) -> bool: ...

    def ttl(self) -> float: ...

    def refresh(self, ttl: float) -> bool: ...


class LockClient(Protocol):
    def obtain(self, key: str, ttl: float, retry_interval: float | None,
               retry_limit: int) -> LockHandle | None: ...


def _to_seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = str(rest).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def _duration_str(seconds: float) -> str:
    ns = round(seconds * 1_000_000_000)
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_fraction(ns, 1_000)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_fraction(ns, 1_000_000)}ms"
    hours, rest = divmod(ns, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    text = sign
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return text + f"{_fraction(rest, 1_000_000_000)}s"


class Locker:
    """Obtains named locks from a lock client on one pool."""

    def __init__(self, client: LockClient, pool: str = "default") -> None:
        self._client = client
        self.pool = pool

    def obtain(self, orm: Any, key: str, ttl: float | timedelta,
               wait_timeout: float | timedelta = 0) -> Lock | None:
        """Try to take the lock, waiting up to wait_timeout; None if not obtained."""
        ttl_s = _to_seconds(ttl)
        wait_s = _to_seconds(wait_timeout)
        if ttl_s <= 0:
            raise ValueError("ttl must be higher than zero")
        if wait_s > ttl_s:
            raise ValueError("waitTimeout can't be higher than ttl")
        logging = bool(orm.redis_loggers())
        start = get_now(logging)
        interval: float | None = None
        limit = 0
        if wait_s > 0:
            interval = 1.0
            limit = 1
            if wait_s < interval:
                interval = wait_s
            else:
                limit = int(wait_s // 1.0)
        handle = self._client.obtain(key, ttl_s, interval, limit)
        if logging:
            message = f"LOCK OBTAIN {key} TTL {_duration_str(ttl_s)} WAIT {_duration_str(wait_s)}"
            self._log(orm, "LOCK OBTAIN", message, start, handle is None, None)
        if handle is None:
            return None
        return Lock(handle, key, ttl_s, self)

    def _log(self, orm: Any, operation: str, query: str, start: int | None,
             cache_miss: bool, error: BaseException | None) -> None:
        fill_log_fields(orm, orm.redis_loggers(), self.pool, SOURCE_REDIS, operation,
                        query, start, cache_miss, error)


class Lock:
    """A lock held through a Locker."""

    def __init__(self, handle: LockHandle, key: str, ttl: float, locker: Locker) -> None:
        self._handle = handle
        self.key = key
        self._ttl = ttl
        self._locker = locker
        self.held = True

    def release(self, orm: Any) -> None:
        """Release the lock; does nothing if it is no longer held."""
        if not self.held:
            return
        self.held = False
        logging = bool(orm.redis_loggers())
        start = get_now(logging)
        try:
            ok = self._handle.release()
        except Exception as exc:
            if logging:
                self._locker._log(orm, "LOCK RELEASE", f"LOCK RELEASE {self.key}", start, False, exc)
            raise
        if logging:
            self._locker._log(orm, "LOCK RELEASE", f"LOCK RELEASE {self.key}", start, not ok, None)

    def ttl(self, orm: Any) -> float:
        """Seconds left before the lock expires."""
        logging = bool(orm.redis_loggers())
        start = get_now(logging)
        try:
            left = self._handle.ttl()
        except Exception as exc:
            if logging:
                self._locker._log(orm, "LOCK TTL", f"LOCK TTL {self.key}", start, False, exc)
            raise
        if logging:
            self._locker._log(orm, "LOCK TTL", f"LOCK TTL {self.key}", start, False, None)
        return left

    def refresh(self, orm: Any, ttl: float | timedelta) -> bool:
        """Extend the lock; returns False when it is no longer held."""
        if not self.held:
            return False
        logging = bool(orm.redis_loggers())
        start = get_now(logging)
        message = f"LOCK REFRESH {self.key} {_duration_str(self._ttl)}"
        try:
            ok = self._handle.refresh(_to_seconds(ttl))
        except Exception as exc:
            if logging:
                self._locker._log(orm, "LOCK REFRESH", message, start, False, exc)
            raise
        if not ok:
            self.held = False
        if logging:
            self._locker._log(orm, "LOCK REFRESH", message, start, not ok, None)
        return ok