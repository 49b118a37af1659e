"""Query log handlers and the helper that builds log records."""

from __future__ import annotations

import sys
import time
from abc import ABC, abstractmethod
from typing import Any, Iterable, TextIO

SOURCE_MYSQL = "mysql"
SOURCE_REDIS = "redis"
SOURCE_LOCAL_CACHE = "local_cache"

_RESET = "\x1b[0m\x1b[0m\x1b[0m"
_BEE_LOGO = (
    "\x1b[1m\x1b[38;2;0;0;0;48;2;255;255;255mBee"
    "\x1b[38;2;254;147;51mORM " + _RESET
)
_SOURCE_LOGOS = {
    SOURCE_MYSQL: "\x1b[38;2;2;117;143;48;2;255;255;255mMy\x1b[38;2;242;145;17mSQL " + _RESET,
    SOURCE_REDIS: "\x1b[1m\x1b[38;2;191;56;42;48;2;255;255;255mredis " + _RESET,
    SOURCE_LOCAL_CACHE: "\x1b[1m\x1b[38;2;254;147;51;48;2;255;255;255mlocal " + _RESET,
}


class LogHandler(ABC):
    """Receives one record for every logged query."""

    @abstractmethod
    def handle(self, orm: Any, fields: dict[str, Any]) -> None:
        """Process a single log record."""


class DefaultLogLogger(LogHandler):
    """Writes coloured, human readable query lines to a text stream."""

    def __init__(self, max_pool_len: int = 0, stream: TextIO | None = None) -> None:
        self.max_pool_len = max_pool_len
        self._stream = stream

    def _format_row(self, fields: dict[str, Any]) -> str:
        row = _BEE_LOGO + _SOURCE_LOGOS.get(fields.get("source"), "")
        width = self.max_pool_len + 3
        pool = str(fields.get("pool", ""))
        row += f"\x1b[1m\x1b[38;2;175;175;175;48;2;255;255;255m{pool:<{width}}{_RESET}"
        microseconds = 0.0
        suffix = ""
        background = 255
        if "microseconds" in fields:
            microseconds = float(fields["microseconds"])
            background = max(0, background - int(microseconds / 2400))
            suffix = " " * int(microseconds / 10000)
        milliseconds = microseconds / 1000
        operation = str(fields.get("operation", ""))
        row += f"\x1b[1m\x1b[38;2;0;0;0;48;2;255;255;255m{operation:<14}{_RESET}"
        row += (
            f"\x1b[38;2;0;0;0;48;2;255;{background};{background}m"
            f" {milliseconds:.1f}ms{suffix} {_RESET}\n"
        )
        row += f"\x1b[38;2;255;255;155m{fields.get('query', '')}{_RESET}\n"
        if "error" in fields:
            row += f"\x1b[38;2;191;46;42m{fields['error']}{_RESET}\n"
        return row

    def handle(self, orm: Any, fields: dict[str, Any]) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        stream.write(self._format_row(fields))
        stream.flush()


def get_now(has: bool) -> int | None:
    """Current time in nanoseconds when logging is enabled, otherwise None."""
    if not has:
        return None
    return time.time_ns()


def fill_log_fields(
    orm: Any,
    handlers: Iterable[LogHandler],
    pool: str,
    source: str,
    operation: str,
    query: str,
    start: int | None = None,
    cache_miss: bool = False,
    error: BaseException | str | None = None,
) -> dict[str, Any]:
    """Build a log record and pass it to every handler; return the record."""
    fields: dict[str, Any] = {
        "operation": operation,
        "query": query,
        "pool": pool,
        "source": source,
    }
    if cache_miss:
        fields["miss"] = "TRUE"
    meta = orm.meta()
    if meta:
        fields["meta"] = meta
    if start is not None:
        now = time.time_ns()
        fields["microseconds"] = (now - start) // 1000
        fields["started"] = start
        fields["finished"] = now
    if error is not None:
        fields["error"] = str(error)
    for handler in handlers:
        handler.handle(orm, fields)
    return fields