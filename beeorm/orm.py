"""Per-request ORM context: loggers, metadata and tracked entities."""

from __future__ import annotations

import threading
from typing import Any

from beeorm.query_logger import DefaultLogLogger, LogHandler


def _append_unique(handlers: list[LogHandler], handler: LogHandler) -> None:
    if not any(existing is handler for existing in handlers):
        handlers.append(handler)


class ORM:
    """Holds request scoped state used by data access operations."""

    def __init__(self, context: Any = None, engine: Any = None,
                 default_logger: LogHandler | None = None) -> None:
        self.context = context
        self.engine = engine
        self._default_logger = default_logger if default_logger is not None else DefaultLogLogger()
        self._db_loggers: list[LogHandler] = []
        self._redis_loggers: list[LogHandler] = []
        self._local_cache_loggers: list[LogHandler] = []
        self._meta: dict[str, str] | None = None
        self._tracked: dict[int, dict[int, Any]] = {}
        self._data_lock = threading.Lock()
        self._flush_lock = threading.Lock()

    def clone_with_context(self, context: Any) -> ORM:
        """Return a new ORM with the given context, same loggers and metadata."""
        clone = ORM(context, self.engine, self._default_logger)
        clone._db_loggers = list(self._db_loggers)
        clone._redis_loggers = list(self._redis_loggers)
        clone._local_cache_loggers = list(self._local_cache_loggers)
        clone._meta = self._meta
        return clone

    def clone(self) -> ORM:
        """Return a new ORM sharing this one's context."""
        return self.clone_with_context(self.context)

    def set_meta_data(self, key: str, value: str) -> None:
        with self._data_lock:
            if self._meta is None:
                self._meta = {key: value}
            else:
                self._meta[key] = value

    def meta(self) -> dict[str, str]:
        """Metadata attached to this ORM."""
        return self._meta if self._meta is not None else {}

    def register_query_logger(self, handler: LogHandler, mysql: bool, redis: bool,
                              local: bool) -> None:
        """Attach a handler to the chosen query sources, once each."""
        with self._data_lock:
            if mysql:
                _append_unique(self._db_loggers, handler)
            if redis:
                _append_unique(self._redis_loggers, handler)
            if local:
                _append_unique(self._local_cache_loggers, handler)

    def enable_query_debug(self) -> None:
        self.enable_query_debug_custom(True, True, True)

    def enable_query_debug_custom(self, mysql: bool, redis: bool, local: bool) -> None:
        self.register_query_logger(self._default_logger, mysql, redis, local)

    def db_loggers(self) -> list[LogHandler]:
        return list(self._db_loggers)

    def redis_loggers(self) -> list[LogHandler]:
        return list(self._redis_loggers)

    def local_cache_loggers(self) -> list[LogHandler]:
        return list(self._local_cache_loggers)

    def track_entity(self, entity: Any) -> None:
        """Remember an entity for the next flush, keyed by schema index and id."""
        with self._flush_lock:
            self._tracked.setdefault(entity.schema.index, {})[entity.id] = entity

    def tracked_entities(self) -> dict[int, dict[int, Any]]:
        with self._flush_lock:
            return {index: dict(entities) for index, entities in self._tracked.items()}