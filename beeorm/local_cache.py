"""In-process key/value, entity and reference caches with optional LRU limits."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Protocol

from beeorm.query_logger import SOURCE_LOCAL_CACHE, fill_log_fields

CACHE_ALL_REFERENCE = "all"


class CachedSchema(Protocol):
    """What a local cache needs to know about an entity schema."""

    has_local_cache: bool
    cached_references: Iterable[str]
    cache_all: bool
    type_name: str


@dataclass(frozen=True)
class LocalCacheConfig:
    """Pool code, entry limit (0 means unlimited) and optional schema."""

    code: str
    limit: int
    schema: Any = None


@dataclass(frozen=True)
class LocalCacheUsage:
    """Size and eviction counters of one cache area."""

    type: str
    limit: int
    used: int
    evictions: int


class _Store:
    """One cache area; with a positive limit it evicts the least recently used entry."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.evictions = 0
        self._data: OrderedDict[Hashable, Any] = OrderedDict()

    def get(self, key: Hashable) -> tuple[Any, bool]:
        if key not in self._data:
            return None, False
        if self.limit > 0 and len(self._data) >= self.limit:
            self._data.move_to_end(key)
        return self._data[key], True

    def set(self, key: Hashable, value: Any) -> None:
        self._data[key] = value
        if self.limit > 0:
            self._data.move_to_end(key)
            if len(self._data) > self.limit:
                self._data.popitem(last=False)
                self.evictions += 1

    def remove(self, key: Hashable) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class LocalCache:
    """A named in-memory cache, optionally holding entities of one schema."""

    def __init__(self, code: str, limit: int = 0, schema: CachedSchema | None = None) -> None:
        if limit < 0:
            raise ValueError("local cache limit can't be negative")
        self.config = LocalCacheConfig(code, limit, schema)
        self._lock = threading.Lock()
        self._global = _Store(limit)
        self._entities: _Store | None = None
        self._references: dict[str, _Store] = {}
        if schema is not None and schema.has_local_cache:
            self._entities = _Store(limit)
            names = list(schema.cached_references)
            if schema.cache_all:
                names.append(CACHE_ALL_REFERENCE)
            for name in names:
                self._references[name] = _Store(limit)

    def _entity_store(self) -> _Store:
        if self._entities is None:
            raise RuntimeError(f"local cache '{self.config.code}' has no entity cache")
        return self._entities

    def _reference_store(self, reference: str) -> _Store:
        try:
            return self._references[reference]
        except KeyError:
            raise KeyError(f"unknown cached reference `{reference}`") from None

    def _log(self, orm: Any, operation: str, query: str, cache_miss: bool = False) -> None:
        loggers = orm.local_cache_loggers()
        if loggers:
            fill_log_fields(orm, loggers, self.config.code, SOURCE_LOCAL_CACHE,
                            operation, query, None, cache_miss, None)

    def get(self, orm: Any, key: str) -> tuple[Any, bool]:
        """Return (value, found) for a key."""
        with self._lock:
            value, found = self._global.get(key)
        self._log(orm, "GET", f"GET {key}", not found)
        return value, found

    def set(self, orm: Any, key: str, value: Any) -> None:
        with self._lock:
            self._global.set(key, value)
        self._log(orm, "SET", f"SET {key} {value}")

    def remove(self, orm: Any, key: str) -> None:
        with self._lock:
            self._global.remove(key)
        self._log(orm, "REMOVE", f"REMOVE {key}")

    def get_entity(self, orm: Any, entity_id: int) -> tuple[Any, bool]:
        """Return (entity, found); a found None marks a known missing entity."""
        with self._lock:
            value, found = self._entity_store().get(entity_id)
        self._log(orm, "GET", f"GET ENTITY {entity_id}", not found)
        return value, found

    def set_entity(self, orm: Any, entity_id: int, value: Any) -> None:
        with self._lock:
            self._entity_store().set(entity_id, value)
        self._log(orm, "SET", f"SET ENTITY {entity_id} [entity value]")

    def remove_entity(self, orm: Any, entity_id: int) -> None:
        with self._lock:
            self._entity_store().remove(entity_id)
        self._log(orm, "REMOVE", f"REMOVE ENTITY {entity_id}")

    def get_reference(self, orm: Any, reference: str, entity_id: int) -> tuple[Any, bool]:
        """Return (value, found) cached for a reference and referenced id."""
        with self._lock:
            value, found = self._reference_store(reference).get(entity_id)
        self._log(orm, "GET", f"GET REFERENCE {reference} {entity_id}", not found)
        return value, found

    def set_reference(self, orm: Any, reference: str, entity_id: int, value: Any) -> None:
        with self._lock:
            self._reference_store(reference).set(entity_id, value)
        self._log(orm, "SET", f"SET REFERENCE {reference} {entity_id} {value}")

    def remove_reference(self, orm: Any, reference: str, entity_id: int) -> None:
        with self._lock:
            self._reference_store(reference).remove(entity_id)
        self._log(orm, "REMOVE", f"REMOVE REFERENCE {reference} {entity_id}")

    def clear(self, orm: Any) -> None:
        """Drop every entry from all areas of this cache."""
        with self._lock:
            self._global.clear()
            if self._entities is not None:
                self._entities.clear()
            for store in self._references.values():
                store.clear()
        self._log(orm, "CLEAR", "CLEAR")

    def usage(self) -> list[LocalCacheUsage]:
        """Counters for the global area, or for the entity and reference areas."""
        limit = self.config.limit
        with self._lock:
            if self._entities is None:
                return [LocalCacheUsage("Global", limit, len(self._global),
                                        self._global.evictions)]
            type_name = self.config.schema.type_name
            result = [LocalCacheUsage(f"Entities {type_name}", limit, len(self._entities),
                                      self._entities.evictions)]
            for name, store in self._references.items():
                result.append(LocalCacheUsage(f"Reference {name} of {type_name}", limit,
                                              len(store), store.evictions))
            return result