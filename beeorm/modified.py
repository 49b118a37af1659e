"""Plugin that stamps creation and modification dates on flushed entities."""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

OPTION_KEY = "beeorm.modified.fields"
EMPTY_TIME = "0001-01-01 00:00:00"
EMPTY_DATE = "0001-01-01"

_DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_DATE_FORMAT = "%Y-%m-%d"

_DATETIME_NAMES = frozenset({"datetime", "datetime.datetime"})


class _SchemaSetter(Protocol):
    type: type

    def get_tag(self, field: str, key: str, true_value: str, default_value: str) -> str: ...

    def set_option(self, key: str, value: Any) -> None: ...

    def option(self, key: str) -> Any: ...


@dataclass(frozen=True)
class _SchemaOptions:
    field_added: str = ""
    field_modified: str = ""
    time_added: bool = False
    time_modified: bool = False
    optional_added: bool = False
    optional_modified: bool = False


def _is_public(name: str) -> bool:
    return name[0].upper() == name[0]


def _field_annotations(cls: type) -> dict[str, Any]:
    """Collect the raw annotations of a class and its bases, without evaluating them."""
    merged: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        own = getattr(klass, "__annotations__", None)
        if isinstance(own, dict):
            merged.update(own)
    return merged


def _date_kind_text(text: str) -> bool | None:
    """Classify an annotation written as text."""
    compact = text.replace(" ", "").strip("'\"")
    if compact in _DATETIME_NAMES:
        return False
    for prefix in ("Optional[", "typing.Optional["):
        if compact.startswith(prefix) and compact.endswith("]"):
            inner = compact[len(prefix):-1]
            return True if inner in _DATETIME_NAMES else None
    for prefix in ("Union[", "typing.Union["):
        if compact.startswith(prefix) and compact.endswith("]"):
            parts = compact[len(prefix):-1].split(",")
            break
    else:
        parts = compact.split("|")
    if len(parts) == 2 and "None" in parts:
        other = [part for part in parts if part != "None"]
        if len(other) == 1 and other[0] in _DATETIME_NAMES:
            return True
    return None


def _date_kind(hint: Any) -> bool | None:
    """Return False for datetime, True for an optional datetime, None otherwise."""
    if isinstance(hint, str):
        return _date_kind_text(hint)
    if hint is datetime:
        return False
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = typing.get_args(hint)
        if len(args) == 2 and datetime in args and type(None) in args:
            return True
    return None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ModifiedPlugin:
    """Sets an "added at" field on insert and a "modified at" field on update."""

    def __init__(self, added_at_field: str, modified_at_field: str,
                 clock: Callable[[], datetime] | None = None) -> None:
        added_at_field = added_at_field.strip()
        modified_at_field = modified_at_field.strip()
        if not added_at_field and not modified_at_field:
            raise ValueError("at least one column name must be defined")
        if added_at_field and not _is_public(added_at_field):
            raise ValueError(f"addedAt field '{added_at_field}' must be public")
        if modified_at_field and not _is_public(modified_at_field):
            raise ValueError(f"modifiedAtField field '{modified_at_field}' must be public")
        self.added_at_field = added_at_field
        self.modified_at_field = modified_at_field
        self._clock = clock if clock is not None else _utc_now

    def validate_entity_schema(self, schema: _SchemaSetter) -> None:
        """Record on the schema which of its date fields this plugin maintains."""
        names: list[str] = []
        if self.added_at_field:
            names.append(self.added_at_field)
        if self.modified_at_field and self.modified_at_field != self.added_at_field:
            names.append(self.modified_at_field)
        hints = _field_annotations(schema.type)
        found = False
        values: dict[str, Any] = {}
        for name in names:
            if name not in hints:
                continue
            if schema.get_tag(name, "ignore", "true", "") == "true":
                continue
            optional = _date_kind(hints[name])
            if optional is None:
                continue
            with_time = schema.get_tag(name, "time", "true", "") == "true"
            if name == self.added_at_field:
                values.update(field_added=name, time_added=with_time, optional_added=optional)
                found = True
            if name == self.modified_at_field:
                values.update(field_modified=name, time_modified=with_time,
                              optional_modified=optional)
                found = True
        if found:
            schema.set_option(OPTION_KEY, _SchemaOptions(**values))

    def entity_flush(self, schema: _SchemaSetter, entity: Any, before: dict[str, Any] | None,
                     after: dict[str, Any] | None, engine: Any) -> None:
        """Fill the date fields in the flushed bind and on the entity."""
        if after is None:
            return None
        options: _SchemaOptions | None = schema.option(OPTION_KEY)
        if options is None:
            return None
        now = self._clock()
        now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
        if before is None:
            if options.field_added:
                _set_date(now, after, entity, options.field_added,
                          options.time_added, options.optional_added)
        elif options.field_modified:
            _set_date(now, after, entity, options.field_modified,
                      options.time_modified, options.optional_modified)
        return None


def _set_date(now: datetime, bind: dict[str, Any], entity: Any, field: str,
              with_time: bool, optional: bool) -> None:
    if field in bind:
        current = bind[field]
        if optional:
            if current is not None:
                return
        elif with_time:
            if current != EMPTY_TIME:
                return
        elif current != EMPTY_DATE:
            return
    if with_time:
        stamp = now.replace(microsecond=0)
        bind[field] = stamp.strftime(_DATE_TIME_FORMAT)
    else:
        stamp = now.replace(hour=0, minute=0, second=0, microsecond=0)
        bind[field] = stamp.strftime(_DATE_FORMAT)
    setattr(entity, field, stamp)


def new(added_at_field: str, modified_at_field: str) -> ModifiedPlugin:
    """Create the plugin for the given added-at and modified-at field names."""
    return ModifiedPlugin(added_at_field, modified_at_field)