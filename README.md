# beeorm

Building blocks of an entity ORM. Each module can be used on its own, and
the package has no third-party dependencies.

| Module | What it provides |
| --- | --- |
| `beeorm.pager` | `Pager`: a page number and page size, rendered as a SQL `LIMIT` clause |
| `beeorm.where` | `Query`, `Operator`, `PrevOperator`, `is_op`: a fluent builder for SQL `WHERE` conditions with `?` placeholders |
| `beeorm.local_cache` | `LocalCache`, `LocalCacheConfig`, `LocalCacheUsage`: an in-process cache, unbounded or LRU-limited |
| `beeorm.orm` | `ORM`: a per-request context that holds metadata, query loggers and tracked entities |
| `beeorm.query_logger` | `LogHandler`, `DefaultLogLogger`, `fill_log_fields`, `get_now` |
| `beeorm.locker` | `Locker` and `Lock`: obtain, refresh, inspect and release named locks through a lock client you supply |
| `beeorm.modified` | `ModifiedPlugin` and `new()`: stamp "added at" and "modified at" fields when an entity is flushed |

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Paging

```python
from beeorm.pager import Pager

pager = Pager(2, 100)
str(pager)              # "LIMIT 100,100"
pager.increment_page()  # pager.current_page == 3
```

## Where clauses

Every `and_*` and `or_*` method adds a condition and returns the query, so
calls can be chained. A list or tuple value becomes an `IN (?,...)` list.
`and_()` and `or_()` use `=` unless the arguments contain an operator, such as
`"LIKE"`. `and_custom()` and `or_custom()` require an operator among their
arguments and raise `ValueError` if none is given.

```python
from beeorm.where import Query

q = Query()
q.and_("id", 1).and_("age", [1, 2, 3]).or_("id", 2).and_like("name", "%test%")
q.and_("sex", "LIKE", "%female%")
str(q)
# "`id` = ? AND `age` IN (?,?,?) OR `id` = ? AND `name` LIKE ? AND `sex` LIKE ?"
q.parameters()
# [1, 1, 2, 3, 2, "%test%", "%female%"]
```

## Local cache

`LocalCache(code, limit=0, schema=None)` has a global key/value area. If its
`limit` is positive, each area keeps at most that many entries and evicts the
least recently used one. A negative limit raises `ValueError`.

If a schema object is given with `has_local_cache` true, the cache also has an
entity area (`get_entity`, `set_entity`, `remove_entity`). It gets one
reference area for each name in `schema.cached_references`, plus an `"all"`
area when `schema.cache_all` is true (`get_reference`, `set_reference`,
`remove_reference`). `usage()` returns a `LocalCacheUsage` with the type,
limit, entries used and evictions for each area. The getters return a
`(value, found)` pair.

```python
from beeorm.local_cache import LocalCache
from beeorm.orm import ORM

orm = ORM()
cache = LocalCache("with_limit", 3)
for key in "1234":
    cache.set(orm, key, key)
cache.usage()[0].used       # 3
cache.usage()[0].evictions  # 1
cache.get(orm, "4")         # ("4", True)
cache.get(orm, "1")         # (None, False)
```

## Query logging

Handlers subclass `LogHandler` and implement `handle(orm, fields)`. They
are registered on an `ORM` for any of the three sources: MySQL, Redis and
local cache. Each handler is registered only once per source.
`ORM.enable_query_debug()` registers a `DefaultLogLogger`, which writes
coloured lines to standard error, or to the stream it was given.

`fill_log_fields()` builds the record and passes it to every handler. The
record holds `operation`, `query`, `pool` and `source`. It also holds `miss`,
the ORM's `meta`, `microseconds`, `started` and `finished` (when a start time
from `get_now(True)` is given), and `error`, when each of these applies.

```python
from beeorm.orm import ORM
from beeorm.query_logger import LogHandler

class Printer(LogHandler):
    def handle(self, orm, fields):
        print(fields["operation"], fields["query"], fields.get("miss"))

orm = ORM()
orm.set_meta_data("source", "test case")
orm.register_query_logger(Printer(), mysql=False, redis=False, local=True)
```

`ORM.clone()` and `ORM.clone_with_context(context)` copy the loggers and the
metadata. `track_entity(entity)` records an entity by `entity.schema.index`
and `entity.id`, and `tracked_entities()` returns a copy of what has been
recorded.

## Locks

`Locker(client, pool="default")` works with any object that has this method:
`obtain(key, ttl, retry_interval, retry_limit)`. The method returns `None`
when the lock is taken, or a handle with `release() -> bool`,
`ttl() -> float` and `refresh(ttl) -> bool`.

`Locker.obtain(orm, key, ttl, wait_timeout=0)` returns a `Lock`, or `None`
when the lock could not be obtained. It takes seconds or `timedelta` values.
It raises `ValueError` when `ttl` is not positive or when `wait_timeout` is
greater than `ttl`. `Lock.release()` does nothing once the lock has been
released. `Lock.refresh()` returns `False` when the lock is no longer held.
Operations are logged to the ORM's Redis loggers.

## Timestamp plugin

```python
from datetime import datetime
from beeorm.modified import new

plugin = new("AddedAt", "ModifiedAt")  # ValueError for "" / "" or lower-case names
```

`validate_entity_schema(schema)` reads the class annotations of `schema.type`.
It looks for the two fields typed as `datetime` or as `datetime | None`, and
skips fields tagged `ignore`. For each field it finds, it records whether the
field is tagged `time`. It does this through `schema.get_tag()` and
`schema.set_option()`.

`entity_flush(schema, entity, before, after, engine)` runs when an entity is
flushed. On insert (`before is None`) it fills the added-at field, and on
update it fills the modified-at field. A field that already holds a value is
left as it is. The bind receives `"YYYY-MM-DD"`, or `"YYYY-MM-DD HH:MM:SS"`
for fields tagged `time`. The entity attribute receives the matching UTC
`datetime`.

## What this package does not do

The package has no database or Redis connection. It has no entity registry
or schema builder, and no functions to load or save entities. `LocalCache`
keeps data only in process memory. `Locker` needs a lock client to be
supplied, and `ModifiedPlugin` needs a schema object from the caller. There
is no command-line tool.