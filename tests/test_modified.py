from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from beeorm.modified import EMPTY_DATE, EMPTY_TIME, OPTION_KEY, ModifiedPlugin, new

EMPTY = datetime(1, 1, 1, tzinfo=timezone.utc)
NOW = datetime(2023, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)


@dataclass
class PluginEntity:
    ID: int = 0
    Name: str = ""
    AddedAtDate: datetime = EMPTY
    AddedAtDateOptional: Optional[datetime] = None
    ModifiedAtDate: datetime = EMPTY
    ModifiedAtDateOptional: Optional[datetime] = None
    AddedAtTime: datetime = EMPTY
    AddedAtTimeOptional: Optional[datetime] = None
    ModifiedAtTime: datetime = EMPTY
    ModifiedAtTimeOptional: Optional[datetime] = None
    AddedAtIgnored: datetime = EMPTY


TAGS = {
    "AddedAtTime": {"time"},
    "AddedAtTimeOptional": {"time"},
    "ModifiedAtTime": {"time"},
    "ModifiedAtTimeOptional": {"time"},
    "AddedAtIgnored": {"ignore"},
}


@dataclass
class FakeSchema:
    type: type = PluginEntity
    tags: dict[str, set[str]] = field(default_factory=lambda: dict(TAGS))
    options: dict[str, Any] = field(default_factory=dict)

    def get_tag(self, field_name, key, true_value, default_value):
        return true_value if key in self.tags.get(field_name, set()) else default_value

    def set_option(self, key, value):
        self.options[key] = value

    def option(self, key):
        return self.options.get(key)


def make(added, modified):
    plugin = ModifiedPlugin(added, modified, clock=lambda: NOW)
    schema = FakeSchema()
    plugin.validate_entity_schema(schema)
    return plugin, schema


def test_added_date_on_insert():
    plugin, schema = make("AddedAtDate", "ModifiedAtDate")
    entity = PluginEntity(Name="a")
    after = {"Name": "a", "AddedAtDate": EMPTY_DATE, "ModifiedAtDate": EMPTY_DATE}
    assert plugin.entity_flush(schema, entity, None, after, None) is None
    assert after["AddedAtDate"] == "2023-05-06"
    assert after["ModifiedAtDate"] == "0001-01-01"
    assert entity.AddedAtDate == datetime(2023, 5, 6, tzinfo=timezone.utc)
    assert entity.ModifiedAtDate == EMPTY


def test_manual_date_is_kept():
    plugin, schema = make("AddedAtDate", "ModifiedAtDate")
    manual = datetime(2022, 2, 3, tzinfo=timezone.utc)
    entity = PluginEntity(Name="a1", AddedAtDate=manual)
    after = {"Name": "a1", "AddedAtDate": "2022-02-03"}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after["AddedAtDate"] == "2022-02-03"
    assert entity.AddedAtDate == manual


def test_added_time_on_insert():
    plugin, schema = make("AddedAtTime", "ModifiedAtTime")
    entity = PluginEntity(Name="b")
    after = {"Name": "b", "AddedAtTime": EMPTY_TIME, "ModifiedAtTime": EMPTY_TIME}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after["AddedAtTime"] == "2023-05-06 07:08:09"
    assert after["ModifiedAtTime"] == "0001-01-01 00:00:00"
    assert entity.AddedAtTime == datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc)


def test_manual_time_is_kept():
    plugin, schema = make("AddedAtTime", "ModifiedAtTime")
    entity = PluginEntity(Name="b1")
    after = {"AddedAtTime": "2022-02-03 04:05:06"}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after["AddedAtTime"] == "2022-02-03 04:05:06"
    assert entity.AddedAtTime == EMPTY


def test_optional_time_on_insert():
    plugin, schema = make("AddedAtTimeOptional", "ModifiedAtTimeOptional")
    entity = PluginEntity(Name="d")
    after = {"Name": "d", "AddedAtTimeOptional": None, "ModifiedAtTimeOptional": None}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after["AddedAtTimeOptional"] == "2023-05-06 07:08:09"
    assert entity.AddedAtTimeOptional == datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    assert entity.ModifiedAtTimeOptional is None
    assert after["ModifiedAtTimeOptional"] is None


def test_optional_manual_value_is_kept():
    plugin, schema = make("AddedAtTimeOptional", "ModifiedAtTimeOptional")
    entity = PluginEntity()
    after = {"AddedAtTimeOptional": "2022-02-03 04:05:06"}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after["AddedAtTimeOptional"] == "2022-02-03 04:05:06"
    assert entity.AddedAtTimeOptional is None


def test_optional_date_on_insert():
    plugin, schema = make("AddedAtDateOptional", "ModifiedAtDateOptional")
    entity = PluginEntity(Name="d")
    after = {"AddedAtDateOptional": None}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after["AddedAtDateOptional"] == "2023-05-06"
    assert entity.AddedAtDateOptional == datetime(2023, 5, 6, tzinfo=timezone.utc)
    assert entity.ModifiedAtDateOptional is None


def test_modified_on_update():
    plugin, schema = make("AddedAtTimeOptional", "ModifiedAtTimeOptional")
    entity = PluginEntity(Name="D1")
    before = {"Name": "D"}
    after = {"Name": "D1"}
    plugin.entity_flush(schema, entity, before, after, None)
    assert after["ModifiedAtTimeOptional"] == "2023-05-06 07:08:09"
    assert "AddedAtTimeOptional" not in after
    assert entity.ModifiedAtTimeOptional == datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    assert entity.AddedAtTimeOptional is None


def test_delete_changes_nothing():
    plugin, schema = make("AddedAtDate", "ModifiedAtDate")
    entity = PluginEntity(Name="g")
    before = {"Name": "g"}
    assert plugin.entity_flush(schema, entity, before, None, None) is None
    assert before == {"Name": "g"}
    assert entity.ModifiedAtDate == EMPTY


def test_options_recorded():
    _, schema = make("AddedAtTime", "ModifiedAtDateOptional")
    options = schema.options[OPTION_KEY]
    assert options.field_added == "AddedAtTime"
    assert options.time_added is True
    assert options.optional_added is False
    assert options.field_modified == "ModifiedAtDateOptional"
    assert options.time_modified is False
    assert options.optional_modified is True


@pytest.mark.parametrize("name", ["Invalid", "AddedAtIgnored", "Name"])
def test_unusable_fields_are_skipped(name):
    plugin, schema = make(name, name)
    assert OPTION_KEY not in schema.options
    entity = PluginEntity(Name="e")
    after = {"Name": "e"}
    plugin.entity_flush(schema, entity, None, after, None)
    assert after == {"Name": "e"}
    assert entity.Name == "e"


def test_new_builds_plugin():
    plugin = new(" AddedAtDate ", "ModifiedAtDate")
    assert plugin.added_at_field == "AddedAtDate"
    assert plugin.modified_at_field == "ModifiedAtDate"


def test_new_errors():
    with pytest.raises(ValueError, match="^at least one column name must be defined$"):
        new("", "")
    with pytest.raises(ValueError, match="^addedAt field 'a' must be public$"):
        new("a", "b")
    with pytest.raises(ValueError, match="^modifiedAtField field 'b' must be public$"):
        new("A", "b")