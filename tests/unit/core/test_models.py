"""Unit tests for core/models.py"""

from datetime import date, datetime, timezone

import pytest

from mdsite.core.models import (
    BoolField, DateField, ItemKey, ListField, MappingField, NumberField, StringField,
    sort_date, to_field, to_plain,
)


@pytest.mark.parametrize("raw,expected", [
    ("text", StringField("text")),
    (3, NumberField(3)),
    (2.5, NumberField(2.5)),
    (True, BoolField(True)),
    (date(2024, 1, 1), DateField(date(2024, 1, 1))),
    (["a", 1, date(2024, 1, 1)], ListField(("a", "1", "2024-01-01"))),
    ({"k": "v", "n": None}, MappingField({"k": StringField("v")})),
])
def test_to_field(raw, expected):
    """YAML values map onto the tagged variant; None entries are dropped."""
    assert to_field(raw) == expected


def test_to_field_none():
    """A bare None carries no field."""
    assert to_field(None) is None


def test_bool_is_not_a_number():
    """bool is checked before int so true stays a flag."""
    assert to_field(False).kind == "bool"


@pytest.mark.parametrize("raw", [[{"a": 1}], [[1, 2]], object()])
def test_to_field_rejects_unsupported(raw):
    """Lists of containers and unknown objects are outside the variant."""
    with pytest.raises(TypeError):
        to_field(raw)


def test_to_plain_inverts_to_field():
    """to_plain(to_field(x)) gives back a YAML-ready equivalent."""
    raw = {"name": "Ada", "links": ["x", "y"], "since": date(2020, 1, 1), "active": True}
    assert to_plain(to_field(raw)) == raw


def test_kinds_are_distinct():
    """Each variant carries its own kind tag."""
    kinds = {cls.kind for cls in (StringField, NumberField, BoolField, DateField, ListField, MappingField)}
    assert kinds == {"string", "number", "bool", "date", "list", "mapping"}


def test_item_key_str():
    """ItemKey renders as collection/identifier."""
    assert str(ItemKey("posts", "hello")) == "posts/hello"


def test_sort_date_normalizes():
    """Dates become midnight datetimes; aware datetimes move to naive UTC."""
    assert sort_date(date(2024, 1, 2)) == datetime(2024, 1, 2)
    aware = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)
    assert sort_date(aware) == datetime(2024, 1, 2, 12, 0)
