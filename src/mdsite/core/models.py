"""Content data models: tagged front matter values, metadata, and parsed items"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, ClassVar, NamedTuple, Optional, Union


@dataclass(frozen=True)
class StringField:
    kind: ClassVar[str] = "string"
    value: str


@dataclass(frozen=True)
class NumberField:
    kind: ClassVar[str] = "number"
    value: Union[int, float]


@dataclass(frozen=True)
class BoolField:
    kind: ClassVar[str] = "bool"
    value: bool


@dataclass(frozen=True)
class DateField:
    kind: ClassVar[str] = "date"
    value: date                     # date or datetime


@dataclass(frozen=True)
class ListField:
    kind: ClassVar[str] = "list"
    value: tuple[str, ...]


@dataclass(frozen=True)
class MappingField:
    kind: ClassVar[str] = "mapping"
    value: dict[str, FieldValue]


FieldValue = Union[StringField, NumberField, BoolField, DateField, ListField, MappingField]


def _scalar_text(raw: Any) -> str:
    """Coerce a YAML scalar list entry to str; nested containers are rejected."""
    if isinstance(raw, (dict, list)):
        raise TypeError(f"list entries must be scalars, got {type(raw).__name__}")
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, date):
        return raw.isoformat()
    return str(raw)


def to_field(raw: Any) -> Optional[FieldValue]:
    """Convert a YAML-loaded value to a FieldValue; None means the key carries no value.

    Raises TypeError for shapes outside the variant (lists of mappings, unknown types).
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return BoolField(raw)
    if isinstance(raw, (int, float)):
        return NumberField(raw)
    if isinstance(raw, date):
        return DateField(raw)
    if isinstance(raw, str):
        return StringField(raw)
    if isinstance(raw, (list, tuple)):
        return ListField(tuple(_scalar_text(v) for v in raw if v is not None))
    if isinstance(raw, dict):
        fields = {}
        for k, v in raw.items():
            converted = to_field(v)
            if converted is not None:
                fields[str(k)] = converted
        return MappingField(fields)
    raise TypeError(f"unsupported value of type {type(raw).__name__}")


def to_plain(value: FieldValue) -> Any:
    """Inverse of to_field: a plain value yaml.safe_dump can write."""
    if isinstance(value, ListField):
        return list(value.value)
    if isinstance(value, MappingField):
        return {k: to_plain(v) for k, v in value.value.items()}
    return value.value


@dataclass(frozen=True)
class Metadata:
    """Typed front matter. Unrecognized keys are kept in extra."""
    title:         str
    date:          Optional[date] = None
    tags:          frozenset[str] = frozenset()
    permalink:     Optional[str] = None
    redirect_from: tuple[str, ...] = ()
    published:     bool = True
    extra:         dict[str, FieldValue] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Plain value of an extra field, or default."""
        value = self.extra.get(key)
        return to_plain(value) if value is not None else default


class ItemKey(NamedTuple):
    collection: str
    identifier: str

    def __str__(self) -> str:
        return f"{self.collection}/{self.identifier}"


@dataclass(frozen=True)
class ContentItem:
    """One parsed content file; created once per build and never mutated."""
    identifier:  str
    collection:  str
    source_path: Path
    metadata:    Metadata
    body:        str                # raw markdown, pre-render

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.collection, self.identifier)

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> Optional[date]:
        return self.metadata.date


def sort_date(value: date) -> datetime:
    """Comparable naive datetime for a date or datetime; aware values are normalized to UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)
