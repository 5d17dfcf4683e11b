"""Navigation indexes derived from the content store: chronological archive and tags"""

from dataclasses import dataclass, field

from mdsite.core.models import ContentItem, ItemKey, sort_date
from mdsite.core.store import ContentStore


@dataclass(frozen=True)
class SiteIndex:
    """Read-only view rebuilt in full on every build."""
    by_collection: dict[str, tuple[ContentItem, ...]]   # dated items, newest first
    by_tag:        dict[str, frozenset[ItemKey]]
    _positions:    dict[ItemKey, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        positions = {}
        for items in self.by_collection.values():
            positions.update((item.key, pos) for pos, item in enumerate(items))
        object.__setattr__(self, "_positions", positions)

    def archive(self, collection: str) -> dict[int, tuple[ContentItem, ...]]:
        """Dated items of collection grouped by year, newest year first."""
        years: dict[int, list[ContentItem]] = {}
        for item in self.by_collection.get(collection, ()):
            years.setdefault(item.date.year, []).append(item)
        return {year: tuple(items) for year, items in years.items()}

    def neighbours(self, item: ContentItem) -> tuple[ContentItem | None, ContentItem | None]:
        """(newer, older) items next to item in its collection order; None at the ends or if undated."""
        pos = self._positions.get(item.key)
        if pos is None:
            return None, None
        ordered = self.by_collection[item.collection]
        newer = ordered[pos - 1] if pos > 0 else None
        older = ordered[pos + 1] if pos + 1 < len(ordered) else None
        return newer, older


def chronological(items) -> tuple[ContentItem, ...]:
    """Order dated items by date descending, then identifier ascending."""
    ordered = sorted(items, key=lambda i: i.identifier)
    ordered.sort(key=lambda i: sort_date(i.date), reverse=True)   # stable: ties keep identifier order
    return tuple(ordered)


def build_index(store: ContentStore) -> SiteIndex:
    """Derive by_collection and by_tag. Output depends only on store contents, not insertion order."""
    by_collection = {}
    for name in store.collections():
        dated = [item for item in store.all(name) if item.date is not None]
        by_collection[name] = chronological(dated)

    tags: dict[str, set[ItemKey]] = {}
    for item in store:
        for tag in item.metadata.tags:
            tags.setdefault(tag, set()).add(item.key)
    by_tag = {tag: frozenset(tags[tag]) for tag in sorted(tags)}

    return SiteIndex(by_collection=by_collection, by_tag=by_tag)
