"""In-memory content store scoped to a single build"""

import threading
from collections.abc import Iterator, Sequence
from typing import Optional

from mdsite.core.errors import DuplicateIdentifier
from mdsite.core.models import ContentItem


class CollectionView(Sequence):
    """Read-only, restartable view over one collection's items in insertion order."""

    def __init__(self, items: list[ContentItem]):
        self._items = items

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ContentItem]:
        return iter(self._items)


class ContentStore:
    """Accumulates ContentItems grouped by collection.

    add() is safe to call from parser threads. Once sealed, the store is
    read-only; there is no removal.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._collections: dict[str, list[ContentItem]] = {}
        self._by_key: dict[tuple[str, str], ContentItem] = {}
        self._sealed = False

    def add(self, item: ContentItem) -> None:
        """Record item; DuplicateIdentifier if (collection, identifier) is taken."""
        with self._lock:
            if self._sealed:
                raise RuntimeError("content store is sealed")
            existing = self._by_key.get(item.key)
            if existing is not None:
                raise DuplicateIdentifier(
                    f"identifier '{item.identifier}' already used in collection "
                    f"'{item.collection}' by {existing.source_path}",
                    item.source_path,
                )
            self._by_key[item.key] = item
            self._collections.setdefault(item.collection, []).append(item)

    def seal(self) -> None:
        """End the write phase; later add() calls raise RuntimeError."""
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def all(self, collection: str) -> CollectionView:
        """Items of collection in insertion order; empty for unknown collections."""
        return CollectionView(self._collections.get(collection, []))

    def get(self, collection: str, identifier: str) -> Optional[ContentItem]:
        return self._by_key.get((collection, identifier))

    def collections(self) -> list[str]:
        """Sorted names of collections holding at least one item."""
        return sorted(self._collections)

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[ContentItem]:
        """All items, collections in name order, insertion order within each."""
        for name in self.collections():
            yield from self._collections[name]
