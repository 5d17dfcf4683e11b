"""Shared fixtures for core unit tests"""

from datetime import date
from pathlib import Path

import pytest

from mdsite.core.models import ContentItem, Metadata, to_field
from mdsite.core.store import ContentStore


@pytest.fixture(name="make_item")
def make_item_fixture():
    """Factory for ContentItems without touching the filesystem."""
    def _make(
        identifier: str,
        collection: str = "posts",
        title: str = None,
        date: date = None,
        tags=(),
        permalink: str = None,
        redirect_from=(),
        body: str = "Body.\n",
        **extra,
    ) -> ContentItem:
        return ContentItem(
            identifier=identifier,
            collection=collection,
            source_path=Path(f"_{collection}/{identifier}.md"),
            metadata=Metadata(
                title=title or identifier.title(),
                date=date,
                tags=frozenset(tags),
                permalink=permalink,
                redirect_from=tuple(redirect_from),
                extra={k: to_field(v) for k, v in extra.items()},
            ),
            body=body,
        )
    return _make


@pytest.fixture(name="make_store")
def make_store_fixture():
    """Build a sealed ContentStore from items."""
    def _make(*items: ContentItem) -> ContentStore:
        store = ContentStore()
        for item in items:
            store.add(item)
        store.seal()
        return store
    return _make
