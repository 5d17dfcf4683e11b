"""Unit tests for core/store.py"""

import threading

import pytest

from mdsite.core.errors import DuplicateIdentifier
from mdsite.core.store import ContentStore


def test_add_and_all_in_insertion_order(make_item):
    """all() yields a collection's items in the order they were added."""
    store = ContentStore()
    b, a, page = make_item("b"), make_item("a"), make_item("about", collection="pages")
    for item in (b, a, page):
        store.add(item)
    assert list(store.all("posts")) == [b, a]
    assert list(store.all("pages")) == [page]
    assert store.collections() == ["pages", "posts"]
    assert len(store) == 3


def test_all_is_restartable(make_store, make_item):
    """Iterating the same view twice yields the same items."""
    store = make_store(make_item("a"), make_item("b"))
    view = store.all("posts")
    assert list(view) == list(view)
    assert len(view) == 2
    assert view[0].identifier == "a"


def test_all_unknown_collection_is_empty(make_store):
    """Unknown collections yield nothing."""
    assert list(make_store().all("talks")) == []


def test_duplicate_identifier_in_collection(make_item):
    """Adding a second item with the same (collection, identifier) fails."""
    store = ContentStore()
    store.add(make_item("hello"))
    with pytest.raises(DuplicateIdentifier, match="hello"):
        store.add(make_item("hello", title="Other"))
    assert len(store) == 1


def test_same_identifier_in_other_collection(make_item):
    """Identifiers only need to be unique within their collection."""
    store = ContentStore()
    store.add(make_item("hello", collection="posts"))
    store.add(make_item("hello", collection="talks"))
    assert store.get("talks", "hello").collection == "talks"
    assert store.get("pages", "hello") is None


def test_distinct_items_never_fail(make_item):
    """Any set of distinct (collection, identifier) pairs is accepted."""
    store = ContentStore()
    for collection in ("posts", "pages", "talks"):
        for n in range(20):
            store.add(make_item(f"item-{n}", collection=collection))
    assert len(store) == 60


def test_add_after_seal(make_store, make_item):
    """A sealed store rejects further writes."""
    store = make_store(make_item("a"))
    assert store.sealed
    with pytest.raises(RuntimeError, match="sealed"):
        store.add(make_item("b"))


def test_concurrent_adds_detect_duplicates(make_item):
    """Racing adds of one identifier record it exactly once."""
    store = ContentStore()
    errors = []
    barrier = threading.Barrier(8)

    def _add():
        barrier.wait()
        try:
            store.add(make_item("same"))
        except DuplicateIdentifier as e:
            errors.append(e)

    threads = [threading.Thread(target=_add) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store) == 1
    assert len(errors) == 7


def test_iter_orders_collections_by_name(make_store, make_item):
    """Iterating the store walks collections alphabetically."""
    store = make_store(make_item("t", collection="talks"), make_item("a", collection="about"))
    assert [i.collection for i in store] == ["about", "talks"]
