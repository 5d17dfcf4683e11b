"""Unit tests for core/index.py"""

import random
from datetime import date, datetime, timedelta, timezone

from mdsite.core.index import build_index
from mdsite.core.store import ContentStore


def test_by_collection_orders_date_desc_then_identifier(make_store, make_item):
    """Newest first; equal dates fall back to identifier ascending."""
    store = make_store(
        make_item("b", date=date(2024, 1, 1)),
        make_item("old", date=date(2020, 6, 1)),
        make_item("a", date=date(2024, 1, 1)),
        make_item("new", date=date(2025, 1, 1)),
    )
    index = build_index(store)
    assert [i.identifier for i in index.by_collection["posts"]] == ["new", "a", "b", "old"]


def test_undated_items_excluded_from_order(make_store, make_item):
    """Items without a date stay in the store but not in the chronological sequence."""
    store = make_store(
        make_item("cv", collection="pages"),
        make_item("post", date=date(2024, 1, 1)),
    )
    index = build_index(store)
    assert index.by_collection["pages"] == ()
    assert [i.identifier for i in store.all("pages")] == ["cv"]
    assert [i.identifier for i in index.by_collection["posts"]] == ["post"]


def test_mixed_date_and_datetime(make_store, make_item):
    """Dates and datetimes (naive or aware) compare on one timeline."""
    store = make_store(
        make_item("midnight", date=date(2024, 1, 2)),
        make_item("evening", date=datetime(2024, 1, 1, 22, 0)),
        make_item("aware", date=datetime(2024, 1, 2, 9, 0, tzinfo=timezone(timedelta(hours=2)))),
    )
    index = build_index(store)
    assert [i.identifier for i in index.by_collection["posts"]] == ["aware", "midnight", "evening"]


def test_by_tag_exact_and_complete(make_store, make_item):
    """Every tag becomes a key; 'ML' and 'ml' are separate tags."""
    store = make_store(
        make_item("a", tags=["ML", "notes"]),
        make_item("b", tags=["ml"]),
        make_item("cv", collection="pages", tags=["notes"]),
    )
    index = build_index(store)
    assert list(index.by_tag) == ["ML", "ml", "notes"]
    assert index.by_tag["ML"] == {("posts", "a")}
    assert index.by_tag["ml"] == {("posts", "b")}
    assert index.by_tag["notes"] == {("posts", "a"), ("pages", "cv")}


def test_index_is_deterministic_across_insertion_orders(make_item):
    """Shuffled insertion produces an identical index."""
    items = [
        make_item(f"p{n}", date=date(2024, 1 + n % 12, 1), tags=[f"t{n % 3}"])
        for n in range(30)
    ]
    indexes = []
    for seed in range(3):
        shuffled = items[:]
        random.Random(seed).shuffle(shuffled)
        store = ContentStore()
        for item in shuffled:
            store.add(item)
        indexes.append(build_index(store))
    assert indexes[0] == indexes[1] == indexes[2]


def test_archive_groups_by_year(make_store, make_item):
    """archive() groups the ordered items by year, newest first."""
    store = make_store(
        make_item("a", date=date(2023, 3, 1)),
        make_item("b", date=date(2024, 5, 1)),
        make_item("c", date=date(2024, 1, 1)),
    )
    archive = build_index(store).archive("posts")
    assert list(archive) == [2024, 2023]
    assert [i.identifier for i in archive[2024]] == ["b", "c"]


def test_neighbours(make_store, make_item):
    """neighbours() returns (newer, older) within the collection order."""
    first = make_item("first", date=date(2024, 1, 1))
    middle = make_item("middle", date=date(2024, 2, 1))
    last = make_item("last", date=date(2024, 3, 1))
    index = build_index(make_store(first, middle, last))
    assert index.neighbours(middle) == (last, first)
    assert index.neighbours(last) == (None, middle)
    assert index.neighbours(make_item("undated")) == (None, None)


def test_neighbours_keeps_collections_apart(make_store, make_item):
    """Positions are looked up per (collection, identifier), so equal identifiers do not mix."""
    post = make_item("same", date=date(2024, 1, 1))
    talk = make_item("same", collection="talks", date=date(2023, 1, 1))
    newer_talk = make_item("keynote", collection="talks", date=date(2024, 5, 1))
    index = build_index(make_store(post, talk, newer_talk))
    assert index.neighbours(post) == (None, None)
    assert index.neighbours(talk) == (newer_talk, None)
    assert index.neighbours(newer_talk) == (None, talk)
