"""Tests for prefix-growing pagination and the record store."""

import asyncio

from rada_engine.core.pagination import Paginator, has_more, load_more, reset, visible_slice
from rada_engine.core.store import RecordStore
from rada_engine.models import PageWindow


class TestPageWindow:
    def test_sizes_are_at_least_one(self):
        window = PageWindow(page_size=0, pages_loaded=0)

        assert window.page_size == 1
        assert window.pages_loaded == 1

    def test_visible_slice_is_capped_at_total(self):
        records = list(range(7))
        window = PageWindow(page_size=5, pages_loaded=2)

        assert visible_slice(records, window) == records
        assert has_more(records, window) is False

    def test_empty_collection(self):
        window = PageWindow(page_size=10)

        assert visible_slice([], window) == []
        assert has_more([], window) is False


class TestLoadMore:
    def test_load_more_adds_a_page(self):
        window = asyncio.run(load_more(PageWindow(page_size=10), delay=0))

        assert window.pages_loaded == 2
        assert window.loading is False

    def test_load_more_while_loading_is_a_noop(self):
        window = PageWindow(page_size=10, loading=True)

        asyncio.run(load_more(window, delay=0))

        assert window.pages_loaded == 1

    def test_reset_returns_to_first_page(self):
        window = PageWindow(page_size=10, pages_loaded=3, loading=True)

        reset(window)

        assert window.pages_loaded == 1
        assert window.loading is False

    def test_paginator_wraps_window(self):
        paginator = Paginator(page_size=2, delay=0)
        records = list("abcde")

        assert paginator.visible(records) == ["a", "b"]
        asyncio.run(paginator.load_more())
        assert paginator.visible(records) == ["a", "b", "c", "d"]
        assert paginator.has_more(records) is True

        paginator.reset()
        assert paginator.pages_loaded == 1


class TestRecordStore:
    def test_replace_drops_duplicate_ids(self, make_politician):
        store = RecordStore("politician")

        held = store.replace([make_politician(1, "A"), make_politician(1, "A again"), make_politician(2, "B")])

        assert held == 2
        assert [p.name for p in store.records] == ["A", "B"]

    def test_append_skips_known_ids(self, make_politician):
        store = RecordStore("politician", [make_politician(1, "A")])

        added = store.append([make_politician(1, "A"), make_politician(3, "C")])

        assert added == 1
        assert [p.id for p in store.records] == [1, 3]

    def test_records_of_another_type_are_dropped(self, make_politician, make_article):
        store = RecordStore("news")

        store.replace([make_article("n1", "Headline"), make_politician(1, "A")])

        assert len(store) == 1
        assert store.get("n1").title == "Headline"
        assert store.get(1) is None

    def test_accessors_return_copies(self, make_politician):
        store = RecordStore("politician", [make_politician(1, "A")])

        store.records.clear()
        store.filtered.clear()

        assert len(store.records) == 1
        assert len(store.filtered) == 1

    def test_clear(self, make_politician):
        store = RecordStore("politician", [make_politician(1, "A")])

        store.clear()

        assert len(store) == 0
        assert store.filtered == []
