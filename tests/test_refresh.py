"""Tests for refresh coordination between a source and an orchestrator."""

import asyncio

import pytest

from rada_engine.core.orchestrator import QueryOrchestrator
from rada_engine.errors import UpstreamUnavailable
from rada_engine.models import RecordPage
from rada_engine.services.refresh import UNAVAILABLE_NOTICE, RefreshCoordinator


class PagedSource:
    """Serves `records` in pages of `size`, optionally slowly or failing."""

    record_type = "politician"

    def __init__(self, records, size=2, delay=0.0):
        self.records = records
        self.size = size
        self.delay = delay
        self.fail_with = None
        self.calls = []

    async def get_records(self, filters=None, page=1, page_size=None):
        self.calls.append((dict(filters or {}), page))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        start = (page - 1) * self.size
        chunk = self.records[start : start + self.size]
        return RecordPage(
            records=chunk,
            total=len(self.records),
            page=page,
            limit=self.size,
            has_more=start + self.size < len(self.records),
        )

    async def search(self, query):
        return []


def _ids(records):
    return [record.id for record in records]


class TestRefresh:
    def test_refresh_replaces_store(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        coordinator = RefreshCoordinator(orchestrator, PagedSource(politicians, size=10))

        outcome = asyncio.run(coordinator.refresh())

        assert outcome.ok is True
        assert outcome.count == 5
        assert outcome.notice == ""
        assert _ids(orchestrator.visible()) == [1, 2, 3, 4, 5]

    def test_failed_refresh_keeps_previous_collection(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=10)
        coordinator = RefreshCoordinator(orchestrator, source)
        asyncio.run(coordinator.refresh())

        source.fail_with = UpstreamUnavailable("timeout")
        outcome = asyncio.run(coordinator.refresh())

        assert outcome.ok is False
        assert outcome.notice == UNAVAILABLE_NOTICE
        assert outcome.stale is True
        assert outcome.count == 5
        assert len(orchestrator.store) == 5

    def test_unexpected_errors_are_contained(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians)
        source.fail_with = RuntimeError("bug in source")
        coordinator = RefreshCoordinator(orchestrator, source)

        outcome = asyncio.run(coordinator.refresh())

        assert outcome.ok is False
        assert len(orchestrator.store) == 0

    def test_concurrent_refreshes_share_one_fetch(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=10, delay=0.01)
        coordinator = RefreshCoordinator(orchestrator, source)

        async def scenario():
            return await asyncio.gather(coordinator.refresh({"party": "ODM"}), coordinator.refresh({"party": "ODM"}))

        first, second = asyncio.run(scenario())

        assert first == second
        assert len(source.calls) == 1
        assert coordinator.in_flight is False

    def test_refresh_with_other_filters_runs_after_in_flight_one(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=10, delay=0.01)
        coordinator = RefreshCoordinator(orchestrator, source)

        async def scenario():
            return await asyncio.gather(coordinator.refresh(), coordinator.refresh({"party": "KANU"}))

        first, second = asyncio.run(scenario())

        assert first.ok is True
        assert second.ok is True
        assert source.calls == [({}, 1), ({"party": "KANU"}, 1)]
        assert coordinator.filters == {"party": "KANU"}
        assert coordinator.in_flight is False

    def test_mismatched_record_types_are_rejected(self, politicians):
        orchestrator = QueryOrchestrator("news", load_more_delay=0)

        with pytest.raises(ValueError):
            RefreshCoordinator(orchestrator, PagedSource(politicians))


class TestFetchNextPage:
    def test_pages_are_appended_without_resetting(self, politicians):
        orchestrator = QueryOrchestrator("politician", page_size=1, load_more_delay=0)
        source = PagedSource(politicians, size=2)
        coordinator = RefreshCoordinator(orchestrator, source)

        async def scenario():
            await coordinator.refresh({"party": "UDA"})
            await orchestrator.load_more()
            return await coordinator.fetch_next_page()

        outcome = asyncio.run(scenario())

        assert outcome.count == 2
        assert _ids(orchestrator.store.records) == [1, 2, 3, 4]
        assert orchestrator.paginator.pages_loaded == 2
        assert source.calls[-1] == ({"party": "UDA"}, 2)

    def test_no_fetch_after_last_page(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=10)
        coordinator = RefreshCoordinator(orchestrator, source)
        asyncio.run(coordinator.refresh())

        outcome = asyncio.run(coordinator.fetch_next_page())

        assert outcome.ok is True
        assert outcome.count == 0
        assert len(source.calls) == 1

    def test_walks_every_page(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        coordinator = RefreshCoordinator(orchestrator, PagedSource(politicians, size=2))

        async def scenario():
            await coordinator.refresh()
            while coordinator.remote_has_more:
                await coordinator.fetch_next_page()

        asyncio.run(scenario())

        assert _ids(orchestrator.store.records) == [1, 2, 3, 4, 5]
        assert coordinator.page == 3

    def test_failed_page_keeps_loaded_records(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=2)
        coordinator = RefreshCoordinator(orchestrator, source)
        asyncio.run(coordinator.refresh())

        source.fail_with = UpstreamUnavailable("timeout")
        outcome = asyncio.run(coordinator.fetch_next_page())

        assert outcome.ok is False
        assert _ids(orchestrator.store.records) == [1, 2]
        assert coordinator.page == 1
        assert coordinator.remote_has_more is True

    def test_refresh_during_page_fetch_is_not_swallowed(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=2, delay=0.01)
        coordinator = RefreshCoordinator(orchestrator, source)

        async def scenario():
            await coordinator.refresh()
            paging = asyncio.ensure_future(coordinator.fetch_next_page())
            await asyncio.sleep(0)
            refreshed = await coordinator.refresh({"party": "KANU"})
            return await paging, refreshed

        paged, refreshed = asyncio.run(scenario())

        assert source.calls == [({}, 1), ({}, 2), ({"party": "KANU"}, 1)]
        assert paged.count == 2
        assert refreshed.ok is True
        assert refreshed.count == 2
        assert _ids(orchestrator.store.records) == [1, 2]
        assert coordinator.filters == {"party": "KANU"}
        assert coordinator.page == 1

    def test_concurrent_page_fetches_share_one_request(self, politicians):
        orchestrator = QueryOrchestrator("politician", load_more_delay=0)
        source = PagedSource(politicians, size=2, delay=0.01)
        coordinator = RefreshCoordinator(orchestrator, source)

        async def scenario():
            await coordinator.refresh()
            return await asyncio.gather(coordinator.fetch_next_page(), coordinator.fetch_next_page())

        first, second = asyncio.run(scenario())

        assert first == second
        assert source.calls == [({}, 1), ({}, 2)]
        assert coordinator.page == 2
