"""
File: rada_engine/services/refresh.py
Serialises fetches from a record source into a query orchestrator.

Only one fetch writes to the store at a time; fetches run in the order they
were requested. A refresh joins an in-flight refresh for the same filters and
a page fetch joins an in-flight page fetch. Anything else waits its turn, and
every response that arrives is applied.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from rada_engine.core.orchestrator import QueryOrchestrator
from rada_engine.errors import UpstreamUnavailable
from rada_engine.models import FilterCriteria
from rada_engine.sources.base import RecordSource

logger = logging.getLogger(__name__)

UNAVAILABLE_NOTICE = "Unable to load the latest data. Showing previously loaded results."


@dataclass(frozen=True)
class RefreshOutcome:
    """What a refresh or page fetch did to the store."""

    ok: bool
    count: int = 0  # records received (on failure, records still held)
    notice: str = ""  # user-visible message, empty on success
    stale: bool = False


def _pending(future: Optional[asyncio.Future]) -> bool:
    return future is not None and not future.done()


class RefreshCoordinator:
    """Feeds one orchestrator from one record source."""

    def __init__(self, orchestrator: QueryOrchestrator, source: RecordSource, page_size: Optional[int] = None):
        if source.record_type != orchestrator.record_type:
            raise ValueError(
                f"Source delivers {source.record_type} records, orchestrator holds {orchestrator.record_type}"
            )
        self.orchestrator = orchestrator
        self.source = source
        self.page_size = page_size
        self.filters: FilterCriteria = {}
        self.page = 0
        self.remote_has_more = False
        self._refreshing: Optional[Tuple[FilterCriteria, asyncio.Future]] = None
        self._paging: Optional[asyncio.Future] = None
        self._last: Optional[asyncio.Future] = None

    @property
    def in_flight(self) -> bool:
        return _pending(self._last)

    def _enqueue(self, work: Callable[[], Awaitable[RefreshOutcome]]) -> asyncio.Future:
        previous = self._last

        async def run_after_previous() -> RefreshOutcome:
            if _pending(previous):
                await asyncio.wait([previous])
            return await work()

        self._last = asyncio.ensure_future(run_after_previous())
        return self._last

    def _is_stale(self) -> bool:
        check = getattr(self.source, "is_data_stale", None)
        return bool(check()) if callable(check) else False

    def _failure(self) -> RefreshOutcome:
        return RefreshOutcome(ok=False, count=len(self.orchestrator.store), notice=UNAVAILABLE_NOTICE, stale=True)

    async def refresh(self, filters: Optional[FilterCriteria] = None) -> RefreshOutcome:
        """
        Reload the first page and replace the store with it.

        A refresh for the filters of an in-flight refresh shares its outcome.
        A refresh for other filters, or one requested during a page fetch,
        runs once the earlier fetches have been applied.

        Args:
            filters: Criteria forwarded to the source

        Returns:
            RefreshOutcome; on failure the previous collection is kept and the
            outcome carries a notice
        """
        filters = dict(filters or {})
        if self._refreshing is not None:
            pending_filters, future = self._refreshing
            if _pending(future) and pending_filters == filters:
                logger.debug("Refresh of %s already in flight, joining it", self.orchestrator.record_type)
                # A cancelled caller must not cancel the shared fetch
                return await asyncio.shield(future)

        future = self._enqueue(lambda: self._refresh(filters))
        self._refreshing = (filters, future)
        return await asyncio.shield(future)

    async def fetch_next_page(self) -> RefreshOutcome:
        """
        Fetch the next remote page and append it without resetting pagination.

        Returns:
            RefreshOutcome with the number of records received (0 when the
            source has no more pages)
        """
        if _pending(self._paging):
            logger.debug("Page fetch of %s already in flight, joining it", self.orchestrator.record_type)
            return await asyncio.shield(self._paging)

        self._paging = self._enqueue(self._next_page)
        return await asyncio.shield(self._paging)

    async def _refresh(self, filters: FilterCriteria) -> RefreshOutcome:
        record_type = self.orchestrator.record_type
        try:
            page = await self.source.get_records(filters, 1, self.page_size)
        except UpstreamUnavailable as e:
            logger.warning("Refresh of %s records failed: %s", record_type, e)
            return self._failure()
        except Exception as e:
            logger.error(f"Unexpected error refreshing {record_type} records: {e}")
            return self._failure()

        self.filters = filters
        self.page = page.page
        self.remote_has_more = page.has_more
        self.orchestrator.set_records(page.records)
        logger.info("Refreshed %d %s records", len(page.records), record_type)
        return RefreshOutcome(ok=True, count=len(page.records), stale=self._is_stale())

    async def _next_page(self) -> RefreshOutcome:
        record_type = self.orchestrator.record_type
        if not self.remote_has_more:
            return RefreshOutcome(ok=True, count=0, stale=self._is_stale())

        try:
            page = await self.source.get_records(self.filters, self.page + 1, self.page_size)
        except UpstreamUnavailable as e:
            logger.warning("Fetching page %d of %s records failed: %s", self.page + 1, record_type, e)
            return self._failure()
        except Exception as e:
            logger.error(f"Unexpected error fetching {record_type} page {self.page + 1}: {e}")
            return self._failure()

        self.page = page.page if page.page > self.page else self.page + 1
        self.remote_has_more = page.has_more
        self.orchestrator.append_records(page.records)
        return RefreshOutcome(ok=True, count=len(page.records), stale=self._is_stale())


__all__ = ["UNAVAILABLE_NOTICE", "RefreshOutcome", "RefreshCoordinator"]
