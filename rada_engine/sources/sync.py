"""
Offline-first wrapper around a record source.

Online, every fetch goes to the wrapped source and the result is cached.
When the fetch fails, or the device is offline, the cached copy of the same
request is served instead. Only when there is no cached copy does the
failure surface as UpstreamUnavailable.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import timedelta
from typing import Any, List, Optional

from rada_engine.config import CACHE_EXPIRY_HOURS
from rada_engine.core.search import search_records
from rada_engine.errors import UpstreamUnavailable
from rada_engine.models import FilterCriteria, Record, RecordPage, SearchQuery, SyncStatus
from rada_engine.schemas import parse_records, record_to_payload
from rada_engine.sources.api_client import filters_to_params
from rada_engine.sources.base import RecordCache, RecordSource
from rada_engine.utils import now_utc

logger = logging.getLogger(__name__)


class OfflineFirstSource:
    """A RecordSource that falls back to its cache."""

    def __init__(
        self,
        source: RecordSource,
        cache: RecordCache,
        status: Optional[SyncStatus] = None,
        expiry_hours: float = CACHE_EXPIRY_HOURS,
    ):
        self.source = source
        self.record_type = source.record_type
        self.cache = cache
        self.status = status if status is not None else SyncStatus(is_online=True)
        self.max_age = timedelta(hours=expiry_hours)

    # Sync status

    def set_online(self, online: bool) -> None:
        if online != self.status.is_online:
            logger.info("%s source is now %s", self.record_type, "online" if online else "offline")
        self.status.is_online = online

    def get_sync_status(self) -> SyncStatus:
        """Copy of the current status; mutating it does not affect the source."""
        return replace(self.status)

    def is_data_stale(self) -> bool:
        if self.status.last_sync is None:
            return True
        return now_utc() - self.status.last_sync > self.max_age

    # Cache plumbing

    def _cache_key(self, filters: Optional[FilterCriteria], page: int, page_size: Optional[int]) -> str:
        params = json.dumps(filters_to_params(filters), sort_keys=True)
        return f"{self.record_type}:page={page}:size={page_size or 0}:{params}"

    @property
    def _latest_key(self) -> str:
        return f"{self.record_type}:latest"

    def _store(self, key: str, page: RecordPage) -> None:
        entry = {
            "records": [record_to_payload(record) for record in page.records],
            "total": page.total,
            "page": page.page,
            "limit": page.limit,
            "has_more": page.has_more,
        }
        self.cache.put(key, entry)
        self.cache.put(self._latest_key, entry)

    def _load(self, key: str) -> Optional[RecordPage]:
        cached: Any = self.cache.get(key)
        if not isinstance(cached, dict):
            return None
        records = parse_records(cached.get("records"), self.record_type)
        return RecordPage(
            records=records,
            total=int(cached.get("total") or len(records)),
            page=int(cached.get("page") or 1),
            limit=int(cached.get("limit") or 0),
            has_more=bool(cached.get("has_more")),
        )

    # RecordSource

    async def get_records(
        self,
        filters: Optional[FilterCriteria] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> RecordPage:
        """
        Fetch a page, preferring the network and falling back to the cache.

        Args:
            filters: Criteria forwarded to the wrapped source
            page: 1-based page number
            page_size: Records per page

        Returns:
            Fresh or cached RecordPage

        Raises:
            UpstreamUnavailable: If the fetch fails (or we are offline) and
                nothing is cached for the request
        """
        key = self._cache_key(filters, page, page_size)

        if not self.status.is_online:
            cached = self._load(key)
            if cached is None:
                raise UpstreamUnavailable("No cached data available and offline")
            logger.info("Offline, serving %d cached %s records", len(cached.records), self.record_type)
            return cached

        self.status.sync_in_progress = True
        try:
            result = await self.source.get_records(filters, page, page_size)
        except UpstreamUnavailable as e:
            cached = self._load(key)
            if cached is None:
                raise
            logger.warning("Fetch failed, serving cached %s records: %s", self.record_type, e)
            return cached
        finally:
            self.status.sync_in_progress = False

        self._store(key, result)
        self.status.last_sync = now_utc()
        self.status.pending_changes = 0
        return result

    async def search(self, query: str) -> List[Record]:
        """Search upstream; offline or on failure, search the last cached page locally."""
        if self.status.is_online:
            try:
                return await self.source.search(query)
            except UpstreamUnavailable as e:
                logger.warning("Search failed, searching cached %s records: %s", self.record_type, e)

        cached = self._load(self._latest_key)
        if cached is None:
            raise UpstreamUnavailable("No cached data available to search")
        return search_records(cached.records, SearchQuery(text=query))


__all__ = ["OfflineFirstSource"]
