"""
Query pipeline for one record collection: search, filter, sort, paginate.

The derived collection is recomputed in that fixed order whenever the
search query, filter criteria or sort spec change, and every recompute
restarts pagination at the first page. Loading more pages only widens the
visible prefix of the already derived collection.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from rada_engine.config import LOAD_MORE_DELAY_SECONDS, NEWS_PAGE_SIZE, PAGE_SIZE
from rada_engine.core.filters import CategoryRegistry, FilterPipeline, toggle_filter
from rada_engine.core.pagination import Paginator
from rada_engine.core.search import search_records
from rada_engine.core.sorting import resolve_sort_key, sort_records
from rada_engine.core.store import RecordStore
from rada_engine.errors import InvalidFilterKey
from rada_engine.models import FilterCriteria, Record, SearchQuery, SortDirection, SortSpec

logger = logging.getLogger(__name__)


class QueryState(str, Enum):
    IDLE = "idle"
    QUERYING = "querying"
    SETTLED = "settled"


@dataclass(frozen=True)
class QueryResult:
    """Snapshot of the derived view handed to the rendering layer."""

    state: QueryState
    total: int
    visible: List[Record]
    pages_loaded: int
    page_size: int
    has_more: bool


class QueryOrchestrator:
    """Owns the query state of one screen's record collection."""

    def __init__(
        self,
        record_type: str,
        store: Optional[RecordStore] = None,
        categories: Optional[CategoryRegistry] = None,
        page_size: Optional[int] = None,
        load_more_delay: float = LOAD_MORE_DELAY_SECONDS,
        sort: Optional[SortSpec] = None,
    ):
        self.record_type = record_type
        self.store = store if store is not None else RecordStore(record_type)
        self.pipeline = FilterPipeline(record_type, categories)
        if page_size is None:
            page_size = PAGE_SIZE if record_type == "politician" else NEWS_PAGE_SIZE
        self.paginator = Paginator(page_size, delay=load_more_delay)

        self.query = SearchQuery()
        self.criteria: FilterCriteria = {}
        self.sort_spec: Optional[SortSpec] = self._validated_sort(sort) if sort else None
        self.state = QueryState.IDLE
        self._derived: List[Record] = []

    @property
    def categories(self) -> CategoryRegistry:
        return self.pipeline.categories

    # Records

    def set_records(self, records: Iterable[Record]) -> QueryResult:
        """Replace the collection (initial load or refresh) and re-derive."""
        self.store.replace(records)
        return self.requery()

    def append_records(self, records: Iterable[Record]) -> QueryResult:
        """
        Append a fetched page without restarting pagination.

        Records already visible keep their positions. Appended records that
        match are merged in sort order behind them, so an arrival that sorts
        ahead of the visible prefix shows up on the next load_more.

        Returns:
            Result after the derived collection is recomputed
        """
        added = self.store.append(records)
        if added:
            shown = self.visible()
            self._derive()
            if shown:
                shown_ids = {record.id for record in shown}
                self._derived = shown + [record for record in self._derived if record.id not in shown_ids]
                self.store.set_filtered(self._derived)
        return self.result()

    # Query inputs

    def set_query(self, query: Union[str, SearchQuery]) -> QueryResult:
        if isinstance(query, str):
            query = SearchQuery(text=query, fields=self.query.fields, match_all_tokens=self.query.match_all_tokens)
        if query == self.query and self.state is QueryState.SETTLED:
            return self.result()
        self.query = query
        return self.requery()

    def select_filter(self, key: str, value: Any) -> QueryResult:
        """
        Select a filter value; selecting the active value (or "all") clears it.

        Unknown keys are ignored and leave the current view untouched.
        """
        try:
            self.pipeline.validate_key(key)
        except InvalidFilterKey as e:
            logger.warning("Ignoring filter selection: %s", e)
            return self.result()
        self.criteria = toggle_filter(self.criteria, key, value)
        return self.requery()

    def clear_filter(self, key: str) -> QueryResult:
        if key not in self.criteria:
            return self.result()
        self.criteria = {k: v for k, v in self.criteria.items() if k != key}
        return self.requery()

    def clear_filters(self) -> QueryResult:
        self.criteria = {}
        return self.requery()

    def set_criteria(self, criteria: Optional[FilterCriteria]) -> QueryResult:
        self.criteria = self.pipeline.sanitize(criteria)
        return self.requery()

    def _validated_sort(self, spec: SortSpec) -> Optional[SortSpec]:
        try:
            resolve_sort_key(self.record_type, spec.key)
        except InvalidFilterKey as e:
            logger.warning("Ignoring sort: %s", e)
            return None
        return spec

    def set_sort(self, key: Union[str, SortSpec, None], direction: Optional[SortDirection] = None) -> QueryResult:
        if key is None:
            self.sort_spec = None
            return self.requery()
        spec = key if isinstance(key, SortSpec) else SortSpec(key=key, direction=direction)
        validated = self._validated_sort(spec)
        if validated is None:
            return self.result()
        self.sort_spec = validated
        return self.requery()

    # Derivation

    def _derive(self) -> None:
        searched = search_records(self.store.records, self.query)
        filtered = self.pipeline.apply(searched, self.criteria)
        self._derived = sort_records(filtered, self.sort_spec, self.record_type, self.query.text)
        self.store.set_filtered(self._derived)

    def requery(self) -> QueryResult:
        """
        Re-run search, filter and sort, then restart at the first page.

        Safe to call from an external debounce scheduler.
        """
        self.state = QueryState.QUERYING
        self._derive()
        self.paginator.reset()
        self.state = QueryState.SETTLED
        logger.debug(
            "Requeried %s: %d of %d records match", self.record_type, len(self._derived), len(self.store)
        )
        return self.result()

    # Pagination

    def visible(self) -> List[Record]:
        return self.paginator.visible(self._derived)

    def has_more(self) -> bool:
        return self.paginator.has_more(self._derived)

    async def load_more(self) -> bool:
        """
        Reveal one more page of the derived collection.

        Returns:
            True if the visible slice grew
        """
        if self.state is not QueryState.SETTLED or not self.has_more():
            return False
        before = self.paginator.pages_loaded
        await self.paginator.load_more()
        return self.paginator.pages_loaded > before

    @property
    def derived(self) -> List[Record]:
        return list(self._derived)

    def result(self) -> QueryResult:
        return QueryResult(
            state=self.state,
            total=len(self._derived),
            visible=self.visible(),
            pages_loaded=self.paginator.pages_loaded,
            page_size=self.paginator.window.page_size,
            has_more=self.has_more(),
        )
