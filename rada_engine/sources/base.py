"""
Collaborator interfaces the engine is handed at construction time.
"""
from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable

from rada_engine.models import FilterCriteria, Record, RecordPage


@runtime_checkable
class RecordSource(Protocol):
    """Anything that can deliver pages of records of one type."""

    record_type: str

    async def get_records(
        self,
        filters: Optional[FilterCriteria] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> RecordPage:
        """
        Fetch one page of records.

        Raises:
            UpstreamUnavailable: If the source cannot be reached
        """
        ...

    async def search(self, query: str) -> List[Record]:
        ...


@runtime_checkable
class RecordCache(Protocol):
    """Key-value store for serialisable payloads."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def put(self, key: str, value: Any) -> None:
        ...


__all__ = ["RecordSource", "RecordCache"]
