"""
In-memory holder for one entity type's full and filtered collections.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from rada_engine.models import Record

logger = logging.getLogger(__name__)


class RecordStore:
    """Full and derived record collections for a single record type.

    The store never mutates a record; refresh replaces the whole collection,
    paginated fetches append to it. Ids are unique within a store.
    """

    def __init__(self, record_type: str, records: Optional[Iterable[Record]] = None):
        self.record_type = record_type
        self._records: List[Record] = []
        self._filtered: List[Record] = []
        if records is not None:
            self.replace(records)

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    @property
    def filtered(self) -> List[Record]:
        return list(self._filtered)

    def __len__(self) -> int:
        return len(self._records)

    def _accepts(self, record: Record) -> bool:
        if getattr(record, "record_type", None) != self.record_type:
            logger.warning(
                "Dropping %s record %r from %s store",
                getattr(record, "record_type", type(record).__name__),
                getattr(record, "id", None),
                self.record_type,
            )
            return False
        return True

    def replace(self, records: Iterable[Record]) -> int:
        """
        Replace the collection wholesale (refresh).

        Args:
            records: New records; later duplicates of an id are dropped

        Returns:
            Number of records held after the replace
        """
        unique: List[Record] = []
        seen: set = set()
        for record in records:
            if not self._accepts(record) or record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)

        self._records = unique
        self._filtered = list(unique)
        return len(unique)

    def append(self, records: Iterable[Record]) -> int:
        """
        Append a fetched page, skipping ids already held.

        Returns:
            Number of records actually added
        """
        seen = {record.id for record in self._records}
        added = 0
        for record in records:
            if not self._accepts(record) or record.id in seen:
                continue
            seen.add(record.id)
            self._records.append(record)
            added += 1
        return added

    def set_filtered(self, records: Sequence[Record]) -> None:
        self._filtered = list(records)

    def get(self, record_id) -> Optional[Record]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def clear(self) -> None:
        self._records = []
        self._filtered = []
