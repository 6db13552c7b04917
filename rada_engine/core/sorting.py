"""
Single-key, stable ordering of record collections.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional

from rada_engine.core.search import relevance_score
from rada_engine.errors import InvalidFilterKey
from rada_engine.models import Record, SortDirection, SortSpec
from rada_engine.utils import collation_key

logger = logging.getLogger(__name__)

SortKind = Literal["lexicographic", "numeric"]


@dataclass(frozen=True)
class SortKey:
    name: str
    kind: SortKind
    natural_direction: SortDirection
    # Relevance ordering needs the active search text
    needs_query: bool = False


def _keys(*keys: SortKey) -> Dict[str, SortKey]:
    return {key.name: key for key in keys}


POLITICIAN_SORT_KEYS: Dict[str, SortKey] = _keys(
    SortKey("name", "lexicographic", "asc"),
    SortKey("constituency", "lexicographic", "asc"),
    SortKey("party", "lexicographic", "asc"),
    SortKey("position", "lexicographic", "asc"),
    SortKey("achievements", "numeric", "desc"),
    SortKey("experience", "numeric", "desc"),
)

NEWS_SORT_KEYS: Dict[str, SortKey] = _keys(
    SortKey("title", "lexicographic", "asc"),
    SortKey("date", "numeric", "desc"),
    SortKey("credibility", "numeric", "desc"),
    SortKey("engagement", "numeric", "desc"),
    SortKey("trending", "numeric", "desc"),
    SortKey("relevance", "numeric", "desc", needs_query=True),
)

SORT_REGISTRIES: Dict[str, Dict[str, SortKey]] = {
    "politician": POLITICIAN_SORT_KEYS,
    "news": NEWS_SORT_KEYS,
}


def resolve_sort_key(record_type: str, name: str) -> SortKey:
    """
    Look up a sort key for a record type.

    Raises:
        InvalidFilterKey: If the key is not defined for the record type
    """
    key = SORT_REGISTRIES.get(record_type, {}).get(name)
    if key is None:
        raise InvalidFilterKey(name, record_type)
    return key


def resolve_direction(spec: SortSpec, key: SortKey) -> SortDirection:
    return spec.direction or key.natural_direction


def _value(record: Record, key: SortKey, query_text: str) -> Any:
    if key.needs_query:
        return relevance_score(record, query_text) if record.record_type == "news" else None
    value = record.orderable_fields().get(key.name)
    if key.kind == "lexicographic":
        return collation_key(value) if value else None
    if isinstance(value, datetime):
        return value.timestamp()
    return value


def _sign(number: float) -> int:
    return (number > 0) - (number < 0)


def make_comparator(record_type: str, spec: SortSpec, query_text: str = "") -> Callable[[Record, Record], int]:
    """
    Build a three-way comparator for a sort spec.

    Missing values always sort after present ones, whatever the direction.

    Raises:
        InvalidFilterKey: If the spec names an unknown key
    """
    key = resolve_sort_key(record_type, spec.key)
    descending = resolve_direction(spec, key) == "desc"

    def compare_records(a: Record, b: Record) -> int:
        va, vb = _value(a, key, query_text), _value(b, key, query_text)
        if va is None or vb is None:
            return _sign((va is None) - (vb is None))
        if va == vb:
            return 0
        result = -1 if va < vb else 1
        return -result if descending else result

    return compare_records


def compare(a: Record, b: Record, spec: SortSpec, query_text: str = "") -> int:
    """
    Compare two records of the same type under a sort spec.

    Args:
        a: First record
        b: Second record
        spec: Sort key and direction
        query_text: Search text, used only by relevance ordering

    Returns:
        -1, 0 or 1; 0 for an unknown key
    """
    try:
        comparator = make_comparator(a.record_type, spec, query_text)
    except InvalidFilterKey as e:
        logger.warning("Ignoring sort: %s", e)
        return 0
    return comparator(a, b)


def sort_records(
    records: Iterable[Record],
    spec: Optional[SortSpec],
    record_type: str,
    query_text: str = "",
) -> List[Record]:
    """
    Stable-sort records by a single key.

    Records with equal keys keep their input order, so repeated loads
    paginate identically.

    Args:
        records: Input collection
        spec: Sort spec, or None to keep input order
        record_type: "politician" or "news"
        query_text: Search text for relevance ordering

    Returns:
        New sorted list (input order for an unknown key)
    """
    items = list(records)
    if spec is None:
        return items
    try:
        comparator = make_comparator(record_type, spec, query_text)
    except InvalidFilterKey as e:
        logger.warning("Ignoring sort: %s", e)
        return items
    return sorted(items, key=cmp_to_key(comparator))
