"""
Conjunctive predicate filters over record collections.

Each record type has a closed set of filter keys. Every key maps to one
predicate kind:

- exact: scalar categorical field equals the selected value
- membership: any entry of a (multi-valued) field contains the value
- threshold: numeric field is at least the value
- custom: arbitrary test, e.g. role categories matched by position keywords

Criteria are applied in registry order and AND-ed across keys. The "all"
value clears a dimension and never reaches a predicate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from rada_engine.config import DEFAULT_NEWS_CATEGORIES, DEFAULT_POLITICIAN_CATEGORIES
from rada_engine.errors import InvalidFilterKey
from rada_engine.models import FilterCriteria, Record
from rada_engine.sources.common import parse_utc_datetime
from rada_engine.utils import fold_case

logger = logging.getLogger(__name__)

ALL = "all"

PredicateKind = Literal["exact", "membership", "threshold", "custom"]
Predicate = Callable[[Record, Any], bool]

# Role categories of the political archive, matched against the position title
POLITICIAN_CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "senate": ("senate", "senator"),
    "parliament": ("member", "mp"),
    "governors": ("governor",),
    "cabinet": ("minister", "president"),
}


class CategoryRegistry:
    """Mutable, caller-owned list of selectable categories.

    Categories can be created at runtime. For politicians each category maps
    to the position keywords that place a record in it; a category created
    without keywords matches positions containing its own name.
    """

    def __init__(self, categories: Optional[Dict[str, Sequence[str]]] = None):
        self._categories: Dict[str, Tuple[str, ...]] = {}
        for name, keywords in (categories or {}).items():
            self.register(name, keywords)

    @classmethod
    def for_politicians(cls) -> "CategoryRegistry":
        return cls({name: POLITICIAN_CATEGORY_KEYWORDS.get(name, ()) for name in DEFAULT_POLITICIAN_CATEGORIES})

    @classmethod
    def for_news(cls) -> "CategoryRegistry":
        return cls({name: () for name in DEFAULT_NEWS_CATEGORIES})

    def register(self, name: str, keywords: Optional[Sequence[str]] = None) -> bool:
        """Add a category. Returns False if it already existed."""
        key = fold_case(name).strip()
        if not key or key == ALL:
            return False
        if key in self._categories:
            return False
        self._categories[key] = tuple(fold_case(k) for k in (keywords or ()) if k)
        logger.info("Registered category %r", key)
        return True

    def keywords(self, name: str) -> Tuple[str, ...]:
        key = fold_case(name)
        return self._categories.get(key) or (key,)

    def names(self) -> List[str]:
        return list(self._categories)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and fold_case(name) in self._categories

    def __len__(self) -> int:
        return len(self._categories)


@dataclass(frozen=True)
class FilterDefinition:
    key: str
    kind: PredicateKind
    field: str
    test: Predicate


def _field(record: Record, name: str) -> Any:
    return record.categorical_fields().get(name)


def exact(key: str, field: Optional[str] = None) -> FilterDefinition:
    field = field or key

    def test(record: Record, value: Any) -> bool:
        return _field(record, field) == value

    return FilterDefinition(key, "exact", field, test)


def membership(key: str, field: Optional[str] = None) -> FilterDefinition:
    field = field or key

    def test(record: Record, value: Any) -> bool:
        current = _field(record, field)
        if current is None:
            return False
        entries = current if isinstance(current, (list, tuple)) else [current]
        needle = fold_case(str(value))
        return any(needle in fold_case(str(entry)) for entry in entries)

    return FilterDefinition(key, "membership", field, test)


def any_of(key: str, field: Optional[str] = None) -> FilterDefinition:
    field = field or key

    def test(record: Record, value: Any) -> bool:
        wanted = value if isinstance(value, (list, tuple, set)) else [value]
        if not wanted:
            return True
        return any(item in (_field(record, field) or []) for item in wanted)

    return FilterDefinition(key, "membership", field, test)


def threshold(key: str, field: Optional[str] = None) -> FilterDefinition:
    field = field or key

    def test(record: Record, value: Any) -> bool:
        current = _field(record, field)
        return current is not None and current >= value

    return FilterDefinition(key, "threshold", field, test)


def date_bound(key: str, field: str, upper: bool) -> FilterDefinition:
    def test(record: Record, value: Any) -> bool:
        bound = parse_utc_datetime(value)
        current = _field(record, field)
        if current is None:
            return False
        return current <= bound if upper else current >= bound

    return FilterDefinition(key, "threshold", field, test)


def custom(key: str, field: str, test: Predicate) -> FilterDefinition:
    return FilterDefinition(key, "custom", field, test)


def _registry(*definitions: FilterDefinition) -> Dict[str, FilterDefinition]:
    return {definition.key: definition for definition in definitions}


POLITICIAN_FILTERS: Dict[str, FilterDefinition] = _registry(
    # "category" is bound per pipeline, since it needs the category registry
    membership("party"),
    exact("status"),
    membership("constituency"),
    membership("position"),
    threshold("min_achievements", "achievements"),
)

NEWS_FILTERS: Dict[str, FilterDefinition] = _registry(
    exact("category"),
    exact("source"),
    membership("politician", "politicians"),
    date_bound("date_from", "published_at", upper=False),
    date_bound("date_to", "published_at", upper=True),
    threshold("credibility_min", "credibility"),
    exact("sentiment"),
    exact("is_breaking"),
    exact("is_verified"),
    exact("language"),
    any_of("tags"),
    membership("location"),
)

FILTER_REGISTRIES: Dict[str, Dict[str, FilterDefinition]] = {
    "politician": POLITICIAN_FILTERS,
    "news": NEWS_FILTERS,
}


def is_cleared(value: Any) -> bool:
    """True for values that place no constraint: None, blank strings and the "all" sentinel."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or fold_case(value) == ALL
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def toggle_filter(criteria: FilterCriteria, key: str, value: Any) -> FilterCriteria:
    """
    Select a filter value with single-select toggle semantics.

    Selecting the value already active for `key`, or selecting "all", clears
    the dimension; any other value replaces the current one.

    Args:
        criteria: Current criteria (left untouched)
        key: Filter dimension
        value: Selected value

    Returns:
        New criteria mapping
    """
    updated = dict(criteria)
    if is_cleared(value) or updated.get(key) == value:
        updated.pop(key, None)
    else:
        updated[key] = value
    return updated


class FilterPipeline:
    """Applies a record type's filters, in registry order, to a collection."""

    def __init__(self, record_type: str, categories: Optional[CategoryRegistry] = None):
        if record_type not in FILTER_REGISTRIES:
            raise ValueError(f"Unsupported record type: {record_type}")
        self.record_type = record_type
        if categories is None:
            categories = (
                CategoryRegistry.for_politicians() if record_type == "politician" else CategoryRegistry.for_news()
            )
        self.categories = categories

        definitions = dict(FILTER_REGISTRIES[record_type])
        if record_type == "politician":
            definitions = {"category": custom("category", "position", self._in_category), **definitions}
        self.definitions: Dict[str, FilterDefinition] = definitions

    def _in_category(self, record: Record, value: Any) -> bool:
        position = fold_case(_field(record, "position"))
        return any(keyword in position for keyword in self.categories.keywords(str(value)))

    @property
    def keys(self) -> List[str]:
        return list(self.definitions)

    def validate_key(self, key: str) -> FilterDefinition:
        """
        Look up a filter key.

        Raises:
            InvalidFilterKey: If the key is not defined for this record type
        """
        definition = self.definitions.get(key)
        if definition is None:
            raise InvalidFilterKey(key, self.record_type)
        return definition

    def sanitize(self, criteria: Optional[FilterCriteria]) -> FilterCriteria:
        """
        Drop unknown keys and cleared values from criteria.

        Args:
            criteria: Raw criteria mapping (None is treated as empty)

        Returns:
            Criteria holding only active, known keys
        """
        clean: FilterCriteria = {}
        for key, value in (criteria or {}).items():
            try:
                self.validate_key(key)
            except InvalidFilterKey as e:
                logger.warning("Ignoring filter: %s", e)
                continue
            if is_cleared(value):
                continue
            clean[key] = value
        return clean

    def apply(self, records: Iterable[Record], criteria: Optional[FilterCriteria]) -> List[Record]:
        """
        Keep the records that satisfy every active criterion.

        Args:
            records: Input collection
            criteria: Filter-key -> selected value

        Returns:
            Filtered records in input order
        """
        active = self.sanitize(criteria)
        result = list(records)

        for key, definition in self.definitions.items():
            if key not in active:
                continue
            value = active[key]
            try:
                result = [record for record in result if definition.test(record, value)]
            except (TypeError, ValueError) as e:
                # Unusable value for this predicate: treat the key as absent
                logger.warning("Ignoring filter %s=%r: %s", key, value, e)
                continue

        return result


def apply_filters(
    records: Iterable[Record],
    criteria: Optional[FilterCriteria],
    record_type: str,
    categories: Optional[CategoryRegistry] = None,
) -> List[Record]:
    """Convenience wrapper building a one-off FilterPipeline."""
    return FilterPipeline(record_type, categories).apply(records, criteria)
