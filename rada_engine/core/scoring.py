"""
Side-by-side comparison metrics for politicians.

Each metric is computed per record with no cross-record normalisation; the
only shared scale is the fixed bar maximum used when rendering a comparison.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from rada_engine.config import EXPERIENCE_BASELINE_YEAR, MAX_COMPARISON, METRIC_BAR_MAXIMUMS
from rada_engine.errors import ComparisonOverflow
from rada_engine.models import ComparisonMetric, Politician
from rada_engine.utils import clamp_to_unit_range, now_utc

logger = logging.getLogger(__name__)

# Scanned top to bottom; the first tier whose keyword appears wins.
# Education keywords are matched case-sensitively ("MA" is a degree, "ma" is not).
EDUCATION_TIERS: List[Tuple[int, Tuple[str, ...]]] = [
    (4, ("PhD", "Doctorate")),
    (3, ("MSc", "MA", "LLM")),
    (2, ("BSc", "BA", "LLB")),
]
DEFAULT_EDUCATION_TIER = 1

# Matched against the lower-cased position title
ENGAGEMENT_TIERS: List[Tuple[int, Tuple[str, ...]]] = [
    (5, ("president",)),
    (4, ("prime minister",)),
    (3, ("governor",)),
    (2, ("mp", "senator")),
]
DEFAULT_ENGAGEMENT_TIER = 1

PARTY_STABILITY_CEILING = 5


def _first_tier(text: str, tiers: Sequence[Tuple[int, Tuple[str, ...]]], default: int) -> int:
    for tier, keywords in tiers:
        if any(keyword in text for keyword in keywords):
            return tier
    return default


def education_tier(education: str) -> int:
    return _first_tier(education or "", EDUCATION_TIERS, DEFAULT_EDUCATION_TIER)


def engagement_tier(position: str) -> int:
    return _first_tier((position or "").lower(), ENGAGEMENT_TIERS, DEFAULT_ENGAGEMENT_TIER)


def party_stability(party_history: Sequence[str]) -> int:
    return max(0, PARTY_STABILITY_CEILING - len(party_history))


def score(politician: Politician, current_year: Optional[int] = None) -> ComparisonMetric:
    """
    Compute the five comparison metrics for one politician.

    Args:
        politician: Record to score
        current_year: Year experience is measured to (defaults to this year)

    Returns:
        ComparisonMetric for the record
    """
    year = current_year if current_year is not None else now_utc().year
    return ComparisonMetric(
        experience=max(0, year - EXPERIENCE_BASELINE_YEAR),
        achievements=len(politician.key_achievements),
        education=education_tier(politician.education),
        party_stability=party_stability(politician.party_history),
        public_engagement=engagement_tier(politician.current_position),
    )


class SelectionResult(str, Enum):
    ADDED = "added"
    ALREADY_SELECTED = "already_selected"
    MAXIMUM_REACHED = "maximum_reached"
    REMOVED = "removed"
    NOT_SELECTED = "not_selected"


SELECTION_MESSAGES: Dict[SelectionResult, str] = {
    SelectionResult.ALREADY_SELECTED: "This politician is already in the comparison.",
    SelectionResult.NOT_SELECTED: "This politician is not in the comparison.",
}


class ComparisonSet:
    """Up to `limit` politicians compared side by side.

    Every membership change recomputes `derived_score` for the members and
    clears it on records leaving the set.
    """

    def __init__(self, limit: int = MAX_COMPARISON, current_year: Optional[int] = None):
        self.limit = limit
        self.current_year = current_year
        self._members: List[Politician] = []
        self.last_message: str = ""

    @property
    def members(self) -> List[Politician]:
        return list(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, politician: object) -> bool:
        record_id = getattr(politician, "id", politician)
        return any(member.id == record_id for member in self._members)

    @property
    def is_full(self) -> bool:
        return len(self._members) >= self.limit

    @property
    def is_comparable(self) -> bool:
        return len(self._members) >= 2

    def _check_capacity(self) -> None:
        if self.is_full:
            raise ComparisonOverflow(self.limit)

    def _rescore(self) -> None:
        for member in self._members:
            member.derived_score = score(member, self.current_year)

    def add(self, politician: Politician) -> SelectionResult:
        """
        Add a politician to the comparison.

        Returns:
            ADDED, ALREADY_SELECTED, or MAXIMUM_REACHED (selection unchanged)
        """
        if politician in self:
            self.last_message = SELECTION_MESSAGES[SelectionResult.ALREADY_SELECTED]
            return SelectionResult.ALREADY_SELECTED
        try:
            self._check_capacity()
        except ComparisonOverflow as e:
            logger.info("Comparison add rejected for %s: %s", politician.id, e)
            self.last_message = str(e)
            return SelectionResult.MAXIMUM_REACHED

        self._members.append(politician)
        self._rescore()
        self.last_message = ""
        return SelectionResult.ADDED

    def remove(self, politician_id) -> SelectionResult:
        for index, member in enumerate(self._members):
            if member.id == politician_id:
                del self._members[index]
                member.derived_score = None
                self._rescore()
                self.last_message = ""
                return SelectionResult.REMOVED
        self.last_message = SELECTION_MESSAGES[SelectionResult.NOT_SELECTED]
        return SelectionResult.NOT_SELECTED

    def toggle(self, politician: Politician) -> SelectionResult:
        if politician in self:
            return self.remove(politician.id)
        return self.add(politician)

    def clear(self) -> None:
        for member in self._members:
            member.derived_score = None
        self._members = []

    def metrics(self) -> Dict[object, ComparisonMetric]:
        """Metrics keyed by record id, in selection order."""
        return {
            member.id: member.derived_score or score(member, self.current_year)
            for member in self._members
        }

    def metric_bars(self) -> Dict[str, Dict[object, float]]:
        """
        Bar fill fractions for rendering, per metric then per record id.

        Every record shares the same fixed maximum for a metric, so bars are
        comparable across the row. Fractions are clamped to [0, 1].
        """
        bars: Dict[str, Dict[object, float]] = {name: {} for name in METRIC_BAR_MAXIMUMS}
        for record_id, metric in self.metrics().items():
            for name, value in metric.as_dict().items():
                maximum = METRIC_BAR_MAXIMUMS[name]
                bars[name][record_id] = clamp_to_unit_range(value / maximum) if maximum else 0.0
        return bars

    def leaders(self) -> Dict[str, List[object]]:
        """Ids holding the highest value of each metric (ties share the lead)."""
        leaders: Dict[str, List[object]] = {}
        metrics = self.metrics()
        if not metrics:
            return leaders
        for name in METRIC_BAR_MAXIMUMS:
            best = max(metric.as_dict()[name] for metric in metrics.values())
            leaders[name] = [rid for rid, metric in metrics.items() if metric.as_dict()[name] == best]
        return leaders
