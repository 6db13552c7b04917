"""
File: rada_engine/models.py
Internal record and query structures shared by the engine components.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Literal, Optional, Union


SortDirection = Literal["asc", "desc"]
Sentiment = Literal["positive", "negative", "neutral", "mixed"]

# filter-key -> accepted value; an absent key places no constraint
FilterCriteria = Dict[str, Any]


@dataclass(frozen=True)
class ComparisonMetric:
    """Five independently computed comparison scores for one politician."""

    experience: int
    achievements: int
    education: int  # ordinal tier 1..4
    party_stability: int  # 0..5, higher means fewer party switches
    public_engagement: int  # ordinal tier 1..5

    def as_dict(self) -> Dict[str, int]:
        return {
            "experience": self.experience,
            "achievements": self.achievements,
            "education": self.education,
            "party_stability": self.party_stability,
            "public_engagement": self.public_engagement,
        }


@dataclass
class Politician:
    """A politician profile as delivered by the politics API."""

    record_type: ClassVar[str] = "politician"

    id: int
    name: str
    current_position: str
    party_history: List[str] = field(default_factory=list)
    constituency: str = ""
    wikipedia_summary: str = ""
    key_achievements: List[str] = field(default_factory=list)
    education: str = ""
    slug: str = ""
    image_url: Optional[str] = None
    party_color: Optional[str] = None
    status: Optional[str] = None  # e.g. "active", "former"
    years_in_office: Optional[int] = None

    # Cached ScoringEngine output, only set while the record is being compared
    derived_score: Optional[ComparisonMetric] = field(default=None, compare=False, repr=False)

    @property
    def current_party(self) -> str:
        return self.party_history[-1] if self.party_history else ""

    def searchable_fields(self) -> Dict[str, List[str]]:
        return {
            "name": [self.name],
            "position": [self.current_position],
            "constituency": [self.constituency],
            "party": list(self.party_history),
        }

    def categorical_fields(self) -> Dict[str, Any]:
        return {
            "position": self.current_position,
            "party": list(self.party_history),
            "status": self.status,
            "constituency": self.constituency,
            "achievements": len(self.key_achievements),
        }

    def orderable_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "constituency": self.constituency,
            "party": self.current_party,
            "position": self.current_position,
            "achievements": len(self.key_achievements),
            "experience": self.years_in_office,
        }


@dataclass
class NewsSource:
    id: str
    name: str
    domain: str = ""
    credibility: int = 0


@dataclass
class Location:
    country: str = ""
    region: Optional[str] = None
    city: Optional[str] = None


@dataclass
class Engagement:
    views: int = 0
    likes: int = 0
    shares: int = 0
    comments: int = 0


@dataclass
class NewsArticle:
    """A news article with its upstream credibility and sentiment ratings.

    `credibility` and `sentiment` are supplied by the data source; the engine
    only classifies them.
    """

    record_type: ClassVar[str] = "news"

    # Identity & content
    id: Union[int, str]
    title: str
    summary: str
    source: NewsSource
    published_at: datetime
    content: str = ""
    url: str = ""
    author: str = ""

    # Categorisation
    category: str = "politics"
    tags: List[str] = field(default_factory=list)
    politicians: List[str] = field(default_factory=list)  # names mentioned
    location: Location = field(default_factory=Location)
    language: str = "en"

    # Ratings (set upstream)
    credibility: int = 0  # 0..100
    sentiment: Sentiment = "neutral"
    engagement: Engagement = field(default_factory=Engagement)
    priority: str = "medium"
    is_breaking: bool = False
    is_verified: bool = False
    is_opinion: bool = False

    derived_score: Optional[Any] = field(default=None, compare=False, repr=False)

    def searchable_fields(self) -> Dict[str, List[str]]:
        return {
            "title": [self.title],
            "summary": [self.summary],
            "source": [self.source.name],
            "content": [self.content],
            "tags": list(self.tags),
            "politicians": list(self.politicians),
        }

    def categorical_fields(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "source": self.source.name,
            "politicians": list(self.politicians),
            "published_at": self.published_at,
            "credibility": self.credibility,
            "sentiment": self.sentiment,
            "is_breaking": self.is_breaking,
            "is_verified": self.is_verified,
            "language": self.language,
            "tags": list(self.tags),
            "location": [v for v in (self.location.country, self.location.region, self.location.city) if v],
        }

    def orderable_fields(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "date": self.published_at,
            "credibility": self.credibility,
            "engagement": self.engagement.views + self.engagement.shares,
            "trending": self.engagement.views + self.engagement.shares + self.engagement.likes,
        }


Record = Union[Politician, NewsArticle]


@dataclass(frozen=True)
class SearchQuery:
    """Free-text query. Blank text means "no search"."""

    text: str = ""
    fields: Optional[List[str]] = None
    # Off: the whole text is one literal substring
    match_all_tokens: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class SortSpec:
    key: str
    # None falls back to the key's natural direction
    direction: Optional[SortDirection] = None


@dataclass
class PageWindow:
    """Prefix-growing pagination state; the visible slice is records[0:pages_loaded*page_size]."""

    page_size: int
    pages_loaded: int = 1
    loading: bool = False
    # Bumped on every reset so a superseded load cannot grow the new window
    generation: int = 0

    def __post_init__(self) -> None:
        self.page_size = max(1, int(self.page_size))
        self.pages_loaded = max(1, int(self.pages_loaded))

    @property
    def limit(self) -> int:
        return self.pages_loaded * self.page_size


@dataclass
class RecordPage:
    """One page of records as returned by a data source."""

    records: List[Any]
    total: int = 0
    page: int = 1
    limit: int = 0
    has_more: bool = False


@dataclass
class SyncStatus:
    is_online: bool = False
    last_sync: Optional[datetime] = None
    pending_changes: int = 0
    sync_in_progress: bool = False


__all__ = [
    "SortDirection",
    "Sentiment",
    "FilterCriteria",
    "ComparisonMetric",
    "Politician",
    "NewsSource",
    "Location",
    "Engagement",
    "NewsArticle",
    "Record",
    "SearchQuery",
    "SortSpec",
    "PageWindow",
    "RecordPage",
    "SyncStatus",
]
