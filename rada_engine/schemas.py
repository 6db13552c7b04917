# rada_engine/schemas.py
"""
Validation of upstream payloads into engine records.

The politics and news APIs are loosely typed; every payload is validated here
and converted to a dataclass record. A payload that fails validation is a
MalformedRecord: it is logged and skipped, the rest of the batch survives.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from rada_engine.errors import MalformedRecord
from rada_engine.models import Engagement, Location, NewsArticle, NewsSource, Politician, Record
from rada_engine.sources.common import clean_list, clean_text, parse_utc_datetime
from rada_engine.utils import extract_domain_from_url

logger = logging.getLogger(__name__)


class PoliticianPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: int
    name: str = Field(min_length=1)
    current_position: str = ""
    party_history: List[str] = Field(default_factory=list)
    constituency: str = ""
    wikipedia_summary: str = ""
    key_achievements: List[str] = Field(default_factory=list)
    education: str = ""
    slug: str = ""
    image_url: Optional[str] = None
    party_color: Optional[str] = None
    status: Optional[str] = None
    years_in_office: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_archive_shape(cls, data: Any) -> Any:
        # Archive listings send {title, party, years} instead of the profile fields
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("current_position") and data.get("title"):
            data["current_position"] = data["title"]
        if not data.get("party_history") and data.get("party"):
            data["party_history"] = [data["party"]]
        if data.get("years_in_office") is None and data.get("years") is not None:
            data["years_in_office"] = data["years"]
        return data

    @field_validator("party_history", "key_achievements", mode="before")
    @classmethod
    def _clean_lists(cls, value: Any) -> List[str]:
        return clean_list(value)

    @field_validator("current_position", "constituency", "wikipedia_summary", "education", "slug", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return clean_text(value)

    def to_record(self) -> Politician:
        return Politician(**self.model_dump())


class NewsSourcePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = Field(min_length=1)
    domain: str = ""
    credibility: int = Field(default=0, ge=0, le=100)

    @field_validator("credibility", mode="before")
    @classmethod
    def _overall_credibility(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("overall", 0)
        return value if value is not None else 0


class NewsArticlePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Union[int, str]
    title: str = Field(min_length=1)
    summary: str = ""
    content: str = ""
    url: str = ""
    source: NewsSourcePayload
    author: str = ""
    published_at: datetime = Field(alias="publishedAt")
    category: str = "politics"
    tags: List[str] = Field(default_factory=list)
    politicians: List[str] = Field(default_factory=list)
    location: Dict[str, Optional[str]] = Field(default_factory=dict)
    language: str = "en"
    credibility: int = Field(default=0, ge=0, le=100)
    sentiment: str = "neutral"
    engagement: Dict[str, Any] = Field(default_factory=dict)
    priority: str = "medium"
    is_breaking: bool = Field(default=False, alias="isBreaking")
    is_verified: bool = Field(default=False, alias="isVerified")
    is_opinion: bool = Field(default=False, alias="isOpinion")

    @model_validator(mode="before")
    @classmethod
    def _normalise_source(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        source = data.get("source")
        if isinstance(source, str):
            data["source"] = {"name": source}
        elif source is None and data.get("source_name"):
            data["source"] = {"name": data["source_name"]}
        # Articles without their own rating inherit the source rating
        if data.get("credibility") is None and isinstance(data.get("source"), dict):
            data["credibility"] = data["source"].get("credibility")
        return data

    @field_validator("published_at", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime:
        return parse_utc_datetime(value)

    @field_validator("credibility", mode="before")
    @classmethod
    def _overall_credibility(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("overall", 0)
        return value if value is not None else 0

    @field_validator("tags", "politicians", mode="before")
    @classmethod
    def _clean_lists(cls, value: Any) -> List[str]:
        return clean_list(value)

    @field_validator("sentiment", "category", "language", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return clean_text(value).lower() if isinstance(value, str) else value

    def to_record(self) -> NewsArticle:
        domain = self.source.domain or extract_domain_from_url(self.url)
        engagement = self.engagement or {}
        return NewsArticle(
            id=self.id,
            title=clean_text(self.title),
            summary=clean_text(self.summary),
            content=clean_text(self.content),
            url=self.url,
            source=NewsSource(
                id=self.source.id or domain,
                name=clean_text(self.source.name),
                domain=domain,
                credibility=self.source.credibility,
            ),
            author=self.author,
            published_at=self.published_at,
            category=self.category,
            tags=self.tags,
            politicians=self.politicians,
            location=Location(
                country=self.location.get("country") or "",
                region=self.location.get("region"),
                city=self.location.get("city"),
            ),
            language=self.language,
            credibility=self.credibility,
            sentiment=self.sentiment,  # type: ignore[arg-type]
            engagement=Engagement(
                views=int(engagement.get("views", 0) or 0),
                likes=int(engagement.get("likes", 0) or 0),
                shares=int(engagement.get("shares", 0) or 0),
                comments=int(engagement.get("comments", 0) or 0),
            ),
            priority=self.priority,
            is_breaking=self.is_breaking,
            is_verified=self.is_verified,
            is_opinion=self.is_opinion,
        )


PAYLOAD_MODELS: Dict[str, Type[BaseModel]] = {
    "politician": PoliticianPayload,
    "news": NewsArticlePayload,
}


class PaginationEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    limit: int = 0
    total: int = 0
    pages: Optional[int] = None


def parse_record(payload: Any, record_type: str) -> Record:
    """
    Validate one upstream payload and convert it into a record.

    Args:
        payload: Raw mapping from the data source (records pass through untouched)
        record_type: "politician" or "news"

    Returns:
        Politician or NewsArticle

    Raises:
        MalformedRecord: If required fields are missing or invalid
    """
    if isinstance(payload, (Politician, NewsArticle)):
        return payload

    model = PAYLOAD_MODELS[record_type]
    try:
        return model.model_validate(payload).to_record()
    except (ValidationError, TypeError, ValueError) as e:
        raise MalformedRecord(f"Invalid {record_type} record: {e}", payload=payload) from e


def parse_records(payloads: Optional[Iterable[Any]], record_type: str) -> List[Record]:
    """
    Convert a batch of payloads, skipping the malformed ones.

    Args:
        payloads: Iterable of raw mappings (None is treated as empty)
        record_type: "politician" or "news"

    Returns:
        List of valid records in input order
    """
    records: List[Record] = []
    skipped = 0

    for payload in payloads or []:
        try:
            records.append(parse_record(payload, record_type))
        except MalformedRecord as e:
            skipped += 1
            logger.warning("Skipping malformed record: %s", e)
            continue

    if skipped:
        logger.info("Parsed %d %s records, skipped %d", len(records), record_type, skipped)
    return records


def record_to_payload(record: Record) -> Dict[str, Any]:
    """
    Serialise a record back into a JSON-ready payload that `parse_record` accepts.

    The cached comparison score is not part of the payload.
    """
    payload = asdict(record)
    payload.pop("derived_score", None)
    if isinstance(payload.get("published_at"), datetime):
        payload["published_at"] = payload["published_at"].isoformat()
    return payload


__all__ = [
    "PoliticianPayload",
    "NewsSourcePayload",
    "NewsArticlePayload",
    "PaginationEnvelope",
    "parse_record",
    "parse_records",
    "record_to_payload",
]
