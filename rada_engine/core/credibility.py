"""
Lookup-table classification of upstream credibility scores and sentiment.

Both values arrive with the article; nothing here computes them.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List

from rada_engine.config import (
    CREDIBILITY_COLORS,
    HIGH_CREDIBILITY_THRESHOLD,
    MEDIUM_CREDIBILITY_THRESHOLD,
    SENTIMENT_COLORS,
    SENTIMENT_ICONS,
    UNKNOWN_SENTIMENT_COLOR,
    UNKNOWN_SENTIMENT_ICON,
)
from rada_engine.models import NewsArticle

SENTIMENTS = ("positive", "negative", "neutral", "mixed")


@dataclass(frozen=True)
class CredibilityTier:
    level: str  # "high" | "medium" | "low"
    label: str
    color: str


@dataclass(frozen=True)
class SentimentStyle:
    sentiment: str
    icon: str
    color: str


def credibility_level(score: float) -> str:
    if score >= HIGH_CREDIBILITY_THRESHOLD:
        return "high"
    if score >= MEDIUM_CREDIBILITY_THRESHOLD:
        return "medium"
    return "low"


def classify(score: float) -> CredibilityTier:
    """
    Map a 0-100 credibility score to its tier.

    Args:
        score: Upstream credibility rating

    Returns:
        CredibilityTier with level, display label and colour
    """
    level = credibility_level(score)
    return CredibilityTier(level=level, label=level.capitalize(), color=CREDIBILITY_COLORS[level])


def sentiment_style(value: str) -> SentimentStyle:
    """
    Map a sentiment value to its icon and colour.

    Args:
        value: "positive", "negative", "neutral" or "mixed" (any case)

    Returns:
        SentimentStyle; unknown values get a help icon in neutral grey
    """
    key = (value or "").strip().lower()
    return SentimentStyle(
        sentiment=key,
        icon=SENTIMENT_ICONS.get(key, UNKNOWN_SENTIMENT_ICON),
        color=SENTIMENT_COLORS.get(key, UNKNOWN_SENTIMENT_COLOR),
    )


def summarize_credibility(articles: Iterable[NewsArticle]) -> Dict[str, object]:
    """
    Summarise credibility and sentiment over a set of articles.

    Args:
        articles: News articles

    Returns:
        Dictionary with article count, average credibility, tier counts and
        sentiment distribution
    """
    items: List[NewsArticle] = list(articles)
    if not items:
        return {
            "n_articles": 0,
            "average_credibility": 0.0,
            "tiers": {"high": 0, "medium": 0, "low": 0},
            "sentiments": {sentiment: 0 for sentiment in SENTIMENTS},
        }

    tiers = Counter(credibility_level(article.credibility) for article in items)
    sentiments = Counter(article.sentiment for article in items)
    average = sum(article.credibility for article in items) / len(items)

    return {
        "n_articles": len(items),
        "average_credibility": round(average, 2),
        "tiers": {level: tiers.get(level, 0) for level in ("high", "medium", "low")},
        "sentiments": {
            **{sentiment: 0 for sentiment in SENTIMENTS},
            **dict(sentiments),
        },
    }
