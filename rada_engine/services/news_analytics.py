"""
File: rada_engine/services/news_analytics.py
Aggregate views over a news collection: breaking and trending lists,
distributions, and top sources and politicians.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List

from rada_engine.core.credibility import SENTIMENTS, summarize_credibility
from rada_engine.core.sorting import sort_records
from rada_engine.models import NewsArticle, SortSpec


def get_breaking_news(articles: Iterable[NewsArticle], limit: int = 10) -> List[NewsArticle]:
    """
    Get breaking articles, newest first.

    Args:
        articles: News articles
        limit: Maximum number of articles to return

    Returns:
        Up to `limit` breaking articles
    """
    breaking = [article for article in articles if article.is_breaking]
    return sort_records(breaking, SortSpec("date"), "news")[:limit]


def get_trending_articles(articles: Iterable[NewsArticle], limit: int = 10) -> List[NewsArticle]:
    """Most viewed, shared and liked articles first."""
    return sort_records(articles, SortSpec("trending"), "news")[:limit]


def category_distribution(articles: Iterable[NewsArticle]) -> Dict[str, int]:
    return dict(Counter(article.category for article in articles))


def sentiment_distribution(articles: Iterable[NewsArticle]) -> Dict[str, int]:
    counts = Counter(article.sentiment for article in articles)
    return {**{sentiment: 0 for sentiment in SENTIMENTS}, **dict(counts)}


def top_sources(articles: Iterable[NewsArticle], limit: int = 10) -> List[Dict[str, Any]]:
    """
    Rank sources by article count.

    Args:
        articles: News articles
        limit: Maximum number of sources

    Returns:
        List of {"name", "articles", "credibility"} dicts, credibility being
        the mean article credibility for that source
    """
    counts: Counter = Counter()
    credibility: Dict[str, int] = {}
    for article in articles:
        name = article.source.name
        counts[name] += 1
        credibility[name] = credibility.get(name, 0) + article.credibility

    ranked = counts.most_common(limit)
    return [
        {"name": name, "articles": n, "credibility": round(credibility[name] / n, 2)}
        for name, n in ranked
    ]


def top_politicians(articles: Iterable[NewsArticle], limit: int = 10) -> List[Dict[str, Any]]:
    mentions: Counter = Counter()
    for article in articles:
        mentions.update(article.politicians)
    return [{"name": name, "mentions": n} for name, n in mentions.most_common(limit)]


def engagement_stats(articles: Iterable[NewsArticle], top: int = 5) -> Dict[str, Any]:
    """
    Total views and shares, the share-per-view rate, and the best performers.

    Args:
        articles: News articles
        top: Number of top performing articles to include

    Returns:
        Dictionary with total_views, total_shares, average_engagement and
        top_performing (by views + shares)
    """
    items = list(articles)
    total_views = sum(article.engagement.views for article in items)
    total_shares = sum(article.engagement.shares for article in items)
    return {
        "total_views": total_views,
        "total_shares": total_shares,
        "average_engagement": round(total_shares / total_views, 4) if total_views else 0.0,
        "top_performing": sort_records(items, SortSpec("engagement"), "news")[:top],
    }


def build_news_stats(articles: Iterable[NewsArticle]) -> Dict[str, Any]:
    """
    Build the full statistics block for a news collection.

    Args:
        articles: News articles

    Returns:
        Dictionary combining credibility summary, distributions, top sources,
        top politicians, breaking count and engagement stats
    """
    items = list(articles)
    credibility = summarize_credibility(items)
    return {
        "total_articles": len(items),
        "total_sources": len({article.source.name for article in items}),
        "average_credibility": credibility["average_credibility"],
        "credibility_tiers": credibility["tiers"],
        "category_distribution": category_distribution(items),
        "sentiment_distribution": sentiment_distribution(items),
        "top_sources": top_sources(items),
        "top_politicians": top_politicians(items),
        "breaking_count": sum(1 for article in items if article.is_breaking),
        "engagement": engagement_stats(items),
    }


__all__ = [
    "get_breaking_news",
    "get_trending_articles",
    "category_distribution",
    "sentiment_distribution",
    "top_sources",
    "top_politicians",
    "engagement_stats",
    "build_news_stats",
]
