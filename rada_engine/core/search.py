"""
Case-insensitive substring search over a record's text fields.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence

from rada_engine.models import NewsArticle, Record, SearchQuery
from rada_engine.utils import fold_case

# Relevance weights for news search ordering
RELEVANCE_WEIGHTS = {
    "title": 10,
    "summary": 5,
    "content": 2,
    "tag": 3,
    "politician": 4,
}


def _field_texts(record: Record, fields: Sequence[str] | None) -> Iterable[str]:
    searchable = record.searchable_fields()
    names = fields if fields else list(searchable)
    for name in names:
        # Unknown field names simply contribute nothing
        for text in searchable.get(name, ()):
            if text:
                yield text


def matches(record: Record, query: SearchQuery) -> bool:
    """
    Test whether a record matches a free-text query.

    The whole query text is one literal substring unless the query opts into
    `match_all_tokens`, in which case every whitespace-separated token must
    appear in some field.

    Args:
        record: Politician or NewsArticle
        query: Search text and optional field subset

    Returns:
        True if any searchable field contains the text (always True for blank text)
    """
    if query.is_empty:
        return True

    texts = [fold_case(text) for text in _field_texts(record, query.fields)]
    needle = fold_case(query.text.strip())

    if query.match_all_tokens:
        return all(any(token in text for text in texts) for token in needle.split())
    return any(needle in text for text in texts)


def search_records(records: Iterable[Record], query: SearchQuery) -> List[Record]:
    """Keep the records matching `query`, preserving input order."""
    if query.is_empty:
        return list(records)
    return [record for record in records if matches(record, query)]


def relevance_score(article: NewsArticle, text: str) -> int:
    """
    Score how strongly a news article matches a query.

    Title hits weigh most, then summary, then content; every matching tag and
    every matching mentioned politician adds its own weight.

    Args:
        article: News article to score
        text: Search text

    Returns:
        Non-negative integer relevance score (0 for blank text)
    """
    needle = fold_case(text.strip())
    if not needle:
        return 0

    score = 0
    if needle in fold_case(article.title):
        score += RELEVANCE_WEIGHTS["title"]
    if needle in fold_case(article.summary):
        score += RELEVANCE_WEIGHTS["summary"]
    if needle in fold_case(article.content):
        score += RELEVANCE_WEIGHTS["content"]
    score += RELEVANCE_WEIGHTS["tag"] * sum(1 for tag in article.tags if needle in fold_case(tag))
    score += RELEVANCE_WEIGHTS["politician"] * sum(
        1 for name in article.politicians if needle in fold_case(name)
    )
    return score
