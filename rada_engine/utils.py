"""
Shared utility functions for the record engine.
"""
from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timezone
from urllib.parse import urlparse

import tldextract

# Offline extractor: relies on the bundled public suffix snapshot only
_extract = tldextract.TLDExtract(suffix_list_urls=())


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def normalize_text(text: str | None) -> str:
    """
    Normalize whitespace in text content.

    Args:
        text: Input text string (can be None)

    Returns:
        Normalized text with single spaces and trimmed edges
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def fold_case(text: str | None) -> str:
    """Lower-case text for case-insensitive containment tests."""
    return (text or "").casefold()


def collation_key(text: str | None) -> tuple[str, str]:
    """
    Build a locale-insensitive ordering key for a string.

    Accents are stripped and case folded for the primary key, so "Álvaro"
    sorts beside "Alvaro"; the raw text breaks remaining ties.

    Args:
        text: String to order (None is treated as empty)

    Returns:
        Tuple usable as a sort key
    """
    raw = text or ""
    decomposed = unicodedata.normalize("NFKD", raw)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), raw


def extract_domain_from_url(url: str) -> str:
    """
    Extract the main domain from a URL.

    Args:
        url: Full URL string

    Returns:
        Normalized domain name in lowercase, empty string for an empty URL
    """
    if not url:
        return ""
    extracted = _extract(url)
    if extracted.domain:
        domain = f"{extracted.domain}.{extracted.suffix}" if extracted.suffix else extracted.domain
        return domain.lower()
    return urlparse(url).netloc.lower()


def clamp_to_unit_range(value: float) -> float:
    """
    Clamp a float value to the range [0.0, 1.0].

    Args:
        value: Input float value

    Returns:
        Value clamped to [0.0, 1.0] range
    """
    return max(0.0, min(1.0, value))
