"""
Common utilities for upstream record payloads.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from dateutil import parser as dateparser

from rada_engine.utils import normalize_text


def parse_utc_datetime(value: Optional[Any]) -> datetime:
    """
    Parse a date string (or datetime) and convert to UTC datetime.

    Args:
        value: Date string in various formats, datetime, or None

    Returns:
        UTC datetime object, or current UTC time if input is None/empty

    Raises:
        ValueError: If the string cannot be parsed as a date
    """
    if not value:
        return datetime.now(timezone.utc)

    if isinstance(value, datetime):
        parsed_date = value
    else:
        parsed_date = dateparser.parse(str(value))

    if parsed_date.tzinfo:
        return parsed_date.astimezone(timezone.utc)
    return parsed_date.replace(tzinfo=timezone.utc)


def clean_text(text: Optional[str]) -> str:
    """
    Clean and normalize text content.

    Args:
        text: Raw text string or None

    Returns:
        Cleaned text string, empty string if input is None
    """
    if not text:
        return ""
    return normalize_text(str(text))


def clean_list(values: Optional[Iterable[Any]]) -> List[str]:
    """Strip every entry of a string list, dropping blanks. A bare string becomes a one-item list."""
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    cleaned = (clean_text(v) for v in values if v is not None)
    return [v for v in cleaned if v]
