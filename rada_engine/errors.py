"""
Failure taxonomy for the record engine.

None of these escape a public operation: each one is raised where the
problem is detected and handled by the layer that owns its policy.
"""
from __future__ import annotations

from typing import Any, Optional


class RadaEngineError(Exception):
    """Base class for engine failures."""


class UpstreamUnavailable(RadaEngineError):
    """The data source fetch failed or timed out."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class MalformedRecord(RadaEngineError):
    """A record payload is missing required fields."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class InvalidFilterKey(RadaEngineError):
    """A filter or sort key is not known for the record type."""

    def __init__(self, key: str, record_type: str):
        super().__init__(f"Unknown key {key!r} for {record_type} records")
        self.key = key
        self.record_type = record_type


class ComparisonOverflow(RadaEngineError):
    """The comparison set is already full."""

    def __init__(self, limit: int):
        super().__init__(f"You can compare up to {limit} politicians at once.")
        self.limit = limit


__all__ = [
    "RadaEngineError",
    "UpstreamUnavailable",
    "MalformedRecord",
    "InvalidFilterKey",
    "ComparisonOverflow",
]
