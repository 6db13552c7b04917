"""
Versioned, expiring caches for fetched record pages.

Every entry is stored inside an envelope carrying the cache version and the
time it was saved. An entry from another version, or older than
CACHE_EXPIRY_HOURS, reads as missing.
"""
from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from rada_engine.config import CACHE_EXPIRY_HOURS, CACHE_VERSION, get_settings
from rada_engine.sources.common import parse_utc_datetime
from rada_engine.utils import now_utc

logger = logging.getLogger(__name__)


def _envelope(value: Any) -> Dict[str, Any]:
    return {"version": CACHE_VERSION, "saved_at": now_utc().isoformat(), "value": value}


def _saved_at(envelope: Dict[str, Any]) -> Optional[datetime]:
    raw = envelope.get("saved_at")
    if not raw:
        return None
    try:
        return parse_utc_datetime(raw)
    except (ValueError, OverflowError):
        return None


def _unwrap(envelope: Any, key: str, max_age: timedelta) -> Optional[Any]:
    if not isinstance(envelope, dict) or "value" not in envelope:
        logger.warning("Discarding unreadable cache entry %r", key)
        return None
    if envelope.get("version") != CACHE_VERSION:
        logger.info("Discarding cache entry %r from version %s", key, envelope.get("version"))
        return None
    saved_at = _saved_at(envelope)
    if saved_at is None:
        logger.warning("Discarding cache entry %r with a bad timestamp", key)
        return None
    if now_utc() - saved_at > max_age:
        logger.info("Cache entry %r expired", key)
        return None
    return envelope["value"]


class MemoryCache:
    """Process-local cache, mostly useful in tests and short-lived sessions."""

    def __init__(self, expiry_hours: float = CACHE_EXPIRY_HOURS):
        self.max_age = timedelta(hours=expiry_hours)
        self._entries: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        envelope = self._entries.get(key)
        if envelope is None:
            return None
        return _unwrap(envelope, key, self.max_age)

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = _envelope(value)

    def clear(self) -> None:
        self._entries.clear()


class JsonFileCache:
    """One JSON file per key under `directory` (defaults to the configured cache_dir)."""

    def __init__(self, directory: Optional[str | Path] = None, expiry_hours: float = CACHE_EXPIRY_HOURS):
        self.directory = Path(directory if directory is not None else get_settings().cache_dir)
        self.max_age = timedelta(hours=expiry_hours)

    def _path(self, key: str) -> Path:
        digest = hashlib.blake2b(key.encode("utf-8", "ignore"), digest_size=16).hexdigest()
        return self.directory / f"{digest}.json"

    def get(self, key: str) -> Optional[Any]:
        """
        Read a cached value.

        Args:
            key: Cache key

        Returns:
            The stored value, or None if missing, expired, from another
            version or unreadable
        """
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                envelope = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read cache entry %r: %s", key, e)
            return None
        return _unwrap(envelope, key, self.max_age)

    def put(self, key: str, value: Any) -> None:
        """Write a value; a failed write is logged and the cache stays as it was."""
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(_envelope(value), f, default=str)
            tmp.replace(path)
        except OSError as e:
            logger.warning("Failed to write cache entry %r: %s", key, e)

    def clear(self) -> None:
        if not self.directory.exists():
            return
        for path in self.directory.glob("*.json"):
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Failed to remove cache file %s: %s", path, e)


__all__ = ["MemoryCache", "JsonFileCache"]
