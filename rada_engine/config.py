"""
Engine configuration with environment variable support.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable with fallback."""
    try:
        return float(os.getenv(key, default))
    except (ValueError, TypeError):
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable with fallback."""
    try:
        return int(os.getenv(key, default))
    except (ValueError, TypeError):
        return default


def _get_env_list(key: str, default: list[str], separator: str = ",") -> list[str]:
    """Get list value from environment variable with fallback."""
    value = os.getenv(key)
    if not value:
        return default
    return [item.strip() for item in value.split(separator) if item.strip()]


# Pagination Settings
PAGE_SIZE: int = _get_env_int("RADA_PAGE_SIZE", 10)
NEWS_PAGE_SIZE: int = _get_env_int("RADA_NEWS_PAGE_SIZE", 20)
LOAD_MORE_DELAY_SECONDS: float = _get_env_float("RADA_LOAD_MORE_DELAY_SECONDS", 0.5)

# Comparison Settings
MAX_COMPARISON: int = _get_env_int("RADA_MAX_COMPARISON", 4)
EXPERIENCE_BASELINE_YEAR: int = _get_env_int("RADA_EXPERIENCE_BASELINE_YEAR", 2000)

# Upper bound of each comparison bar, shared by every compared record
METRIC_BAR_MAXIMUMS: Dict[str, int] = {
    "experience": 30,
    "achievements": 10,
    "education": 4,
    "party_stability": 5,
    "public_engagement": 5,
}

# Credibility Tiers (0 to 100)
HIGH_CREDIBILITY_THRESHOLD: int = _get_env_int("RADA_HIGH_CREDIBILITY_THRESHOLD", 80)
MEDIUM_CREDIBILITY_THRESHOLD: int = _get_env_int("RADA_MEDIUM_CREDIBILITY_THRESHOLD", 60)

CREDIBILITY_COLORS: Dict[str, str] = {
    "high": "#10b981",
    "medium": "#f59e0b",
    "low": "#ef4444",
}

# Sentiment presentation
SENTIMENT_COLORS: Dict[str, str] = {
    "positive": "#10b981",
    "negative": "#ef4444",
    "neutral": "#6b7280",
    "mixed": "#f59e0b",
}
SENTIMENT_ICONS: Dict[str, str] = {
    "positive": "trending-up",
    "negative": "trending-down",
    "neutral": "remove",
    "mixed": "swap-horizontal",
}
UNKNOWN_SENTIMENT_ICON = "help"
UNKNOWN_SENTIMENT_COLOR = "#6b7280"

# News categories offered before any are created at runtime
DEFAULT_NEWS_CATEGORIES: list[str] = _get_env_list(
    "RADA_NEWS_CATEGORIES",
    [
        "politics",
        "economy",
        "society",
        "international",
        "sports",
        "technology",
        "health",
        "education",
        "environment",
        "security",
    ],
)
DEFAULT_POLITICIAN_CATEGORIES: list[str] = _get_env_list(
    "RADA_POLITICIAN_CATEGORIES", ["senate", "parliament", "governors", "cabinet"]
)

# Offline Cache
CACHE_EXPIRY_HOURS: float = _get_env_float("RADA_CACHE_EXPIRY_HOURS", 24.0)
CACHE_VERSION: str = os.getenv("RADA_CACHE_VERSION", "1.0.0")

# Logging Configuration
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv(
    "LOG_FORMAT",
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once with the engine's format."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


class Settings(BaseSettings):
    """Upstream API settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RADA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:5000"
    api_timeout_seconds: float = 15.0
    api_token: str = ""
    user_agent: str = "rada-engine/0.1"
    cache_dir: str = ".rada_cache"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
