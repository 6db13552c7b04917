"""
File: rada_engine/sources/api_client.py
HTTP record sources for the politics API.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from rada_engine.config import NEWS_PAGE_SIZE, PAGE_SIZE, Settings, get_settings
from rada_engine.core.filters import is_cleared
from rada_engine.errors import UpstreamUnavailable
from rada_engine.models import FilterCriteria, Record, RecordPage
from rada_engine.schemas import PaginationEnvelope, parse_records

logger = logging.getLogger(__name__)


def build_headers(settings: Settings) -> Dict[str, str]:
    headers = {"User-Agent": settings.user_agent, "Accept": "application/json"}
    if settings.api_token:
        headers["Authorization"] = f"Bearer {settings.api_token}"
    return headers


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return str(value)


def filters_to_params(filters: Optional[FilterCriteria]) -> Dict[str, str]:
    """
    Turn filter criteria into query-string parameters.

    Cleared values ("all", blanks, empty lists) are left out.

    Args:
        filters: Filter-key -> selected value

    Returns:
        Query parameters as strings
    """
    return {key: _query_value(value) for key, value in (filters or {}).items() if not is_cleared(value)}


class APIRecordSource:
    """Paginated JSON endpoint returning `{<collection_key>: [...], pagination: {...}}`."""

    record_type: str = ""
    path: str = ""
    collection_key: str = ""
    default_page_size: int = PAGE_SIZE

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = settings.api_timeout_seconds
        self.headers = build_headers(settings)
        # An injected client is owned by the caller and never closed here
        self._client = client

    async def _get_json(self, params: Dict[str, str]) -> Any:
        url = f"{self.base_url}{self.path}"
        try:
            if self._client is not None:
                r = await self._client.get(url, params=params, headers=self.headers, timeout=self.timeout)
                r.raise_for_status()
                return r.json()

            async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
                r = await client.get(url, params=params)
                r.raise_for_status()
                return r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable(f"GET {self.path} failed: {e}", cause=e) from e

    def _extract_payloads(self, data: Any) -> List[Any]:
        if isinstance(data, list):
            return data
        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"Unexpected response body from {self.path}")
        if data.get("success") is False:
            raise UpstreamUnavailable(str(data.get("error") or f"{self.path} reported a failure"))
        payloads = data.get(self.collection_key)
        if payloads is None:
            payloads = data.get("data")
        return payloads if isinstance(payloads, list) else []

    def _pagination(self, data: Any, page: int, limit: int, count: int) -> RecordPage:
        raw = data.get("pagination") if isinstance(data, dict) else None
        try:
            envelope = PaginationEnvelope.model_validate(raw or {})
        except ValidationError as e:
            logger.warning("Ignoring malformed pagination from %s: %s", self.path, e)
            envelope = PaginationEnvelope()

        limit = max(1, envelope.limit or limit)
        total = envelope.total or count
        pages = envelope.pages if envelope.pages is not None else math.ceil(total / limit)
        current = envelope.page if raw else page
        return RecordPage(records=[], total=total, page=current, limit=limit, has_more=current < pages)

    async def get_records(
        self,
        filters: Optional[FilterCriteria] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> RecordPage:
        """
        Fetch one page of records.

        Args:
            filters: Criteria forwarded as query parameters
            page: 1-based page number
            page_size: Records per page (defaults to the source's page size)

        Returns:
            RecordPage with the valid records of the page; malformed entries are skipped

        Raises:
            UpstreamUnavailable: On transport errors, HTTP errors or a non-JSON body
        """
        limit = page_size or self.default_page_size
        params = filters_to_params(filters)
        params.update({"page": str(page), "limit": str(limit)})

        data = await self._get_json(params)
        payloads = self._extract_payloads(data)
        records = parse_records(payloads, self.record_type)

        result = self._pagination(data, page, limit, len(payloads))
        result.records = records
        logger.info(
            "Fetched %d %s records (page %d, has_more=%s)", len(records), self.record_type, result.page, result.has_more
        )
        return result

    async def search(self, query: str) -> List[Record]:
        """
        Server-side search.

        Raises:
            UpstreamUnavailable: If the request fails
        """
        data = await self._get_json({"search": query.strip()})
        return parse_records(self._extract_payloads(data), self.record_type)


class PoliticianAPISource(APIRecordSource):
    record_type = "politician"
    path = "/api/politicians"
    collection_key = "politicians"
    default_page_size = PAGE_SIZE


class NewsAPISource(APIRecordSource):
    record_type = "news"
    path = "/api/news"
    collection_key = "articles"
    default_page_size = NEWS_PAGE_SIZE


__all__ = [
    "build_headers",
    "filters_to_params",
    "APIRecordSource",
    "PoliticianAPISource",
    "NewsAPISource",
]
