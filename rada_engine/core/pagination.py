"""
Prefix-growing pagination: "load more" widens the visible slice, it never
drops earlier pages.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from rada_engine.config import LOAD_MORE_DELAY_SECONDS
from rada_engine.models import PageWindow, Record

logger = logging.getLogger(__name__)


def visible_slice(records: Sequence[Record], window: PageWindow) -> List[Record]:
    """Return the first min(pages_loaded * page_size, len(records)) records."""
    return list(records[: window.limit])


def has_more(records: Sequence[Record], window: PageWindow) -> bool:
    return window.limit < len(records)


def reset(window: PageWindow) -> PageWindow:
    """Restart from the first page (any change of query, filters or sort)."""
    window.pages_loaded = 1
    window.loading = False
    window.generation += 1
    return window


async def load_more(window: PageWindow, delay: float = LOAD_MORE_DELAY_SECONDS) -> PageWindow:
    """
    Grow the window by one page.

    A call arriving while another load is in flight is a no-op. The delay
    only smooths the page boundary for the UI and may be zero.

    Args:
        window: Window to grow in place
        delay: Seconds to wait before the new page becomes visible

    Returns:
        The same window
    """
    if window.loading:
        logger.debug("Load more ignored, a load is already in flight")
        return window

    generation = window.generation
    window.loading = True
    try:
        if delay > 0:
            await asyncio.sleep(delay)
        if window.generation == generation:
            window.pages_loaded += 1
    finally:
        if window.generation == generation:
            window.loading = False
    return window


class Paginator:
    """Pagination state for one derived collection."""

    def __init__(self, page_size: int, delay: float = LOAD_MORE_DELAY_SECONDS):
        self.window = PageWindow(page_size=page_size)
        self.delay = delay

    @property
    def pages_loaded(self) -> int:
        return self.window.pages_loaded

    def visible(self, records: Sequence[Record]) -> List[Record]:
        return visible_slice(records, self.window)

    def has_more(self, records: Sequence[Record]) -> bool:
        return has_more(records, self.window)

    def reset(self) -> None:
        reset(self.window)

    async def load_more(self) -> PageWindow:
        return await load_more(self.window, self.delay)
