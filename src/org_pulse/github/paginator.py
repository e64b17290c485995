"""Drain page-numbered GitHub collections into a single list."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

PER_PAGE = 100


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    has_next_page: bool = False


PageFetcher = Callable[[int, int], Awaitable[Page]]


async def paginate(fetch_page: PageFetcher, per_page: int = PER_PAGE) -> list[Any]:
    """Fetch pages 1..n until the server reports no next page.

    Items keep server order. An error on any page propagates; the pages already
    collected are discarded with it.
    """
    items: list[Any] = []
    page_number = 1
    while True:
        page = await fetch_page(page_number, per_page)
        if not page.items:
            break
        items.extend(page.items)
        if not page.has_next_page:
            break
        page_number += 1

    logger.debug("Collected %d items over %d page(s)", len(items), page_number)
    return items
