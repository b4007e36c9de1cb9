"""Generic "fetch every page" driver.

Termination rule: the first page holding fewer than ``page_size`` items
(including an empty one) ends the sequence.  There is no total-count check
and no cap on the number of pages, so a very long history can exhaust the
rate limit before this returns.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100  # GitHub's per_page ceiling


async def fetch_all(
    page_fetcher: Callable[[int], Awaitable[Sequence[T]]],
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[T]:
    """Call ``page_fetcher(1)``, ``page_fetcher(2)``, ... and concatenate the pages."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    items: list[T] = []
    page = 1
    while True:
        chunk = await page_fetcher(page)
        items.extend(chunk)
        if len(chunk) < page_size:
            break
        page += 1

    logger.debug("Fetched %d item(s) over %d page(s)", len(items), page)
    return items
