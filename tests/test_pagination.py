"""Tests for the short-page pagination driver."""

from __future__ import annotations

import pytest

from revision_compare.infrastructure.pagination import fetch_all


def _backend(sizes: list[int]):
    """Return a page fetcher serving pages of the given sizes, then empty pages."""
    calls: list[int] = []
    offsets = [sum(sizes[:i]) for i in range(len(sizes))]

    async def fetch(page: int) -> list[int]:
        calls.append(page)
        if page > len(sizes):
            return []
        start = offsets[page - 1]
        return list(range(start, start + sizes[page - 1]))

    return fetch, calls


@pytest.mark.asyncio
async def test_concatenates_pages_in_order():
    fetch, calls = _backend([100, 100, 37])
    items = await fetch_all(fetch, 100)
    assert len(items) == 237
    assert items == list(range(237))
    assert calls == [1, 2, 3]


@pytest.mark.asyncio
async def test_full_page_triggers_one_more_fetch():
    fetch, calls = _backend([100])
    items = await fetch_all(fetch, 100)
    assert len(items) == 100
    assert calls == [1, 2]


@pytest.mark.asyncio
async def test_short_page_stops_immediately():
    fetch, calls = _backend([99])
    items = await fetch_all(fetch, 100)
    assert len(items) == 99
    assert calls == [1]


@pytest.mark.asyncio
async def test_empty_first_page():
    fetch, calls = _backend([])
    assert await fetch_all(fetch, 100) == []
    assert calls == [1]


@pytest.mark.asyncio
async def test_small_page_size():
    fetch, calls = _backend([2, 2, 1])
    assert await fetch_all(fetch, 2) == [0, 1, 2, 3, 4]
    assert calls == [1, 2, 3]


@pytest.mark.asyncio
async def test_rejects_non_positive_page_size():
    fetch, _ = _backend([1])
    with pytest.raises(ValueError):
        await fetch_all(fetch, 0)
