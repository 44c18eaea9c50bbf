"""
Unit tests for PageCache.

Tests cover:
- TTL hits and misses
- Staleness verification against page 1
- Page-1 fetch failures degrading to a miss
- Coalescing of concurrent lookups
- Invalidation
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from core.exceptions import NetworkException
from services.components.page_cache import PageCache


class Board:
    """In-memory board whose pages are loaded through an AsyncMock."""

    def __init__(self, make_row, total: int, page_size: int = 10):
        self.make_row = make_row
        self.total = total
        self.page_size = page_size
        self.failing_pages = set()
        self.loader = AsyncMock(side_effect=self._load)

    async def _load(self, source, page):
        if page in self.failing_pages:
            raise NetworkException("Timeout", {"page": page})
        start = self.total - (page - 1) * self.page_size
        return [self.make_row(n) for n in range(start, start - self.page_size, -1) if n > 0]

    def publish(self, count: int = 1):
        self.total += count

    def loaded_pages(self):
        return [c.args[1] for c in self.loader.await_args_list]


@pytest.fixture
def source(catalog):
    return catalog.get("dept_computer")


@pytest.fixture
def cache(clock):
    return PageCache(ttl=300, clock=clock)


@pytest.fixture
def board(make_row):
    return Board(make_row, total=45)


class TestPageCache:
    @pytest.mark.asyncio
    async def test_miss_then_hit_within_ttl(self, cache, source, board, clock):
        first = await cache.get(source, 1, board.loader)
        clock.advance(299)
        second = await cache.get(source, 1, board.loader)

        assert first == second
        assert board.loaded_pages() == [1]
        assert cache.stats["hits"] == 1
        assert cache.stats["misses"] == 1

    @pytest.mark.asyncio
    async def test_expired_page_one_revalidated_when_unchanged(self, cache, source, board, clock):
        rows = await cache.get(source, 1, board.loader)
        clock.advance(301)

        again = await cache.get(source, 1, board.loader)

        assert again == rows
        assert board.loaded_pages() == [1, 1]
        assert cache.stats["revalidations"] == 1
        assert cache.peek(source.key, 1).fetched_at == clock.now

    @pytest.mark.asyncio
    async def test_expired_page_revalidated_against_page_one(self, cache, source, board, clock):
        await cache.get(source, 1, board.loader)
        page_two = await cache.get(source, 2, board.loader)
        clock.advance(301)

        again = await cache.get(source, 2, board.loader)

        assert again == page_two
        # Page 2 itself is not reloaded, only page 1 is refetched
        assert board.loaded_pages() == [1, 2, 1]
        assert cache.peek(source.key, 2).fetched_at == clock.now

    @pytest.mark.asyncio
    async def test_revalidated_entry_is_fresh_again(self, cache, source, board, clock):
        await cache.get(source, 1, board.loader)
        await cache.get(source, 2, board.loader)
        clock.advance(301)
        await cache.get(source, 2, board.loader)
        clock.advance(100)

        await cache.get(source, 2, board.loader)

        assert board.loaded_pages() == [1, 2, 1]

    @pytest.mark.asyncio
    async def test_shifted_board_reloads_page(self, cache, source, board, clock):
        await cache.get(source, 1, board.loader)
        old_page_two = await cache.get(source, 2, board.loader)
        board.publish()
        clock.advance(301)

        new_page_two = await cache.get(source, 2, board.loader)

        assert board.loaded_pages() == [1, 2, 1, 2]
        assert new_page_two[0].no == old_page_two[0].no + 1
        # The page-1 refetch replaced the cached page 1
        assert cache.peek(source.key, 1).rows[0].no == 46

    @pytest.mark.asyncio
    async def test_shifted_board_page_one_served_fresh(self, cache, source, board, clock):
        await cache.get(source, 1, board.loader)
        board.publish(2)
        clock.advance(301)

        rows = await cache.get(source, 1, board.loader)

        assert rows[0].no == 47
        assert board.loaded_pages() == [1, 1]

    @pytest.mark.asyncio
    async def test_page_one_failure_degrades_to_miss(self, cache, source, board, clock):
        await cache.get(source, 1, board.loader)
        await cache.get(source, 2, board.loader)
        clock.advance(301)
        board.failing_pages.add(1)

        rows = await cache.get(source, 2, board.loader)

        assert rows[0].no == 35
        assert board.loaded_pages() == [1, 2, 1, 2]

    @pytest.mark.asyncio
    async def test_transport_failure_on_miss_propagates(self, cache, source, board):
        board.failing_pages.add(3)

        with pytest.raises(NetworkException):
            await cache.get(source, 3, board.loader)

        assert cache.peek(source.key, 3) is None

    @pytest.mark.asyncio
    async def test_no_staleness_check_on_true_miss(self, cache, source, board):
        await cache.get(source, 3, board.loader)

        assert board.loaded_pages() == [3]

    @pytest.mark.asyncio
    async def test_page_without_known_head_reloads_after_expiry(self, cache, source, board, clock):
        """Without a cached page 1 at store time there is nothing to compare against"""
        await cache.get(source, 2, board.loader)
        clock.advance(301)

        await cache.get(source, 2, board.loader)

        # Reloaded directly, page 1 is not fetched
        assert board.loaded_pages() == [2, 2]

    @pytest.mark.asyncio
    async def test_fresh_page_one_reused_for_revalidation(self, cache, source, board, clock):
        await cache.get(source, 1, board.loader)
        clock.advance(100)
        await cache.get(source, 2, board.loader)
        clock.advance(201)
        # Page 1 expired and is revalidated, page 2 is still fresh
        await cache.get(source, 1, board.loader)
        clock.advance(100)

        again = await cache.get(source, 2, board.loader)

        assert again[0].no == 35
        assert board.loaded_pages() == [1, 2, 1]
        assert cache.peek(source.key, 2).fetched_at == clock.now

    @pytest.mark.asyncio
    async def test_revalidation_shares_page_one_with_concurrent_lookup(
        self, cache, source, board, clock
    ):
        await cache.get(source, 1, board.loader)
        await cache.get(source, 2, board.loader)
        clock.advance(301)

        in_flight = {"current": 0, "peak": 0}

        async def _tracked_load(src, page):
            if page == 1:
                in_flight["current"] += 1
                in_flight["peak"] = max(in_flight["peak"], in_flight["current"])
            try:
                await asyncio.sleep(0)
                return await board._load(src, page)
            finally:
                if page == 1:
                    in_flight["current"] -= 1

        loader = AsyncMock(side_effect=_tracked_load)

        second, first = await asyncio.gather(
            cache.get(source, 2, loader),
            cache.get(source, 1, loader),
        )

        assert in_flight["peak"] == 1
        assert [c.args[1] for c in loader.await_args_list] == [1]
        assert first[0].no == 45
        assert second[0].no == 35

    @pytest.mark.asyncio
    async def test_concurrent_lookups_share_one_fetch(self, cache, source, make_row):
        started = asyncio.Event()
        release = asyncio.Event()

        async def _slow_load(src, page):
            started.set()
            await release.wait()
            return [make_row(1)]

        loader = AsyncMock(side_effect=_slow_load)

        first = asyncio.ensure_future(cache.get(source, 1, loader))
        second = asyncio.ensure_future(cache.get(source, 1, loader))
        await started.wait()
        release.set()
        results = await asyncio.gather(first, second)

        assert results[0] == results[1]
        assert loader.await_count == 1

    @pytest.mark.asyncio
    async def test_returned_rows_do_not_alias_cache(self, cache, source, board):
        rows = await cache.get(source, 1, board.loader)
        rows.clear()

        assert len(cache.peek(source.key, 1).rows) == 10

    @pytest.mark.asyncio
    async def test_invalidate(self, cache, source, board, catalog):
        other = catalog.get("general_notice")
        await cache.get(source, 1, board.loader)
        await cache.get(source, 2, board.loader)
        await cache.get(other, 1, board.loader)

        assert cache.invalidate(source.key) == 2
        assert len(cache) == 1
        assert cache.invalidate() == 1
        assert len(cache) == 0
