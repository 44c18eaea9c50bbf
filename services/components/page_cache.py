"""
PageCache component: (source, page) -> rows with TTL and staleness verification.
"""
import asyncio
import time
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Optional

from core.config import settings
from core.exceptions import NoticeApiException
from core.logger import get_logger
from models.cache import CacheEntry, CacheKey, PageBoundary
from models.notice import NoticeRow
from models.source import Source
from services.components.change_detector import ChangeDetector

logger = get_logger(__name__)

# Fetches and parses one page of a source
PageLoader = Callable[[Source, int], Awaitable[List[NoticeRow]]]


class PageCache:
    """
    Per-page cache for board listings.

    Lookup policy:
    1. Entry younger than the TTL: returned unchanged.
    2. Expired entry with a recorded page-1 boundary: page 1 is probed
       (or reused, if fresh). If the probe's boundary rows match
       the page-1 boundary recorded with the entry, the entry's timestamp is
       refreshed and its rows returned. Otherwise it is a miss.
    3. Miss: the page is loaded and stored.

    A lock per key serializes lookups for the same page, so concurrent
    callers share a single fetch. Revalidating page N also takes the page-1
    lock, always after its own, so the probe never races a page-1 lookup.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
        change_detector: Optional[ChangeDetector] = None,
    ):
        self.ttl = ttl if ttl is not None else settings.CACHE_TTL
        self._clock = clock or time.monotonic
        self.change_detector = change_detector or ChangeDetector()
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._locks: Dict[CacheKey, asyncio.Lock] = {}
        self.stats: Dict[str, int] = defaultdict(int)

    async def get(self, source: Source, page: int, loader: PageLoader) -> List[NoticeRow]:
        key = (source.key, page)

        async with self._lock_for(key):
            entry = self._entries.get(key)

            if entry is not None:
                if self.is_fresh(entry):
                    self.stats["hits"] += 1
                    logger.debug(f"[CACHE] Hit {source.key} page {page}")
                    return list(entry.rows)

                rows = await self._revalidate(source, page, entry, loader)
                if rows is not None:
                    return rows

            self.stats["misses"] += 1
            logger.debug(f"[CACHE] Miss {source.key} page {page}")
            rows = await loader(source, page)
            self._put(key, rows, self._head_for(source, page, rows))
            return list(rows)

    async def _revalidate(
        self,
        source: Source,
        page: int,
        entry: CacheEntry,
        loader: PageLoader,
    ) -> Optional[List[NoticeRow]]:
        """
        Checks an expired entry against the current page 1.

        Returns the rows to serve, or None if the entry must be reloaded.
        """
        if entry.head is None:
            logger.debug(f"[CACHE] No page-1 boundary recorded for {source.key} page {page}")
            return None

        if page == 1:
            # The caller already holds the page-1 lock
            return await self._compare_with_first_page(source, page, entry, loader)

        # Lock order is always page N, then page 1
        async with self._lock_for((source.key, 1)):
            return await self._compare_with_first_page(source, page, entry, loader)

    async def _compare_with_first_page(
        self,
        source: Source,
        page: int,
        entry: CacheEntry,
        loader: PageLoader,
    ) -> Optional[List[NoticeRow]]:
        first_key = (source.key, 1)
        first_page = self._entries.get(first_key)

        if page != 1 and first_page is not None and self.is_fresh(first_page):
            # Another lookup stored page 1 while this one waited for the lock
            probe, probe_head = list(first_page.rows), first_page.head
        else:
            try:
                probe = await loader(source, 1)
            except NoticeApiException as e:
                logger.info(f"[CACHE] Staleness probe failed for {source.key}, reloading: {e}")
                return None
            probe_head = self.change_detector.boundary_of(probe)
            self._put(first_key, probe, probe_head)

        if self.change_detector.is_unchanged(entry.head, probe_head):
            self.stats["revalidations"] += 1
            if page != 1:
                self._entries[(source.key, page)] = entry.model_copy(
                    update={"fetched_at": self._clock()}
                )
            logger.debug(f"[CACHE] Revalidated {source.key} page {page}")
            return list(entry.rows)

        logger.info(f"[CACHE] {source.key} has shifted since page {page} was cached")

        if page == 1:
            self.stats["misses"] += 1
            return list(probe)
        return None

    def _head_for(self, source: Source, page: int, rows: List[NoticeRow]) -> Optional[PageBoundary]:
        if page == 1:
            return self.change_detector.boundary_of(rows)

        first_page = self._entries.get((source.key, 1))
        if first_page is not None and self.is_fresh(first_page):
            return first_page.head
        return None

    def _put(self, key: CacheKey, rows: List[NoticeRow], head: Optional[PageBoundary]) -> None:
        self._entries[key] = CacheEntry(rows=rows, fetched_at=self._clock(), head=head)

    def _lock_for(self, key: CacheKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self.ttl

    def peek(self, source_key: str, page: int) -> Optional[CacheEntry]:
        """Returns the stored entry without any freshness handling."""
        return self._entries.get((source_key, page))

    def invalidate(self, source_key: Optional[str] = None) -> int:
        """
        Drops cached pages of one source, or all pages.

        Returns:
            Number of entries removed
        """
        if source_key is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            keys = [k for k in self._entries if k[0] == source_key]
            for k in keys:
                del self._entries[k]
            removed = len(keys)

        logger.info(f"[CACHE] Invalidated {removed} entries" + (f" for {source_key}" if source_key else ""))
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self.stats.clear()

    def __len__(self) -> int:
        return len(self._entries)
