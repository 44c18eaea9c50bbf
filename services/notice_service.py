from typing import Awaitable, Callable, Dict, List, Optional, Union
import aiohttp

from core import constants
from core.config import settings
from core.exceptions import (
    IndexOutOfRangeException,
    NoticeApiException,
    TotalCountUnavailableException,
    ValidationException,
)
from core.logger import get_logger
from core.performance import get_performance_monitor
from models.notice import NoticeRow
from models.result import FetchResult
from models.source import Source
from parsers.base_parser import ParseContext
from services.components.page_cache import PageCache
from services.components.source_catalog import SourceCatalog
from services.scraper.fetcher import NoticeFetcher
from services.scraper.total_count import TotalCountResolver

logger = get_logger(__name__)

SourceRef = Union[Source, str]


class NoticeService:
    """
    Entry point for reading notice boards.

    Owns the page cache and (unless one is injected) the HTTP session.
    Use as an async context manager:

        async with NoticeService() as service:
            rows = await service.get_page("general_notice", 1)
    """

    def __init__(
        self,
        catalog: Optional[SourceCatalog] = None,
        fetcher: Optional[NoticeFetcher] = None,
        cache: Optional[PageCache] = None,
        total_count_resolver: Optional[TotalCountResolver] = None,
        session: Optional[aiohttp.ClientSession] = None,
        strict_total_count: Optional[bool] = None,
        max_page_walk: Optional[int] = None,
    ):
        self.catalog = catalog or SourceCatalog()
        self.fetcher = fetcher or NoticeFetcher()
        self.cache = cache or PageCache()
        self.total_count_resolver = total_count_resolver or TotalCountResolver(self.fetcher)
        self.strict_total_count = (
            settings.STRICT_TOTAL_COUNT if strict_total_count is None else strict_total_count
        )
        self.max_page_walk = max_page_walk or settings.MAX_PAGE_WALK

        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "NoticeService":
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = await self.fetcher.create_session()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Closes the owned HTTP session and drops cached pages."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
        self.cache.clear()

    @staticmethod
    def version_label() -> str:
        return f"{constants.VERSION_PREFIX} v{constants.VERSION}"

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def list_sources(self) -> List[Source]:
        return self.catalog.list_sources()

    def get_source(self, source: SourceRef) -> Source:
        return self.catalog.get(source)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_page(self, source: SourceRef, page: int) -> List[NoticeRow]:
        """
        Returns one listing page (1-based).

        Raises:
            ValidationException: If page < 1
            UnsupportedSourceException: If the source is unknown
            NetworkException: If the page cannot be fetched
        """
        _require_positive("page", page)
        resolved = self.catalog.get(source)
        return await self.cache.get(resolved, page, self._load_page)

    async def get_by_count(self, source: SourceRef, count: int) -> List[NoticeRow]:
        """
        Returns up to `count` rows, walking pages from 1 until enough rows
        are collected or a page comes back empty.
        """
        _require_positive("count", count)
        resolved = self.catalog.get(source)

        rows: List[NoticeRow] = []
        page = 1
        while len(rows) < count:
            if page > self.max_page_walk:
                logger.warning(
                    f"[SERVICE] Stopped walking {resolved.key} at page limit {self.max_page_walk}"
                )
                break

            page_rows = await self.cache.get(resolved, page, self._load_page)
            if not page_rows:
                break

            rows.extend(page_rows)
            page += 1

        return rows[:count]

    async def get_by_index(self, source: SourceRef, index: int) -> NoticeRow:
        """
        Returns the row at absolute 1-based position `index`.

        Raises:
            ValidationException: If index < 1
            IndexOutOfRangeException: If the board has fewer rows
        """
        _require_positive("index", index)
        rows = await self.get_by_count(source, index)

        if len(rows) < index:
            raise IndexOutOfRangeException(
                "Index beyond available rows",
                {"source": self.catalog.get(source).key, "index": index, "available": len(rows)},
            )
        return rows[-1]

    # ------------------------------------------------------------------
    # Result variants
    # ------------------------------------------------------------------

    async def try_get_page(self, source: SourceRef, page: int) -> FetchResult:
        return await _as_result(lambda: self.get_page(source, page))

    async def try_get_by_count(self, source: SourceRef, count: int) -> FetchResult:
        return await _as_result(lambda: self.get_by_count(source, count))

    async def try_get_by_index(self, source: SourceRef, index: int) -> FetchResult:
        async def _single():
            return [await self.get_by_index(source, index)]

        return await _as_result(_single)

    def clear_cache(self, source: Optional[SourceRef] = None) -> int:
        if source is None:
            return self.cache.invalidate()
        return self.cache.invalidate(self.catalog.get(source).key)

    def stats(self) -> Dict[str, Dict]:
        """Cache counters and fetch timings, for diagnostics."""
        return {
            "cache": dict(self.cache.stats),
            "fetch": get_performance_monitor().get_stats("fetch_url"),
        }

    def reset_stats(self) -> None:
        self.cache.stats.clear()
        get_performance_monitor().reset()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load_page(self, source: Source, page: int) -> List[NoticeRow]:
        """Fetches and parses one page, bypassing the cache."""
        session = await self._get_session()
        parser = self.catalog.parser_for(source)
        url = source.url_for(page)

        total_count = None
        if parser.needs_total_count:
            total_count = await self._resolve_total_count(session, source)

        content = await self.fetcher.fetch_url(session, url)
        rows = parser.parse_rows(
            content,
            ParseContext(source=source, page=page, page_url=url, total_count=total_count),
        )

        logger.info(
            f"[SERVICE] Fetched {len(rows)} rows",
            context={"source": source.key, "page": page},
        )
        return rows

    async def _resolve_total_count(self, session: aiohttp.ClientSession, source: Source) -> int:
        try:
            return await self.total_count_resolver.resolve(session, source)
        except TotalCountUnavailableException as e:
            if self.strict_total_count:
                raise
            logger.warning(f"[SERVICE] {e}. Numbering {source.key} from 0")
            return 0


def _require_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationException(f"{name} must be a positive integer", {name: value})


async def _as_result(call: Callable[[], Awaitable[List[NoticeRow]]]) -> FetchResult:
    try:
        return FetchResult.success(await call())
    except NoticeApiException as e:
        return FetchResult.failure(e)
