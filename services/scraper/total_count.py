from typing import Optional
import aiohttp
from bs4 import BeautifulSoup

from core import constants
from core.exceptions import (
    ScraperException,
    TotalCountUnavailableException,
    UnsupportedSourceException,
)
from core.logger import get_logger
from models.source import ParseStrategy, Source
from services.scraper.fetcher import NoticeFetcher

logger = get_logger(__name__)


def parse_total_count(html: str) -> Optional[int]:
    """
    Extracts the article count from the search-result counter
    (<div class="srch_counts"><strong>1,234</strong>).

    Returns None if the element is missing or not numeric.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    node = soup.select_one(constants.TOTAL_COUNT_SELECTOR)
    if node is None:
        return None

    text = node.get_text(strip=True).replace(",", "")
    try:
        return int(text)
    except ValueError:
        return None


class TotalCountResolver:
    """
    Resolves the total article count of an RSS board from its HTML listing.
    The count is the numbering baseline for RssFeedParser.
    """

    def __init__(self, fetcher: Optional[NoticeFetcher] = None):
        self.fetcher = fetcher or NoticeFetcher()

    async def resolve(self, session: aiohttp.ClientSession, source: Source) -> int:
        """
        Fetches the auxiliary listing and extracts the count.

        Raises:
            UnsupportedSourceException: If the source is not an RSS board
            TotalCountUnavailableException: If the page cannot be fetched or has no count
        """
        if source.strategy != ParseStrategy.RSS_DESCENDING or not source.total_count_url:
            raise UnsupportedSourceException(
                "Total count extraction is not supported for this source",
                {"source": source.key, "strategy": source.strategy.value},
            )

        url = source.total_count_url
        try:
            html = await self.fetcher.fetch_url(session, url)
        except ScraperException as e:
            raise TotalCountUnavailableException(
                "Failed to fetch total count page", {"source": source.key, "error": str(e)}
            )

        count = parse_total_count(html)
        if count is None:
            raise TotalCountUnavailableException(
                "Total count element missing or not numeric", {"source": source.key, "url": url}
            )

        logger.debug(f"[TOTAL_COUNT] {source.key}: {count} articles")
        return count
