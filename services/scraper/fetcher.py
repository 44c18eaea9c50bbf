import aiohttp
import asyncio
from typing import Optional
from core.config import settings
from core.logger import get_logger
from core.exceptions import NetworkException, ScraperException
from core.performance import get_performance_monitor

logger = get_logger(__name__)


class NoticeFetcher:
    """
    Handles network operations for fetching board pages and feeds.
    Every request is bounded by REQUEST_TIMEOUT and never retried.
    """

    def __init__(self, timeout: Optional[float] = None, user_agent: Optional[str] = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.REQUEST_TIMEOUT)
        self.headers = {
            "User-Agent": user_agent or settings.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/rss+xml,*/*;q=0.8",
            "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        }

    async def create_session(self) -> aiohttp.ClientSession:
        """Creates and returns a new aiohttp session."""
        connector = aiohttp.TCPConnector(limit=10, limit_per_host=5)
        return aiohttp.ClientSession(
            timeout=self.timeout,
            connector=connector,
            headers=self.headers,
        )

    async def fetch_url(self, session: aiohttp.ClientSession, url: str) -> str:
        """
        Fetches URL content as text.

        Raises:
            NetworkException: On timeout, non-2xx status, or any client error
            ScraperException: If the body cannot be read (e.g. undecodable charset)
        """
        logger.debug(f"[FETCHER] GET {url}")
        monitor = get_performance_monitor()
        with monitor.measure("fetch_url", {"url": url}):
            try:
                async with session.get(url, timeout=self.timeout) as resp:
                    resp.raise_for_status()
                    return await resp.text()
            except asyncio.TimeoutError:
                raise NetworkException(
                    f"Timeout fetching {url}", {"url": url, "timeout": self.timeout.total}
                )
            except aiohttp.ClientResponseError as e:
                raise NetworkException(
                    f"HTTP {e.status} fetching {url}", {"url": url, "status": e.status}
                )
            except aiohttp.ClientError as e:
                raise NetworkException(f"HTTP error fetching {url}", {"url": url, "error": str(e)})
            except Exception as e:
                # Undecodable bodies (charset mismatch) and other non-aiohttp failures
                raise ScraperException(
                    f"Unexpected error fetching {url}", {"url": url, "error": str(e)}
                )
