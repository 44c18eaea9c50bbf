import pytest
from typing import Dict, Optional
from unittest.mock import Mock

from models.notice import NoticeRow
from services.components.page_cache import PageCache
from services.components.source_catalog import SourceCatalog
from services.notice_service import NoticeService

from builders import FakeClock, routed_fetcher

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def catalog() -> SourceCatalog:
    return SourceCatalog()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_service(catalog, clock):
    """Factory for a NoticeService wired to a routed fetcher and fake clock."""

    def _make(pages: Dict[str, str], ttl: float = 300.0, **kwargs) -> NoticeService:
        fetcher = routed_fetcher(pages)
        return NoticeService(
            catalog=catalog,
            fetcher=fetcher,
            cache=PageCache(ttl=ttl, clock=clock),
            session=Mock(),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_row():
    def _make(no: int, title: Optional[str] = None, day: int = 1) -> NoticeRow:
        return NoticeRow(
            no=no,
            title=title or f"공지 {no}",
            link=f"https://computer.kmu.ac.kr/bbs/computer/265/{no}/artclView.do",
            date=f"2024-03-{day:02d}",
            author="학과사무실",
        )

    return _make
