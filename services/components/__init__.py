"""
Components package for NoticeService decomposition.
Provides SourceCatalog, PageCache, and ChangeDetector.
"""
from services.components.change_detector import ChangeDetector
from services.components.page_cache import PageCache
from services.components.source_catalog import SourceCatalog

__all__ = [
    "ChangeDetector",
    "PageCache",
    "SourceCatalog",
]
