"""
SourceCatalog component for loading the configured notice boards.
Each source is bound to its parser once, at load time, through ParserFactory.
"""
import os
import json
from typing import Dict, List, Optional, Union

from core.config import settings
from core.exceptions import UnsupportedSourceException
from core.logger import get_logger
from models.source import Source
from parsers.base_parser import BaseParser
from parsers.parser_factory import ParserFactory, get_parser_factory

logger = get_logger(__name__)


class SourceCatalog:
    """
    Process-wide table of sources and their parsers.
    Responsible for loading, validating, and looking up sources.
    """

    # Default path to sources.json (relative to this file)
    DEFAULT_SOURCES_PATH = os.path.join(
        os.path.dirname(__file__), "../../resources/sources.json"
    )

    def __init__(
        self,
        sources: Optional[List[Source]] = None,
        sources_path: Optional[str] = None,
        parser_factory: Optional[ParserFactory] = None,
    ):
        """
        Initialize SourceCatalog.

        Args:
            sources: Explicit sources. If given, the file is not read.
            sources_path: Optional custom path to sources.json.
                         Defaults to settings.SOURCES_FILE, then DEFAULT_SOURCES_PATH.
            parser_factory: Optional ParserFactory instance for DI.
                           If not provided, uses global singleton.
        """
        self.sources_path = sources_path or settings.SOURCES_FILE or self.DEFAULT_SOURCES_PATH
        self.parser_factory = parser_factory or get_parser_factory()
        self._sources: Dict[str, Source] = {}
        self._parsers: Dict[str, BaseParser] = {}

        if sources is None:
            sources = self._load_file()

        for source in sources:
            self._bind(source)

        logger.info(f"[CATALOG] {len(self._sources)} sources available")

    def _load_file(self) -> List[Source]:
        """
        Loads sources from sources.json and validates them.
        Invalid entries are logged and skipped.
        """
        if not os.path.exists(self.sources_path):
            logger.error(f"[CATALOG] Sources file not found at {self.sources_path}")
            return []

        with open(self.sources_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        sources = []
        for item in data:
            try:
                sources.append(Source(**item))
            except ValueError as e:
                logger.error(
                    f"[CATALOG] Invalid source configuration: {item.get('key', 'unknown')} - {e}"
                )

        logger.debug(f"[CATALOG] Loaded {len(sources)} sources from {self.sources_path}")
        return sources

    def _bind(self, source: Source) -> None:
        if source.key in self._sources:
            logger.warning(f"[CATALOG] Duplicate source key '{source.key}', keeping the first")
            return
        self._sources[source.key] = source
        self._parsers[source.key] = self.parser_factory.get_parser(source.strategy)

    def list_sources(self) -> List[Source]:
        """Returns all sources in catalog order."""
        return list(self._sources.values())

    def get(self, source: Union[Source, str]) -> Source:
        """
        Looks up a source by key (or validates a Source instance).

        Raises:
            UnsupportedSourceException: If the source is not in the catalog
        """
        key = source.key if isinstance(source, Source) else source
        try:
            return self._sources[key]
        except KeyError:
            raise UnsupportedSourceException(
                f"Unknown source '{key}'", {"available": ", ".join(self._sources)}
            )

    def parser_for(self, source: Union[Source, str]) -> BaseParser:
        return self._parsers[self.get(source).key]

    def __len__(self) -> int:
        return len(self._sources)
