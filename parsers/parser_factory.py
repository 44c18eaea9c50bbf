"""
ParserFactory for creating parser instances based on a source's parse strategy.
Implements Factory Pattern so new board formats can be added without
touching the service.
"""
from typing import Dict, Optional, Type

from core.exceptions import UnsupportedSourceException
from core.logger import get_logger
from models.source import ParseStrategy
from parsers.base_parser import BaseParser
from parsers.board_table_parser import BoardTableParser
from parsers.notice_board_parser import NoticeBoardParser
from parsers.rss_parser import RssFeedParser

logger = get_logger(__name__)


class ParserFactory:
    """
    Factory for creating parser instances based on ParseStrategy.

    Usage:
        factory = ParserFactory()
        parser = factory.get_parser(ParseStrategy.RSS_DESCENDING)

        # Register custom parser
        factory.register_parser(ParseStrategy.TABULAR_NOTICE, CustomParser)
    """

    _DEFAULT_PARSERS: Dict[ParseStrategy, Type[BaseParser]] = {
        ParseStrategy.TABULAR_NOTICE: NoticeBoardParser,
        ParseStrategy.TABULAR_NO_RSS: BoardTableParser,
        ParseStrategy.RSS_DESCENDING: RssFeedParser,
    }

    def __init__(self):
        # Instance-level registry for runtime extension
        self._parsers: Dict[ParseStrategy, Type[BaseParser]] = dict(self._DEFAULT_PARSERS)

    def get_parser(self, strategy: ParseStrategy) -> BaseParser:
        """
        Creates the parser for the given strategy.

        Args:
            strategy: Parse strategy of the source

        Returns:
            Parser instance

        Raises:
            UnsupportedSourceException: If no parser is registered for the strategy
        """
        parser_class = self._parsers.get(strategy)
        if parser_class is None:
            raise UnsupportedSourceException(
                "No parser registered for strategy", {"strategy": strategy}
            )

        logger.debug(f"[PARSER_FACTORY] Creating {parser_class.__name__} for {strategy.value}")
        return parser_class()

    def register_parser(self, strategy: ParseStrategy, parser_class: Type[BaseParser]) -> None:
        """
        Registers (or replaces) the parser class for a strategy.

        Args:
            strategy: Strategy to bind
            parser_class: Parser class to instantiate
        """
        self._parsers[strategy] = parser_class
        logger.info(f"[PARSER_FACTORY] Registered parser: {strategy.value} -> {parser_class.__name__}")

    def get_registered_parsers(self) -> Dict[str, str]:
        """
        Returns a dictionary of all registered parsers.

        Returns:
            Dict mapping strategy names to parser class names
        """
        return {strategy.value: cls.__name__ for strategy, cls in self._parsers.items()}


# Singleton instance for convenience
_parser_factory: Optional[ParserFactory] = None


def get_parser_factory() -> ParserFactory:
    """
    Returns the global ParserFactory singleton.

    Returns:
        ParserFactory instance
    """
    global _parser_factory
    if _parser_factory is None:
        _parser_factory = ParserFactory()
    return _parser_factory
