import urllib.parse

from core import constants
from core.exceptions import ParsingException
from parsers.base_parser import ParseContext, TabularBoardParser


class NoticeBoardParser(TabularBoardParser):
    """
    Parser for the university-wide notice boards (table.board_st).

    Pinned notices at the top of page 1 carry an icon instead of a number
    and are numbered PINNED_NOTICE_NO. On later pages a non-numeric id
    marks a non-data row and the row is dropped.
    """

    row_selector = constants.NOTICE_BOARD_ROW_SELECTOR
    min_cells = constants.NOTICE_BOARD_MIN_CELLS

    def _parse_no(self, text: str, context: ParseContext) -> int:
        try:
            return int(text)
        except ValueError:
            if context.page == 1:
                return constants.PINNED_NOTICE_NO
            raise ParsingException("Non-numeric id outside page 1", {"value": text})

    def _resolve_link(self, href: str, context: ParseContext) -> str:
        # Board links are query-only ("?mnu_uid=...&cmd=2"), relative to the listing page
        return urllib.parse.urljoin(context.page_url, href)
