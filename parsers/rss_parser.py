import datetime
import re
import xml.etree.ElementTree as ET
from email.utils import parsedate_to_datetime
from typing import List

from core import constants
from core.exceptions import ParsingException
from core.logger import get_logger
from models.notice import NoticeRow
from parsers.base_parser import (
    DATE_PATTERN,
    BaseParser,
    ParseContext,
    normalize_text,
    parse_date,
)

logger = get_logger(__name__)

XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")
DC_CREATOR = "{http://purl.org/dc/elements/1.1/}creator"


class RssFeedParser(BaseParser):
    """
    Parser for board RSS feeds.

    Feed items carry no sequence number. Items arrive newest first, so the
    number of item i on page p is reconstructed from the board's total
    article count:

        no = total_count - (page - 1) * PAGE_SIZE - i

    This only holds while the feed's paging matches the live board.
    """

    needs_total_count = True

    def __init__(self, page_size: int = constants.PAGE_SIZE):
        self.page_size = page_size

    def _select_records(self, content: str, context: ParseContext) -> List[ET.Element]:
        try:
            root = ET.fromstring(XML_DECLARATION.sub("", content or "", count=1).strip())
        except ET.ParseError as e:
            logger.warning(f"[PARSER] Malformed feed for {context.source.key}: {e}")
            return []
        return list(root.iter("item"))

    def start_number(self, total_count: int, page: int) -> int:
        return total_count - (page - 1) * self.page_size

    def _parse_record(self, item: ET.Element, index: int, context: ParseContext) -> NoticeRow:
        title = _text(item, "title")
        link = _text(item, "link")
        pub_date = _text(item, "pubDate")
        author = _text(item, "author") or _text(item, DC_CREATOR)

        if not any((title, link, pub_date, author)):
            raise ParsingException("Empty feed item", {"index": index})

        # Feed generator leaves a stray closing brace on some titles
        if title.endswith("}"):
            title = title.rstrip("}").strip()

        total_count = context.total_count if context.total_count is not None else 0

        return NoticeRow(
            no=self.start_number(total_count, context.page) - index,
            title=normalize_text(title),
            # Items without a link point at the board itself
            link=context.source.resolve_link(link) if link else context.source.origin,
            date=_parse_pub_date(pub_date),
            author=normalize_text(author),
        )


def _text(item: ET.Element, tag: str) -> str:
    return (item.findtext(tag) or "").strip()


def _parse_pub_date(value: str) -> datetime.date:
    """Date-only prefix of pubDate ("2024-03-01 09:00:00"); RFC 822 dates as a fallback."""
    prefix = value.split(" ")[0] if value else ""
    if DATE_PATTERN.search(prefix):
        return parse_date(prefix)

    try:
        return parsedate_to_datetime(value).date()
    except (TypeError, ValueError, IndexError, AttributeError):
        raise ParsingException("Unparsable pubDate", {"value": value})
