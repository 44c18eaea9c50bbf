from abc import ABC, abstractmethod
import datetime
import html
import re
from typing import Any, List, Optional
from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict

from core.exceptions import ParsingException
from core.logger import get_logger
from models.notice import NoticeRow
from models.source import Source

logger = get_logger(__name__)

# 2024-03-01, 2024.03.01, 2024/03/01, 24.03.01
DATE_PATTERN = re.compile(r"(\d{2,4})\s*[-./]\s*(\d{1,2})\s*[-./]\s*(\d{1,2})")


class ParseContext(BaseModel):
    """Everything a parser may need besides the raw content."""

    model_config = ConfigDict(frozen=True)

    source: Source
    page: int
    page_url: str
    total_count: Optional[int] = None


def normalize_text(text: Optional[str]) -> str:
    """Decodes leftover entities and collapses whitespace (including NBSP) to single spaces."""
    if not text:
        return ""
    return " ".join(html.unescape(text).split())


def parse_date(text: str) -> datetime.date:
    match = DATE_PATTERN.search(text or "")
    if not match:
        raise ParsingException("Unparsable date", {"value": text})

    year, month, day = (int(g) for g in match.groups())
    if year < 100:
        year += 2000

    try:
        return datetime.date(year, month, day)
    except ValueError as e:
        raise ParsingException("Invalid calendar date", {"value": text, "error": str(e)})


class BaseParser(ABC):
    """
    Turns one fetched listing page into NoticeRows.

    Subclasses select the raw records and convert them one at a time.
    A record that raises ParsingException is skipped; the rest of the
    page is still returned.
    """

    needs_total_count: bool = False

    def parse_rows(self, content: str, context: ParseContext) -> List[NoticeRow]:
        records = self._select_records(content, context)

        if not records:
            logger.warning(
                f"[PARSER] No records found for {context.source.key} page {context.page}"
            )
            return []

        rows = []
        for index, record in enumerate(records):
            try:
                row = self._parse_record(record, index, context)
            except ParsingException as e:
                logger.debug(f"[PARSER] Skipping record {index} of {context.source.key}: {e}")
                continue
            if row is not None:
                rows.append(row)

        logger.debug(
            f"[PARSER] Parsed {len(rows)}/{len(records)} records",
            context={"source": context.source.key, "page": context.page},
        )
        return rows

    @abstractmethod
    def _select_records(self, content: str, context: ParseContext) -> List[Any]:
        pass

    @abstractmethod
    def _parse_record(self, record: Any, index: int, context: ParseContext) -> Optional[NoticeRow]:
        pass


class TabularBoardParser(BaseParser):
    """
    Parser for HTML board tables laid out as
    [no, title+link, author, date, ...].
    """

    row_selector: str = ""
    min_cells: int = 4

    def _select_records(self, content: str, context: ParseContext) -> List[Tag]:
        soup = BeautifulSoup(content, "html.parser")
        return soup.select(self.row_selector)

    def _parse_record(self, record: Tag, index: int, context: ParseContext) -> NoticeRow:
        cells = record.find_all("td", recursive=False)
        if len(cells) < self.min_cells:
            raise ParsingException(
                "Too few cells", {"expected": self.min_cells, "found": len(cells)}
            )

        no = self._parse_no(cells[0].get_text(strip=True), context)

        anchor = cells[1].find("a")
        href = anchor.get("href", "").strip() if anchor else ""
        if not href:
            raise ParsingException("Missing link", {"no": no})

        return NoticeRow(
            no=no,
            title=normalize_text(cells[1].get_text()),
            link=self._resolve_link(html.unescape(href), context),
            author=normalize_text(cells[2].get_text()),
            date=parse_date(cells[3].get_text(strip=True)),
        )

    def _parse_no(self, text: str, context: ParseContext) -> int:
        try:
            return int(text)
        except ValueError:
            raise ParsingException("Non-numeric id", {"value": text})

    def _resolve_link(self, href: str, context: ParseContext) -> str:
        return context.source.resolve_link(href)
