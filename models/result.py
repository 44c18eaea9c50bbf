from typing import List, Optional
from pydantic import BaseModel, Field

from core.exceptions import ErrorKind, NoticeApiException
from models.notice import NoticeRow


class FetchResult(BaseModel):
    """Non-raising outcome of a NoticeService query."""

    rows: List[NoticeRow] = Field(default_factory=list)
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def row(self) -> Optional[NoticeRow]:
        """Last row, the answer of an index query."""
        return self.rows[-1] if self.rows else None

    @classmethod
    def success(cls, rows: List[NoticeRow]) -> "FetchResult":
        return cls(rows=list(rows))

    @classmethod
    def failure(cls, exc: NoticeApiException) -> "FetchResult":
        return cls(error=exc.kind, message=str(exc))
