from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict

from models.notice import NoticeRow

# (source key, page number)
CacheKey = Tuple[str, int]


class PageBoundary(BaseModel):
    """First and last row of a page, the cheap fingerprint of its ordering window."""

    model_config = ConfigDict(frozen=True)

    first: NoticeRow
    last: NoticeRow


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    rows: List[NoticeRow]
    fetched_at: float
    # Boundary of page 1 at the time this entry was stored
    head: Optional[PageBoundary] = None
