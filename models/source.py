import urllib.parse
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParseStrategy(str, Enum):
    TABULAR_NOTICE = "tabular_notice"  # board_st table, pinned rows on page 1
    TABULAR_NO_RSS = "tabular_no_rss"  # board-table, strictly numbered
    RSS_DESCENDING = "rss_descending"  # RSS feed numbered from total count


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Unique identifier for the source")
    name: str = Field(..., description="Display name of the board")
    origin: str = Field(..., description="Scheme and host used to resolve relative links")
    path_template: str = Field(..., description="Listing path with a {page} placeholder")
    strategy: ParseStrategy = Field(..., description="Parsing strategy for the listing")
    total_count_path: Optional[str] = Field(
        None, description="Auxiliary page holding the total article count"
    )

    @model_validator(mode="after")
    def check_template(self):
        if "{page}" not in self.path_template:
            raise ValueError(f"path_template for '{self.key}' must contain '{{page}}'")
        if self.strategy == ParseStrategy.RSS_DESCENDING and not self.total_count_path:
            raise ValueError(f"RSS source '{self.key}' requires total_count_path")
        return self

    def url_for(self, page: int) -> str:
        return self.origin.rstrip("/") + self.path_template.format(page=page)

    @property
    def total_count_url(self) -> Optional[str]:
        if not self.total_count_path:
            return None
        return self.origin.rstrip("/") + self.total_count_path

    def resolve_link(self, href: str) -> str:
        """Resolves a relative href against the source origin."""
        if href.startswith(("http://", "https://")):
            return href
        return urllib.parse.urljoin(self.origin.rstrip("/") + "/", href)
