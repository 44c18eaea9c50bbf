from pydantic_settings import BaseSettings
from typing import List, Optional
from pydantic import Field, field_validator
from core import constants


class Settings(BaseSettings):
    # --- Cache ---
    CACHE_TTL: float = Field(
        constants.DEFAULT_CACHE_TTL, description="Seconds a cached page is served without verification"
    )

    # --- Scraper ---
    REQUEST_TIMEOUT: float = Field(
        constants.DEFAULT_REQUEST_TIMEOUT, description="Per-request timeout in seconds"
    )
    USER_AGENT: str = Field(constants.DEFAULT_USER_AGENT)
    MAX_PAGE_WALK: int = Field(
        constants.DEFAULT_MAX_PAGE_WALK, description="Max pages walked by count/index queries"
    )

    # Fail the page fetch instead of numbering from 0 when the total count is unavailable
    STRICT_TOTAL_COUNT: bool = Field(False, description="Raise on missing total article count")

    # Optional override for the sources catalog file
    SOURCES_FILE: Optional[str] = Field(None, description="Path to sources.json")

    # --- Logging ---
    LOG_LEVEL: str = Field(constants.DEFAULT_LOG_LEVEL, description="Logging level")
    LOG_FILE: str = Field(constants.DEFAULT_LOG_FILE, description="Log file path")
    LOG_FORMAT: str = Field(constants.DEFAULT_LOG_FORMAT, description="Log format (text/json)")
    LOG_MAX_BYTES: int = Field(constants.DEFAULT_LOG_MAX_BYTES, description="Max log file size")
    LOG_BACKUP_COUNT: int = Field(constants.DEFAULT_LOG_BACKUP_COUNT, description="Log backup count")

    @field_validator("CACHE_TTL", "REQUEST_TIMEOUT")
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("MAX_PAGE_WALK")
    @classmethod
    def page_walk_must_be_positive(cls, v):
        if v < 1:
            raise ValueError("MAX_PAGE_WALK must be at least 1")
        return v

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def normalize_log_format(cls, v):
        if isinstance(v, str):
            v = v.strip().strip("'").strip('"').lower()
            if v not in ("text", "json"):
                raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got '{v}'")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def validate_all(self) -> List[str]:
        """
        Validate all configuration settings.
        Returns a list of warning/error messages.
        """
        errors = []

        if self.CACHE_TTL < 10:
            errors.append(
                f"⚠️ CACHE_TTL is very low ({self.CACHE_TTL}s) - most lookups will hit the network"
            )

        if self.REQUEST_TIMEOUT > 30:
            errors.append(f"⚠️ REQUEST_TIMEOUT is high ({self.REQUEST_TIMEOUT}s)")

        if not self.USER_AGENT:
            errors.append("❌ USER_AGENT is empty - some boards reject anonymous clients")

        if self.STRICT_TOTAL_COUNT:
            errors.append(
                "⚠️ STRICT_TOTAL_COUNT is enabled - RSS boards fail when the article count is missing"
            )

        return errors


settings = Settings()
