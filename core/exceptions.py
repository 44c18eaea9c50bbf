"""
Custom exception hierarchy for kmu-notice.
Each exception carries an ErrorKind so callers can branch on the kind
(see FetchResult) instead of on the class.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Discriminates user-visible failure categories."""

    VALIDATION = "validation"
    UNSUPPORTED_SOURCE = "unsupported_source"
    TRANSPORT = "transport"
    PARSING = "parsing"
    TOTAL_COUNT_UNAVAILABLE = "total_count_unavailable"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    UNKNOWN = "unknown"


class NoticeApiException(Exception):
    """Base exception for all kmu-notice errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


# =============================================================================
# Argument / Source Exceptions
# =============================================================================


class ValidationException(NoticeApiException):
    """Exception for invalid page, count or index arguments."""

    kind = ErrorKind.VALIDATION


class UnsupportedSourceException(NoticeApiException):
    """Exception when a source is unknown or does not support an operation."""

    kind = ErrorKind.UNSUPPORTED_SOURCE


class IndexOutOfRangeException(NoticeApiException):
    """Exception when an absolute index lies beyond the available rows."""

    kind = ErrorKind.INDEX_OUT_OF_RANGE


# =============================================================================
# Scraper Exceptions
# =============================================================================


class ScraperException(NoticeApiException):
    """Base exception for scraping-related errors."""

    kind = ErrorKind.TRANSPORT


class NetworkException(ScraperException):
    """Exception for network/HTTP errors, including timeouts."""

    pass


class ParsingException(ScraperException):
    """Exception for a malformed individual record. Always recovered by the parser."""

    kind = ErrorKind.PARSING


class TotalCountUnavailableException(ScraperException):
    """Exception when the total article count cannot be extracted."""

    kind = ErrorKind.TOTAL_COUNT_UNAVAILABLE
