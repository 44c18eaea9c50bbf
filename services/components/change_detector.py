"""
ChangeDetector component for deciding whether a board has shifted.
Boards are not append-only: a new post pushes every row down one slot,
so comparing the boundary rows of page 1 detects any new arrival.
"""
from typing import List, Optional

from core.logger import get_logger
from models.cache import PageBoundary
from models.notice import NoticeRow

logger = get_logger(__name__)


class ChangeDetector:
    """
    Compares page boundaries (first and last row) between fetches.
    """

    def boundary_of(self, rows: List[NoticeRow]) -> Optional[PageBoundary]:
        """
        Returns the boundary of a page, or None for an empty page.
        """
        if not rows:
            return None
        return PageBoundary(first=rows[0], last=rows[-1])

    def is_unchanged(
        self,
        recorded: Optional[PageBoundary],
        current: Optional[PageBoundary],
    ) -> bool:
        """
        True only when both boundaries exist and are structurally equal.
        A missing boundary means no comparison is possible.

        Args:
            recorded: Boundary stored alongside the cached entry
            current: Boundary of a fresh probe

        Returns:
            True if the ordering window has not moved
        """
        if recorded is None or current is None:
            logger.debug("[CHANGE_DETECTOR] No boundary to compare")
            return False

        if recorded.first != current.first:
            logger.debug(
                f"[CHANGE_DETECTOR] Head row changed: '{recorded.first.title}' -> '{current.first.title}'"
            )
            return False

        if recorded.last != current.last:
            logger.debug(
                f"[CHANGE_DETECTOR] Tail row changed: '{recorded.last.title}' -> '{current.last.title}'"
            )
            return False

        return True
