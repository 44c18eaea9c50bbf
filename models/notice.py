import datetime
from pydantic import BaseModel, ConfigDict

from core import constants


class NoticeRow(BaseModel):
    """
    One normalized announcement row.

    `no` is a display value only: rows shift down a page as newer posts
    arrive, so it does not identify a row across fetches.
    """

    model_config = ConfigDict(frozen=True)

    no: int
    title: str
    link: str
    date: datetime.date
    author: str

    @property
    def is_pinned(self) -> bool:
        return self.no == constants.PINNED_NOTICE_NO

    def __str__(self) -> str:
        no = constants.PINNED_NOTICE_LABEL if self.is_pinned else str(self.no)
        return (
            f"No: {no}\n"
            f"Title: {self.title}\n"
            f"Link: {self.link}\n"
            f"Date: {self.date.isoformat()}\n"
            f"Writer: {self.author}\n"
        )
