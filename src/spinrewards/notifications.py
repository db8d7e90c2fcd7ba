"""Client-facing notices attached to API responses."""

from enum import Enum

from pydantic import BaseModel


class NoticeKind(str, Enum):
    """Notice variants a client renders as a toast."""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notice(BaseModel):
    """A single toast-style message."""
    kind: NoticeKind
    title: str
    message: str


def success(title: str, message: str) -> Notice:
    return Notice(kind=NoticeKind.SUCCESS, title=title, message=message)


def error(title: str, message: str) -> Notice:
    return Notice(kind=NoticeKind.ERROR, title=title, message=message)


def info(title: str, message: str) -> Notice:
    return Notice(kind=NoticeKind.INFO, title=title, message=message)
