"""Data models for the book catalog."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union, List

BookId = Union[int, str]


@dataclass(frozen=True)
class Book:
    """Read replica of a book owned by the Book Store."""
    id: BookId
    title: str
    author: str
    category: str
    isbn: str
    status: str
    pages: int
    pages_read: int
    publisher: str
    cover_url: Optional[str] = None

    @property
    def progress_str(self) -> str:
        """Format reading progress, empty when the page count is unknown."""
        if self.pages > 0:
            return f"{self.pages_read} / {self.pages}"
        return ""


@dataclass(frozen=True)
class ReadingStatus:
    """Entry of the reading-status reference list."""
    id: str
    status: str


DEFAULT_READING_STATUSES: List[ReadingStatus] = [
    ReadingStatus("1", "Not started"),
    ReadingStatus("2", "Reading"),
    ReadingStatus("3", "Finished"),
]


class FilterMode(str, Enum):
    ALL = "all"
    BY_STATUS = "status"
    BY_CATEGORY = "category"


@dataclass(frozen=True)
class FilterState:
    """Search text plus the active filter mode and its selected value."""
    search_text: str = ""
    mode: FilterMode = FilterMode.ALL
    selected_value: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "mode", FilterMode(self.mode))

    def with_mode(self, mode: FilterMode) -> "FilterState":
        # A mode switch always drops the previous selection
        return FilterState(self.search_text, FilterMode(mode), None)

    def with_value(self, value: Optional[str]) -> "FilterState":
        if self.mode is FilterMode.ALL:
            return FilterState(self.search_text, self.mode, None)
        return FilterState(self.search_text, self.mode, value)

    def with_search(self, text: str) -> "FilterState":
        return FilterState(text or "", self.mode, self.selected_value)


class SessionState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SAVING = "saving"


@dataclass(frozen=True)
class RequestResult:
    """Outcome of a write request against the Book Store."""
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok
