"""Book shelf catalog engine."""
from bookshelf.engine import LibraryEngine
from bookshelf.models import Book, FilterMode, FilterState, ReadingStatus, SessionState

__all__ = ["LibraryEngine", "Book", "FilterMode", "FilterState", "ReadingStatus", "SessionState"]
