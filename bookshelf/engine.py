"""Library engine: the state a presentation layer renders and the intents it sends."""
import logging
from typing import Any, List, Optional, Sequence

from bookshelf.catalog import Catalog
from bookshelf.filters import available_categories, filter_books
from bookshelf.models import (
    Book,
    BookId,
    DEFAULT_READING_STATUSES,
    FilterMode,
    FilterState,
    ReadingStatus,
    SessionState,
)
from bookshelf.session import BookDetailSession, SaveOutcome

logger = logging.getLogger(__name__)

EMPTY_LIBRARY_MESSAGE = "Your library is empty"
NO_MATCHES_MESSAGE = "No books found"


class LibraryEngine:
    """
    Catalog state engine.

    Exposes the visible books, the available categories and the edit
    session, and accepts search, filter, open, edit, dismiss and save
    intents. Intents are expected to arrive one at a time.
    """

    def __init__(
        self,
        client: Any,
        statuses: Optional[Sequence[ReadingStatus]] = None,
        close_on_write_failure: bool = False
    ):
        """
        Args:
            client: Async Book Store client
            statuses: Reading-status reference list
            close_on_write_failure: Close the session even when a write fails
        """
        self.client = client
        self.statuses: List[ReadingStatus] = list(
            DEFAULT_READING_STATUSES if statuses is None else statuses
        )
        self.catalog = Catalog()
        self.filter_state = FilterState()
        self.session = BookDetailSession(self.catalog, client, close_on_write_failure)

        self._categories: List[str] = []
        self._categories_version = -1

    # Catalog

    async def refresh(self) -> bool:
        """Reload the catalog; the previous snapshot survives a failure."""
        return await self.catalog.refresh(self.client)

    @property
    def books(self) -> Sequence[Book]:
        return self.catalog.books

    @property
    def visible_books(self) -> List[Book]:
        return filter_books(self.catalog.books, self.filter_state, self.statuses)

    @property
    def available_categories(self) -> List[str]:
        if self._categories_version != self.catalog.version:
            self._categories = available_categories(self.catalog.books)
            self._categories_version = self.catalog.version
        return list(self._categories)

    @property
    def empty_state_message(self) -> Optional[str]:
        """Message to show when nothing is visible, or None."""
        if len(self.catalog) == 0:
            return EMPTY_LIBRARY_MESSAGE
        if not self.visible_books:
            return NO_MATCHES_MESSAGE
        return None

    # Filter intents

    def set_search_text(self, text: str) -> None:
        self.filter_state = self.filter_state.with_search(text)

    def set_filter_mode(self, mode: FilterMode) -> None:
        self.filter_state = self.filter_state.with_mode(mode)
        logger.debug(f"Filter mode set to {self.filter_state.mode.value}")

    def set_filter_value(self, value: Optional[str]) -> None:
        self.filter_state = self.filter_state.with_value(value)

    def toggle_filter_value(self, value: str) -> None:
        """Select ``value``, or clear it if it is already selected."""
        if self.filter_state.selected_value == value:
            value = None
        self.set_filter_value(value)

    # Session intents

    @property
    def session_state(self) -> SessionState:
        return self.session.state

    def open_book(self, book_id: BookId) -> Book:
        """
        Open a book from the visible sequence.

        Raises:
            KeyError: if no visible book has ``book_id``
        """
        for book in self.visible_books:
            if book.id == book_id:
                self.session.open(book)
                return book
        raise KeyError(book_id)

    def set_pages_read(self, value: Any) -> bool:
        return self.session.set_pages_read(value)

    def set_rating(self, rating: int) -> None:
        self.session.set_rating(rating)

    def dismiss(self) -> None:
        self.session.dismiss()

    async def save(self) -> SaveOutcome:
        return await self.session.save()
