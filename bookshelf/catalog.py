"""Locally held replica of the Book Store collection."""
import logging
from typing import Iterable, Optional, Tuple

from bookshelf.models import Book, BookId

logger = logging.getLogger(__name__)


class Catalog:
    """
    Ordered book snapshot, replaced wholesale on every refresh.

    The snapshot is an immutable tuple so a reader holding ``books``
    never sees a half-applied refresh.
    """

    def __init__(self, books: Iterable[Book] = ()):
        self._books: Tuple[Book, ...] = tuple(books)
        self.version = 0

    @property
    def books(self) -> Tuple[Book, ...]:
        return self._books

    def __len__(self) -> int:
        return len(self._books)

    def __iter__(self):
        return iter(self._books)

    def get(self, book_id: BookId) -> Optional[Book]:
        for book in self._books:
            if book.id == book_id:
                return book
        return None

    def replace(self, books: Iterable[Book]) -> None:
        self._books = tuple(books)
        self.version += 1
        logger.debug(f"Catalog replaced: {len(self._books)} books (version {self.version})")

    async def refresh(self, client) -> bool:
        """
        Reload from the Book Store.

        Args:
            client: Object with an async ``list_books()``

        Returns:
            True if the catalog was replaced; on failure the previous
            snapshot is kept
        """
        try:
            books = await client.list_books()
        except Exception as e:
            logger.error(f"Catalog refresh raised: {e}", exc_info=True)
            books = None

        if books is None:
            logger.warning("Catalog refresh failed; keeping last known snapshot")
            return False
        self.replace(books)
        logger.info(f"Catalog refreshed with {len(books)} books")
        return True
