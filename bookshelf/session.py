"""Book detail session: the single book open for editing and its save cycle."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from bookshelf.catalog import Catalog
from bookshelf.models import Book, BookId, RequestResult, SessionState
from bookshelf.parse import coerce_page_input

logger = logging.getLogger(__name__)

MAX_RATING = 5


@dataclass
class SaveOutcome:
    """What a save transaction did, reported back to the caller."""
    book_id: BookId
    progress_result: Optional[RequestResult] = None
    review_result: Optional[RequestResult] = None
    refreshed: bool = False
    reconciled_book: Optional[Book] = None
    pages_read_draft: Optional[int] = None
    closed: bool = False
    stale: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class BookDetailSession:
    """
    Closed / Open / Saving state machine over one book.

    The session owns its drafts only. The book itself belongs to the
    catalog and is replaced through a refresh, never mutated here.
    """

    def __init__(self, catalog: Catalog, client: Any, close_on_write_failure: bool = False):
        """
        Args:
            catalog: Shared catalog refreshed after every save
            client: Book Store client with async ``update_pages_read``,
                ``add_review`` and ``list_books``
            close_on_write_failure: Close even when a write failed
        """
        self.catalog = catalog
        self.client = client
        self.close_on_write_failure = close_on_write_failure

        self.state = SessionState.CLOSED
        self.book: Optional[Book] = None
        self.pages_read_draft = 0
        self.rating_draft = 0
        self.last_error: Optional[str] = None
        # Pages read of the last book closed by a save, after reconciliation
        self.last_pages_read: Optional[int] = None
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.state is not SessionState.CLOSED

    @property
    def open_book_id(self) -> Optional[BookId]:
        return self.book.id if self.book else None

    def open(self, book: Book) -> None:
        """Open ``book`` and seed the drafts from its stored values."""
        self._generation += 1
        self.book = book
        self.pages_read_draft = book.pages_read or 0
        # Prior rating is unknown: every save is a fresh review
        self.rating_draft = 0
        self.last_error = None
        self.state = SessionState.OPEN
        logger.info(f"Opened book {book.id}")

    def dismiss(self) -> None:
        """Close without saving. An in-flight save is left to finish but its result is dropped."""
        if self.state is SessionState.CLOSED:
            return
        if self.state is SessionState.SAVING:
            logger.info(f"Dismissed book {self.open_book_id} while a save is in flight")
        self._generation += 1
        self._reset()

    def set_pages_read(self, value: Any) -> bool:
        """
        Propose a new pages-read value.

        Returns:
            True if applied; False if rejected (negative or above the
            page count), leaving the draft unchanged
        """
        self._require_open()
        pages_read = coerce_page_input(value)
        if pages_read < 0 or pages_read > self.book.pages:
            logger.debug(f"Rejected pages-read {pages_read} for book {self.book.id} (pages={self.book.pages})")
            return False
        self.pages_read_draft = pages_read
        return True

    def set_rating(self, rating: int) -> None:
        self._require_open()
        if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= MAX_RATING:
            raise ValueError(f"rating must be an integer in [0, {MAX_RATING}], got {rating!r}")
        self.rating_draft = rating

    async def save(self) -> SaveOutcome:
        """
        Write the drafts, refresh the catalog, then reconcile and close.

        The progress update is sent only when the draft differs from the
        value seen at open time; the review only when a rating was
        picked. Both are attempted before the refresh is issued.
        """
        if self.state is not SessionState.OPEN:
            raise RuntimeError(f"cannot save in state {self.state.value}")

        book = self.book
        generation = self._generation
        self.state = SessionState.SAVING
        self.last_error = None

        try:
            return await self._write_and_refresh(book, generation)
        finally:
            if self.state is SessionState.SAVING and generation == self._generation:
                # Never leave the session stranded mid-save
                self.state = SessionState.OPEN

    async def _write_and_refresh(self, book: Book, generation: int) -> SaveOutcome:
        pages_read = self.pages_read_draft
        rating = self.rating_draft
        outcome = SaveOutcome(book_id=book.id)

        progress = None
        review = None
        if pages_read != (book.pages_read or 0):
            progress = self.client.update_pages_read(book.id, pages_read)
        if rating > 0:
            review = self.client.add_review(book.id, rating, "")

        # Independent writes; completion order does not matter
        pending = [request for request in (progress, review) if request is not None]
        results = iter([
            _as_result(result)
            for result in await asyncio.gather(*pending, return_exceptions=True)
        ])
        if progress is not None:
            outcome.progress_result = next(results)
        if review is not None:
            outcome.review_result = next(results)

        for label, result in (("progress update", outcome.progress_result),
                              ("review", outcome.review_result)):
            if result is not None and not result.ok:
                outcome.errors.append(f"{label} failed: {result.error}")
                logger.warning(f"Book {book.id}: {label} failed ({result.error})")

        outcome.refreshed = await self.catalog.refresh(self.client)

        if generation != self._generation:
            logger.info(f"Dropping stale save result for book {book.id}")
            outcome.stale = True
            return outcome

        refreshed_book = self.catalog.get(book.id) if outcome.refreshed else None
        if refreshed_book is None and outcome.refreshed:
            logger.info(f"Book {book.id} no longer in catalog after refresh")

        if outcome.errors and not self.close_on_write_failure:
            # Keep drafts so the user can retry
            if refreshed_book is not None:
                self.book = refreshed_book
            self.last_error = "; ".join(outcome.errors)
            self.state = SessionState.OPEN
            outcome.reconciled_book = refreshed_book
            outcome.pages_read_draft = self.pages_read_draft
            return outcome

        if outcome.errors:
            self.last_error = "; ".join(outcome.errors)
        if refreshed_book is not None:
            self.book = refreshed_book
            self.pages_read_draft = refreshed_book.pages_read or 0
            outcome.reconciled_book = refreshed_book
        outcome.pages_read_draft = self.pages_read_draft
        self.last_pages_read = self.pages_read_draft

        self._reset()
        outcome.closed = True
        logger.info(f"Saved book {book.id}")
        return outcome

    def _require_open(self) -> None:
        if self.state is not SessionState.OPEN:
            raise RuntimeError(f"no book open for editing (state={self.state.value})")

    def _reset(self) -> None:
        self.state = SessionState.CLOSED
        self.book = None
        self.pages_read_draft = 0
        self.rating_draft = 0


def _as_result(result: Any) -> RequestResult:
    """A write that raised counts as a failed write."""
    if isinstance(result, BaseException):
        logger.error(f"Write request raised: {result!r}")
        return RequestResult(False, None, str(result) or result.__class__.__name__)
    return result
