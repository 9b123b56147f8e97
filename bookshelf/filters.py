"""Catalog filter index: search and mode filtering over the catalog."""
from typing import List, Optional, Sequence

from bookshelf.models import Book, FilterMode, FilterState, ReadingStatus


def resolve_status(statuses: Sequence[ReadingStatus], status_id: Optional[str]) -> Optional[str]:
    """Translate a reading-status id into its label."""
    if status_id is None:
        return None
    for status in statuses:
        if status.id == status_id:
            return status.status
    return None


def matches_search(book: Book, search_text: str) -> bool:
    """Case-insensitive substring match on title or author."""
    if not search_text:
        return True
    needle = search_text.lower()
    return needle in book.title.lower() or needle in book.author.lower()


def matches_mode(book: Book, state: FilterState, statuses: Sequence[ReadingStatus]) -> bool:
    if state.mode is FilterMode.ALL or state.selected_value is None:
        return True

    if state.mode is FilterMode.BY_STATUS:
        # An id missing from the reference list matches nothing
        label = resolve_status(statuses, state.selected_value)
        return label is not None and book.status == label

    return book.category == state.selected_value


def filter_books(
    books: Sequence[Book],
    state: FilterState,
    statuses: Sequence[ReadingStatus] = (),
) -> List[Book]:
    """
    Compute the visible sequence.

    Args:
        books: Catalog in its stored order
        state: Current filter state
        statuses: Reading-status reference list

    Returns:
        Books passing both predicates, in catalog order
    """
    return [
        book
        for book in books
        if matches_search(book, state.search_text) and matches_mode(book, state, statuses)
    ]


def available_categories(books: Sequence[Book]) -> List[str]:
    """Distinct categories of the catalog, sorted ascending."""
    return sorted({book.category for book in books})
