"""Parse and normalize Book Store API responses."""
import json
import logging
import math
import re
from typing import Dict, Any, List, Optional
from bookshelf.models import Book, ReadingStatus

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _to_int(value: Any, default: int = 0) -> int:
    """Coerce a payload number to int, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single book record from the Book Store.

    Args:
        item: One element of the ``data`` array

    Returns:
        Book object or None if the record has no id
    """
    try:
        book_id = item.get("id")
        if book_id is None or book_id == "":
            return None
        if isinstance(book_id, bool) or not isinstance(book_id, (int, str)):
            logger.warning(f"Skipping book with unusable id: {book_id!r}")
            return None

        pages = max(_to_int(item.get("pages")), 0)
        pages_read = max(_to_int(item.get("pagesRead")), 0)

        return Book(
            id=book_id,
            title=_to_text(item.get("title")),
            author=_to_text(item.get("author")),
            category=_to_text(item.get("category")),
            isbn=_to_text(item.get("isbn")),
            status=_to_text(item.get("status")),
            pages=pages,
            pages_read=pages_read,
            publisher=_to_text(item.get("publisher")),
            cover_url=item.get("coverUrl") or None,
        )
    except (AttributeError, TypeError) as e:
        # Log but don't crash - a single bad record must not drop the catalog
        logger.warning(f"Failed to parse book: {e}")
        return None


def parse_books_response(response_json: Any) -> Optional[List[Book]]:
    """
    Parse the ``GET books`` envelope.

    Args:
        response_json: Decoded ``{success, data, timestamp}`` payload

    Returns:
        List of Book objects, or None when the envelope reports failure
        or is malformed (the caller keeps its previous catalog)
    """
    if not isinstance(response_json, dict):
        logger.warning("Malformed books payload: not an object")
        return None

    if not response_json.get("success"):
        logger.warning("Book Store reported success=false")
        return None

    data = response_json.get("data")
    if not isinstance(data, list):
        logger.warning("Malformed books payload: data is not a list")
        return None

    books = []
    for item in data:
        book = parse_book(item) if isinstance(item, dict) else None
        if book:
            books.append(book)

    return deduplicate_books(books)


def deduplicate_books(books: List[Book]) -> List[Book]:
    """
    Remove duplicate books by ID, keeping the first occurrence.

    Args:
        books: List of Book objects

    Returns:
        Deduplicated list of books
    """
    seen_ids = set()
    unique_books = []

    for book in books:
        if book.id not in seen_ids:
            seen_ids.add(book.id)
            unique_books.append(book)
        else:
            logger.warning(f"Duplicate book id in snapshot: {book.id}")

    return unique_books


def parse_reading_statuses(items: List[Dict[str, Any]]) -> List[ReadingStatus]:
    """Parse the reading-status reference list, preserving its order."""
    statuses = []
    for item in items:
        status_id = item.get("reading_status_id", item.get("id"))
        label = item.get("status")
        if status_id is None or label is None:
            logger.warning(f"Skipping reading status entry: {item}")
            continue
        statuses.append(ReadingStatus(str(status_id), str(label)))
    return statuses


def coerce_page_input(value: Any) -> int:
    """
    Turn raw pages-read input into an integer.

    Numbers are truncated, strings read their leading integer, and
    anything else (empty, non-numeric, NaN) becomes 0.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def load_reading_statuses(path: str) -> List[ReadingStatus]:
    """Load the reading-status reference list from a JSON file."""
    with open(path, encoding="utf-8") as f:
        items = json.load(f)
    if not isinstance(items, list):
        raise ValueError(f"{path}: expected a JSON array of reading statuses")
    return parse_reading_statuses(items)
