"""Shared fixtures: sample books and an in-memory Book Store."""
import dataclasses

import pytest

from bookshelf.models import Book, RequestResult


def make_book(book_id, title, author="Unknown", category="Fiction", status="Not started",
              pages=300, pages_read=0):
    return Book(
        id=book_id,
        title=title,
        author=author,
        category=category,
        isbn="",
        status=status,
        pages=pages,
        pages_read=pages_read,
        publisher="",
    )


class FakeBookStore:
    """Async Book Store double that records every call in order."""

    def __init__(self, books):
        self.books = list(books)
        self.calls = []
        self.fail_list = False
        self.fail_progress = False
        self.fail_review = False
        self.drop_on_refresh = set()

    async def list_books(self):
        self.calls.append(("list",))
        if self.fail_list:
            return None
        return [book for book in self.books if book.id not in self.drop_on_refresh]

    async def update_pages_read(self, book_id, pages_read):
        self.calls.append(("pages-read", book_id, pages_read))
        if self.fail_progress:
            return RequestResult(False, 503, "HTTP 503")
        self.books = [
            dataclasses.replace(book, pages_read=pages_read) if book.id == book_id else book
            for book in self.books
        ]
        return RequestResult(True, 200)

    async def add_review(self, book_id, rating, comment=""):
        self.calls.append(("review", book_id, rating, comment))
        if self.fail_review:
            return RequestResult(False, None, "connection refused")
        return RequestResult(True, 201)

    def count(self, kind):
        return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture
def sample_books():
    return [
        make_book(1, "Dune", author="Frank Herbert", category="Sci-Fi",
                  status="Reading", pages=400, pages_read=50),
        make_book(2, "Foundation", author="Isaac Asimov", category="Sci-Fi",
                  status="Finished", pages=400, pages_read=400),
        make_book(3, "Emma", author="Jane Austen", category="Classics",
                  status="Not started", pages=474, pages_read=0),
        make_book(4, "The Dispossessed", author="Ursula K. Le Guin", category="Sci-Fi",
                  status="Reading", pages=387, pages_read=120),
    ]


@pytest.fixture
def store(sample_books):
    return FakeBookStore(sample_books)
