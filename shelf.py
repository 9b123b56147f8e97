#!/usr/bin/env python3
"""Book Shelf CLI - browse the catalog and record reading progress."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from bookshelf.client import BookStoreClient
from bookshelf.async_client import AsyncBookStoreClient
from bookshelf.catalog import Catalog
from bookshelf.config import Config
from bookshelf.engine import LibraryEngine
from bookshelf.filters import available_categories, filter_books
from bookshelf.models import DEFAULT_READING_STATUSES, FilterMode, FilterState
from bookshelf.parse import load_reading_statuses
import logging

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def reading_statuses(config: Config):
    """Reading-status reference list from config, or the built-in default."""
    if config.READING_STATUSES_FILE:
        return load_reading_statuses(config.READING_STATUSES_FILE)
    return list(DEFAULT_READING_STATUSES)


def async_client(config: Config) -> AsyncBookStoreClient:
    return AsyncBookStoreClient(
        config.BOOK_STORE_BASE_URL,
        api_prefix=config.BOOK_STORE_API_PREFIX,
        timeout=config.DEFAULT_TIMEOUT,
        max_concurrent=config.DEFAULT_MAX_CONCURRENT
    )


def filter_state_from_args(args) -> FilterState:
    """Build the filter state from --search/--status/--category."""
    state = FilterState().with_search(args.search or "")
    if args.status:
        state = state.with_mode(FilterMode.BY_STATUS).with_value(args.status)
    elif args.category:
        state = state.with_mode(FilterMode.BY_CATEGORY).with_value(args.category)
    return state


def fetch_catalog_sync(config: Config) -> Catalog:
    """Load the catalog with the retrying sync client."""
    catalog = Catalog()
    with BookStoreClient(
        config.BOOK_STORE_BASE_URL,
        api_prefix=config.BOOK_STORE_API_PREFIX,
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES
    ) as client:
        books = client.list_books()

    if books is None:
        logger.error("Failed to fetch books")
    else:
        catalog.replace(books)
    return catalog


async def fetch_catalog_async(config: Config) -> Catalog:
    """Load the catalog with the async client."""
    catalog = Catalog()
    async with async_client(config) as client:
        await catalog.refresh(client)
    return catalog


def list_books(args, config: Config):
    """List visible books under the requested filters."""
    if args.use_async:
        catalog = asyncio.run(fetch_catalog_async(config))
    else:
        catalog = fetch_catalog_sync(config)

    state = filter_state_from_args(args)
    books = filter_books(catalog.books, state, reading_statuses(config))

    if not books:
        print("Your library is empty" if len(catalog) == 0 else "No books found")
        return

    display_books(books, args.format)


def display_books(books, format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Author", "Category", "Status", "Progress"]
        rows = [
            [
                book.id,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                book.category,
                book.status,
                book.progress_str or "N/A"
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        books_dict = [
            {
                "id": book.id,
                "title": book.title,
                "author": book.author,
                "category": book.category,
                "isbn": book.isbn,
                "status": book.status,
                "pages": book.pages,
                "pagesRead": book.pages_read,
                "publisher": book.publisher,
                "coverUrl": book.cover_url
            }
            for book in books
        ]
        print(json.dumps(books_dict, indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author}")


def display_book_details(book):
    """Show a single book the way the detail view does."""
    rows = [["Title", book.title], ["Author", book.author]]
    if book.publisher:
        rows.append(["Publisher", book.publisher])
    if book.pages > 0:
        rows.append(["Pages", book.pages])
        rows.append(["Pages Read", book.progress_str])
    if book.isbn:
        rows.append(["ISBN", book.isbn])
    rows.append(["Status", book.status])
    rows.append(["Category", book.category])
    if book.cover_url:
        rows.append(["Cover", book.cover_url])
    print("\n" + tabulate(rows, tablefmt="plain"))


def parse_book_id(raw: str):
    """Book ids are numeric on the wire when they look numeric."""
    return int(raw) if raw.isdigit() else raw


def show_categories(args, config: Config):
    catalog = fetch_catalog_sync(config)
    for category in available_categories(catalog.books):
        print(category)


def show_statuses(args, config: Config):
    rows = [[status.id, status.status] for status in reading_statuses(config)]
    print(tabulate(rows, headers=["ID", "Status"], tablefmt="simple"))


def show_book(args, config: Config) -> int:
    catalog = fetch_catalog_sync(config)
    book = catalog.get(parse_book_id(args.book_id))
    if book is None:
        logger.error(f"No book with id {args.book_id}")
        return 1
    display_book_details(book)
    return 0


async def update_book(args, config: Config) -> int:
    """Open a book, apply the edits and save through the engine."""
    async with async_client(config) as client:
        engine = LibraryEngine(
            client,
            statuses=reading_statuses(config),
            close_on_write_failure=config.CLOSE_ON_WRITE_FAILURE
        )

        if not await engine.refresh():
            logger.error("Failed to fetch books")
            return 1

        try:
            book = engine.open_book(parse_book_id(args.book_id))
        except KeyError:
            logger.error(f"No book with id {args.book_id}")
            return 1

        if args.pages_read is not None and not engine.set_pages_read(args.pages_read):
            logger.error(f"Pages read must be between 0 and {book.pages}")
            engine.dismiss()
            return 1

        if args.rating is not None:
            engine.set_rating(args.rating)

        outcome = await engine.save()

        if not outcome.ok:
            for error in outcome.errors:
                logger.error(f"❌ {error}")
            return 1

        if outcome.reconciled_book:
            display_book_details(outcome.reconciled_book)
        if not outcome.refreshed:
            logger.warning("⚠️  Saved, but the catalog could not be refreshed")
        logger.info(f"✅ Saved book {book.id}")
        return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book Shelf - personal library catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List everything
  %(prog)s list

  # Search and filter by reading status id
  %(prog)s list --search dune --status 2

  # Record progress and a rating
  %(prog)s update 1 --pages-read 120 --rating 4
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # List command
    list_parser = subparsers.add_parser("list", help="List books")
    list_parser.add_argument("--search", help="Match title or author (case-insensitive)")
    filter_group = list_parser.add_mutually_exclusive_group()
    filter_group.add_argument("--status", help="Reading status id")
    filter_group.add_argument("--category", help="Exact category")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    list_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    subparsers.add_parser("categories", help="List categories present in the catalog")
    subparsers.add_parser("statuses", help="List reading statuses")

    show_parser = subparsers.add_parser("show", help="Show one book")
    show_parser.add_argument("book_id", help="Book id")

    # Update command
    update_parser = subparsers.add_parser("update", help="Update reading progress and rating")
    update_parser.add_argument("book_id", help="Book id")
    update_parser.add_argument("--pages-read", help="Pages read so far")
    update_parser.add_argument("--rating", type=int, choices=range(0, 6), help="Rating 1-5 (0 = none)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    setup_logging(config)

    try:
        if args.command == "list":
            list_books(args, config)

        elif args.command == "categories":
            show_categories(args, config)

        elif args.command == "statuses":
            show_statuses(args, config)

        elif args.command == "show":
            sys.exit(show_book(args, config))

        elif args.command == "update":
            sys.exit(asyncio.run(update_book(args, config)))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
