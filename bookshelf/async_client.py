"""Async HTTP client for the Book Store service."""
import asyncio
import httpx
from typing import List, Optional, Dict, Any
import logging

from bookshelf.models import Book, BookId, RequestResult
from bookshelf.parse import parse_books_response

logger = logging.getLogger(__name__)


class AsyncBookStoreClient:
    """Async client used by the catalog engine."""

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api",
        timeout: int = 10,
        max_concurrent: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: Resolved Book Store address
            api_prefix: Path prefix of the books API
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )

    def _books_path(self, *parts: Any) -> str:
        suffix = "".join(f"/{part}" for part in parts)
        return f"{self.api_prefix}/books{suffix}"

    async def list_books(self) -> Optional[List[Book]]:
        """
        Fetch the full catalog.

        Returns:
            Parsed books, or None on any transport failure
        """
        payload = await self._request_json("GET", self._books_path())
        if payload is None:
            return None
        return parse_books_response(payload)

    async def update_pages_read(self, book_id: BookId, pages_read: int) -> RequestResult:
        """Send a progress update for one book."""
        return await self._send(
            "PUT",
            self._books_path(book_id, "pages-read"),
            {"pagesRead": pages_read}
        )

    async def add_review(self, book_id: BookId, rating: int, comment: str = "") -> RequestResult:
        """Submit a review for one book."""
        return await self._send(
            "POST",
            self._books_path(book_id, "review"),
            {"rating": rating, "comment": comment}
        )

    async def _request_json(self, method: str, path: str) -> Optional[Any]:
        async with self.semaphore:
            try:
                logger.info(f"Async request: {method} {path}")
                response = await self.client.request(method, path)

                if response.is_success:
                    return response.json()
                else:
                    logger.warning(f"Status {response.status_code} for {method} {path}")
                    return None

            except httpx.HTTPError as e:
                logger.error(f"Async request failed: {e}")
                return None
            except ValueError as e:
                logger.error(f"Malformed JSON from {path}: {e}")
                return None

    async def _send(self, method: str, path: str, body: Dict[str, Any]) -> RequestResult:
        async with self.semaphore:
            try:
                logger.info(f"Async request: {method} {path}")
                response = await self.client.request(method, path, json=body)

                if response.is_success:
                    return RequestResult(True, response.status_code)
                else:
                    logger.warning(f"Status {response.status_code} for {method} {path}")
                    return RequestResult(
                        False,
                        response.status_code,
                        f"HTTP {response.status_code}"
                    )

            except httpx.HTTPError as e:
                logger.error(f"Async request failed: {e}")
                return RequestResult(False, None, str(e) or e.__class__.__name__)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
