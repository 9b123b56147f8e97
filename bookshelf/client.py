"""HTTP client for the Book Store service with resilience patterns."""
import time
import random
import requests
from typing import Optional, Dict, Any, List
import logging

from bookshelf.models import Book, BookId, RequestResult
from bookshelf.parse import parse_books_response

logger = logging.getLogger(__name__)

# Methods that may be repeated without side effects on the store
IDEMPOTENT_METHODS = frozenset({"GET", "PUT"})


class BookStoreClient:
    """Client for the Book Store with timeouts, retries, and backoff."""

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api",
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize Book Store client.

        Args:
            base_url: Resolved Book Store address
            api_prefix: Path prefix of the books API
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts for idempotent requests
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff
        self._last_status: Optional[int] = None
        self._last_error: Optional[str] = None

        # Create session for connection pooling
        self.session = requests.Session()

    def _books_url(self, *parts: Any) -> str:
        suffix = "".join(f"/{part}" for part in parts)
        return f"{self.base_url}{self.api_prefix}/books{suffix}"

    def list_books(self) -> Optional[List[Book]]:
        """
        Fetch the full catalog.

        Returns:
            Parsed books, or None if all retries failed
        """
        response = self._make_request_with_retry("GET", self._books_url())
        if response is None:
            return None

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Malformed JSON from Book Store: {e}")
            return None

        return parse_books_response(payload)

    def update_pages_read(self, book_id: BookId, pages_read: int) -> RequestResult:
        """Send a progress update for one book."""
        return self._write("PUT", self._books_url(book_id, "pages-read"), {"pagesRead": pages_read})

    def add_review(self, book_id: BookId, rating: int, comment: str = "") -> RequestResult:
        """Submit a review for one book (never retried)."""
        return self._write(
            "POST",
            self._books_url(book_id, "review"),
            {"rating": rating, "comment": comment}
        )

    def _write(self, method: str, url: str, body: Dict[str, Any]) -> RequestResult:
        response = self._make_request_with_retry(method, url, body)
        if response is None:
            return RequestResult(False, self._last_status, self._last_error)
        return RequestResult(True, response.status_code)

    def _make_request_with_retry(
        self,
        method: str,
        url: str,
        body: Optional[Dict[str, Any]] = None
    ) -> Optional[requests.Response]:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method
            url: Request URL
            body: Optional JSON body

        Returns:
            Successful response or None if all retries exhausted
        """
        attempts = self.max_retries if method in IDEMPOTENT_METHODS else 1
        self._last_status = None
        self._last_error = None

        for attempt in range(attempts):
            try:
                logger.info(f"Request attempt {attempt + 1}/{attempts}: {method} {url}")

                response = self.session.request(
                    method,
                    url,
                    json=body,
                    timeout=self.timeout
                )
                self._last_status = response.status_code

                # Handle different status codes
                if 200 <= response.status_code < 300:
                    logger.info(f"Success: {response.status_code}")
                    return response

                self._last_error = f"HTTP {response.status_code}"

                if response.status_code == 429:
                    # Rate limited - retry with backoff
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    if attempt < attempts - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 500:
                    # Server error - retryable
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < attempts - 1:
                        self._backoff(attempt)
                        continue

                else:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}): {response.text}")
                    return None

            except requests.exceptions.Timeout:
                self._last_error = "timeout"
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < attempts - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                self._last_error = f"connection error: {e}"
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < attempts - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.RequestException as e:
                self._last_error = str(e)
                logger.error(f"Unexpected error: {e}")
                return None

        logger.error(f"All {attempts} attempts failed for {method} {url}")
        return None

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        delay = self.base_backoff * (2 ** attempt)
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
