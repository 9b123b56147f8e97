"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Book Store
    BOOK_STORE_BASE_URL = os.getenv("BOOK_STORE_BASE_URL", "http://localhost:3000")
    BOOK_STORE_API_PREFIX = os.getenv("BOOK_STORE_API_PREFIX", "/api")

    @property
    def BOOKS_URL(self):
        """Build the books collection URL."""
        return f"{self.BOOK_STORE_BASE_URL.rstrip('/')}{self.BOOK_STORE_API_PREFIX}/books"

    # Reading-status reference list (JSON file, optional)
    READING_STATUSES_FILE = os.getenv("READING_STATUSES_FILE")

    # Session behaviour
    CLOSE_ON_WRITE_FAILURE = _env_flag("CLOSE_ON_WRITE_FAILURE")

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "3"))
    DEFAULT_MAX_CONCURRENT = int(os.getenv("DEFAULT_MAX_CONCURRENT", "5"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
