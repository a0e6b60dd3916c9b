"""HTTP client for the Open Library catalog."""
import requests
from typing import List, Optional, Dict, Any, Type
import logging

from readinglist.errors import AuthorLookupError, NetworkError, RatingLookupError, ReadingListFetchError
from readinglist.models import AuthorRecord, RatingRecord, WorkRecord
from readinglist.parse import (
    parse_author_response,
    parse_rating_response,
    parse_reading_list_response,
)

logger = logging.getLogger(__name__)


class CatalogClient:
    """Blocking client for the Open Library reading-list and search endpoints."""

    def __init__(
        self,
        base_url: str = "https://openlibrary.org",
        reading_list_url: Optional[str] = None,
        reading_list_limit: int = 100,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Open Library client.

        Args:
            base_url: Open Library root URL
            reading_list_url: Full reading-list endpoint URL
            reading_list_limit: Max works kept from the reading list (0 = all)
            timeout: Request timeout in seconds (None = wait indefinitely)
            session: Optional session to reuse
        """
        self.base_url = base_url.rstrip("/")
        self.reading_list_url = (
            reading_list_url or f"{self.base_url}/people/mekBot/books/want-to-read.json"
        )
        self.reading_list_limit = reading_list_limit
        self.timeout = timeout

        # Create session for connection pooling
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None):
        """Build a client from a ``Config`` instance."""
        return cls(
            base_url=config.OPENLIBRARY_BASE_URL,
            reading_list_url=config.READING_LIST_URL,
            reading_list_limit=config.READING_LIST_LIMIT,
            timeout=config.DEFAULT_TIMEOUT,
            session=session,
        )

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        error_cls: Type[NetworkError] = NetworkError
    ) -> Dict[str, Any]:
        """
        Make a single HTTP GET request.

        Args:
            url: Request URL
            params: Query parameters
            error_cls: Exception type raised on failure

        Returns:
            Decoded JSON object
        """
        try:
            logger.info(f"Request: {url} {params or ''}")
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(f"Timeout: {url}")
            raise error_cls(f"Request to {url} timed out", url=url) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Connection error: {e}")
            raise error_cls(f"Request to {url} failed: {e}", url=url) from e

        if response.status_code != 200:
            logger.warning(f"Status {response.status_code} for {url}")
            raise error_cls(f"Request to {url} returned status {response.status_code}", url=url)

        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(f"Invalid JSON from {url}: {e}", url=url) from e

        if not isinstance(data, dict):
            raise error_cls(f"Unexpected payload from {url}", url=url)
        return data

    def fetch_reading_list(self) -> List[WorkRecord]:
        """Fetch the reading list; raises ReadingListFetchError on failure."""
        data = self._get_json(self.reading_list_url, error_cls=ReadingListFetchError)
        works = parse_reading_list_response(data, limit=self.reading_list_limit)
        logger.info(f"Fetched {len(works)} works")
        return works

    def fetch_author(self, name: str) -> Optional[AuthorRecord]:
        """Look up an author by name; None when nothing matches."""
        data = self._get_json(
            f"{self.base_url}/search/authors.json",
            params={"q": name},
            error_cls=AuthorLookupError,
        )
        return parse_author_response(name, data)

    def fetch_rating(self, title: str) -> Optional[RatingRecord]:
        """Look up ratings for a title; None when nothing matches."""
        data = self._get_json(
            f"{self.base_url}/search.json",
            params={"q": title},
            error_cls=RatingLookupError,
        )
        return parse_rating_response(title, data)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
