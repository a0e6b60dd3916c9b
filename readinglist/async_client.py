"""Async HTTP client for parallel catalog lookups."""
import httpx
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


class AsyncCatalogClient:
    """Async client for the Open Library reading-list and search endpoints.

    Every call is a single attempt: failures raise a ``NetworkError``
    subclass and are never retried.
    """

    def __init__(
        self,
        base_url: str = "https://openlibrary.org",
        reading_list_url: Optional[str] = None,
        reading_list_limit: int = 100,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: Open Library root URL
            reading_list_url: Full reading-list endpoint URL
            reading_list_limit: Max works kept from the reading list (0 = all)
            timeout: Request timeout in seconds (None = wait indefinitely)
            transport: Optional httpx transport, used to stub the network
        """
        self.base_url = base_url.rstrip("/")
        self.reading_list_url = (
            reading_list_url or f"{self.base_url}/people/mekBot/books/want-to-read.json"
        )
        self.reading_list_limit = reading_list_limit
        self.timeout = timeout

        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Build a client from a ``Config`` instance."""
        return cls(
            base_url=config.OPENLIBRARY_BASE_URL,
            reading_list_url=config.READING_LIST_URL,
            reading_list_limit=config.READING_LIST_LIMIT,
            timeout=config.DEFAULT_TIMEOUT,
            transport=transport,
        )

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        error_cls: Type[NetworkError] = NetworkError
    ) -> Dict[str, Any]:
        """
        GET ``url`` and decode the JSON body.

        Raises:
            error_cls: on transport failure, non-200 status or bad JSON
        """
        try:
            logger.info(f"Async request: {url} {params or ''}")
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Async request failed: {e}")
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

    async def fetch_reading_list(self) -> List[WorkRecord]:
        """
        Fetch the reading list in upstream order.

        Returns:
            At most ``reading_list_limit`` works

        Raises:
            ReadingListFetchError: if the list cannot be fetched
        """
        data = await self._get_json(self.reading_list_url, error_cls=ReadingListFetchError)
        works = parse_reading_list_response(data, limit=self.reading_list_limit)
        logger.info(f"Fetched {len(works)} works")
        return works

    async def fetch_author(self, name: str) -> Optional[AuthorRecord]:
        """
        Look up an author by name.

        Args:
            name: Author name, sent as the free-text query

        Returns:
            AuthorRecord for the first candidate, or None if there are none

        Raises:
            AuthorLookupError: on transport failure
        """
        data = await self._get_json(
            f"{self.base_url}/search/authors.json",
            params={"q": name},
            error_cls=AuthorLookupError,
        )
        return parse_author_response(name, data)

    async def fetch_rating(self, title: str) -> Optional[RatingRecord]:
        """Look up ratings for a title via the work search endpoint."""
        data = await self._get_json(
            f"{self.base_url}/search.json",
            params={"q": title},
            error_cls=RatingLookupError,
        )
        return parse_rating_response(title, data)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
