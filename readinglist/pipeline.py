"""Enrichment pipeline: reading list -> author lookups -> joined rows.

One ``EnrichmentPipeline`` is one dashboard session. It loads the whole
reading list up front and every filtered, sorted or paged view is derived
locally from its rows; the upstream API is never asked to do any of that.

Session states::

    IDLE -> FETCHING_LIST -> FETCHING_AUTHORS -> READY
                  |                 |
                  +-> ERROR         +-> CANCELLED

Author (and optionally rating) lookups are cached per session. A name
that was not found, or whose lookup failed, is cached as ``MISSING`` so
it is never requested twice.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from readinglist.errors import NetworkError, ReadingListFetchError
from readinglist.models import EnrichedRow, WorkRecord
from readinglist.parse import distinct_author_names, distinct_titles

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


class SessionState(Enum):
    IDLE = "idle"
    FETCHING_LIST = "fetching_list"
    FETCHING_AUTHORS = "fetching_authors"
    READY = "ready"
    ERROR = "error"
    CANCELLED = "cancelled"


class LookupCache:
    """Unbounded per-session map of lookup results keyed by exact string."""

    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: str, value) -> None:
        self._entries[key] = MISSING if value is None else value

    def get(self, key: str):
        """Return the cached record, or None if missing or not yet settled."""
        value = self._entries.get(key)
        return None if value is MISSING else value

    def is_missing(self, key: str) -> bool:
        return self._entries.get(key) is MISSING


def join_rows(
    works: Iterable[WorkRecord],
    authors: LookupCache,
    ratings: Optional[LookupCache] = None
) -> List[EnrichedRow]:
    """
    Join works with whatever is in the caches right now.

    A work takes the author fields of its first author name. Authors that
    are unresolved or missing give a row with no author record.
    """
    rows = []
    for work in works:
        author = authors.get(work.author_names[0]) if work.author_names else None
        rating = ratings.get(work.title) if ratings is not None and work.title else None
        rows.append(EnrichedRow(work=work, author=author, rating=rating))
    return rows


def enrich_sequential(
    client,
    works: Iterable[WorkRecord],
    authors: LookupCache,
    ratings: Optional[LookupCache] = None
) -> int:
    """
    Resolve authors (and titles) one at a time with a blocking client.

    Names already in the cache are skipped. A lookup that fails for any
    reason is cached as missing.

    Returns:
        Number of lookups issued
    """
    works = list(works)
    issued = 0

    jobs: List[Tuple[LookupCache, str, Callable]] = [
        (authors, name, client.fetch_author) for name in distinct_author_names(works)
    ]
    if ratings is not None:
        jobs += [(ratings, title, client.fetch_rating) for title in distinct_titles(works)]

    for cache, key, fetch in jobs:
        if key in cache:
            continue
        issued += 1
        try:
            record = fetch(key)
        except Exception as e:
            logger.warning(f"Lookup failed for {key!r}: {e}")
            record = None
        cache.set(key, record)

    return issued


class EnrichmentPipeline:
    """Fetches and enriches the reading list for one session."""

    # Views are always derived locally from the full list
    LOADS_FULL_DATASET = True

    def __init__(self, client, fetch_ratings: bool = False):
        """
        Args:
            client: AsyncCatalogClient for ``run``, CatalogClient for ``run_sequential``
            fetch_ratings: Also look up ratings for each title
        """
        self.client = client
        self.fetch_ratings = fetch_ratings
        self.authors = LookupCache()
        self.ratings = LookupCache()
        self.works: List[WorkRecord] = []
        self.state = SessionState.IDLE
        self.error: Optional[ReadingListFetchError] = None
        self.requests_issued = 0
        self._in_flight: Dict[Tuple[str, str], asyncio.Task] = {}

    def _transition(self, state: SessionState) -> None:
        logger.info(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def _start(self) -> None:
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Pipeline already started (state={self.state.value})")
        self._transition(SessionState.FETCHING_LIST)

    def _fail(self, error: NetworkError) -> None:
        if not isinstance(error, ReadingListFetchError):
            error = ReadingListFetchError(str(error), url=error.url)
        logger.error(f"Failed to fetch reading list: {error}")
        self.error = error
        self._transition(SessionState.ERROR)

    @property
    def ready(self) -> bool:
        return self.state is SessionState.READY

    @property
    def pending(self) -> int:
        """Number of lookups still in flight."""
        return len(self._in_flight)

    def rows(self) -> List[EnrichedRow]:
        """Current join of works and caches; unresolved authors render as N/A."""
        return join_rows(self.works, self.authors, self.ratings if self.fetch_ratings else None)

    async def run(self) -> List[EnrichedRow]:
        """
        Run the session: fetch the list, then every author concurrently.

        Returns:
            Joined rows, or an empty list if the reading list failed
        """
        self._start()
        try:
            self.works = await self.client.fetch_reading_list()
        except NetworkError as e:
            self._fail(e)
            return []

        self._transition(SessionState.FETCHING_AUTHORS)
        lookups = [self.lookup_author(name) for name in distinct_author_names(self.works)]
        if self.fetch_ratings:
            lookups += [self.lookup_rating(title) for title in distinct_titles(self.works)]

        logger.info(f"Dispatching {len(lookups)} lookups for {len(self.works)} works")
        results = await asyncio.gather(*lookups, return_exceptions=True)

        if any(isinstance(r, asyncio.CancelledError) for r in results):
            self._transition(SessionState.CANCELLED)
            return self.rows()

        self._transition(SessionState.READY)
        return self.rows()

    def run_sequential(self) -> List[EnrichedRow]:
        """Blocking variant of ``run``: lookups happen one after another."""
        self._start()
        try:
            self.works = self.client.fetch_reading_list()
        except NetworkError as e:
            self._fail(e)
            return []

        self._transition(SessionState.FETCHING_AUTHORS)
        self.requests_issued += enrich_sequential(
            self.client,
            self.works,
            self.authors,
            self.ratings if self.fetch_ratings else None,
        )
        self._transition(SessionState.READY)
        return self.rows()

    async def lookup_author(self, name: str):
        """Resolve one author, sharing any request already in flight."""
        return await self._lookup("author", self.authors, name, self.client.fetch_author)

    async def lookup_rating(self, title: str):
        return await self._lookup("rating", self.ratings, title, self.client.fetch_rating)

    async def _lookup(
        self,
        kind: str,
        cache: LookupCache,
        key: str,
        fetch: Callable[[str], Awaitable[Any]]
    ):
        if key in cache:
            return cache.get(key)

        task = self._in_flight.get((kind, key))
        if task is None:
            task = asyncio.ensure_future(self._resolve(kind, cache, key, fetch))
            self._in_flight[(kind, key)] = task
        # A cancelled waiter must not cancel the shared request
        return await asyncio.shield(task)

    async def _resolve(
        self,
        kind: str,
        cache: LookupCache,
        key: str,
        fetch: Callable[[str], Awaitable[Any]]
    ):
        self.requests_issued += 1
        try:
            record = await fetch(key)
        except Exception as e:
            logger.warning(f"{kind} lookup failed for {key!r}: {e}")
            record = None
        finally:
            self._in_flight.pop((kind, key), None)

        if record is None:
            logger.info(f"No {kind} found for {key!r}")
        cache.set(key, record)
        return record

    def cancel(self) -> None:
        """Abort every lookup still in flight. Cancelled keys stay uncached."""
        for task in list(self._in_flight.values()):
            task.cancel()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.cancel()
