"""Filtered, sorted and paged views over enriched rows."""
import logging
from typing import List, Optional, Sequence

from readinglist.models import EnrichedRow, SortKey, ViewState

logger = logging.getLogger(__name__)


def filter_rows(rows: Sequence[EnrichedRow], search: str) -> List[EnrichedRow]:
    """Keep rows whose joined author names contain ``search``, ignoring case."""
    if not search:
        return list(rows)
    needle = search.lower()
    return [row for row in rows if needle in row.authors_str.lower()]


def sort_rows(
    rows: Sequence[EnrichedRow],
    key: Optional[SortKey],
    descending: bool = False
) -> List[EnrichedRow]:
    """
    Sort rows by ``key``.

    Missing values go last when ascending (first when descending).
    Without a key the input order is kept.
    """
    if key is None:
        return list(rows)

    def sort_value(row):
        value = key.value_of(row)
        return (value is None, value if value is not None else 0)

    ordered = sorted(rows, key=sort_value)
    if descending:
        ordered.reverse()
    return ordered


def page_slice(rows: Sequence[EnrichedRow], page: int, page_size: int) -> List[EnrichedRow]:
    start = page * page_size
    return list(rows[start:start + page_size])


def page_count(total: int, page_size: int) -> int:
    """Number of pages for ``total`` rows; an empty table still has one page."""
    if total <= 0:
        return 1
    return (total + page_size - 1) // page_size


class ViewController:
    """Holds the loaded rows and the view state, and derives what to show."""

    def __init__(self, rows: Sequence[EnrichedRow] = (), page_size: int = 10):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.rows: List[EnrichedRow] = list(rows)
        self.state = ViewState(page_size=page_size)

    def set_rows(self, rows: Sequence[EnrichedRow]) -> None:
        """Replace the rows, e.g. after more authors resolved."""
        self.rows = list(rows)
        self._clamp_page()

    def set_search(self, text: str) -> None:
        self.state.search = text or ""
        self._clamp_page()

    def toggle_sort(self, key: SortKey) -> None:
        """Flip direction on the active key, or sort ascending by a new one."""
        if self.state.sort_key is key:
            self.state.descending = not self.state.descending
        else:
            self.state.sort_key = key
            self.state.descending = False

    def clear_sort(self) -> None:
        self.state.sort_key = None
        self.state.descending = False

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.state.page_size = page_size
        self.state.page = 0

    def set_page(self, page: int) -> None:
        self.state.page = page
        self._clamp_page()

    def visible(self) -> List[EnrichedRow]:
        """All rows that pass the search, in sort order. This is what gets exported."""
        filtered = filter_rows(self.rows, self.state.search)
        return sort_rows(filtered, self.state.sort_key, self.state.descending)

    def page_rows(self) -> List[EnrichedRow]:
        return page_slice(self.visible(), self.state.page, self.state.page_size)

    @property
    def page_count(self) -> int:
        return page_count(len(filter_rows(self.rows, self.state.search)), self.state.page_size)

    @property
    def first_serial(self) -> int:
        """1-based serial number of the first row on the current page."""
        return self.state.page * self.state.page_size + 1

    def _clamp_page(self) -> None:
        last = self.page_count - 1
        clamped = min(max(self.state.page, 0), last)
        if clamped != self.state.page:
            logger.debug(f"Clamping page {self.state.page} -> {clamped}")
            self.state.page = clamped
