"""Data models for the reading list dashboard."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

NOT_AVAILABLE = "N/A"


def _or_na(value) -> str:
    """Render a missing or empty value as N/A."""
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)


@dataclass(frozen=True)
class WorkRecord:
    """One reading-list entry."""
    title: str
    author_names: Tuple[str, ...] = ()
    first_publish_year: Optional[int] = None


@dataclass(frozen=True)
class AuthorRecord:
    """Author metadata resolved by name search."""
    name: str
    birth_date: Optional[str] = None
    top_work: Optional[str] = None
    top_subjects: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RatingRecord:
    """Work-search metadata for a title."""
    title: str
    ratings_average: Optional[float] = None
    ratings_count: int = 0


@dataclass(frozen=True)
class EnrichedRow:
    """A work joined with its author (and optionally rating) metadata.

    ``author`` and ``rating`` are ``None`` while the lookup is pending
    or when it found nothing.
    """
    work: WorkRecord
    author: Optional[AuthorRecord] = None
    rating: Optional[RatingRecord] = None

    @property
    def title(self) -> str:
        return self.work.title

    @property
    def first_publish_year(self) -> Optional[int]:
        return self.work.first_publish_year

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.work.author_names)

    @property
    def top_subject(self) -> Optional[str]:
        if self.author and self.author.top_subjects:
            return self.author.top_subjects[0]
        return None

    @property
    def birth_date(self) -> Optional[str]:
        return self.author.birth_date if self.author else None

    @property
    def top_work(self) -> Optional[str]:
        return self.author.top_work if self.author else None

    @property
    def ratings_average(self) -> Optional[float]:
        return self.rating.ratings_average if self.rating else None

    # Display helpers
    @property
    def year_str(self) -> str:
        return _or_na(self.first_publish_year)

    @property
    def top_subject_str(self) -> str:
        return _or_na(self.top_subject)

    @property
    def birth_date_str(self) -> str:
        return _or_na(self.birth_date)

    @property
    def top_work_str(self) -> str:
        return _or_na(self.top_work)

    @property
    def rating_str(self) -> str:
        if self.ratings_average is None:
            return NOT_AVAILABLE
        return f"{self.ratings_average:.2f}"


class SortKey(Enum):
    """Sortable table columns."""
    AUTHORS = "authors"
    TITLE = "title"
    YEAR = "year"
    SUBJECT = "subject"
    BIRTH_DATE = "birth_date"
    TOP_WORK = "top_work"
    RATING = "rating"

    def value_of(self, row: EnrichedRow):
        """Return the field of ``row`` this key sorts by."""
        return {
            SortKey.AUTHORS: lambda r: r.authors_str,
            SortKey.TITLE: lambda r: r.title,
            SortKey.YEAR: lambda r: r.first_publish_year,
            SortKey.SUBJECT: lambda r: r.top_subject,
            SortKey.BIRTH_DATE: lambda r: r.birth_date,
            SortKey.TOP_WORK: lambda r: r.top_work,
            SortKey.RATING: lambda r: r.ratings_average,
        }[self](row)


@dataclass
class ViewState:
    """Presentation state for one dashboard session."""
    page: int = 0
    page_size: int = 10
    sort_key: Optional[SortKey] = None
    descending: bool = False
    search: str = ""
