"""Parse and normalize Open Library API responses."""
import logging
from typing import Dict, Any, Iterable, List, Optional

from readinglist.models import AuthorRecord, RatingRecord, WorkRecord

logger = logging.getLogger(__name__)


def _as_str_tuple(value) -> tuple:
    """Coerce a string or list of strings into a tuple of strings."""
    if isinstance(value, str):
        return (value,)
    if not value:
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _as_year(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def parse_work(entry: Dict[str, Any]) -> Optional[WorkRecord]:
    """
    Parse a single reading-log entry.

    Args:
        entry: One item of ``reading_log_entries``

    Returns:
        WorkRecord or None if the entry has no work
    """
    try:
        work = entry.get("work")
        if not isinstance(work, dict):
            return None

        # Older payloads use "authors" instead of "author_names"
        names = work.get("author_names")
        if names is None:
            names = work.get("authors")

        return WorkRecord(
            title=work.get("title") or "",
            author_names=_as_str_tuple(names),
            first_publish_year=_as_year(work.get("first_publish_year")),
        )
    except Exception as e:
        # Log but don't crash - APIs can be unpredictable
        logger.warning(f"Failed to parse reading-log entry: {e}")
        return None


def parse_reading_list_response(response_json: Dict[str, Any], limit: int = 0) -> List[WorkRecord]:
    """
    Parse a reading-list response, keeping upstream order.

    Args:
        response_json: Complete API response JSON
        limit: Keep at most this many works (0 keeps all)

    Returns:
        List of WorkRecord objects (empty if no entries found)
    """
    entries = response_json.get("reading_log_entries") or []
    works = []

    for entry in entries:
        if not isinstance(entry, dict):
            continue
        work = parse_work(entry)
        if work:
            works.append(work)

    if limit > 0:
        works = works[:limit]
    return works


def select_candidate(response_json: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the best match from a search response.

    Every lookup path takes the first document, which is upstream's
    highest ranked match.
    """
    if not response_json:
        return None
    docs = response_json.get("docs") or []
    for doc in docs:
        if isinstance(doc, dict):
            return doc
    return None


def parse_author_doc(name: str, doc: Dict[str, Any]) -> AuthorRecord:
    """Build an AuthorRecord keyed by the name that was searched for."""
    return AuthorRecord(
        name=name,
        birth_date=doc.get("birth_date") or None,
        top_work=doc.get("top_work") or None,
        top_subjects=_as_str_tuple(doc.get("top_subjects")),
    )


def parse_author_response(name: str, response_json: Dict[str, Any]) -> Optional[AuthorRecord]:
    """Return the selected author candidate, or None when there are none."""
    try:
        doc = select_candidate(response_json)
        if doc is None:
            return None
        return parse_author_doc(name, doc)
    except Exception as e:
        # Log but don't crash - APIs can be unpredictable
        logger.warning(f"Failed to parse author {name!r}: {e}")
        return None


def parse_rating_response(title: str, response_json: Dict[str, Any]) -> Optional[RatingRecord]:
    """Return rating data for the selected work candidate."""
    try:
        doc = select_candidate(response_json)
        if doc is None:
            return None

        average = doc.get("ratings_average")
        if isinstance(average, bool) or not isinstance(average, (int, float)):
            average = None
        count = doc.get("ratings_count")

        return RatingRecord(
            title=title,
            ratings_average=float(average) if average is not None else None,
            ratings_count=count if isinstance(count, int) else 0,
        )
    except Exception as e:
        logger.warning(f"Failed to parse rating for {title!r}: {e}")
        return None


def distinct_author_names(works: Iterable[WorkRecord]) -> List[str]:
    """
    Collect author names across works, dropping duplicates.

    Names are compared exactly; first-seen order is kept.

    Args:
        works: WorkRecord objects

    Returns:
        Deduplicated list of author names
    """
    seen = set()
    names = []

    for work in works:
        for name in work.author_names:
            if name not in seen:
                seen.add(name)
                names.append(name)

    return names


def distinct_titles(works: Iterable[WorkRecord]) -> List[str]:
    """Collect non-empty titles across works, dropping duplicates."""
    seen = set()
    titles = []

    for work in works:
        if work.title and work.title not in seen:
            seen.add(work.title)
            titles.append(work.title)

    return titles
