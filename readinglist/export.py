"""CSV and JSON export of the dashboard table."""
import csv
import io
import json
import logging
from typing import Any, Dict, List, Sequence

from readinglist.models import EnrichedRow, NOT_AVAILABLE

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "S.No",
    "Author Name",
    "Title",
    "First Publish Year",
    "Subject",
    "Author Birth Date",
    "Author Top Work",
]


def csv_record(serial: int, row: EnrichedRow) -> List[Any]:
    return [
        serial,
        row.authors_str or NOT_AVAILABLE,
        row.title or NOT_AVAILABLE,
        row.year_str,
        row.top_subject_str,
        row.birth_date_str,
        row.top_work_str,
    ]


def to_csv(rows: Sequence[EnrichedRow]) -> str:
    """
    Serialize rows to CSV.

    Pass the full filtered and sorted sequence, not a single page; serial
    numbers run from 1 across all of it.

    Args:
        rows: EnrichedRow objects in display order

    Returns:
        CSV text with a header line
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)

    for serial, row in enumerate(rows, 1):
        writer.writerow(csv_record(serial, row))

    return buffer.getvalue()


def write_csv(rows: Sequence[EnrichedRow], path: str) -> int:
    """Write ``to_csv(rows)`` to ``path`` and return the number of rows."""
    with open(path, 'w', newline='', encoding='utf-8') as f:
        f.write(to_csv(rows))
    logger.info(f"Exported {len(rows)} rows to {path}")
    return len(rows)


def row_to_dict(row: EnrichedRow) -> Dict[str, Any]:
    return {
        "title": row.title,
        "author_names": list(row.work.author_names),
        "first_publish_year": row.first_publish_year,
        "subject": row.top_subject,
        "author_birth_date": row.birth_date,
        "author_top_work": row.top_work,
        "ratings_average": row.ratings_average,
    }


def to_json(rows: Sequence[EnrichedRow]) -> str:
    return json.dumps([row_to_dict(row) for row in rows], indent=2)
