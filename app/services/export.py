import csv
import io
from datetime import datetime, timezone
from typing import Iterable

from app.models import Issue

CSV_HEADERS = [
    "ID",
    "Title",
    "Description",
    "Category",
    "Location",
    "Status",
    "Created At",
    "Photo URL",
]
CSV_FILENAME = "issues-export.csv"


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC instant with microsecond precision, e.g. 2024-05-01T10:00:00.000000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def issue_row(issue: Issue) -> list:
    return [
        issue.id,
        issue.title,
        issue.description,
        issue.category.value,
        issue.location,
        issue.status.value,
        format_timestamp(issue.created_at),
        issue.photo_url or "",
    ]


def render_issues_csv(issues: Iterable[Issue]) -> str:
    """
    Serialize issues into a CSV document.
    Rows keep the order of ``issues``; quoting follows the csv module's minimal
    quoting, so embedded commas, quotes and newlines survive a round trip.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for issue in issues:
        writer.writerow(issue_row(issue))
    return buffer.getvalue()
