# ABOUTME: Converts between normalized SQLite rows and the denormalized BookRecord view.
# ABOUTME: Validates caller input and orders embedded author/series lists by link position.

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from promethea.db.errors import ValidationError
from promethea.metadata.sorting import title_sort
from promethea.metadata.types import BookMetadata

# Book columns a caller may change through update_book().
EDITABLE_BOOK_FIELDS = ("title", "sort", "date_published", "number_of_pages", "goodreads_id")


@dataclass
class AuthorRecord:
    """A stored author as embedded in a BookRecord or returned by lookups."""

    id: int
    name: str
    sort: str
    goodreads_id: int | None = None


@dataclass
class SeriesRecord:
    """A stored series."""

    id: int
    name: str
    sort: str
    goodreads_id: int | None = None


@dataclass
class SeriesVolumeRecord:
    """A book's membership in one series, with its volume number."""

    series_id: int
    series: str
    sort: str
    volume: float | None
    goodreads_id: int | None = None


@dataclass
class SeriesLink:
    """One requested book-series association: which series, and which volume."""

    series_id: int
    volume: float | None = None


@dataclass
class ReadEvent:
    """One read (or re-read) of a book. Either date may be unknown."""

    id: int
    book_id: int
    start_date: str | None = None
    end_date: str | None = None


@dataclass
class BookRecord:
    """The aggregate view of a cataloged book.

    Authors and series are listed in the order they were associated with
    the book. Read events are ordered by start date, unknown starts last.
    """

    id: int
    title: str
    sort: str
    authors: list[AuthorRecord] = field(default_factory=list)
    series_and_volume: list[SeriesVolumeRecord] = field(default_factory=list)
    number_of_pages: int | None = None
    goodreads_id: int | None = None
    date_added: str = ""
    date_published: str | None = None
    date_modified: str = ""
    read_events: list[ReadEvent] = field(default_factory=list)

    @property
    def author(self) -> str:
        """Convenience property: joined author names for display."""
        return ", ".join(author.name for author in self.authors)

    @property
    def author_names(self) -> list[str]:
        return [author.name for author in self.authors]


# --- Validation ---


def _format_timestamp(value: datetime) -> str:
    """Naive UTC, whole seconds: the one timestamp form stored."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="seconds")


def normalize_date(value: str | date | None) -> str | None:
    """Return the canonical stored text for a date, datetime, or ISO-8601 string.

    Dates become "YYYY-MM-DD". Timestamps become "YYYY-MM-DDTHH:MM:SS" in
    UTC, so stored values compare correctly as text.

    Raises:
        ValidationError: If a string is not a parseable ISO-8601 date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    try:
        return _format_timestamp(datetime.fromisoformat(text))
    except ValueError as exc:
        raise ValidationError(f"Not an ISO-8601 date: {value!r}") from exc


def _as_timestamp(text: str) -> str:
    return text if "T" in text else f"{text}T00:00:00"


def validate_name(value: Any, what: str) -> str:
    """Return a stripped, non-empty name or raise ValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} must be a non-empty string")
    return value.strip()


def validate_goodreads_id(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"goodreads_id must be a positive integer, got {value!r}")
    return value


def validate_volume(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
        raise ValidationError(f"Series volume must be a non-negative number, got {value!r}")
    return float(value)


def validate_page_count(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"number_of_pages must be a non-negative integer, got {value!r}")
    return value


def validate_read_dates(
    start: str | date | None, end: str | date | None,
) -> tuple[str | None, str | None]:
    """Normalize a read event's dates and check that end does not precede start.

    Date-only values stay "YYYY-MM-DD" when both ends are dates; next to a
    timestamp they are widened to midnight so both ends share one form.
    """
    start_text = normalize_date(start)
    end_text = normalize_date(end)
    if start_text and end_text:
        if ("T" in start_text) != ("T" in end_text):
            start_text, end_text = _as_timestamp(start_text), _as_timestamp(end_text)
        if end_text < start_text:
            raise ValidationError(f"Read end {end_text} precedes start {start_text}")
    return start_text, end_text


def validate_book_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize a partial set of editable book columns.

    Raises:
        ValidationError: For unknown field names or values that break domain rules.
    """
    unknown = set(fields) - set(EDITABLE_BOOK_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown book field(s): {', '.join(sorted(unknown))}")

    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if key == "title":
            cleaned[key] = validate_name(value, "title")
        elif key == "sort":
            cleaned[key] = validate_name(value, "sort")
        elif key == "date_published":
            cleaned[key] = normalize_date(value)
        elif key == "number_of_pages":
            cleaned[key] = validate_page_count(value)
        elif key == "goodreads_id":
            cleaned[key] = validate_goodreads_id(value)
    return cleaned


# --- Row conversion ---


def metadata_to_row(metadata: BookMetadata) -> dict[str, Any]:
    """Convert BookMetadata to a validated dict suitable for INSERT.

    A missing sort key is derived from the title.
    """
    title = validate_name(metadata.title, "title")
    row = validate_book_fields(
        {
            "title": title,
            "date_published": metadata.date_published,
            "number_of_pages": metadata.number_of_pages,
            "goodreads_id": metadata.goodreads_id,
        }
    )
    row["sort"] = validate_name(metadata.sort, "sort") if metadata.sort else title_sort(title)
    return row


def _decode_ordered(payload: str | None) -> list[dict[str, Any]]:
    """Decode a JSON array of link objects and order it by link position.

    Entries produced by a LEFT JOIN with no match carry a null id and are dropped.
    """
    if not payload:
        return []
    entries = [entry for entry in json.loads(payload) if entry.get("id") is not None]
    return sorted(entries, key=lambda entry: entry["position"])


def _read_event_key(event: ReadEvent) -> tuple[bool, str, int]:
    return (event.start_date is None, event.start_date or "", event.id)


def row_to_author(row: Any) -> AuthorRecord:
    return AuthorRecord(
        id=row["id"], name=row["name"], sort=row["sort"], goodreads_id=row["goodreads_id"],
    )


def row_to_series(row: Any) -> SeriesRecord:
    return SeriesRecord(
        id=row["id"], name=row["name"], sort=row["sort"], goodreads_id=row["goodreads_id"],
    )


def row_to_read_event(row: Any) -> ReadEvent:
    return ReadEvent(
        id=row["id"],
        book_id=row["book"],
        start_date=row["start_date"],
        end_date=row["end_date"],
    )


def row_to_record(row: Any) -> BookRecord:
    """Convert one aggregate query row to a BookRecord.

    The row carries JSON arrays for authors, series, and (optionally) read
    events, assembled by promethea.db.queries.
    """
    authors = [
        AuthorRecord(
            id=entry["id"],
            name=entry["name"],
            sort=entry["sort"],
            goodreads_id=entry["goodreads_id"],
        )
        for entry in _decode_ordered(row["authors"])
    ]
    series = [
        SeriesVolumeRecord(
            series_id=entry["id"],
            series=entry["name"],
            sort=entry["sort"],
            volume=entry["volume"],
            goodreads_id=entry["goodreads_id"],
        )
        for entry in _decode_ordered(row["series_and_volume"])
    ]

    read_events: list[ReadEvent] = []
    if "read_events" in row.keys() and row["read_events"]:
        read_events = sorted(
            (
                ReadEvent(
                    id=entry["id"],
                    book_id=row["id"],
                    start_date=entry["start_date"],
                    end_date=entry["end_date"],
                )
                for entry in json.loads(row["read_events"])
                if entry.get("id") is not None
            ),
            key=_read_event_key,
        )

    return BookRecord(
        id=row["id"],
        title=row["title"],
        sort=row["sort"],
        authors=authors,
        series_and_volume=series,
        number_of_pages=row["number_of_pages"],
        goodreads_id=row["goodreads_id"],
        date_added=row["date_added"],
        date_published=row["date_published"],
        date_modified=row["date_modified"],
        read_events=read_events,
    )
