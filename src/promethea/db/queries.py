# ABOUTME: SQL for the aggregate read path: one statement per BookRecord listing.
# ABOUTME: Correlated subqueries fold link rows into JSON arrays so each read is a single snapshot.

from dataclasses import dataclass
from typing import Any

from promethea.db.errors import ValidationError

_AUTHORS_JSON = """(
        SELECT json_group_array(json_object(
                   'id', a.id,
                   'name', a.name,
                   'sort', a.sort,
                   'goodreads_id', a.goodreads_id,
                   'position', bal.position))
        FROM books_authors_link AS bal
             JOIN authors AS a ON a.id = bal.author
        WHERE bal.book = books.id
    )"""

_SERIES_JSON = """(
        SELECT json_group_array(json_object(
                   'id', s.id,
                   'name', s.name,
                   'sort', s.sort,
                   'goodreads_id', s.goodreads_id,
                   'volume', bsl.entry,
                   'position', bsl.position))
        FROM books_series_link AS bsl
             JOIN series AS s ON s.id = bsl.series
        WHERE bsl.book = books.id
    )"""

_READ_EVENTS_JSON = """(
        SELECT json_group_array(json_object(
                   'id', r.id,
                   'start_date', r.start_date,
                   'end_date', r.end_date))
        FROM read_events AS r
        WHERE r.book = books.id
    )"""

# Caller-selectable sort keys mapped to their ORDER BY expression.
SORT_COLUMNS = {
    "title": "books.title COLLATE NOCASE",
    "sort": "books.sort COLLATE NOCASE",
    "date_added": "books.date_added",
    "date_published": "books.date_published",
    "date_modified": "books.date_modified",
    "number_of_pages": "books.number_of_pages",
}

DEFAULT_SORT = "date_added"


@dataclass
class BookFilter:
    """Optional restrictions for list_books(). All set fields must match."""

    author_id: int | None = None
    series_id: int | None = None
    title_contains: str | None = None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def book_records_sql(
    *,
    book_id: int | None = None,
    book_filter: BookFilter | None = None,
    sort: str = DEFAULT_SORT,
    descending: bool = False,
    limit: int | None = None,
    offset: int = 0,
    with_read_events: bool = True,
) -> tuple[str, list[Any]]:
    """Build the aggregate BookRecord query and its parameters.

    Ordering always ends with books.id ascending so equal sort keys page
    deterministically.

    Raises:
        ValidationError: For an unknown sort key or negative paging values.
    """
    if sort not in SORT_COLUMNS:
        raise ValidationError(
            f"Unknown sort key {sort!r}; expected one of {', '.join(SORT_COLUMNS)}"
        )
    if (limit is not None and limit < 0) or offset < 0:
        raise ValidationError("limit and offset must be non-negative")

    read_events = _READ_EVENTS_JSON if with_read_events else "NULL"
    sql = f"""
        SELECT books.id,
               books.title,
               books.sort,
               books.date_added,
               books.date_published,
               books.date_modified,
               books.number_of_pages,
               books.goodreads_id,
               {_AUTHORS_JSON} AS authors,
               {_SERIES_JSON} AS series_and_volume,
               {read_events} AS read_events
        FROM books
    """

    clauses: list[str] = []
    params: list[Any] = []
    if book_id is not None:
        clauses.append("books.id = ?")
        params.append(book_id)
    if book_filter is not None:
        if book_filter.author_id is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM books_authors_link "
                "WHERE book = books.id AND author = ?)"
            )
            params.append(book_filter.author_id)
        if book_filter.series_id is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM books_series_link "
                "WHERE book = books.id AND series = ?)"
            )
            params.append(book_filter.series_id)
        if book_filter.title_contains:
            clauses.append("books.title LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(book_filter.title_contains)}%")

    if clauses:
        sql += " WHERE " + " AND ".join(clauses)

    direction = "DESC" if descending else "ASC"
    sql += f" ORDER BY {SORT_COLUMNS[sort]} {direction}, books.id ASC"

    if limit is not None or offset:
        sql += " LIMIT ? OFFSET ?"
        params.extend([-1 if limit is None else limit, offset])

    return sql, params
