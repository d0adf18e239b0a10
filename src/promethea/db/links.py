# ABOUTME: Replace-semantics writers for the book<->author and book<->series link tables.
# ABOUTME: Order lives in an explicit position column; callers supply the enclosing transaction.

import logging
import sqlite3
from collections.abc import Iterable, Sequence

from promethea.db.errors import NotFoundError, ValidationError
from promethea.db.mapping import SeriesLink, validate_volume

logger = logging.getLogger(__name__)


def _check_id(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Link ids must be integers, got {value!r}")
    return value


def _dedupe_ids(ids: Iterable[int]) -> list[int]:
    """Keep the first occurrence of each id, preserving order."""
    seen: set[int] = set()
    ordered: list[int] = []
    for value in map(_check_id, ids):
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def require_row(conn: sqlite3.Connection, table: str, row_id: int, entity: str) -> None:
    """Raise NotFoundError unless table holds a row with this id."""
    cursor = conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,))
    if cursor.fetchone() is None:
        raise NotFoundError(entity, row_id)


def _require_rows(
    conn: sqlite3.Connection, table: str, ids: Sequence[int], entity: str,
) -> None:
    if not ids:
        return
    placeholders = ", ".join("?" for _ in ids)
    cursor = conn.execute(f"SELECT id FROM {table} WHERE id IN ({placeholders})", list(ids))
    found = {row[0] for row in cursor.fetchall()}
    for row_id in ids:
        if row_id not in found:
            raise NotFoundError(entity, row_id)


def _delete_stale(
    conn: sqlite3.Connection, table: str, column: str, book_id: int, keep: Sequence[int],
) -> int:
    """Delete a book's links whose target is not in keep. Returns rows removed."""
    if keep:
        placeholders = ", ".join("?" for _ in keep)
        cursor = conn.execute(
            f"DELETE FROM {table} WHERE book = ? AND {column} NOT IN ({placeholders})",
            [book_id, *keep],
        )
    else:
        cursor = conn.execute(f"DELETE FROM {table} WHERE book = ?", (book_id,))
    return cursor.rowcount


def replace_book_authors(
    conn: sqlite3.Connection, book_id: int, author_ids: Iterable[int],
) -> list[int]:
    """Make author_ids, in order, the complete author list of a book.

    Links not in the new list are deleted; surviving and new links are
    written with their new position. Duplicate ids keep their first position.
    An empty list removes every author link.

    Returns:
        The de-duplicated, ordered author ids now linked.

    Raises:
        NotFoundError: If the book or any author does not exist.
    """
    ordered = _dedupe_ids(author_ids)
    require_row(conn, "books", book_id, "book")
    _require_rows(conn, "authors", ordered, "author")

    removed = _delete_stale(conn, "books_authors_link", "author", book_id, ordered)
    for position, author_id in enumerate(ordered):
        conn.execute(
            "INSERT INTO books_authors_link (book, author, position) VALUES (?, ?, ?) "
            "ON CONFLICT (book, author) DO UPDATE SET position = excluded.position",
            (book_id, author_id, position),
        )

    logger.debug(
        "Book %d authors set to %s (%d stale link(s) removed)", book_id, ordered, removed,
    )
    return ordered


def replace_book_series(
    conn: sqlite3.Connection, book_id: int, links: Iterable[SeriesLink],
) -> list[SeriesLink]:
    """Make links, in order, the complete series list of a book.

    Same replace semantics as replace_book_authors(); the volume of a
    surviving link is overwritten with the requested one.

    Returns:
        The de-duplicated, ordered links now stored.

    Raises:
        NotFoundError: If the book or any series does not exist.
        ValidationError: If a volume is negative or not a number.
    """
    ordered: list[SeriesLink] = []
    seen: set[int] = set()
    for link in links:
        if _check_id(link.series_id) in seen:
            continue
        seen.add(link.series_id)
        ordered.append(SeriesLink(series_id=link.series_id, volume=validate_volume(link.volume)))

    series_ids = [link.series_id for link in ordered]
    require_row(conn, "books", book_id, "book")
    _require_rows(conn, "series", series_ids, "series")

    removed = _delete_stale(conn, "books_series_link", "series", book_id, series_ids)
    for position, link in enumerate(ordered):
        conn.execute(
            "INSERT INTO books_series_link (book, series, entry, position) "
            "VALUES (?, ?, ?, ?) "
            "ON CONFLICT (book, series) DO UPDATE "
            "SET entry = excluded.entry, position = excluded.position",
            (book_id, link.series_id, link.volume, position),
        )

    logger.debug(
        "Book %d series set to %s (%d stale link(s) removed)", book_id, series_ids, removed,
    )
    return ordered
