# ABOUTME: Read and write operations for the Promethea library catalog.
# ABOUTME: Composite writes run in one IMMEDIATE transaction and signal listeners after commit.

import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Any

from promethea.db.errors import (
    CatalogError,
    DuplicateBookError,
    NotFoundError,
    StorageUnavailableError,
    constraint_error,
)
from promethea.db.events import ChangeNotifier
from promethea.db.links import replace_book_authors, replace_book_series, require_row
from promethea.db.mapping import (
    AuthorRecord,
    BookRecord,
    ReadEvent,
    SeriesLink,
    SeriesRecord,
    metadata_to_row,
    row_to_author,
    row_to_read_event,
    row_to_record,
    row_to_series,
    validate_book_fields,
    validate_read_dates,
)
from promethea.db.queries import DEFAULT_SORT, BookFilter, book_records_sql
from promethea.db.resolver import resolve_author, resolve_series, stored_sort
from promethea.db.schema import TIMESTAMP_NOW
from promethea.metadata.sorting import name_sort, title_sort
from promethea.metadata.types import AuthorMetadata, BookMetadata, SeriesMetadata

logger = logging.getLogger(__name__)


@dataclass
class PruneResult:
    """Rows removed by an explicit orphan cleanup."""

    authors: int = 0
    series: int = 0

    @property
    def total(self) -> int:
        return self.authors + self.series


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides the library's read and write API.

    The connection must come from open_library() (autocommit mode). Every
    public write is one transaction: it either commits completely and then
    notifies subscribers, or rolls back and raises a single CatalogError.
    A catalog may be shared between threads; calls are serialized.
    """

    def __init__(
        self, conn: sqlite3.Connection, notifier: ChangeNotifier | None = None,
    ) -> None:
        self._conn = conn
        self._lock = threading.RLock()
        self.notifier = notifier or ChangeNotifier()

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()

    # --- Transaction plumbing ---

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        """Run a block inside one write transaction, then notify on success.

        BEGIN IMMEDIATE takes the database write lock up front, so concurrent
        writers on other connections queue (up to the busy timeout) instead
        of interleaving partial multi-table updates.
        """
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"Cannot start write transaction: {exc}") from exc

            try:
                yield self._conn
                self._conn.execute("COMMIT")
            except BaseException as exc:
                self._rollback(exc)
                if isinstance(exc, CatalogError):
                    raise
                if isinstance(exc, sqlite3.IntegrityError):
                    raise constraint_error(exc) from exc
                if isinstance(exc, sqlite3.Error):
                    raise StorageUnavailableError(f"Write failed: {exc}") from exc
                raise

        self.notifier.notify()

    def _rollback(self, cause: BaseException) -> None:
        logger.warning("Rolling back library write: %s", cause)
        if not self._conn.in_transaction:
            return
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error:
            logger.exception("Rollback failed")

    def _fetch(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        """Run a single read statement and return all rows."""
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"Read failed: {exc}") from exc

    # --- Aggregate read path ---

    def get_book(self, book_id: int, *, with_read_events: bool = True) -> BookRecord:
        """Return the aggregate record for one book.

        Raises:
            NotFoundError: If no book has this id.
        """
        sql, params = book_records_sql(book_id=book_id, with_read_events=with_read_events)
        rows = self._fetch(sql, params)
        if not rows:
            raise NotFoundError("book", book_id)
        return row_to_record(rows[0])

    def get_by_goodreads_id(self, goodreads_id: int) -> BookRecord | None:
        """Retrieve a book by its Goodreads id, or None if not cataloged."""
        rows = self._fetch("SELECT id FROM books WHERE goodreads_id = ?", (goodreads_id,))
        if not rows:
            return None
        try:
            return self.get_book(rows[0]["id"])
        except NotFoundError:
            # Deleted between the two statements.
            return None

    def list_books(
        self,
        book_filter: BookFilter | None = None,
        *,
        sort: str = DEFAULT_SORT,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
        with_read_events: bool = False,
    ) -> list[BookRecord]:
        """Return aggregate records for all books matching book_filter.

        Args:
            book_filter: Optional author, series, or title restriction.
            sort: One of queries.SORT_COLUMNS; defaults to date_added.
            descending: Reverse the sort key (the id tie-break stays ascending).
            limit: Maximum number of records, for paging.
            offset: Number of records to skip, for paging.
            with_read_events: Embed each book's read history.

        Raises:
            ValidationError: For an unknown sort key or negative paging values.
        """
        sql, params = book_records_sql(
            book_filter=book_filter,
            sort=sort,
            descending=descending,
            limit=limit,
            offset=offset,
            with_read_events=with_read_events,
        )
        return [row_to_record(row) for row in self._fetch(sql, params)]

    def count_books(self) -> int:
        return self._fetch("SELECT COUNT(*) FROM books")[0][0]

    def get_author(self, author_id: int) -> AuthorRecord:
        rows = self._fetch("SELECT * FROM authors WHERE id = ?", (author_id,))
        if not rows:
            raise NotFoundError("author", author_id)
        return row_to_author(rows[0])

    def find_author_by_name(self, name: str) -> AuthorRecord | None:
        """Return the oldest author stored under exactly this name, or None."""
        rows = self._fetch(
            "SELECT * FROM authors WHERE name = ? ORDER BY id LIMIT 1", (name.strip(),)
        )
        return row_to_author(rows[0]) if rows else None

    def list_authors(self) -> list[AuthorRecord]:
        """All authors ordered by sort key."""
        rows = self._fetch("SELECT * FROM authors ORDER BY sort COLLATE NOCASE, id")
        return [row_to_author(row) for row in rows]

    def get_series(self, series_id: int) -> SeriesRecord:
        rows = self._fetch("SELECT * FROM series WHERE id = ?", (series_id,))
        if not rows:
            raise NotFoundError("series", series_id)
        return row_to_series(rows[0])

    def find_series_by_name(self, name: str) -> SeriesRecord | None:
        rows = self._fetch(
            "SELECT * FROM series WHERE name = ? ORDER BY id LIMIT 1", (name.strip(),)
        )
        return row_to_series(rows[0]) if rows else None

    def list_series(self) -> list[SeriesRecord]:
        rows = self._fetch("SELECT * FROM series ORDER BY sort COLLATE NOCASE, id")
        return [row_to_series(row) for row in rows]

    def list_read_events(self, book_id: int) -> list[ReadEvent]:
        """Read history of one book, oldest start first, unknown starts last."""
        rows = self._fetch(
            "SELECT * FROM read_events WHERE book = ? "
            "ORDER BY start_date IS NULL, start_date, id",
            (book_id,),
        )
        return [row_to_read_event(row) for row in rows]

    def author_sort(self, name: str) -> str:
        """Sort key for an author name: the stored one if known, else derived."""
        with self._lock:
            return stored_sort(self._conn, "authors", name) or name_sort(name)

    def series_sort(self, name: str) -> str:
        """Sort key for a series name: the stored one if known, else derived."""
        with self._lock:
            return stored_sort(self._conn, "series", name) or title_sort(name)

    # --- Composite write path ---

    def create_book(
        self,
        metadata: BookMetadata,
        authors: Iterable[AuthorMetadata] = (),
        series: Iterable[SeriesMetadata] = (),
    ) -> int:
        """Add a book together with its authors and series memberships.

        Authors and series are matched to existing rows by goodreads_id, then
        by exact name, and created otherwise. Link order follows input order.

        Args:
            metadata: Book-level fields; title is required.
            authors: Ordered authors of the book.
            series: Ordered series memberships, each with its volume.

        Returns:
            The id of the new book.

        Raises:
            ValidationError: If any input breaks a domain rule.
            DuplicateBookError: If the goodreads_id is already cataloged.
            ConstraintViolationError: For any other constraint breach.
            StorageUnavailableError: If the database cannot be written.
        """
        row = metadata_to_row(metadata)
        authors = list(authors)
        series = list(series)

        with self._write() as conn:
            if row["goodreads_id"] is not None:
                self._ensure_unique_goodreads_id(conn, row["goodreads_id"])

            columns = ", ".join(row.keys())
            placeholders = ", ".join("?" for _ in row)
            cursor = conn.execute(
                f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )
            book_id: int = cursor.lastrowid  # type: ignore[assignment]

            author_ids = [resolve_author(conn, author) for author in authors]
            replace_book_authors(conn, book_id, author_ids)

            links = [
                SeriesLink(series_id=resolve_series(conn, entry), volume=entry.volume)
                for entry in series
            ]
            replace_book_series(conn, book_id, links)

        logger.debug("Created book %d (%s)", book_id, row["title"])
        return book_id

    def update_book(
        self,
        book_id: int,
        *,
        authors: Iterable[AuthorMetadata] | None = None,
        series: Iterable[SeriesMetadata] | None = None,
        **fields: Any,
    ) -> None:
        """Change selected fields of a book; omitted fields keep their values.

        Accepts keyword arguments matching editable books columns (title,
        sort, date_published, number_of_pages, goodreads_id). A new title
        without an explicit sort re-derives the sort key. authors/series,
        when given, replace the book's full association lists.
        date_modified is stamped on every successful call.

        Raises:
            NotFoundError: If the book (or a referenced row) does not exist.
            ValidationError: For unknown fields or invalid values.
            DuplicateBookError: If goodreads_id belongs to another book.
        """
        changes = validate_book_fields(fields)
        if "title" in changes and "sort" not in changes:
            changes["sort"] = title_sort(changes["title"])
        authors = list(authors) if authors is not None else None
        series = list(series) if series is not None else None

        with self._write() as conn:
            require_row(conn, "books", book_id, "book")
            if changes.get("goodreads_id") is not None:
                self._ensure_unique_goodreads_id(conn, changes["goodreads_id"], book_id)

            set_clause = "".join(f"{column} = ?, " for column in changes)
            set_clause += f"date_modified = max({TIMESTAMP_NOW}, date_added)"
            conn.execute(
                f"UPDATE books SET {set_clause} WHERE id = ?",
                [*changes.values(), book_id],
            )

            if authors is not None:
                replace_book_authors(
                    conn, book_id, [resolve_author(conn, author) for author in authors],
                )
            if series is not None:
                replace_book_series(
                    conn,
                    book_id,
                    [
                        SeriesLink(series_id=resolve_series(conn, entry), volume=entry.volume)
                        for entry in series
                    ],
                )

        logger.debug("Updated book %d: %s", book_id, ", ".join(changes) or "links only")

    def _ensure_unique_goodreads_id(
        self, conn: sqlite3.Connection, goodreads_id: int, book_id: int | None = None,
    ) -> None:
        row = conn.execute(
            "SELECT id FROM books WHERE goodreads_id = ? AND id IS NOT ?",
            (goodreads_id, book_id),
        ).fetchone()
        if row is not None:
            raise DuplicateBookError(goodreads_id)

    def _touch(self, conn: sqlite3.Connection, book_id: int) -> None:
        conn.execute(
            f"UPDATE books SET date_modified = max({TIMESTAMP_NOW}, date_added) WHERE id = ?",
            (book_id,),
        )

    def set_book_authors(self, book_id: int, author_ids: Iterable[int]) -> None:
        """Replace a book's ordered author list with existing author ids.

        Idempotent: repeating a call with the same list changes nothing
        beyond date_modified.

        Raises:
            NotFoundError: If the book or an author does not exist.
        """
        author_ids = list(author_ids)
        with self._write() as conn:
            replace_book_authors(conn, book_id, author_ids)
            self._touch(conn, book_id)

    def set_book_series(self, book_id: int, links: Iterable[SeriesLink]) -> None:
        """Replace a book's ordered series list with existing series ids and volumes.

        Raises:
            NotFoundError: If the book or a series does not exist.
            ValidationError: If a volume is invalid.
        """
        links = list(links)
        with self._write() as conn:
            replace_book_series(conn, book_id, links)
            self._touch(conn, book_id)

    def delete_book(self, book_id: int) -> None:
        """Delete a book, its link rows, and its read history.

        Authors and series are kept even if no other book references them;
        see prune_orphans().

        Raises:
            NotFoundError: If the book does not exist.
        """
        with self._write() as conn:
            cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("book", book_id)
        logger.debug("Deleted book %d", book_id)

    def record_read_event(
        self,
        book_id: int,
        start: str | date | None = None,
        end: str | date | None = None,
    ) -> int:
        """Record one read of a book. Returns the new read event id.

        Either date may be None (in progress, or not remembered).

        Raises:
            NotFoundError: If the book does not exist.
            ValidationError: If a date is malformed or end precedes start.
        """
        start_date, end_date = validate_read_dates(start, end)
        with self._write() as conn:
            require_row(conn, "books", book_id, "book")
            cursor = conn.execute(
                "INSERT INTO read_events (book, start_date, end_date) VALUES (?, ?, ?)",
                (book_id, start_date, end_date),
            )
        return cursor.lastrowid  # type: ignore[return-value]

    def delete_read_event(self, event_id: int) -> None:
        """Delete one read event.

        Raises:
            NotFoundError: If the read event does not exist.
        """
        with self._write() as conn:
            cursor = conn.execute("DELETE FROM read_events WHERE id = ?", (event_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("read event", event_id)

    def prune_orphans(self) -> PruneResult:
        """Delete authors and series no book links to any more.

        This is the only path that removes author or series rows; ordinary
        book writes never do.
        """
        with self._write() as conn:
            authors = conn.execute(
                "DELETE FROM authors WHERE id NOT IN (SELECT author FROM books_authors_link)"
            ).rowcount
            series = conn.execute(
                "DELETE FROM series WHERE id NOT IN (SELECT series FROM books_series_link)"
            ).rowcount
        result = PruneResult(authors=authors, series=series)
        logger.info("Pruned %d orphan author(s) and %d orphan series", authors, series)
        return result
