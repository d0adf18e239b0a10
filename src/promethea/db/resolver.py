# ABOUTME: Resolves incoming author and series metadata to stored rows, creating them on first use.
# ABOUTME: Matching order is goodreads_id, then exact name, then a new row.

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

from promethea.db.mapping import validate_goodreads_id, validate_name
from promethea.metadata.sorting import name_sort, title_sort
from promethea.metadata.types import AuthorMetadata, SeriesMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _EntityTable:
    table: str
    label: str
    derive_sort: Callable[[str], str]


_AUTHORS = _EntityTable(table="authors", label="author", derive_sort=name_sort)
_SERIES = _EntityTable(table="series", label="series", derive_sort=title_sort)


def _resolve(
    conn: sqlite3.Connection,
    entity: _EntityTable,
    name: str,
    sort: str | None,
    goodreads_id: int | None,
) -> int:
    """Find or create a row for (name, sort, goodreads_id). Returns its id.

    A name match is only used when it does not carry a different
    goodreads_id, so two distinct people sharing a name stay distinct.
    A name-matched row without a goodreads_id adopts the incoming one.
    """
    name = validate_name(name, f"{entity.label} name")
    goodreads_id = validate_goodreads_id(goodreads_id)

    if goodreads_id is not None:
        row = conn.execute(
            f"SELECT id FROM {entity.table} WHERE goodreads_id = ?", (goodreads_id,)
        ).fetchone()
        if row is not None:
            return row["id"]

    row = conn.execute(
        f"SELECT id, goodreads_id FROM {entity.table} "
        "WHERE name = ? AND (goodreads_id IS NULL OR ? IS NULL OR goodreads_id = ?) "
        "ORDER BY goodreads_id IS NULL, id LIMIT 1",
        (name, goodreads_id, goodreads_id),
    ).fetchone()
    if row is not None:
        if goodreads_id is not None and row["goodreads_id"] is None:
            conn.execute(
                f"UPDATE {entity.table} SET goodreads_id = ? WHERE id = ?",
                (goodreads_id, row["id"]),
            )
            logger.debug(
                "Attached goodreads_id %d to %s %d", goodreads_id, entity.label, row["id"],
            )
        return row["id"]

    sort_key = validate_name(sort, f"{entity.label} sort") if sort else entity.derive_sort(name)
    cursor = conn.execute(
        f"INSERT INTO {entity.table} (name, sort, goodreads_id) VALUES (?, ?, ?)",
        (name, sort_key, goodreads_id),
    )
    logger.debug("Created %s %d (%s)", entity.label, cursor.lastrowid, name)
    return cursor.lastrowid  # type: ignore[return-value]


def resolve_author(conn: sqlite3.Connection, author: AuthorMetadata) -> int:
    """Return the id of the stored author matching this metadata, creating it if needed.

    An existing author keeps its stored sort key; the incoming one only
    applies to newly created rows.
    """
    return _resolve(conn, _AUTHORS, author.name, author.sort, author.goodreads_id)


def resolve_series(conn: sqlite3.Connection, series: SeriesMetadata) -> int:
    """Return the id of the stored series matching this metadata, creating it if needed."""
    return _resolve(conn, _SERIES, series.name, series.sort, series.goodreads_id)


def stored_sort(conn: sqlite3.Connection, table: str, name: str) -> str | None:
    """Return the sort key already stored for an author or series name, if any."""
    if table not in (_AUTHORS.table, _SERIES.table):
        raise ValueError(f"No sort lookup for table {table!r}")
    row = conn.execute(
        f"SELECT sort FROM {table} WHERE name = ? ORDER BY id LIMIT 1", (name.strip(),)
    ).fetchone()
    return row["sort"] if row else None
