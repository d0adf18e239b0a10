# ABOUTME: SQLite connection management for the Promethea library database.
# ABOUTME: Opens or creates the database file, applies schema, and configures transactions.

import logging
import sqlite3
from pathlib import Path

from promethea.db.errors import StorageUnavailableError
from promethea.db.schema import MIGRATIONS, SCHEMA_V1

logger = logging.getLogger(__name__)

LIBRARY_DATABASE_NAME = "library.db"
DEFAULT_DB_PATH = Path.home() / ".promethea" / LIBRARY_DATABASE_NAME

# Seconds a statement waits on a locked database before failing.
DEFAULT_TIMEOUT = 5.0


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _table_names(conn: sqlite3.Connection) -> set[str]:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    return {row[0] for row in cursor.fetchall()}


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Execute the DDL to create all tables and indexes in one transaction.

    Another connection may be initializing the same fresh file; if it wins,
    our script fails on the existing tables and we keep its schema.
    """
    try:
        conn.executescript(f"BEGIN IMMEDIATE;\n{SCHEMA_V1}\nCOMMIT;")
    except sqlite3.OperationalError:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        if not _schema_exists(conn):
            raise
        logger.info("Schema was created concurrently by another connection")


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Apply pending schema migrations sequentially.

    Reads the current schema version and applies any migrations with a higher
    version number. No-op if the database is already at the latest version.
    """
    current = _get_schema_version(conn)
    for version, sql in MIGRATIONS:
        if version > current:
            logger.info("Applying schema migration v%d", version)
            conn.executescript(
                f"BEGIN IMMEDIATE;\n{sql}\n"
                f"INSERT INTO schema_version (version) VALUES ({int(version)});\nCOMMIT;"
            )


def open_library(
    path: Path | None = None,
    *,
    create: bool = True,
    timeout: float = DEFAULT_TIMEOUT,
) -> sqlite3.Connection:
    """Open or create the Promethea library database.

    The connection runs in autocommit mode; the catalog opens explicit
    transactions around every multi-statement operation. WAL journaling lets
    readers proceed while a writer holds the lock, foreign keys are enforced,
    and rows come back as sqlite3.Row for dict-like access.

    Args:
        path: Path to the database file. Defaults to ~/.promethea/library.db.
        create: Create the file (and parent directories) when missing. When
            False, a missing file is an error.
        timeout: Seconds to wait for a lock held by another connection.

    Returns:
        A configured sqlite3.Connection.

    Raises:
        StorageUnavailableError: If the file is missing (with create=False),
            cannot be created, or is not a usable library database.
    """
    db_path = path or DEFAULT_DB_PATH

    if not db_path.exists():
        if not create:
            raise StorageUnavailableError(f"Library database not found: {db_path}")
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot create {db_path.parent}: {exc}") from exc
    elif db_path.is_dir():
        raise StorageUnavailableError(f"Library path is a directory: {db_path}")

    try:
        conn = sqlite3.connect(
            str(db_path),
            timeout=timeout,
            isolation_level=None,
            check_same_thread=False,
        )
    except sqlite3.Error as exc:
        raise StorageUnavailableError(f"Cannot open library {db_path}: {exc}") from exc

    try:
        conn.row_factory = sqlite3.Row
        # Checked before any PRAGMA so a foreign database is left untouched.
        tables = _table_names(conn)
        if tables and "schema_version" not in tables:
            conn.close()
            raise StorageUnavailableError(f"Not a Promethea library: {db_path}")

        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

        if not tables:
            logger.info("Initializing new library schema at %s", db_path)
            _apply_schema(conn)

        _apply_migrations(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise StorageUnavailableError(f"Cannot use library {db_path}: {exc}") from exc

    logger.info("Opened library database at %s", db_path)
    return conn


def create_library(path: Path, *, timeout: float = DEFAULT_TIMEOUT) -> sqlite3.Connection:
    """Create a new, empty library database at path.

    Raises:
        StorageUnavailableError: If a file already exists at path or it cannot
            be created.
    """
    if path.exists():
        raise StorageUnavailableError(f"Refusing to overwrite existing file: {path}")
    return open_library(path, create=True, timeout=timeout)
