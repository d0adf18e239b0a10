# ABOUTME: Public API for the Promethea library database layer.
# ABOUTME: Exports connection management, catalog operations, records, and errors.

from promethea.db.catalog import LibraryCatalog, PruneResult
from promethea.db.connection import (
    DEFAULT_DB_PATH,
    LIBRARY_DATABASE_NAME,
    create_library,
    open_library,
)
from promethea.db.errors import (
    CatalogError,
    ConstraintViolationError,
    DuplicateBookError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from promethea.db.events import ChangeNotifier
from promethea.db.mapping import (
    AuthorRecord,
    BookRecord,
    ReadEvent,
    SeriesLink,
    SeriesRecord,
    SeriesVolumeRecord,
)
from promethea.db.queries import SORT_COLUMNS, BookFilter

__all__ = [
    "DEFAULT_DB_PATH",
    "LIBRARY_DATABASE_NAME",
    "SORT_COLUMNS",
    "AuthorRecord",
    "BookFilter",
    "BookRecord",
    "CatalogError",
    "ChangeNotifier",
    "ConstraintViolationError",
    "DuplicateBookError",
    "LibraryCatalog",
    "NotFoundError",
    "PruneResult",
    "ReadEvent",
    "SeriesLink",
    "SeriesRecord",
    "SeriesVolumeRecord",
    "StorageUnavailableError",
    "ValidationError",
    "create_library",
    "open_library",
]
