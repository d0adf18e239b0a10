# ABOUTME: Holds the currently configured library catalog for a running application.
# ABOUTME: Reports "loaded" or "needs setup" instead of failing when no database is usable.

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from promethea.db.catalog import LibraryCatalog
from promethea.db.connection import (
    DEFAULT_TIMEOUT,
    LIBRARY_DATABASE_NAME,
    create_library,
    open_library,
)
from promethea.db.errors import StorageUnavailableError
from promethea.db.events import ChangeNotifier

logger = logging.getLogger(__name__)


@dataclass
class InitStatus:
    """Whether a usable library is configured, and why not if it isn't."""

    loaded: bool
    path: Path | None = None
    reason: str | None = None

    @property
    def state(self) -> str:
        return "loaded" if self.loaded else "needs_setup"


class LibraryState:
    """The application's handle on its library database.

    Starts empty. create() or open() connects a catalog, replacing (and
    closing) any previous one. Subscribers to notifier keep receiving change
    signals across reconnects, and are signalled when the library switches.
    """

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.notifier = ChangeNotifier()
        self._timeout = timeout
        self._lock = threading.Lock()
        self._catalog: LibraryCatalog | None = None
        self._path: Path | None = None
        self._last_error: str | None = None

    @property
    def catalog(self) -> LibraryCatalog:
        """The connected catalog.

        Raises:
            StorageUnavailableError: If no library has been connected.
        """
        with self._lock:
            if self._catalog is None:
                raise StorageUnavailableError(
                    self._last_error or "No library database is configured"
                )
            return self._catalog

    def create(self, folder: Path) -> Path:
        """Create a new library.db inside folder and connect to it.

        Returns:
            The path of the new database file.
        """
        path = folder / LIBRARY_DATABASE_NAME
        self._connect(path, create=True)
        return path

    def open(self, path: Path) -> None:
        """Connect to an existing library database file."""
        self._connect(path, create=False)

    def _connect(self, path: Path, *, create: bool) -> None:
        try:
            if create:
                conn = create_library(path, timeout=self._timeout)
            else:
                conn = open_library(path, create=False, timeout=self._timeout)
        except StorageUnavailableError as exc:
            with self._lock:
                self._last_error = str(exc)
            logger.error("Library init failed for %s: %s", path, exc)
            raise

        with self._lock:
            old = self._catalog
            self._catalog = LibraryCatalog(conn, notifier=self.notifier)
            self._path = path
            self._last_error = None

        if old is not None:
            logger.info("Closing previously connected library")
            old.close()
        logger.info("Library connected at %s", path)
        self.notifier.notify()

    def status(self) -> InitStatus:
        """Report whether a usable library is connected. Never raises."""
        with self._lock:
            if self._catalog is not None:
                return InitStatus(loaded=True, path=self._path)
            return InitStatus(loaded=False, reason=self._last_error)

    def close(self) -> None:
        with self._lock:
            catalog, self._catalog, self._path = self._catalog, None, None
        if catalog is not None:
            catalog.close()
