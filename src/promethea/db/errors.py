# ABOUTME: Exception hierarchy for the Promethea library database layer.
# ABOUTME: Translates sqlite3 errors into typed, caller-facing catalog errors.

import re
import sqlite3

_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: (?P<columns>[\w., ]+)")
_CHECK_RE = re.compile(r"CHECK constraint failed: (?P<name>.+)")


class CatalogError(Exception):
    """Base class for every error raised by the library catalog."""


class NotFoundError(CatalogError):
    """Raised when a referenced book, author, series, or read event does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity.capitalize()} {key!r} not found")
        self.entity = entity
        self.key = key


class ConstraintViolationError(CatalogError):
    """Raised when a write breaches a uniqueness, foreign-key, or check constraint.

    Attributes:
        constraint: The violated constraint, e.g. "authors.goodreads_id"
            or "FOREIGN KEY".
    """

    def __init__(self, constraint: str, message: str | None = None) -> None:
        super().__init__(message or f"Constraint violated: {constraint}")
        self.constraint = constraint


class DuplicateBookError(ConstraintViolationError):
    """Raised when adding a book whose goodreads_id is already cataloged."""

    def __init__(self, goodreads_id: int) -> None:
        super().__init__(
            "books.goodreads_id",
            f"Book already exists (goodreads_id={goodreads_id})",
        )
        self.goodreads_id = goodreads_id


class StorageUnavailableError(CatalogError):
    """Raised when the database file cannot be opened, read, or written."""


class ValidationError(CatalogError):
    """Raised when caller-supplied data fails domain rules before reaching storage."""


def constraint_error(exc: sqlite3.IntegrityError) -> ConstraintViolationError:
    """Build a ConstraintViolationError naming the constraint sqlite reported."""
    message = str(exc)
    match = _UNIQUE_RE.search(message)
    if match:
        return ConstraintViolationError(match.group("columns"), message)
    if "FOREIGN KEY constraint failed" in message:
        return ConstraintViolationError("FOREIGN KEY", message)
    match = _CHECK_RE.search(message)
    if match:
        return ConstraintViolationError(match.group("name"), message)
    if "NOT NULL constraint failed" in message:
        return ConstraintViolationError(message.split(": ", 1)[-1], message)
    return ConstraintViolationError("unknown", message)
