# ABOUTME: EPUB metadata extraction for library ingestion using ebooklib.
# ABOUTME: Defensive wrapper that handles malformed files gracefully.

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from ebooklib import epub

from promethea.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


@dataclass
class EpubMetadata:
    """What an EPUB file says about itself, before any enrichment."""

    book: BookMetadata
    authors: list[str] = field(default_factory=list)
    identifiers: dict[str, str] = field(default_factory=dict)
    source_path: Path | None = None


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_authors(book: epub.EpubBook) -> list[str]:
    """Extract all author names from an EpubBook, in document order."""
    creators = book.get_metadata("DC", "creator")
    if not creators:
        return []
    return [str(entry[0]).strip() for entry in creators if entry[0]]


def _local_name(attribute: str) -> str:
    """Strip an XML namespace ("{uri}scheme") or prefix ("opf:scheme") from a name."""
    return attribute.rsplit("}", 1)[-1].rsplit(":", 1)[-1]


def _get_identifiers(book: epub.EpubBook) -> dict[str, str]:
    """Extract all identifiers (ISBN, UUID, Goodreads, etc.) from an EpubBook."""
    identifiers = {}
    entries = book.get_metadata("DC", "identifier")
    for value, attrs in entries:
        if not value:
            continue
        scheme = next(
            (text for key, text in attrs.items() if _local_name(key) == "scheme"), "id",
        )
        identifiers[scheme.lower()] = str(value).strip()
    return identifiers


def _detect_goodreads_id(identifiers: dict[str, str]) -> int | None:
    """Return the numeric Goodreads id, if the EPUB carries one."""
    value = identifiers.get("goodreads")
    if value is None:
        return None
    digits = value.split("-", 1)[0].split(".", 1)[0]
    if digits.isdigit() and int(digits) > 0:
        return int(digits)
    logger.warning("Ignoring malformed goodreads identifier %r", value)
    return None


def _get_publication_date(book: epub.EpubBook) -> str | None:
    """Return the DC date as YYYY-MM-DD, if it carries a full calendar date."""
    value = _get_metadata_value(book, "DC", "date")
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10]).isoformat()
    except ValueError:
        logger.debug("Ignoring partial or malformed publication date %r", value)
        return None


def read_epub_metadata(path: Path) -> EpubMetadata:
    """Extract title, authors, publication date, and identifiers from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        EpubMetadata with the book fields and the raw author names.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    title = _get_metadata_value(book, "DC", "title")
    if not title:
        title = path.stem

    identifiers = _get_identifiers(book)

    return EpubMetadata(
        book=BookMetadata(
            title=title,
            date_published=_get_publication_date(book),
            goodreads_id=_detect_goodreads_id(identifiers),
        ),
        authors=_get_authors(book),
        identifiers=identifiers,
        source_path=path,
    )
