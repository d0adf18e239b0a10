# ABOUTME: Import pipeline for cataloging EPUBs into the Promethea library database.
# ABOUTME: Extracts metadata, optionally enriches it off the write path, then calls create_book.

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from promethea.db.catalog import LibraryCatalog
from promethea.db.errors import (
    ConstraintViolationError,
    DuplicateBookError,
    ValidationError,
)
from promethea.formats.epub import EpubReadError, read_epub_metadata
from promethea.metadata.types import AuthorMetadata, BookMetadata, SeriesMetadata

logger = logging.getLogger(__name__)


@dataclass
class BookCandidate:
    """Everything needed for one create_book() call."""

    metadata: BookMetadata
    authors: list[AuthorMetadata] = field(default_factory=list)
    series: list[SeriesMetadata] = field(default_factory=list)


@dataclass
class ImportResult:
    """Summary of an import operation."""

    added: int = 0
    skipped: int = 0
    errors: int = 0
    book_ids: list[int] = field(default_factory=list)
    error_details: list[tuple[Path, str]] = field(default_factory=list)


# Enrichment callback: takes (extracted_candidate, epub_path) -> replacement or None.
# It runs before the write transaction opens, so it may be slow (e.g. network lookups).
EnrichFn = Callable[[BookCandidate, Path], BookCandidate | None]


def candidate_from_epub(path: Path, catalog: LibraryCatalog) -> BookCandidate:
    """Build a BookCandidate from an EPUB file's own metadata.

    Author sort keys reuse what the catalog already stores for the same
    name, falling back to a derived key.

    Raises:
        EpubReadError: If the file cannot be read.
    """
    extracted = read_epub_metadata(path)
    authors = [
        AuthorMetadata(name=name, sort=catalog.author_sort(name))
        for name in extracted.authors
    ]
    return BookCandidate(metadata=extracted.book, authors=authors)


def import_books(
    paths: list[Path],
    catalog: LibraryCatalog,
    *,
    enrich_fn: EnrichFn | None = None,
) -> ImportResult:
    """Import EPUB files into the library catalog.

    For each file: extracts metadata, lets enrich_fn replace it, and adds
    the book with its authors and series. Books whose goodreads_id is
    already cataloged are skipped. Unreadable files and rejected metadata
    are recorded as errors. Storage failures abort the import.

    Args:
        paths: List of EPUB file paths to import.
        catalog: The library catalog to add books to.
        enrich_fn: Optional callback to improve metadata per file.

    Returns:
        ImportResult with counts of added, skipped, and errored files.
    """
    result = ImportResult()

    for epub_path in paths:
        try:
            candidate = candidate_from_epub(epub_path, catalog)
        except EpubReadError as exc:
            result.errors += 1
            result.error_details.append((epub_path, str(exc)))
            continue

        if enrich_fn is not None:
            enriched = enrich_fn(candidate, epub_path)
            if enriched is not None:
                candidate = enriched

        goodreads_id = candidate.metadata.goodreads_id
        # Check for duplicate before opening a write transaction (cheaper)
        if goodreads_id is not None and catalog.get_by_goodreads_id(goodreads_id) is not None:
            result.skipped += 1
            continue

        try:
            book_id = catalog.create_book(
                candidate.metadata, candidate.authors, candidate.series,
            )
        except DuplicateBookError:
            # Another writer cataloged it between the check and the insert
            result.skipped += 1
            continue
        except (ValidationError, ConstraintViolationError) as exc:
            logger.warning("Rejected metadata for %s: %s", epub_path, exc)
            result.errors += 1
            result.error_details.append((epub_path, str(exc)))
            continue

        result.added += 1
        result.book_ids.append(book_id)

    return result
