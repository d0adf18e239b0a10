# ABOUTME: Input data structures describing a book and its contributors before storage.
# ABOUTME: BookMetadata, AuthorMetadata, and SeriesMetadata are what collaborators hand the catalog.

from dataclasses import dataclass


@dataclass
class AuthorMetadata:
    """An author as supplied by an ingestion or metadata source.

    The catalog matches it against stored authors by goodreads_id first,
    then by exact name. A missing sort key is derived from the name.
    """

    name: str
    sort: str | None = None
    goodreads_id: int | None = None


@dataclass
class SeriesMetadata:
    """A series membership: the series itself plus this book's volume in it."""

    name: str
    volume: float | None = None
    sort: str | None = None
    goodreads_id: int | None = None


@dataclass
class BookMetadata:
    """Book-level fields of a catalog entry.

    Only the title is required. Author and series associations travel
    separately so they can be resolved against existing rows.
    """

    title: str
    sort: str | None = None
    date_published: str | None = None
    number_of_pages: int | None = None
    goodreads_id: int | None = None
