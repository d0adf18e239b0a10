# ABOUTME: Metadata package: input data structures and sort-key derivation.
# ABOUTME: Exports the types collaborators use to describe books before storage.

from promethea.metadata.sorting import name_sort, title_sort
from promethea.metadata.types import AuthorMetadata, BookMetadata, SeriesMetadata

__all__ = [
    "AuthorMetadata",
    "BookMetadata",
    "SeriesMetadata",
    "name_sort",
    "title_sort",
]
