# ABOUTME: Shared pytest fixtures for Promethea tests.
# ABOUTME: Provides temporary library databases and sample EPUB files (valid and corrupt).

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from ebooklib import epub

from promethea.db.catalog import LibraryCatalog
from promethea.db.connection import open_library

MakeEpub = Callable[..., Path]


def _write_epub(
    path: Path,
    title: str,
    authors: list[str] | None = None,
    goodreads_id: str | None = None,
    published: str | None = None,
) -> Path:
    book = epub.EpubBook()
    book.set_identifier(f"id-{title}")
    book.set_title(title)
    book.set_language("en")
    for author in authors or []:
        book.add_author(author)
    if goodreads_id:
        book.add_metadata("DC", "identifier", goodreads_id, {"scheme": "GOODREADS"})
    if published:
        book.add_metadata("DC", "date", published)

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    # Add navigation
    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    path.parent.mkdir(parents=True, exist_ok=True)
    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def make_epub() -> MakeEpub:
    """Factory that writes a minimal valid EPUB with the given metadata."""
    return _write_epub


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """A valid EPUB for "Dune" by Frank Herbert carrying a Goodreads identifier."""
    return _write_epub(
        tmp_path / "books" / "dune.epub",
        "Dune",
        authors=["Frank Herbert"],
        goodreads_id="234225",
        published="1965-08-01",
    )


@pytest.fixture
def minimal_epub(tmp_path: Path) -> Path:
    """An EPUB with only a title: no authors, no identifiers."""
    return _write_epub(tmp_path / "books" / "minimal.epub", "Untitled Book")


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """A file with an .epub suffix that is not a valid EPUB."""
    filepath = tmp_path / "books" / "corrupt.epub"
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path for a temporary library database (not yet created)."""
    return tmp_path / "library.db"


@pytest.fixture
def catalog(db_path: Path) -> Iterator[LibraryCatalog]:
    """A LibraryCatalog backed by a fresh temporary database."""
    catalog = LibraryCatalog(open_library(db_path))
    yield catalog
    catalog.close()
