# ABOUTME: The `promethea edit` and `promethea rm` commands for changing cataloged books.
# ABOUTME: Edits apply as one partial update; removal keeps authors and series.

from pathlib import Path
from typing import Any

import click
from rich.console import Console

from promethea.cli.options import db_option, open_catalog
from promethea.metadata.types import AuthorMetadata, SeriesMetadata

console = Console()


def parse_series(value: str) -> SeriesMetadata:
    """Parse "Name" or "Name:volume" into SeriesMetadata."""
    name, sep, volume = value.rpartition(":")
    if not sep:
        return SeriesMetadata(name=value.strip())
    try:
        return SeriesMetadata(name=name.strip(), volume=float(volume))
    except ValueError as exc:
        raise click.BadParameter(f"invalid volume in {value!r}") from exc


@click.command("edit")
@click.argument("book_id", type=int)
@db_option
@click.option("--title", default=None, help="New title (re-derives sort unless --sort).")
@click.option("--sort", "sort_key", default=None, help="New title sort key.")
@click.option("--pages", type=click.IntRange(min=0), default=None, help="Number of pages.")
@click.option("--published", default=None, help="Publication date (YYYY-MM-DD).")
@click.option("--goodreads-id", type=click.IntRange(min=1), default=None, help="Goodreads id.")
@click.option(
    "-a", "--author", "authors", multiple=True,
    help="Replace authors (repeat in order).",
)
@click.option(
    "-s", "--series", "series", multiple=True,
    help="Replace series as NAME or NAME:VOLUME (repeat in order).",
)
@click.option("--clear-authors", is_flag=True, default=False, help="Remove all authors.")
@click.option("--clear-series", is_flag=True, default=False, help="Remove all series.")
def edit(
    book_id: int,
    db_path: Path | None,
    title: str | None,
    sort_key: str | None,
    pages: int | None,
    published: str | None,
    goodreads_id: int | None,
    authors: tuple[str, ...],
    series: tuple[str, ...],
    clear_authors: bool,
    clear_series: bool,
) -> None:
    """Edit metadata of a book by ID. Only given options change."""
    fields: dict[str, Any] = {}
    if title is not None:
        fields["title"] = title
    if sort_key is not None:
        fields["sort"] = sort_key
    if pages is not None:
        fields["number_of_pages"] = pages
    if published is not None:
        fields["date_published"] = published
    if goodreads_id is not None:
        fields["goodreads_id"] = goodreads_id

    author_list = [AuthorMetadata(name=name) for name in authors]
    series_links = [parse_series(value) for value in series]

    with open_catalog(db_path, console) as catalog:
        catalog.update_book(
            book_id,
            authors=author_list if author_list or clear_authors else None,
            series=series_links if series_links or clear_series else None,
            **fields,
        )
        record = catalog.get_book(book_id, with_read_events=False)

    console.print(f"Updated [bold]{record.title}[/bold] (book {record.id}).")


@click.command("rm")
@click.argument("book_id", type=int)
@db_option
def rm(book_id: int, db_path: Path | None) -> None:
    """Remove a book from the catalog. Its authors and series are kept."""
    with open_catalog(db_path, console) as catalog:
        record = catalog.get_book(book_id, with_read_events=False)
        catalog.delete_book(book_id)

    console.print(f"Removed [bold]{record.title}[/bold] (book {book_id}).")
