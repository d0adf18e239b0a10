# ABOUTME: The `promethea info` command for displaying one book in full.
# ABOUTME: Shows all fields, authors, series, and read history for a book by ID.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from promethea.cli.commands.ls_cmd import format_series
from promethea.cli.options import db_option, open_catalog

console = Console()


@click.command("info")
@click.argument("book_id", type=int)
@db_option
def info(book_id: int, db_path: Path | None) -> None:
    """Show detailed metadata for a book by ID."""
    with open_catalog(db_path, console) as catalog:
        record = catalog.get_book(book_id)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Title", record.title)
    table.add_row("Sort", record.sort)
    table.add_row("Author", record.author or "unknown")
    if record.authors:
        table.add_row("Author Sort", " & ".join(author.sort for author in record.authors))
    if record.series_and_volume:
        table.add_row("Series", format_series(record))
    if record.number_of_pages is not None:
        table.add_row("Pages", str(record.number_of_pages))
    if record.goodreads_id is not None:
        table.add_row("Goodreads", str(record.goodreads_id))
    if record.date_published:
        table.add_row("Published", record.date_published)
    table.add_row("Added", record.date_added)
    table.add_row("Modified", record.date_modified)
    for event in record.read_events:
        start = event.start_date or "?"
        end = event.end_date or "reading"
        table.add_row("Read", f"{start} -> {end} [dim](#{event.id})[/dim]")

    console.print(table)
