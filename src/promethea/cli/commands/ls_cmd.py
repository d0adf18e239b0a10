# ABOUTME: The `promethea ls` command for listing cataloged books.
# ABOUTME: Displays a Rich table of books with their authors and series.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from promethea.cli.options import db_option, open_catalog
from promethea.db.mapping import BookRecord
from promethea.db.queries import DEFAULT_SORT, SORT_COLUMNS, BookFilter

console = Console()


def format_series(record: BookRecord) -> str:
    """Render "Name #volume" for each series membership, comma-separated."""
    parts = []
    for entry in record.series_and_volume:
        if entry.volume is not None:
            parts.append(f"{entry.series} #{entry.volume:g}")
        else:
            parts.append(entry.series)
    return ", ".join(parts)


@click.command("ls")
@db_option
@click.option(
    "--sort",
    "sort_key",
    type=click.Choice(list(SORT_COLUMNS)),
    default=DEFAULT_SORT,
    show_default=True,
    help="Sort books by this field.",
)
@click.option("--desc", is_flag=True, default=False, help="Reverse the sort order.")
@click.option("--author", "author_name", default=None, help="Only books by this author.")
@click.option("--series", "series_name", default=None, help="Only books in this series.")
@click.option("--search", "title_search", default=None, help="Only titles containing text.")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N books.")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Skip the first N books.")
def ls(
    db_path: Path | None,
    sort_key: str,
    desc: bool,
    author_name: str | None,
    series_name: str | None,
    title_search: str | None,
    limit: int | None,
    offset: int,
) -> None:
    """List books in the library catalog."""
    with open_catalog(db_path, console) as catalog:
        book_filter = BookFilter(title_contains=title_search)

        if author_name:
            author = catalog.find_author_by_name(author_name)
            if author is None:
                console.print(f"[red]Author '{author_name}' not found.[/red]")
                raise SystemExit(1)
            book_filter.author_id = author.id

        if series_name:
            series = catalog.find_series_by_name(series_name)
            if series is None:
                console.print(f"[red]Series '{series_name}' not found.[/red]")
                raise SystemExit(1)
            book_filter.series_id = series.id

        records = catalog.list_books(
            book_filter, sort=sort_key, descending=desc, limit=limit, offset=offset,
        )

    if not records:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Series")
    table.add_column("Pages", justify="right")
    table.add_column("Added", style="dim")

    for record in records:
        table.add_row(
            str(record.id),
            record.title,
            record.author or "[dim]unknown[/dim]",
            format_series(record),
            str(record.number_of_pages) if record.number_of_pages is not None else "",
            record.date_added[:10],
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} book(s)[/dim]")
