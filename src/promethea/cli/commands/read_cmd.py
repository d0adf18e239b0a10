# ABOUTME: The `promethea read` command group for managing read history.
# ABOUTME: Provides add and rm subcommands for read events.

from pathlib import Path

import click
from rich.console import Console

from promethea.cli.options import db_option, open_catalog

console = Console()


@click.group("read")
def read() -> None:
    """Manage read history."""


@read.command("add")
@click.argument("book_id", type=int)
@db_option
@click.option("--start", default=None, help="Date reading started (YYYY-MM-DD).")
@click.option("--end", default=None, help="Date reading finished (YYYY-MM-DD).")
def read_add(book_id: int, db_path: Path | None, start: str | None, end: str | None) -> None:
    """Record a read of a book. Leave --end off for an in-progress read."""
    with open_catalog(db_path, console) as catalog:
        event_id = catalog.record_read_event(book_id, start, end)

    console.print(f"Recorded read [cyan]#{event_id}[/cyan] for book {book_id}.")


@read.command("rm")
@click.argument("event_id", type=int)
@db_option
def read_rm(event_id: int, db_path: Path | None) -> None:
    """Delete a read event by its ID."""
    with open_catalog(db_path, console) as catalog:
        catalog.delete_read_event(event_id)

    console.print(f"Removed read [cyan]#{event_id}[/cyan].")
