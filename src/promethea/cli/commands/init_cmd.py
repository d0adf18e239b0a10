# ABOUTME: The `promethea init` and `promethea status` commands.
# ABOUTME: Create a new library database, or report whether a usable one is configured.

from pathlib import Path

import click
from rich.console import Console

from promethea.cli.options import db_option
from promethea.core.state import LibraryState
from promethea.db.connection import DEFAULT_DB_PATH
from promethea.db.errors import CatalogError, StorageUnavailableError

console = Console()


@click.command("init")
@click.argument(
    "folder",
    type=click.Path(file_okay=False, path_type=Path),
    default=str(DEFAULT_DB_PATH.parent),
)
def init(folder: Path) -> None:
    """Create a new, empty library database in FOLDER."""
    state = LibraryState()
    try:
        path = state.create(folder)
    except StorageUnavailableError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        state.close()

    console.print(f"Created library at [bold]{path}[/bold]")


@click.command("status")
@db_option
def status(db_path: Path | None) -> None:
    """Report whether the library database is usable."""
    state = LibraryState()
    try:
        state.open(db_path or DEFAULT_DB_PATH)
    except StorageUnavailableError:
        pass  # reflected in state.status()

    init_status = state.status()
    if not init_status.loaded:
        console.print("[yellow]needs_setup[/yellow]")
        if init_status.reason:
            console.print(f"[dim]{init_status.reason}[/dim]")
        raise SystemExit(1)

    try:
        book_count = state.catalog.count_books()
    except CatalogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        state.close()

    console.print(f"[green]loaded[/green] {init_status.path}")
    console.print(f"[dim]{book_count} book(s)[/dim]")
