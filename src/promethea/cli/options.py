# ABOUTME: Shared Click options and helpers for Promethea CLI commands.
# ABOUTME: Provides the --db option and a context manager that opens the catalog safely.

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console

from promethea.db.catalog import LibraryCatalog
from promethea.db.connection import DEFAULT_DB_PATH, open_library
from promethea.db.errors import CatalogError

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path, dir_okay=False),
    envvar="PROMETHEA_DB",
    default=None,
    help=f"Path to library database (default: {DEFAULT_DB_PATH}, env: PROMETHEA_DB)",
)


@contextmanager
def open_catalog(db_path: Path | None, console: Console) -> Iterator[LibraryCatalog]:
    """Open an existing library, report catalog errors in red, and always close it.

    Any CatalogError raised by the body is printed and turned into exit status 1.
    """
    path = db_path or DEFAULT_DB_PATH
    try:
        conn = open_library(path, create=False)
    except CatalogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        console.print("[dim]Run `promethea init` to create a library.[/dim]")
        raise SystemExit(1) from exc

    catalog = LibraryCatalog(conn)
    try:
        yield catalog
    except CatalogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        catalog.close()
