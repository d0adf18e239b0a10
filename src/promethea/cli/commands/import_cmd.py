# ABOUTME: The `promethea import` command for scanning and cataloging EPUBs.
# ABOUTME: Walks a directory, extracts metadata, and stores books in the library DB.

from pathlib import Path

import click
from rich.console import Console

from promethea.cli.options import db_option, open_catalog
from promethea.core.importer import import_books

console = Console()


def _find_epubs(path: Path) -> list[Path]:
    """Find EPUB files at the given path (single file or directory)."""
    if path.is_file():
        return [path]
    return sorted(path.rglob("*.epub"))


@click.command("import")
@click.argument(
    "path",
    type=click.Path(exists=True, path_type=Path),
)
@db_option
def import_command(path: Path, db_path: Path | None) -> None:
    """Catalog an EPUB file, or every EPUB under a directory."""
    epub_files = _find_epubs(path)

    if not epub_files:
        console.print(f"[yellow]No EPUB files found in {path}[/yellow]")
        return

    console.print(f"Found [bold]{len(epub_files)}[/bold] EPUB file(s)\n")

    with open_catalog(db_path, console) as catalog:
        result = import_books(epub_files, catalog)

    # Summary
    parts = []
    if result.added:
        parts.append(f"[green]{result.added} added[/green]")
    if result.skipped:
        parts.append(f"[yellow]{result.skipped} skipped[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")

    console.print(", ".join(parts))

    if result.error_details:
        console.print(
            f"\n[yellow]{result.errors} file(s) could not be cataloged:[/yellow]"
        )
        for epub_path, msg in result.error_details:
            console.print(f"  [dim]{epub_path.name}:[/dim] {msg}")
