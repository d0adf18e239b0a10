# ABOUTME: The `promethea prune` command for explicit orphan cleanup.
# ABOUTME: Deletes authors and series that no book references any more.

from pathlib import Path

import click
from rich.console import Console

from promethea.cli.options import db_option, open_catalog

console = Console()


@click.command("prune")
@db_option
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def prune(db_path: Path | None, yes: bool) -> None:
    """Delete authors and series that no longer belong to any book."""
    if not yes:
        click.confirm("Delete all unreferenced authors and series?", abort=True)

    with open_catalog(db_path, console) as catalog:
        result = catalog.prune_orphans()

    console.print(
        f"Removed [bold]{result.authors}[/bold] author(s) "
        f"and [bold]{result.series}[/bold] series."
    )
