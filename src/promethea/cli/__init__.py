# ABOUTME: CLI package for Promethea, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import logging

import click

from promethea.cli.commands import (
    edit_cmd,
    import_cmd,
    info_cmd,
    init_cmd,
    ls_cmd,
    prune_cmd,
    read_cmd,
)


@click.group()
@click.version_option(package_name="promethea")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log database activity.")
def cli(verbose: bool) -> None:
    """Promethea - a personal ebook library manager."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


cli.add_command(init_cmd.init)
cli.add_command(init_cmd.status)
cli.add_command(import_cmd.import_command)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(edit_cmd.edit)
cli.add_command(edit_cmd.rm)
cli.add_command(read_cmd.read)
cli.add_command(prune_cmd.prune)


def main() -> None:
    cli()
