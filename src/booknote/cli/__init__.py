# ABOUTME: CLI package for booknote, built on Click.
# ABOUTME: Defines the root command group, the --verbose logging switch, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from booknote.cli.commands import filename_cmd, render_cmd, search_cmd


@click.group()
@click.version_option(package_name="booknote")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """booknote - create book notes from online metadata."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


cli.add_command(search_cmd.search)
cli.add_command(render_cmd.render_note)
cli.add_command(filename_cmd.filename)
