# ABOUTME: The `booknote filename` command printing the note file name for a stored record.
# ABOUTME: The format defaults to the configured file_name_format.

from pathlib import Path
from typing import IO

import click
from rich.console import Console

from booknote.cli.options import config_option, read_record, record_argument, settings_or_exit
from booknote.template.filename import make_file_name

console = Console(stderr=True)


@click.command("filename")
@record_argument
@config_option
@click.option(
    "-f",
    "--format",
    "file_name_format",
    default=None,
    help='File name format, e.g. "{{title}} - {{DATE:YYYY}}".',
)
def filename(record_file: IO[str], config_path: Path | None, file_name_format: str | None) -> None:
    """Print the note file name for a book record stored as JSON."""
    settings = settings_or_exit(console, config_path)
    book = read_record(console, record_file)
    click.echo(make_file_name(book, file_name_format or settings.file_name_format))
