# ABOUTME: The `booknote render` command printing the note text for a stored record.
# ABOUTME: Uses the configured header/body templates or an explicit template file.

from pathlib import Path
from typing import IO

import click
from rich.console import Console

from booknote.cli.options import config_option, read_record, record_argument, settings_or_exit
from booknote.template.render import render

console = Console(stderr=True)


@click.command("render")
@record_argument
@config_option
@click.option(
    "-t",
    "--template",
    "template_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Template file to use instead of the configured templates.",
)
def render_note(record_file: IO[str], config_path: Path | None, template_path: Path | None) -> None:
    """Render a book record stored as JSON ('-' for stdin) to stdout."""
    settings = settings_or_exit(console, config_path)
    book = read_record(console, record_file)
    template_text = template_path.read_text(encoding="utf-8") if template_path else None
    click.echo(render(book, settings, template_text=template_text))
