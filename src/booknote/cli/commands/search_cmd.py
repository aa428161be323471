# ABOUTME: The `booknote search` command: search a provider, pick results, and write book notes.
# ABOUTME: Details for the picked results are fetched concurrently before notes are written.

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from booknote.cli.options import config_option, settings_or_exit
from booknote.config import ServiceProvider, Settings
from booknote.core.notes import CoverSaver, NoteWriter
from booknote.core.pipeline import (
    RequestCancelled,
    create_notes,
    enrich_books,
    search_books,
)
from booknote.metadata.factory import create_provider
from booknote.metadata.http import BooknoteHttpClient, MetadataFetchError
from booknote.metadata.types import Book
from booknote.template.filename import make_file_name
from booknote.template.render import render

logger = logging.getLogger(__name__)

console = Console()


def _show_results(books: list[Book]) -> None:
    table = Table(title="Results")
    table.add_column("#", style="bold", width=3)
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Publisher")
    table.add_column("Published")
    table.add_column("ISBN", style="dim")

    for i, book in enumerate(books, start=1):
        table.add_row(
            str(i),
            book.title,
            book.author or "[dim]unknown[/dim]",
            book.publisher or "—",
            book.publish_date or "—",
            book.isbn13 or book.isbn10 or "—",
        )
    console.print(table)


def _prompt_choice(books: list[Book]) -> list[Book]:
    """Ask for one result by number; [c] or Ctrl-C cancels."""
    while True:
        try:
            choice = click.prompt(f"[1-{len(books)}] Create note  [c] Cancel", type=str, default="c")
        except click.Abort as exc:
            raise RequestCancelled() from exc
        if choice.lower() == "c":
            raise RequestCancelled()
        try:
            idx = int(choice) - 1
        except ValueError:
            continue
        if 0 <= idx < len(books):
            return [books[idx]]


def _select(books: list[Book], picks: tuple[int, ...], select_all: bool) -> list[Book]:
    if select_all:
        return list(books)
    if picks:
        invalid = [p for p in picks if not 1 <= p <= len(books)]
        if invalid:
            raise click.BadParameter(
                f"{', '.join(map(str, invalid))} out of range 1-{len(books)}", param_hint="--pick"
            )
        return [books[p - 1] for p in dict.fromkeys(picks)]
    return _prompt_choice(books)


def _print_dry_run(books: list[Book], settings: Settings) -> None:
    for book in books:
        console.rule(make_file_name(book, settings.file_name_format))
        console.print(render(book, settings), markup=False, highlight=False)


async def _search(
    query: str, settings: Settings, provider_name: str | None, options: dict[str, str]
) -> list[Book]:
    async with BooknoteHttpClient() as http:
        provider = create_provider(settings, http, provider_name)
        return await search_books(provider, query, options)


async def _enrich_and_write(
    selected: list[Book],
    settings: Settings,
    *,
    provider_name: str | None,
    dry_run: bool,
    vault: Path,
) -> bool:
    """Fetch details for the picked books and write (or print) their notes.

    Returns False when every note failed to be written.
    """
    async with BooknoteHttpClient() as http:
        provider = create_provider(settings, http, provider_name)
        result = await enrich_books(provider, selected)
        for title, message in result.errors:
            console.print(f"  [yellow]Details unavailable for {title}:[/yellow] {message}")

        if dry_run:
            _print_dry_run(result.books, settings)
            return True

        summary = await create_notes(
            result.books,
            settings,
            writer=NoteWriter(vault),
            cover_saver=CoverSaver(vault, settings.cover_image_path),
            http=http,
        )

    for path in summary.paths:
        console.print(f"  [green]Written:[/green] {path}")
    if summary.skipped and settings.warn_on_duplicate:
        console.print("  [yellow]Existing notes were left untouched.[/yellow]")
    console.print(f"\n{summary.message()}")
    return not (summary.failed and not summary.created and not summary.skipped)


@click.command("search")
@click.argument("query")
@config_option
@click.option(
    "-p",
    "--provider",
    "provider_name",
    type=click.Choice([p.value for p in ServiceProvider]),
    default=None,
    help="Provider to search instead of the configured one.",
)
@click.option("--locale", default=None, help="Only keep results in this language (e.g. en, fr); overrides locale_preference.")
@click.option(
    "--pick",
    "picks",
    type=int,
    multiple=True,
    help="Result number to create a note for; repeat for several.",
)
@click.option("--all", "select_all", is_flag=True, default=False, help="Create notes for every result.")
@click.option("--dry-run", is_flag=True, default=False, help="Print notes instead of writing them.")
@click.option(
    "--vault",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Root directory notes and covers are written under.",
)
def search(
    query: str,
    config_path: Path | None,
    provider_name: str | None,
    locale: str | None,
    picks: tuple[int, ...],
    select_all: bool,
    dry_run: bool,
    vault: Path,
) -> None:
    """Search for QUERY and create book notes from the chosen results."""
    settings = settings_or_exit(console, config_path)
    options = {"locale": locale} if locale else {}

    try:
        books = asyncio.run(_search(query, settings, provider_name, options))
        if not books:
            console.print("[yellow]No results found.[/yellow]")
            return

        _show_results(books)
        selected = _select(books, picks, select_all)

        succeeded = asyncio.run(
            _enrich_and_write(
                selected,
                settings,
                provider_name=provider_name,
                dry_run=dry_run,
                vault=vault,
            )
        )
    except RequestCancelled:
        logger.debug("Search cancelled by user")
        return
    except (MetadataFetchError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    if not succeeded:
        sys.exit(1)
