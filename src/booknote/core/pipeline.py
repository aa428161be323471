# ABOUTME: Search, enrichment and note-creation pipeline shared by the CLI commands.
# ABOUTME: Detail fetches run concurrently; notes are then written one book at a time.

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from booknote.config import Settings
from booknote.core.notes import CoverSaver, NoteExistsError, NoteWriter
from booknote.metadata.http import HttpClient, MetadataFetchError
from booknote.metadata.provider import BookProvider, DetailProvider
from booknote.metadata.types import Book
from booknote.template.filename import make_file_name
from booknote.template.render import render

logger = logging.getLogger(__name__)


class RequestCancelled(Exception):
    """The user aborted an interactive step. Not an error."""

    def __init__(self, message: str = "Cancelled request") -> None:
        super().__init__(message)


@dataclass
class EnrichmentResult:
    """Books after detail lookup, in input order, plus (title, message) per failed fetch."""

    books: list[Book]
    errors: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class BatchSummary:
    """Outcome of writing a batch of notes."""

    created: int = 0
    skipped: int = 0
    failed: list[str] = field(default_factory=list)
    paths: list[Path] = field(default_factory=list)

    def message(self) -> str:
        text = f"Created {self.created} book note{'s' if self.created != 1 else ''}"
        if self.skipped:
            text += f", skipped {self.skipped} duplicate{'s' if self.skipped != 1 else ''}"
        if self.failed:
            text += f". Failed: {', '.join(self.failed)}"
        return text


async def search_books(
    provider: BookProvider, query: str, options: dict[str, str] | None = None
) -> list[Book]:
    """Run a provider search for a non-blank query.

    Raises:
        ValueError: If the query is blank.
        MetadataFetchError: When the provider cannot be reached or answers badly.
    """
    query = query.strip()
    if not query:
        raise ValueError("No query entered.")
    logger.debug("Searching %s for %r", provider.name, query)
    return await provider.get_by_query(query, options)


async def enrich_books(provider: BookProvider, books: Sequence[Book]) -> EnrichmentResult:
    """Fetch full details for every book concurrently.

    A failed fetch keeps the search result as it was and adds an entry to
    errors, so the batch always has one book per input. Providers without a
    detail lookup return the books unchanged.
    """
    if not isinstance(provider, DetailProvider):
        return EnrichmentResult(books=list(books))

    results = await asyncio.gather(
        *(provider.get_book(book) for book in books), return_exceptions=True
    )

    enriched: list[Book] = []
    errors: list[tuple[str, str]] = []
    for book, result in zip(books, results):
        if isinstance(result, Book):
            enriched.append(result)
        elif isinstance(result, Exception):
            logger.warning("Failed to fetch details for %r: %s", book.title, result)
            errors.append((book.title, str(result)))
            enriched.append(book)
        else:
            raise result
    return EnrichmentResult(books=enriched, errors=errors)


async def create_notes(
    books: Sequence[Book],
    settings: Settings,
    *,
    writer: NoteWriter,
    cover_saver: CoverSaver | None = None,
    http: HttpClient | None = None,
    now: datetime | None = None,
) -> BatchSummary:
    """Render and write one note per book, in order.

    Existing notes are counted as skipped duplicates. Any other failure is
    recorded by title and the batch continues with the next book.
    """
    summary = BatchSummary()
    for book in books:
        try:
            if settings.enable_cover_image_save and cover_saver is not None and http is not None:
                book.local_cover_image = await cover_saver.save(book, http)
            text = render(book, settings, now=now)
            file_name = make_file_name(book, settings.file_name_format, now=now)
            path = writer.create(settings.folder, file_name, text)
        except NoteExistsError as exc:
            if settings.warn_on_duplicate:
                logger.warning("Skipping %r: %s", book.title, exc)
            else:
                logger.debug("Skipping %r: %s", book.title, exc)
            summary.skipped += 1
        except (OSError, MetadataFetchError) as exc:
            logger.warning("Failed to create note for %r: %s", book.title, exc)
            summary.failed.append(book.title)
        except Exception:
            logger.error("Unexpected error creating note for %r", book.title, exc_info=True)
            summary.failed.append(book.title)
        else:
            summary.created += 1
            summary.paths.append(path)
    return summary
