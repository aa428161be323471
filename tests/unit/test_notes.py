# ABOUTME: Unit tests for note writing and cover image saving.
# ABOUTME: Uses tmp_path as the notes root and FakeHttpClient for cover downloads.

from pathlib import Path

import pytest

from booknote.core.notes import (
    CoverSaver,
    NoteExistsError,
    NoteWriter,
    best_cover_url,
    cover_image_name,
)
from booknote.metadata.http import MetadataFetchError
from booknote.metadata.types import Book
from tests.fixtures.fake_http import FakeHttpClient


class TestNoteWriter:
    """Tests for NoteWriter.create()."""

    def test_creates_note_in_folder(self, vault: Path) -> None:
        path = NoteWriter(vault).create("Books/SF", "Dune.md", "# Dune")
        assert path == vault / "Books" / "SF" / "Dune.md"
        assert path.read_text(encoding="utf-8") == "# Dune"

    def test_empty_folder_is_root(self, vault: Path) -> None:
        assert NoteWriter(vault).create("", "Dune.md", "x") == vault / "Dune.md"

    def test_existing_note_is_not_overwritten(self, vault: Path) -> None:
        existing = vault / "Dune.md"
        existing.write_text("mine", encoding="utf-8")
        with pytest.raises(NoteExistsError) as exc_info:
            NoteWriter(vault).create("", "Dune.md", "theirs")
        assert exc_info.value.path == existing
        assert existing.read_text(encoding="utf-8") == "mine"


class TestCoverHelpers:
    def test_best_cover_prefers_large(self) -> None:
        book = Book(cover_url="s", cover_medium_url="m", cover_large_url="l")
        assert best_cover_url(book) == "l"
        assert best_cover_url(Book(cover_url="s")) == "s"
        assert best_cover_url(Book()) == ""

    def test_image_name_strips_illegal_characters(self) -> None:
        book = Book(title="Dune: Messiah?", author='Frank "F" Herbert')
        assert cover_image_name(book) == "Dune Messiah — Frank F Herbert.jpg"


class TestCoverSaver:
    """Tests for CoverSaver.save()."""

    @pytest.mark.asyncio
    async def test_downloads_cover_and_returns_link(self, vault: Path) -> None:
        client = FakeHttpClient({"cover.jpg": b"JPEG"})
        book = Book(title="Dune", author="Frank Herbert", cover_url="https://x/cover.jpg")
        link = await CoverSaver(vault, "covers/").save(book, client)
        assert link == "[[covers/Dune — Frank Herbert.jpg]]"
        assert (vault / "covers" / "Dune — Frank Herbert.jpg").read_bytes() == b"JPEG"

    @pytest.mark.asyncio
    async def test_root_directory(self, vault: Path) -> None:
        client = FakeHttpClient({"cover.jpg": b"JPEG"})
        book = Book(title="Dune", author="F", cover_url="https://x/cover.jpg")
        assert await CoverSaver(vault).save(book, client) == "[[Dune — F.jpg]]"

    @pytest.mark.asyncio
    async def test_no_cover_url(self, vault: Path) -> None:
        client = FakeHttpClient()
        assert await CoverSaver(vault).save(Book(title="Dune"), client) == ""
        assert client.request_log == []

    @pytest.mark.asyncio
    async def test_download_failure_returns_empty(self, vault: Path) -> None:
        client = FakeHttpClient({"cover.jpg": MetadataFetchError("HTTP 404")})
        book = Book(title="Dune", cover_url="https://x/cover.jpg")
        assert await CoverSaver(vault, "covers").save(book, client) == ""
        assert not (vault / "covers").exists()
