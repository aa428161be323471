# ABOUTME: Writes rendered notes and downloaded cover images under a notes root directory.
# ABOUTME: Notes are never overwritten; an existing file raises NoteExistsError.

import logging
import re
from pathlib import Path, PurePosixPath

from booknote.metadata.http import HttpClient, MetadataFetchError
from booknote.metadata.types import Book

logger = logging.getLogger(__name__)

_IMAGE_NAME_ILLEGAL_RE = re.compile(r'[:/\\?%*|"<>]')


class NoteExistsError(Exception):
    """Raised when the target note file already exists."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Note already exists: {path}")
        self.path = path


class NoteWriter:
    """Creates note files below a root directory (the vault)."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, folder: str, file_name: str) -> Path:
        directory = self._root / folder if folder else self._root
        return directory / file_name

    def create(self, folder: str, file_name: str, text: str) -> Path:
        """Write text to <root>/<folder>/<file_name> and return the path.

        Raises:
            NoteExistsError: If the file already exists.
            OSError: If the directory or file cannot be written.
        """
        path = self.path_for(folder, file_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, "x", encoding="utf-8") as f:
                f.write(text)
        except FileExistsError as exc:
            raise NoteExistsError(path) from exc
        logger.debug("Created note %s", path)
        return path


def best_cover_url(book: Book) -> str:
    """The largest cover URL the record carries, or ""."""
    return (
        book.cover_large_url
        or book.cover_medium_url
        or book.cover_small_url
        or book.cover_url
        or ""
    )


def cover_image_name(book: Book) -> str:
    return _IMAGE_NAME_ILLEGAL_RE.sub("", f"{book.title} — {book.author}.jpg")


class CoverSaver:
    """Downloads cover images into a directory below the notes root.

    save() returns an internal link ("[[covers/Title — Author.jpg]]") for
    use in the note, or "" when there is no cover or the download fails.
    """

    def __init__(self, root: Path, directory: str = "") -> None:
        self._root = root
        self._directory = directory.strip("/")

    async def save(self, book: Book, http: HttpClient) -> str:
        url = best_cover_url(book)
        if not url:
            return ""

        name = cover_image_name(book)
        target_dir = self._root / self._directory if self._directory else self._root
        try:
            data = await http.get_bytes(url)
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / name).write_bytes(data)
        except (MetadataFetchError, OSError) as exc:
            logger.error("Error downloading or saving cover for %r: %s", book.title, exc)
            return ""

        link = PurePosixPath(self._directory, name) if self._directory else PurePosixPath(name)
        return f"[[{link}]]"
