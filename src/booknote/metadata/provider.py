# ABOUTME: BookProvider protocol defining the contract for bibliographic metadata sources.
# ABOUTME: Google Books, Open Library, Calibre and Goodreads each implement it; detail lookup is optional.

from typing import Any, Protocol, runtime_checkable

from booknote.metadata.types import Book


@runtime_checkable
class BookProvider(Protocol):
    """Protocol for book metadata sources.

    Implementations search by free-text query and map each raw payload item
    onto the canonical Book record through normalize().
    """

    @property
    def name(self) -> str: ...

    def normalize(self, payload: Any) -> Book: ...

    async def get_by_query(
        self, query: str, options: dict[str, str] | None = None
    ) -> list[Book]: ...


@runtime_checkable
class DetailProvider(BookProvider, Protocol):
    """A provider that can fetch a fuller record for a search result."""

    async def get_book(self, book: Book) -> Book: ...
