# ABOUTME: Calibre content server metadata provider and /ajax/book normalizer.
# ABOUTME: Searches a self-hosted library, fetches book details concurrently, and maps them to Book.

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from booknote.metadata.fields import (
    as_text,
    as_text_list,
    filter_by_language,
    matches_marc_language,
    format_list,
    strip_html,
    strip_scheme,
    year_only,
)
from booknote.metadata.http import HttpClient, MetadataFetchError
from booknote.metadata.types import Book, CustomValue, dedupe

logger = logging.getLogger(__name__)

_DETAIL_LIMIT = 5
_DEFAULT_LIBRARY_ID = "calibre"
# Calibre stores "no date" as the year 101.
_UNDEFINED_YEAR = "101"


def _cover_url(data: dict[str, Any], server_url: str, book_id: str, library_id: str) -> str:
    cover = as_text(data.get("cover"))
    if cover:
        return f"{server_url}{cover}" if cover.startswith("/") else cover
    return f"{server_url}/get/cover/{book_id}/{library_id}"


def _custom_value(value: Any) -> CustomValue | None:
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return as_text_list(value)
    return None


def parse_custom_columns(user_metadata: Any) -> dict[str, CustomValue]:
    """Flatten Calibre user_metadata into {column label: value}.

    Columns without a value are left out; the leading '#' of the lookup
    name is dropped.
    """
    columns: dict[str, CustomValue] = {}
    if not isinstance(user_metadata, dict):
        return columns
    for lookup_name, column in user_metadata.items():
        if not isinstance(column, dict):
            continue
        value = _custom_value(column.get("#value#"))
        if value is None or value == "" or value == []:
            continue
        label = as_text(column.get("label")) or str(lookup_name).lstrip("#")
        columns[label] = value
    return columns


def _rating(value: Any) -> float | str:
    # Calibre ratings are 0-10 (half stars); templates expect 0-5.
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return value / 2
    return ""


def _series_number(value: Any) -> float | str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return ""


def parse_book_details(
    data: Any,
    *,
    server_url: str,
    book_id: str,
    library_id: str = _DEFAULT_LIBRARY_ID,
) -> Book:
    """Parse a Calibre /ajax/book/{id} response into a Book."""
    if not isinstance(data, dict):
        data = {}
    server_url = server_url.rstrip("/")
    library_id = library_id or _DEFAULT_LIBRARY_ID
    book_url = f"{server_url}/ajax/book/{book_id}"

    authors = dedupe(as_text_list(data.get("authors")))
    tags = dedupe(as_text_list(data.get("tags")))

    identifiers = data.get("identifiers")
    if not isinstance(identifiers, dict):
        identifiers = {}
    isbn = strip_scheme(as_text(identifiers.get("isbn")) or as_text(data.get("isbn")))

    publish_date = year_only(data.get("pubdate"))
    if publish_date == _UNDEFINED_YEAR:
        publish_date = ""

    series = as_text(data.get("series"))
    cover_url = _cover_url(data, server_url, book_id, library_id)

    return Book(
        title=as_text(data.get("title")),
        subtitle="",
        author=format_list(authors),
        authors=authors,
        category="",
        categories=tags,
        publisher=as_text(data.get("publisher")),
        publish_date=publish_date,
        total_page="",
        cover_url=cover_url,
        cover_small_url=cover_url,
        cover_large_url=cover_url,
        description=strip_html(as_text(data.get("comments"))).strip(),
        link=book_url,
        preview_link=book_url,
        isbn10="",
        isbn13=isbn,
        ids=isbn,
        original_title="",
        translator="",
        narrator="",
        my_rate=_rating(data.get("rating")),
        language=",".join(as_text_list(data.get("languages"))),
        series=series,
        series_number=_series_number(data.get("series_index")) if series else "",
        series_link=f"[[{series}]]" if series else "",
        custom_columns=parse_custom_columns(data.get("user_metadata")),
        source_provider="calibre",
        source_id=book_id,
    )


class CalibreProvider:
    """Metadata provider backed by a Calibre content server.

    A search returns book ids only; details for the first few ids are
    fetched concurrently. A detail fetch that fails drops that one result
    unless every fetch failed, in which case the first error is raised.
    """

    def __init__(
        self,
        http_client: HttpClient,
        *,
        server_url: str,
        library_id: str = _DEFAULT_LIBRARY_ID,
        locale_preference: str = "",
    ) -> None:
        self._http = http_client
        self._server_url = server_url.rstrip("/")
        self._library_id = library_id or _DEFAULT_LIBRARY_ID
        self._locale_preference = locale_preference

    @property
    def name(self) -> str:
        return "calibre"

    def normalize(self, payload: Any) -> Book:
        """Normalize an /ajax/book payload; the book id is read from its 'application_id'."""
        book_id = ""
        if isinstance(payload, dict):
            book_id = as_text(payload.get("application_id") or payload.get("id"))
        return parse_book_details(
            payload, server_url=self._server_url, book_id=book_id, library_id=self._library_id
        )

    async def get_by_query(
        self, query: str, options: dict[str, str] | None = None
    ) -> list[Book]:
        """Search the Calibre library.

        Raises:
            MetadataFetchError: When the search fails, or when every detail
                fetch for a non-empty result set fails.
        """
        try:
            data = await self._http.get_json(
                f"{self._server_url}/ajax/search", params={"query": query}
            )
        except MetadataFetchError as exc:
            logger.warning("Calibre search failed for %r: %s", query, exc)
            raise

        raw_ids = data.get("book_ids") if isinstance(data, dict) else None
        book_ids = [as_text(i) for i in raw_ids or [] if as_text(i)][:_DETAIL_LIMIT]
        if not book_ids:
            return []

        results = await asyncio.gather(
            *(self.get_book_details(book_id) for book_id in book_ids),
            return_exceptions=True,
        )
        books: list[Book] = []
        failures: list[BaseException] = []
        for book_id, result in zip(book_ids, results):
            if isinstance(result, Book):
                books.append(result)
            else:
                logger.warning("Calibre book %s could not be fetched: %s", book_id, result)
                failures.append(result)
        if not books and failures:
            raise failures[0]

        target = (options or {}).get("locale") or self._locale_preference
        return filter_by_language(
            books,
            target,
            lambda b: b.language.split(",") if b.language else None,
            matches_marc_language,
        )

    async def get_book_details(self, book_id: str) -> Book:
        data = await self._http.get_json(f"{self._server_url}/ajax/book/{quote(book_id)}")
        return parse_book_details(
            data, server_url=self._server_url, book_id=book_id, library_id=self._library_id
        )
