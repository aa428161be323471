# ABOUTME: Open Library metadata provider implementation.
# ABOUTME: Searches openlibrary.org by free text and fills descriptions and ISBNs from works/editions.

import logging
import re
from dataclasses import replace
from typing import Any

from booknote.metadata.fields import filter_by_language, matches_marc_language
from booknote.metadata.http import HttpClient, MetadataFetchError
from booknote.metadata.openlibrary_parser import (
    parse_search_doc,
    parse_search_results,
    parse_works_response,
    select_best_edition,
)
from booknote.metadata.types import Book

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"
_SEARCH_LIMIT = 20

# Matches a colon followed by a space and remaining text (subtitle pattern).
_SUBTITLE_RE = re.compile(r"\s*:\s+.+$")


def _strip_subtitle(title: str) -> str | None:
    """Remove subtitle from a query string (text after ": ").

    Returns the stripped query, or None if no subtitle was found or
    stripping would produce an identical or empty string.
    """
    stripped = _SUBTITLE_RE.sub("", title).strip()
    if stripped and stripped != title.strip():
        return stripped
    return None


class OpenLibraryProvider:
    """Metadata provider backed by the Open Library API.

    Search results already carry most fields; get_book() fills in the
    description from the works endpoint and ISBN/publisher from editions.
    Uses dependency-injected HttpClient for testability.
    """

    def __init__(self, http_client: HttpClient, *, locale_preference: str = "") -> None:
        self._http = http_client
        self._locale_preference = locale_preference

    @property
    def name(self) -> str:
        return "openlibrary"

    def normalize(self, payload: Any) -> Book:
        return parse_search_doc(payload)

    async def get_by_query(
        self, query: str, options: dict[str, str] | None = None
    ) -> list[Book]:
        """Search Open Library.

        If the search returns nothing and the query contains a subtitle
        (text after ": "), retries with the subtitle stripped.

        Raises:
            MetadataFetchError: When the search endpoint fails.
        """
        target = (options or {}).get("locale") or self._locale_preference
        docs = await self._search(query)
        if not docs:
            stripped = _strip_subtitle(query)
            if stripped:
                docs = await self._search(stripped)
        docs = filter_by_language(
            docs, target, lambda doc: doc.get("language"), matches_marc_language
        )
        return [self.normalize(doc) for doc in docs]

    async def _search(self, query: str) -> list[dict[str, Any]]:
        params = {"q": query, "limit": str(_SEARCH_LIMIT)}
        try:
            data = await self._http.get_json(f"{_OL_BASE}/search.json", params=params)
        except MetadataFetchError as exc:
            logger.warning("Open Library search failed for %r: %s", query, exc)
            raise
        return parse_search_results(data)

    async def get_book(self, book: Book) -> Book:
        """Return a copy of book with description, ISBN and publisher filled where missing.

        Works and editions lookups are best effort; a failure of either leaves
        the corresponding fields as they were.
        """
        works_key = book.source_id
        if not works_key:
            return book

        enriched = replace(book)
        if not enriched.description:
            try:
                works_data = await self._http.get_json(f"{_OL_BASE}{works_key}.json")
            except MetadataFetchError as exc:
                logger.debug("Works lookup failed for %s: %s", works_key, exc)
            else:
                enriched.description = parse_works_response(works_data) or enriched.description

        if not (enriched.isbn13 or enriched.isbn10) or not enriched.publisher:
            try:
                editions = await self._http.get_json(f"{_OL_BASE}{works_key}/editions.json")
            except MetadataFetchError as exc:
                logger.debug("Editions lookup failed for %s: %s", works_key, exc)
            else:
                entries = editions.get("entries") if isinstance(editions, dict) else None
                best = select_best_edition(entries)
                if best:
                    if not (enriched.isbn13 or enriched.isbn10):
                        enriched.isbn13 = best["isbn13"]
                        enriched.isbn10 = best["isbn10"]
                    if not enriched.publisher:
                        enriched.publisher = best["publisher"]
        return enriched
