# ABOUTME: Goodreads metadata provider backed by scraped HTML pages.
# ABOUTME: Searches goodreads.com and fetches each book page for full details on demand.

import logging
from typing import Any
from urllib.parse import quote

from bs4 import BeautifulSoup

from booknote.metadata.goodreads_parser import (
    GOODREADS_BASE,
    canonical_link,
    is_book_page,
    parse_book_page,
    parse_search_rows,
)
from booknote.metadata.http import BROWSER_USER_AGENT, HttpClient, MetadataFetchError
from booknote.metadata.types import Book

logger = logging.getLogger(__name__)

_HEADERS = {"User-Agent": BROWSER_USER_AGENT}


class GoodreadsProvider:
    """Metadata provider that scrapes Goodreads search and book pages.

    Search rows only carry title, author, link and cover; get_book() loads
    the book page for the rest.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "goodreads"

    def normalize(self, payload: Any) -> Book:
        """Normalize a book page given as HTML text or an already parsed soup."""
        soup = payload if isinstance(payload, BeautifulSoup) else BeautifulSoup(
            str(payload or ""), "html.parser"
        )
        return parse_book_page(soup, canonical_link(soup, ""))

    async def get_by_query(
        self, query: str, options: dict[str, str] | None = None
    ) -> list[Book]:
        """Search Goodreads.

        Raises:
            MetadataFetchError: When the search page cannot be fetched.
        """
        search_url = f"{GOODREADS_BASE}/search?q={quote(query)}"
        try:
            html = await self._http.get_text(search_url, headers=_HEADERS)
        except MetadataFetchError as exc:
            logger.warning("Goodreads search failed for %r: %s", query, exc)
            raise

        soup = BeautifulSoup(html, "html.parser")
        if is_book_page(soup):
            return [parse_book_page(soup, canonical_link(soup, search_url))]
        return parse_search_rows(soup)

    async def get_book(self, book: Book) -> Book:
        """Fetch the book page for a search row.

        Raises:
            MetadataFetchError: When the page cannot be fetched.
        """
        if not book.link:
            return book
        html = await self._http.get_text(book.link, headers=_HEADERS)
        return parse_book_page(BeautifulSoup(html, "html.parser"), book.link)
