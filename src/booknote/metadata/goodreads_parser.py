# ABOUTME: Parsing functions for scraped Goodreads search and book pages.
# ABOUTME: Uses BeautifulSoup for the DOM and regexes for the embedded __NEXT_DATA__ payload.

import json
import re

from bs4 import BeautifulSoup

from booknote.metadata.fields import (
    format_list,
    page_count,
    resize_amazon_image,
    slashed_date,
    strip_scheme,
)
from booknote.metadata.types import Book, dedupe

GOODREADS_BASE = "https://www.goodreads.com"

_ORIGINAL_TITLE_RE = re.compile(r'"Work:.*?"details":.*?"originalTitle":"(.*?)"')
_PUBLISHER_RE = re.compile(r'"publisher":"(.*?)"')
_ISBN_RE = re.compile(r'"isbn":"(.*?)"')
_PUBLICATION_TIME_RE = re.compile(r'"publicationTime":(-?\d+)')


def _text(node) -> str:
    return node.get_text().strip() if node is not None else ""


def _absolute(href: str) -> str:
    return href if href.startswith("http") else f"{GOODREADS_BASE}{href}"


def is_book_page(soup: BeautifulSoup) -> bool:
    """Goodreads redirects a search with a single hit straight to the book page."""
    return bool(soup.select('h1[data-testid="bookTitle"]') or soup.select("#bookTitle"))


def parse_search_rows(soup: BeautifulSoup) -> list[Book]:
    """Parse the search results table into partial Book records.

    Rows without a title link are skipped.
    """
    books: list[Book] = []
    for row in soup.select("table.tableList tr"):
        title_link = row.select_one("a.bookTitle")
        if title_link is None:
            continue
        title = _text(title_link).replace('"', "'")
        href = title_link.get("href") or ""
        if not title or not href:
            continue

        author = _text(row.select_one("a.authorName"))
        cover = row.select_one("img.bookCover")
        cover_src = (cover.get("src") or "") if cover is not None else ""
        link = _absolute(href)

        books.append(
            Book(
                title=title,
                author=author,
                authors=[author] if author else [],
                link=link,
                preview_link=link,
                cover_url=resize_amazon_image(cover_src),
                cover_small_url=cover_src,
                description="",
                publisher="",
                publish_date="",
                total_page="",
                isbn10="",
                isbn13="",
                categories=[],
                category="",
                original_title="",
                translator="",
                narrator="",
                subtitle="",
                asin="",
                source_provider="goodreads",
                source_id=link,
            )
        )
    return books


def _next_data_fields(script: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for name, pattern in (
        ("original_title", _ORIGINAL_TITLE_RE),
        ("publisher", _PUBLISHER_RE),
        ("isbn10", _ISBN_RE),
    ):
        match = pattern.search(script)
        if match:
            fields[name] = match.group(1)
    match = _PUBLICATION_TIME_RE.search(script)
    if match:
        fields["publish_date"] = slashed_date(int(match.group(1)))
    return fields


def _json_ld_book(soup: BeautifulSoup) -> dict:
    for script in soup.select('script[type="application/ld+json"]'):
        try:
            data = json.loads(script.string or "{}")
        except ValueError:
            continue
        if isinstance(data, dict) and data.get("@type") == "Book":
            return data
    return {}


def parse_book_page(soup: BeautifulSoup, link: str) -> Book:
    """Parse a Goodreads book page into a full Book record.

    Every selector is optional; a field whose markup is missing comes out empty.
    """
    title = (
        _text(soup.select_one('h1[data-testid="bookTitle"]'))
        or _text(soup.select_one("#bookTitle"))
    ).replace('"', "'")

    authors = [_text(el) for el in soup.select('.ContributorLink__name[data-testid="name"]')]
    if not authors:
        authors = [_text(el) for el in soup.select("a.authorName")]
    authors = dedupe(authors)

    description = _text(soup.select_one("span.Formatted")).replace('"', "'")
    categories = dedupe(
        _text(el) for el in soup.select('ul[aria-label="Top genres for this book"] a.Button--tag')
    )
    asin = _text(soup.select_one('span[data-testid="asin"]'))

    next_data = soup.select_one("#__NEXT_DATA__")
    scraped = _next_data_fields(next_data.string or "") if next_data is not None else {}

    schema = _json_ld_book(soup)
    isbn13 = strip_scheme(str(schema.get("isbn") or ""))
    total_page = page_count(schema.get("numberOfPages"))
    if not total_page:
        pages_text = _text(soup.select_one('p[data-testid="pagesFormat"]'))
        total_page = page_count(pages_text.split(" ")[0]) if pages_text else ""

    cover_url = str(schema.get("image") or "")
    if not cover_url:
        image = soup.select_one("img.ResponsiveImage") or soup.select_one("#coverImage")
        cover_url = (image.get("src") or "") if image is not None else ""
    cover_url = resize_amazon_image(cover_url)

    isbn10 = strip_scheme(scraped.get("isbn10", ""))
    return Book(
        title=title,
        subtitle="",
        author=format_list(authors),
        authors=authors,
        category=format_list(categories),
        categories=categories,
        publisher=scraped.get("publisher", ""),
        publish_date=scraped.get("publish_date", ""),
        total_page=total_page,
        cover_url=cover_url,
        cover_small_url=cover_url,
        description=description,
        link=link,
        preview_link=link,
        isbn10=isbn10,
        isbn13=isbn13 or isbn10,
        original_title=scraped.get("original_title", ""),
        translator="",
        narrator="",
        asin=asin,
        source_provider="goodreads",
        source_id=link,
    )


def canonical_link(soup: BeautifulSoup, fallback: str) -> str:
    link = soup.select_one('link[rel="canonical"]')
    return (link.get("href") or fallback) if link is not None else fallback
