# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts OL search docs, works and editions into Book records.

from typing import Any

from booknote.metadata.fields import (
    as_text,
    as_text_list,
    format_list,
    page_count,
    strip_html,
    strip_scheme,
    year_only,
)
from booknote.metadata.types import Book, dedupe

_OL_BASE = "https://openlibrary.org"
_COVERS_BASE_URL = "https://covers.openlibrary.org/b"


def build_cover_url(cover_id: int | None = None, isbn: str | None = None, size: str = "L") -> str:
    """Build an Open Library cover image URL from a cover id or, failing that, an ISBN.

    Args:
        cover_id: The numeric cover id from a search doc (cover_i).
        isbn: The ISBN to look up cover art for.
        size: Image size: "S" (small), "M" (medium), or "L" (large).
    """
    if cover_id:
        return f"{_COVERS_BASE_URL}/id/{cover_id}-{size}.jpg"
    if isbn:
        return f"{_COVERS_BASE_URL}/isbn/{isbn}-{size}.jpg"
    return ""


def _first_publish_date(doc: dict[str, Any]) -> str:
    year = year_only(as_text(doc.get("first_publish_year")))
    if year:
        return year
    for value in as_text_list(doc.get("publish_date")):
        year = year_only(value)
        if year:
            return year
    return ""


def parse_search_doc(doc: Any) -> Book:
    """Parse one doc of an Open Library Search API response into a Book."""
    if not isinstance(doc, dict):
        doc = {}

    authors = dedupe(as_text_list(doc.get("author_name")))
    isbns = [strip_scheme(i) for i in as_text_list(doc.get("isbn"))]
    isbn10 = next((i for i in isbns if len(i) == 10), "")
    isbn13 = next((i for i in isbns if len(i) == 13), "")
    subjects = dedupe(as_text_list(doc.get("subject")))
    publishers = as_text_list(doc.get("publisher"))
    cover_id = doc.get("cover_i") if isinstance(doc.get("cover_i"), int) else None
    cover_url = build_cover_url(cover_id, isbns[0] if isbns else None)

    key = as_text(doc.get("key"))
    link = f"{_OL_BASE}{key}" if key else ""

    return Book(
        title=as_text(doc.get("title")),
        author=format_list(authors),
        authors=authors,
        category=subjects[0] if subjects else "",
        categories=subjects,
        publisher=publishers[0] if publishers else "",
        publish_date=_first_publish_date(doc),
        total_page=page_count(doc.get("number_of_pages_median"))
        or page_count(doc.get("number_of_pages")),
        cover_url=cover_url,
        cover_small_url=build_cover_url(cover_id, isbns[0] if isbns else None, "M"),
        cover_large_url=cover_url,
        description="",
        link=link,
        preview_link=link,
        isbn10=isbn10,
        isbn13=isbn13,
        asin="",
        original_title=as_text(doc.get("original_title")),
        language=",".join(as_text_list(doc.get("language"))),
        source_provider="openlibrary",
        source_id=key,
    )


def parse_search_results(data: Any) -> list[dict[str, Any]]:
    """Return the docs of an Open Library Search API response, dropping malformed entries."""
    if not isinstance(data, dict):
        return []
    docs = data.get("docs")
    if not isinstance(docs, list):
        return []
    return [doc for doc in docs if isinstance(doc, dict)]


def parse_works_response(data: Any) -> str:
    """Extract the plain-text description from an Open Library Works response.

    Handles the OL quirk where description can be either a plain string
    or a dict with {"type": ..., "value": "actual text"}.
    """
    if not isinstance(data, dict):
        return ""
    desc = data.get("description")
    if isinstance(desc, dict):
        desc = desc.get("value")
    return strip_html(as_text(desc))


# Format preference for edition selection (lower = better).
_FORMAT_RANK: dict[str, int] = {
    "hardcover": 0,
    "paperback": 1,
    "trade paperback": 1,
    "mass market paperback": 1,
    "electronic resource": 2,
    "ebook": 2,
    "audio cd": 3,
    "audio cassette": 3,
}
_FORMAT_RANK_DEFAULT = 2


def select_best_edition(entries: Any) -> dict[str, str] | None:
    """Pick the best edition from a list of Open Library edition entries.

    Prefers physical formats with ISBNs. Returns a dict with 'isbn10', 'isbn13'
    and 'publisher' keys, or None if no usable edition was found.
    """
    if not isinstance(entries, list):
        return None
    scored: list[tuple[int, int, dict[str, str]]] = []

    for entry in entries:
        if not isinstance(entry, dict):
            continue
        isbn_13 = as_text_list(entry.get("isbn_13"))
        isbn_10 = as_text_list(entry.get("isbn_10"))
        if not isbn_13 and not isbn_10:
            continue

        publishers = as_text_list(entry.get("publishers"))
        fmt = as_text(entry.get("physical_format")).lower()
        format_rank = _FORMAT_RANK.get(fmt, _FORMAT_RANK_DEFAULT)
        # Prefer ISBN-13 (0) over ISBN-10 only (1)
        isbn_rank = 0 if isbn_13 else 1

        scored.append(
            (
                format_rank,
                isbn_rank,
                {
                    "isbn13": strip_scheme(isbn_13[0]) if isbn_13 else "",
                    "isbn10": strip_scheme(isbn_10[0]) if isbn_10 else "",
                    "publisher": publishers[0] if publishers else "",
                },
            )
        )

    if not scored:
        return None

    scored.sort(key=lambda pair: (pair[0], pair[1]))
    return scored[0][2]
