# ABOUTME: Google Books metadata provider and volumeInfo normalizer.
# ABOUTME: Searches the volumes API, applies a strict language post-filter, and maps results to Book.

import locale
import logging
from typing import Any

from booknote.metadata.fields import (
    as_text,
    as_text_list,
    filter_by_language,
    format_list,
    language_code,
    page_count,
    resize_zoom,
    set_edge_curl,
    strip_html,
    strip_scheme,
    year_only,
)
from booknote.metadata.http import HttpClient, MetadataFetchError
from booknote.metadata.types import Book, dedupe

logger = logging.getLogger(__name__)

_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"
_MAX_RESULTS = 40
_PRINT_TYPE = "books"
_LARGE_COVER_ZOOM = 3


def resolve_locale(preference: str) -> str:
    """Two-letter language code for a locale preference; 'default' uses the process locale."""
    if preference == "default":
        current = locale.getlocale()[0] or "en"
        return language_code(current)
    return language_code(preference)


def extract_isbns(identifiers: Any) -> dict[str, str]:
    """Map industryIdentifiers entries to isbn10/isbn13. Other identifier types are ignored."""
    result: dict[str, str] = {}
    if not isinstance(identifiers, list):
        return result
    for item in identifiers:
        if not isinstance(item, dict):
            continue
        kind = item.get("type")
        value = strip_scheme(as_text(item.get("identifier")))
        if not value:
            continue
        if kind == "ISBN_10":
            result["isbn10"] = value
        elif kind == "ISBN_13":
            result["isbn13"] = value
    return result


def parse_volume_info(volume_info: Any, *, edge_curl: bool = True) -> Book:
    """Parse a Google Books volumeInfo object into a Book.

    Every field the volumes API can supply is present on the result, as an
    empty string or list when the payload lacks it.
    """
    if not isinstance(volume_info, dict):
        volume_info = {}

    authors = dedupe(as_text_list(volume_info.get("authors")))
    categories = dedupe(as_text_list(volume_info.get("categories")))
    images = volume_info.get("imageLinks")
    if not isinstance(images, dict):
        images = {}
    thumbnail = as_text(images.get("thumbnail"))
    small_thumbnail = as_text(images.get("smallThumbnail"))
    isbns = extract_isbns(volume_info.get("industryIdentifiers"))

    return Book(
        title=as_text(volume_info.get("title")),
        subtitle=as_text(volume_info.get("subtitle")),
        author=format_list(authors),
        authors=authors,
        category=format_list(categories),
        categories=categories,
        publisher=as_text(volume_info.get("publisher")),
        publish_date=year_only(volume_info.get("publishedDate")),
        total_page=page_count(volume_info.get("pageCount")),
        cover_url=set_edge_curl(thumbnail, edge_curl),
        cover_small_url=set_edge_curl(small_thumbnail, edge_curl),
        cover_large_url=set_edge_curl(resize_zoom(thumbnail, _LARGE_COVER_ZOOM), edge_curl),
        description=strip_html(as_text(volume_info.get("description"))),
        link=as_text(volume_info.get("canonicalVolumeLink"))
        or as_text(volume_info.get("infoLink")),
        preview_link=as_text(volume_info.get("previewLink")),
        isbn10=isbns.get("isbn10", ""),
        isbn13=isbns.get("isbn13", ""),
        language=as_text(volume_info.get("language")),
    )


def _reported_language(item: dict[str, Any]) -> Any:
    info = item.get("volumeInfo")
    return info.get("language") if isinstance(info, dict) else None


class GoogleBooksProvider:
    """Metadata provider backed by the Google Books volumes API.

    The API's langRestrict parameter is sent but not trusted: results are
    filtered again on each volume's reported language.
    """

    def __init__(
        self,
        http_client: HttpClient,
        *,
        locale_preference: str = "default",
        enable_edge_curl: bool = True,
        api_key: str = "",
    ) -> None:
        self._http = http_client
        self._locale_preference = locale_preference
        self._edge_curl = enable_edge_curl
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "google"

    def normalize(self, payload: Any) -> Book:
        """Normalize a volume item (or a bare volumeInfo object)."""
        if isinstance(payload, dict) and "volumeInfo" in payload:
            payload = payload["volumeInfo"]
        return parse_volume_info(payload, edge_curl=self._edge_curl)

    def _build_params(self, query: str, target_language: str) -> dict[str, str]:
        params = {
            "q": query,
            "maxResults": str(_MAX_RESULTS),
            "printType": _PRINT_TYPE,
            "langRestrict": target_language,
        }
        if self._api_key:
            params["key"] = self._api_key
        return params

    async def get_by_query(
        self, query: str, options: dict[str, str] | None = None
    ) -> list[Book]:
        """Search Google Books.

        Raises:
            MetadataFetchError: When the API cannot be reached or answers badly.
        """
        target_language = resolve_locale((options or {}).get("locale") or self._locale_preference)
        try:
            data = await self._http.get_json(
                _VOLUMES_URL, params=self._build_params(query, target_language)
            )
        except MetadataFetchError as exc:
            logger.warning("Google Books search failed for %r: %s", query, exc)
            raise

        if not isinstance(data, dict) or not data.get("totalItems"):
            return []
        items = [item for item in data.get("items") or [] if isinstance(item, dict)]

        kept = filter_by_language(
            items,
            target_language,
            _reported_language,
        )
        if len(kept) != len(items):
            logger.debug(
                "Dropped %d Google Books results not in language %s",
                len(items) - len(kept),
                target_language,
            )
        return [self.normalize(item) for item in kept]
