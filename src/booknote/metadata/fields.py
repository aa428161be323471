# ABOUTME: Field-level normalization helpers shared by the provider record normalizers.
# ABOUTME: Covers list projection, HTML/prefix stripping, date policies, language and cover URLs.

import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, TypeVar

from dateutil import parser as date_parser

T = TypeVar("T")

_HTML_TAG_RE = re.compile(r"<[^>]*>?")
_SCHEME_PREFIX_RE = re.compile(r"^[a-z][a-z0-9_-]*:", re.IGNORECASE)
_ZOOM_RE = re.compile(r"(&zoom)=\d")
_AMAZON_SY_RE = re.compile(r"_SY\d+_")
_AMAZON_SX_RE = re.compile(r"_SX\d+_")
_YEAR_RE = re.compile(r"^\d{4}$")

# Open Library and Calibre report MARC / ISO 639-2 codes. Bibliographic and
# terminology forms are both listed where they differ.
_MARC_LANGUAGES: dict[str, tuple[str, ...]] = {
    "ar": ("ara",),
    "cs": ("cze", "ces"),
    "da": ("dan",),
    "de": ("ger", "deu"),
    "el": ("gre", "ell"),
    "en": ("eng",),
    "es": ("spa",),
    "fi": ("fin",),
    "fr": ("fre", "fra"),
    "he": ("heb",),
    "hu": ("hun",),
    "it": ("ita",),
    "ja": ("jpn",),
    "ko": ("kor",),
    "nl": ("dut", "nld"),
    "no": ("nor",),
    "pl": ("pol",),
    "pt": ("por",),
    "ru": ("rus",),
    "sv": ("swe",),
    "tr": ("tur",),
    "uk": ("ukr",),
    "zh": ("chi", "zho"),
}


def as_text(value: Any) -> str:
    """Return value as a stripped string; anything that is not str/int/float becomes ""."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return ""


def as_text_list(value: Any) -> list[str]:
    """Return the string items of a list payload field, stripped, blanks dropped."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [text for text in (as_text(item) for item in value) if text]


def page_count(value: Any) -> int | str:
    """Page counts stay numeric when the payload gives a positive number, else ""."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, float) and value > 0:
        return int(value)
    text = as_text(value)
    return text if text.isdigit() else ""


def format_list(items: list[str] | None) -> str:
    """Scalar projection of a list field: the single element, or a ", "-joined string."""
    if not items:
        return ""
    if len(items) > 1:
        return ", ".join(item.strip() for item in items)
    return items[0]


def strip_html(text: str) -> str:
    """Remove anything that looks like an angle-bracket tag."""
    return _HTML_TAG_RE.sub("", text)


def strip_scheme(identifier: str) -> str:
    """Drop a scheme prefix such as 'isbn:' and any separators from an identifier."""
    bare = _SCHEME_PREFIX_RE.sub("", identifier.strip())
    return re.sub(r"[\s-]", "", bare)


def _parse_date(value: Any) -> datetime | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    text = as_text(value)
    if not text:
        return None
    if _YEAR_RE.match(text):
        return datetime(int(text), 1, 1)
    try:
        return date_parser.isoparse(text)
    except ValueError:
        pass
    try:
        return date_parser.parse(text, default=datetime(1, 1, 1))
    except (ValueError, OverflowError):
        return None


def year_only(value: Any) -> str:
    """Year-only date policy. Unparseable input yields ""."""
    parsed = _parse_date(value)
    if parsed is None or parsed.year < 1:
        return ""
    return str(parsed.year)


def slashed_date(value: Any) -> str:
    """YYYY/MM/DD date policy. Numbers are epoch milliseconds (UTC)."""
    parsed = _parse_date(value)
    if parsed is None:
        return ""
    return f"{parsed.year:04d}/{parsed.month:02d}/{parsed.day:02d}"


def language_code(locale: str) -> str:
    """Reduce a locale such as 'en-US' or 'en_GB' to its two-letter language code."""
    return locale.strip()[:2].lower()


def _language_values(reported: Any) -> list[str]:
    if isinstance(reported, str):
        return [reported]
    if isinstance(reported, (list, tuple)):
        return [v for v in reported if isinstance(v, str)]
    return []


def matches_language(reported: str | Iterable[str] | None, target: str) -> bool:
    """Case-insensitive prefix match of a reported language against a target code.

    A provider may report several languages; any of them matching is enough.
    """
    code = language_code(target)
    if not code:
        return True
    return any(v.lower().startswith(code) for v in _language_values(reported))


def marc_language_codes(target: str) -> tuple[str, ...]:
    """Three-letter codes for a locale such as 'de' or 'pt-BR'.

    Languages missing from the table fall back to the two-letter code, which
    is then prefix-matched.
    """
    code = language_code(target)
    return _MARC_LANGUAGES.get(code, (code,))


def matches_marc_language(reported: str | Iterable[str] | None, target: str) -> bool:
    """Like matches_language, for providers reporting 'ger', 'spa', 'jpn'..."""
    if not language_code(target):
        return True
    codes = marc_language_codes(target)
    return any(v.lower().startswith(codes) for v in _language_values(reported))


def filter_by_language(
    items: Iterable[T],
    target: str | None,
    reported: Callable[[T], Any],
    matcher: Callable[[Any, str], bool] = matches_language,
) -> list[T]:
    """Strict post-filter keeping only items whose reported language matches target."""
    items = list(items)
    if not target:
        return items
    return [item for item in items if matcher(reported(item), target)]


def set_edge_curl(url: str, enabled: bool) -> str:
    """Google cover URLs carry '&edge=curl' by default; drop it when disabled."""
    return url if enabled else url.replace("&edge=curl", "")


def resize_zoom(url: str, zoom: int) -> str:
    """Rewrite the zoom parameter of a resizable cover URL."""
    return _ZOOM_RE.sub(rf"\g<1>={zoom}", url)


def resize_amazon_image(url: str, size: int = 475) -> str:
    """Rewrite Amazon-style _SYnnn_/_SXnnn_ size tokens to a fixed size."""
    url = _AMAZON_SY_RE.sub(f"_SY{size}_", url)
    return _AMAZON_SX_RE.sub(f"_SX{size}_", url)
