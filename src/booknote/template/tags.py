# ABOUTME: Derives note tags from a record's author and title.
# ABOUTME: Tags are lower-cased, underscore-joined, and limited to letters, digits and underscores.

import re
from collections.abc import Mapping
from typing import Any

from booknote.metadata.types import Book, record_of, value_to_text

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w]")


def sanitize_tag(text: str) -> str:
    """'Café "Noir"' -> 'café_noir'. Accented letters are kept."""
    return _NON_WORD_RE.sub("", _WHITESPACE_RE.sub("_", text.lower()))


def derive_tags(book: Book | Mapping[str, Any]) -> list[str]:
    """Return the author tag then the title tag, skipping empty sources."""
    record = record_of(book)
    tags: list[str] = []
    for key in ("author", "title"):
        source = value_to_text(record.get(key))
        if source:
            tags.append(sanitize_tag(source))
    return tags
