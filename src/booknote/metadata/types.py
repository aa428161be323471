# ABOUTME: Canonical book record shared by every provider, the header pipeline and templates.
# ABOUTME: Book is a dataclass; to_record() projects it to the flat camelCase mapping templates see.

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Union

# Value union for provider-specific custom columns.
CustomValue = Union[str, int, float, bool, list[str]]

# Any value a record field may hold once projected to a mapping.
RecordValue = Union[str, int, float, list[str], dict[str, CustomValue]]

_SNAKE_PART_RE = re.compile(r"_([a-z0-9])")


def _snake_to_camel(name: str) -> str:
    return _SNAKE_PART_RE.sub(lambda m: m.group(1).upper(), name)


@dataclass
class Book:
    """Normalized, provider-agnostic book metadata.

    Only title and author are always present. Every other field is None until a
    provider fills it; providers set the fields they know about to "" or [] so
    that templates never see a missing value for a field the provider declares.
    """

    title: str = ""
    author: str = ""
    authors: list[str] = field(default_factory=list)
    subtitle: str | None = None
    category: str | None = None
    categories: list[str] | None = None
    publisher: str | None = None
    publish_date: str | None = None
    total_page: int | str | None = None
    cover_url: str | None = None
    cover_small_url: str | None = None
    cover_medium_url: str | None = None
    cover_large_url: str | None = None
    local_cover_image: str | None = None
    status: str | None = None
    start_read_date: str | None = None
    finish_read_date: str | None = None
    my_rate: float | str | None = None
    book_note: str | None = None
    isbn10: str | None = None
    isbn13: str | None = None
    isbn: str | None = None
    link: str | None = None
    description: str | None = None
    preview_link: str | None = None
    original_title: str | None = None
    translator: str | None = None
    narrator: str | None = None
    asin: str | None = None
    tags: list[str] | None = None
    ids: str | None = None
    language: str | None = None
    series: str | None = None
    series_number: float | str | None = None
    series_link: str | None = None
    current_page: int | str | None = None
    reading_progress: int | str | None = None
    custom_columns: dict[str, CustomValue] | None = None
    source_provider: str | None = None
    source_id: str | None = None

    def to_record(self) -> dict[str, RecordValue]:
        """Project present fields to an ordered mapping keyed by camelCase names."""
        record: dict[str, RecordValue] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, list):
                value = list(value)
            elif isinstance(value, dict):
                value = dict(value)
            record[_snake_to_camel(f.name)] = value
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Book":
        """Build a Book from a camelCase mapping. Unknown keys are ignored."""
        by_camel = {_snake_to_camel(f.name): f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in record.items():
            name = by_camel.get(key)
            if name is None or value is None:
                continue
            kwargs[name] = value
        return cls(**kwargs)


def record_of(book: "Book | Mapping[str, Any]") -> dict[str, Any]:
    """Return the record mapping for a Book, or a shallow copy of a mapping."""
    if isinstance(book, Book):
        return book.to_record()
    return dict(book)


def value_to_text(value: Any) -> str:
    """Coerce a record value to the string used for display and comparison."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(value_to_text(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def dedupe(items: Iterable[str]) -> list[str]:
    """Drop repeated and blank entries, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        text = item.strip()
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
    return result
