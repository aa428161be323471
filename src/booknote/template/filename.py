# ABOUTME: Builds note file names from a record and an optional file name format.
# ABOUTME: Strips characters that are illegal or awkward in file names and appends the extension.

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from booknote.metadata.types import Book, record_of, value_to_text
from booknote.template.dates import replace_date_in_string
from booknote.template.substitution import replace_variable_syntax

_ILLEGAL_CHARS_RE = re.compile(r'[\\,#%&{}/*<>$":@.?|]')
_WHITESPACE_RE = re.compile(r"\s+")
_ISBN_RE = re.compile(r"^(97(8|9))?\d{9}(\d|X)$")


def replace_illegal_file_name_characters(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", _ILLEGAL_CHARS_RE.sub("", text))


def is_isbn(text: str) -> bool:
    return bool(_ISBN_RE.match(text))


def make_file_name(
    book: Book | Mapping[str, Any],
    file_name_format: str | None = None,
    extension: str = "md",
    *,
    now: datetime | None = None,
) -> str:
    """Return the note file name for a record.

    With a format, {{DATE...}} and {{field}} placeholders are resolved first.
    Without one the name is "<title> - <author>", or the title alone when the
    record has no author.
    """
    record = record_of(book)
    if file_name_format:
        name = replace_variable_syntax(record, replace_date_in_string(file_name_format, now))
    else:
        title = value_to_text(record.get("title"))
        author = value_to_text(record.get("author"))
        name = f"{title} - {author}" if author else title
    return f"{replace_illegal_file_name_characters(name)}.{extension}"
