# ABOUTME: {{field}} placeholder substitution of record values into free-form template text.
# ABOUTME: Lists become indented "- item" lines; quoted list placeholders lose their quotes.

import re
from collections.abc import Mapping
from typing import Any

from booknote.metadata.types import value_to_text
from booknote.template.frontmatter import replace_quotes

_LEFTOVER_PLACEHOLDER_RE = re.compile(r"\{\{\w+\}\}")


def list_text(items: list[Any]) -> str:
    """'\\n  - a\\n  - b' for ['a', 'b']."""
    return "".join(f"\n  - {value_to_text(item)}" for item in items)


def replace_variable_syntax(record: Mapping[str, Any], text: str) -> str:
    """Substitute record values into {{field}} placeholders.

    Field names match case-insensitively. A list field written as "{{field}}"
    or '{{field}}' replaces the quotes too, so a quoted scalar slot in a header
    template still turns into a valid list. Placeholders naming unknown fields
    are removed and the result is stripped. Blank text yields "".
    """
    if not text or not text.strip():
        return ""

    result = text
    for key, value in record.items():
        if value is None:
            value = ""
        placeholder = re.escape(f"{{{{{key}}}}}")
        bare = re.compile(placeholder, re.IGNORECASE)

        if isinstance(value, (list, tuple)):
            replacement = list_text(list(value))
            quoted = re.compile(rf"(['\"]){placeholder}\1", re.IGNORECASE)
            result = quoted.sub(lambda _m: replacement, result)
        else:
            replacement = replace_quotes(value_to_text(value))

        result = bare.sub(lambda _m: replacement, result)

    return _LEFTOVER_PLACEHOLDER_RE.sub("", result).strip()
