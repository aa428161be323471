# ABOUTME: Header (front matter) block handling: override parsing, default merging, and emission.
# ABOUTME: A constrained line format, not YAML; values are quoted with «» marks instead of escaping.

import re
from collections.abc import Mapping
from typing import Any

from booknote.config import FrontmatterKeyStyle
from booknote.metadata.types import value_to_text

_UPPER_RE = re.compile(r"[A-Z]")
_NEEDS_QUOTES_RE = re.compile(r':\s|"')
_LINE_BREAK_RE = re.compile(r"[\r\n]")

OPEN_QUOTE = "«"
CLOSE_QUOTE = "»"


def replace_quotes(text: str) -> str:
    """Replace double quotes pairwise with alternating « and » marks."""
    if '"' not in text:
        return text
    parts = text.split('"')
    out = [parts[0]]
    for index, part in enumerate(parts[1:]):
        out.append(OPEN_QUOTE if index % 2 == 0 else CLOSE_QUOTE)
        out.append(part)
    return "".join(out)


def camel_to_snake(key: str) -> str:
    """'totalPage' -> 'total_page'. Every uppercase letter becomes '_' plus its lowercase."""
    return _UPPER_RE.sub(lambda m: f"_{m.group(0).lower()}", key)


def change_snake_case(record: Mapping[str, Any]) -> dict[str, Any]:
    return {camel_to_snake(key): value for key, value in record.items()}


def parse_front_matter(text: str) -> dict[str, str]:
    """Parse 'key: value' lines into a mapping.

    The key is everything before the first colon. A line without a colon
    becomes a key with an empty value; lines with an empty key are dropped.
    """
    result: dict[str, str] = {}
    if not text:
        return result
    for line in text.split("\n"):
        key, sep, value = line.partition(":")
        key = key.strip()
        if not key:
            continue
        result[key] = value.strip() if sep else ""
    return result


def _is_set(value: Any) -> bool:
    # Lists count as set even when empty; other values must be non-empty.
    if isinstance(value, list):
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return bool(value)


def apply_default_front_matter(
    record: Mapping[str, Any],
    override: Mapping[str, Any] | str,
    key_style: FrontmatterKeyStyle = FrontmatterKeyStyle.SNAKE_CASE,
) -> dict[str, Any]:
    """Merge a user override block on top of the record.

    For every key of the override:
    - an empty override keeps a record value that is present and non-empty,
      otherwise the key becomes "";
    - a non-empty override that differs from a set record value is appended
      as "<record value>, <override>" (lists are stringified first);
    - otherwise the override wins.
    """
    merged = (
        dict(record)
        if key_style is FrontmatterKeyStyle.CAMEL_CASE
        else change_snake_case(record)
    )
    extra = parse_front_matter(override) if isinstance(override, str) else override

    for key, raw in extra.items():
        value = value_to_text(raw).strip()
        current = merged.get(key)

        if value == "" and current is not None and current != "":
            continue

        if _is_set(current) and value_to_text(current) != value:
            merged[key] = f"{value_to_text(current)}, {value}"
        else:
            merged[key] = value

    return merged


def to_string_front_matter(front_matter: Mapping[str, Any]) -> str:
    """Serialize a mapping into header lines (without the --- delimiters).

    Lists become indented '  - item' lines and are dropped when empty.
    Scalars containing a line break are dropped. Scalars containing ': ' or
    a double quote are wrapped in quotes with inner quotes replaced by «».
    """
    lines: list[str] = []
    for key, value in front_matter.items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            lines.append(f"{key}:")
            lines.extend(f"  - {value_to_text(item)}" for item in value)
            continue

        text = value_to_text(value).strip()
        if _LINE_BREAK_RE.search(text):
            continue
        if _NEEDS_QUOTES_RE.search(text):
            lines.append(f'{key}: "{replace_quotes(text)}"')
        else:
            lines.append(f"{key}: {text}")
    return "\n".join(lines).strip()
