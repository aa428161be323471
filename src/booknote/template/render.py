# ABOUTME: Single entry point turning a record and settings into note text.
# ABOUTME: Chooses the template file path or the header + body path and runs every stage in order.

import logging
from collections.abc import MutableMapping
from datetime import datetime
from pathlib import Path
from typing import Any

from booknote.config import Settings
from booknote.metadata.types import Book, record_of
from booknote.template.dates import apply_template_transformations
from booknote.template.expressions import execute_inline_scripts
from booknote.template.frontmatter import apply_default_front_matter, to_string_front_matter
from booknote.template.substitution import replace_variable_syntax
from booknote.template.tags import derive_tags

logger = logging.getLogger(__name__)


def read_template_file(path: str) -> str:
    """Read a template file; a missing or unreadable file yields ""."""
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to read template file %s: %s", path, exc)
        return ""


def _attach_tags(book: Book | MutableMapping[str, Any]) -> None:
    tags = derive_tags(book)
    if isinstance(book, Book):
        book.tags = tags
    else:
        book["tags"] = tags


def render(
    book: Book | MutableMapping[str, Any],
    settings: Settings,
    *,
    template_text: str | None = None,
    now: datetime | None = None,
) -> str:
    """Render the note text for one record.

    Tags derived from author and title are stored on the record first.

    With a template file (settings.template_file, or template_text given
    directly) the text goes through date placeholders, {{field}}
    substitution and inline expressions.

    Otherwise the header template is substituted and, when the default
    header is enabled, merged over the record and emitted. A non-empty header
    is wrapped in --- lines above the substituted body.
    """
    _attach_tags(book)
    record = record_of(book)

    if template_text is None and settings.uses_template_file:
        template_text = read_template_file(settings.template_file)

    if template_text is not None:
        substituted = replace_variable_syntax(
            record, apply_template_transformations(template_text, now)
        )
        return execute_inline_scripts(record, substituted)

    header = replace_variable_syntax(record, settings.frontmatter)
    if settings.use_default_frontmatter:
        header = to_string_front_matter(
            apply_default_front_matter(record, header, settings.default_frontmatter_key_type)
        )
    body = execute_inline_scripts(record, replace_variable_syntax(record, settings.content))

    if header:
        return f"---\n{header}\n---\n{body}"
    return body
