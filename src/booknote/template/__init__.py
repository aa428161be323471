# ABOUTME: Template package: header merge/emit, placeholder substitution, expressions and file names.
# ABOUTME: Exports render() and the helpers other packages call directly.

from booknote.template.filename import make_file_name
from booknote.template.render import render
from booknote.template.tags import derive_tags

__all__ = [
    "derive_tags",
    "make_file_name",
    "render",
]
