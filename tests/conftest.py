# ABOUTME: Shared pytest fixtures for booknote tests.
# ABOUTME: Provides sample records, default settings, and a notes vault directory.

from pathlib import Path

import pytest

from booknote.config import FrontmatterKeyStyle, Settings
from booknote.metadata.types import Book


@pytest.fixture
def dune() -> Book:
    """The canonical Dune record used across render tests."""
    return Book(
        title="Dune",
        author="Frank Herbert",
        authors=["Frank Herbert"],
        isbn13="9780441013593",
        categories=["Science Fiction"],
    )


@pytest.fixture
def snake_settings() -> Settings:
    """Default header enabled with snake_case keys and no templates."""
    return Settings(
        use_default_frontmatter=True,
        default_frontmatter_key_type=FrontmatterKeyStyle.SNAKE_CASE,
    )


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty notes root directory."""
    root = tmp_path / "vault"
    root.mkdir()
    return root
