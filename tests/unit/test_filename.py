# ABOUTME: Unit tests for note file name building and sanitization.
# ABOUTME: Covers the default "title - author" name, format placeholders, and illegal characters.

from datetime import datetime

from booknote.metadata.types import Book
from booknote.template.filename import (
    is_isbn,
    make_file_name,
    replace_illegal_file_name_characters,
)

NOW = datetime(2024, 3, 9)


class TestReplaceIllegalCharacters:
    def test_strips_illegal_characters(self) -> None:
        assert replace_illegal_file_name_characters('a\\b,c#d%e&f{g}h/i*j<k>l$m"n:o@p.q?r|s') == (
            "abcdefghijklmnopqrs"
        )

    def test_collapses_whitespace(self) -> None:
        assert replace_illegal_file_name_characters("a \t\n b") == "a b"


class TestMakeFileName:
    """Tests for make_file_name()."""

    def test_default_is_title_dash_author(self) -> None:
        assert make_file_name(Book(title="Dune", author="Frank Herbert")) == "Dune - Frank Herbert.md"

    def test_default_without_author_is_title(self) -> None:
        assert make_file_name(Book(title="Dune")) == "Dune.md"

    def test_unsafe_title_and_author(self) -> None:
        """':', '?' and '"' are stripped and exactly one .md suffix is added."""
        name = make_file_name(Book(title="Book: A Tale?", author='Jane "J" Doe'))
        assert name == "Book A Tale - Jane J Doe.md"
        assert ":" not in name and "?" not in name and '"' not in name
        assert name.count(".md") == 1

    def test_dots_in_title_are_removed(self) -> None:
        assert make_file_name(Book(title="Mr. Mercedes")) == "Mr Mercedes.md"

    def test_format_with_fields(self) -> None:
        book = Book(title="Dune", author="Frank Herbert", publish_date="1965")
        assert make_file_name(book, "{{author}} ({{publishDate}}) {{title}}") == (
            "Frank Herbert (1965) Dune.md"
        )

    def test_format_with_date(self) -> None:
        name = make_file_name(Book(title="Dune"), "{{DATE:YYYY-MM}} {{title}}", now=NOW)
        assert name == "2024-03 Dune.md"

    def test_format_with_date_offset(self) -> None:
        assert make_file_name(Book(title="Dune"), "{{DATE+1}}", now=NOW) == "2024-03-10.md"

    def test_custom_extension(self) -> None:
        assert make_file_name(Book(title="Dune"), extension="txt") == "Dune.txt"

    def test_list_field_in_format(self) -> None:
        """List placeholders render as list text, whose whitespace collapses."""
        book = Book(title="Dune", authors=["A", "B"])
        assert make_file_name(book, "{{title}} {{authors}}") == "Dune - A - B.md"

    def test_accepts_mapping(self) -> None:
        assert make_file_name({"title": "Dune", "author": "F"}) == "Dune - F.md"


class TestIsIsbn:
    def test_valid(self) -> None:
        assert is_isbn("9780441013593")
        assert is_isbn("044101359X")

    def test_invalid(self) -> None:
        assert not is_isbn("978-0441013593")
        assert not is_isbn("12345")
