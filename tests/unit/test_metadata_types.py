# ABOUTME: Unit tests for the canonical Book record and its mapping projection.
# ABOUTME: Covers to_record/from_record, value_to_text coercion and dedupe.

from booknote.metadata.types import Book, dedupe, record_of, value_to_text


class TestBookRecord:
    """Tests for Book.to_record() and Book.from_record()."""

    def test_absent_fields_are_left_out(self) -> None:
        """Fields that are None do not appear in the record."""
        record = Book(title="Dune", author="Frank Herbert").to_record()
        assert record == {"title": "Dune", "author": "Frank Herbert", "authors": []}

    def test_keys_are_camel_case_in_field_order(self) -> None:
        """Snake-case attributes project to camelCase keys, in declaration order."""
        book = Book(title="Dune", total_page=896, cover_large_url="x", isbn13="978")
        assert list(book.to_record()) == [
            "title",
            "author",
            "authors",
            "totalPage",
            "coverLargeUrl",
            "isbn13",
        ]

    def test_empty_strings_are_kept(self) -> None:
        """A provider-declared empty field is present in the record."""
        assert Book(title="Dune", publisher="").to_record()["publisher"] == ""

    def test_record_lists_are_copies(self) -> None:
        """Mutating the record does not touch the Book."""
        book = Book(title="Dune", authors=["Frank Herbert"])
        book.to_record()["authors"].append("Someone Else")
        assert book.authors == ["Frank Herbert"]

    def test_from_record_ignores_unknown_keys(self) -> None:
        """Unknown keys and None values are dropped."""
        book = Book.from_record(
            {"title": "Dune", "totalPage": 896, "unknownKey": 1, "publisher": None}
        )
        assert book.title == "Dune"
        assert book.total_page == 896
        assert book.publisher is None

    def test_from_record_round_trip(self) -> None:
        """from_record(to_record()) rebuilds an equal Book."""
        book = Book(
            title="Dune",
            author="Frank Herbert",
            authors=["Frank Herbert"],
            custom_columns={"read": True},
            series_number=1.0,
        )
        assert Book.from_record(book.to_record()) == book

    def test_record_of_mapping_is_shallow_copy(self) -> None:
        """record_of accepts a plain mapping and copies it."""
        source = {"title": "Dune"}
        copy = record_of(source)
        copy["title"] = "Changed"
        assert source["title"] == "Dune"


class TestValueToText:
    """Tests for display coercion of record values."""

    def test_none_is_empty(self) -> None:
        assert value_to_text(None) == ""

    def test_integral_float_drops_fraction(self) -> None:
        """4.0 displays as '4', 4.5 stays '4.5'."""
        assert value_to_text(4.0) == "4"
        assert value_to_text(4.5) == "4.5"

    def test_booleans_are_lower_case(self) -> None:
        assert value_to_text(True) == "true"
        assert value_to_text(False) == "false"

    def test_list_is_comma_joined_without_space(self) -> None:
        assert value_to_text(["a", "b", 3]) == "a,b,3"

    def test_dict_is_json(self) -> None:
        assert value_to_text({"shelf": "Café"}) == '{"shelf": "Café"}'


class TestDedupe:
    """Tests for dedupe()."""

    def test_keeps_first_seen_order(self) -> None:
        assert dedupe(["b", "a", "b", " a ", ""]) == ["b", "a"]
