# ABOUTME: Unit tests for the <%= expr %> inline expression evaluator.
# ABOUTME: Covers allowed syntax, output formatting, rejected constructs and per-fragment failure.

import logging

import pytest

from booknote.template.expressions import (
    ExpressionError,
    evaluate_expression,
    execute_inline_scripts,
)

RECORD = {
    "title": "Dune",
    "authors": ["Frank Herbert", "Brian Herbert"],
    "totalPage": 896,
    "publisher": "",
    "customColumns": {"shelf": "SF"},
}


class TestEvaluateExpression:
    """Tests for evaluate_expression()."""

    def test_attribute_access(self) -> None:
        assert evaluate_expression(RECORD, "book.title") == "Dune"

    def test_missing_attribute_is_none(self) -> None:
        assert evaluate_expression(RECORD, "book.subtitle") is None

    def test_subscript_and_slice(self) -> None:
        assert evaluate_expression(RECORD, "book['authors'][0]") == "Frank Herbert"
        assert evaluate_expression(RECORD, "book.title[:2]") == "Du"

    def test_nested_mapping_attribute(self) -> None:
        assert evaluate_expression(RECORD, "book.customColumns.shelf") == "SF"

    def test_string_methods(self) -> None:
        assert evaluate_expression(RECORD, "book.title.upper()") == "DUNE"
        assert evaluate_expression(RECORD, "', '.join(book.authors)") == (
            "Frank Herbert, Brian Herbert"
        )

    def test_arithmetic_and_comparison(self) -> None:
        assert evaluate_expression(RECORD, "book.totalPage // 2") == 448
        assert evaluate_expression(RECORD, "book.totalPage > 500") is True
        assert evaluate_expression(RECORD, "1 < 2 < 3") is True

    def test_boolean_and_conditional(self) -> None:
        assert evaluate_expression(RECORD, "book.publisher or 'unknown'") == "unknown"
        assert evaluate_expression(RECORD, "'long' if book.totalPage > 500 else 'short'") == "long"

    def test_builtins(self) -> None:
        assert evaluate_expression(RECORD, "len(book.authors)") == 2
        assert evaluate_expression(RECORD, "sorted(book.authors)[0]") == "Brian Herbert"

    def test_f_string(self) -> None:
        assert evaluate_expression(RECORD, "f'{book.title} ({book.totalPage:,})'") == "Dune (896)"

    def test_literals(self) -> None:
        assert evaluate_expression(RECORD, "[1, 2]") == [1, 2]
        assert evaluate_expression(RECORD, "{'a': None}") == {"a": None}

    @pytest.mark.parametrize(
        "source",
        [
            "__import__('os')",
            "open('/etc/passwd')",
            "book.__class__",
            "book.title.__class__",
            "().__class__.__bases__",
            "lambda: 1",
            "[x for x in book.authors]",
            "os",
            "2 ** 1000",
            "'{0.__class__}'.format(book)",
            "book.authors.append('x')",
            "'x' * 100000000",
            "book.title(",
        ],
    )
    def test_rejected_expressions(self, source: str) -> None:
        with pytest.raises(ExpressionError):
            evaluate_expression(RECORD, source)

    def test_runtime_errors_are_expression_errors(self) -> None:
        with pytest.raises(ExpressionError):
            evaluate_expression(RECORD, "book.totalPage / 0")
        with pytest.raises(ExpressionError):
            evaluate_expression(RECORD, "book.authors[5]")
        with pytest.raises(ExpressionError):
            evaluate_expression(RECORD, "int('abc')")

    @pytest.mark.parametrize("source", ["book.title[::0]", "{[1]: 2}", "{book.authors: 1}"])
    def test_value_and_type_errors_are_expression_errors(self, source: str) -> None:
        with pytest.raises(ExpressionError):
            evaluate_expression(RECORD, source)

    def test_record_is_not_mutated(self) -> None:
        record = {"authors": ["A"]}
        with pytest.raises(ExpressionError):
            evaluate_expression(record, "book.authors.clear()")
        assert record == {"authors": ["A"]}


class TestExecuteInlineScripts:
    """Tests for execute_inline_scripts()."""

    def test_string_result_is_inserted_verbatim(self) -> None:
        assert execute_inline_scripts(RECORD, "# <%= book.title %>") == "# Dune"

    def test_non_string_result_is_json(self) -> None:
        text = "<%= book.authors %> <%= book.totalPage %> <%= book.subtitle %>"
        assert execute_inline_scripts(RECORD, text) == '["Frank Herbert", "Brian Herbert"] 896 null'

    def test_fragments_on_one_line_are_separate(self) -> None:
        assert execute_inline_scripts(RECORD, "<%= 1 %>-<%= 2 %>") == "1-2"

    def test_failed_fragment_is_left_in_place(self, caplog: pytest.LogCaptureFixture) -> None:
        """A bad expression is logged; the other fragments still run."""
        text = "<%= book.title %> <%= nope %> <%= book.totalPage %>"
        with caplog.at_level(logging.WARNING):
            result = execute_inline_scripts(RECORD, text)
        assert result == "Dune <%= nope %> 896"
        assert "Inline expression" in caplog.text

    @pytest.mark.parametrize(
        "fragment", ["<%= book.title[::0] %>", "<%= {[1]: 2} %>", "<%= {(1, 2): 1} %>"]
    )
    def test_unusual_failures_leave_fragment_in_place(self, fragment: str) -> None:
        result = execute_inline_scripts(RECORD, f"{fragment} <%= book.title %>")
        assert result == f"{fragment} Dune"

    def test_text_without_fragments_is_unchanged(self) -> None:
        assert execute_inline_scripts(RECORD, "plain <% not an output tag %>") == (
            "plain <% not an output tag %>"
        )
