# ABOUTME: Unit tests for date placeholders and Moment-style date formatting.
# ABOUTME: Uses a fixed "now" so results are deterministic.

from datetime import datetime

import pytest

from booknote.template.dates import (
    apply_template_transformations,
    format_moment,
    replace_date_in_string,
)

NOW = datetime(2024, 3, 9, 14, 5, 7)


class TestFormatMoment:
    """Tests for format_moment()."""

    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            ("YYYY-MM-DD", "2024-03-09"),
            ("YY/M/D", "24/3/9"),
            ("MMMM Do, YYYY", "March 9th, 2024"),
            ("ddd, MMM D", "Sat, Mar 9"),
            ("dddd", "Saturday"),
            ("HH:mm:ss", "14:05:07"),
            ("h:mm A", "2:05 PM"),
            ("Q", "1"),
            ("DDDD", "069"),
            ("[Week of] YYYY", "Week of 2024"),
        ],
    )
    def test_tokens(self, fmt: str, expected: str) -> None:
        assert format_moment(NOW, fmt) == expected

    @pytest.mark.parametrize(("day", "suffix"), [(1, "1st"), (2, "2nd"), (3, "3rd"), (11, "11th"), (22, "22nd")])
    def test_ordinals(self, day: int, suffix: str) -> None:
        assert format_moment(datetime(2024, 1, day), "Do") == suffix


class TestReplaceDateInString:
    """Tests for the {{DATE}} family used in file name formats."""

    def test_plain_date(self) -> None:
        assert replace_date_in_string("{{DATE}} note", NOW) == "2024-03-09 note"

    def test_day_offset(self) -> None:
        assert replace_date_in_string("{{DATE+1}}", NOW) == "2024-03-10"
        assert replace_date_in_string("{{DATE+-9}}", NOW) == "2024-02-29"

    def test_formatted(self) -> None:
        assert replace_date_in_string("{{DATE:YYYY}}", NOW) == "2024"

    def test_formatted_with_offset(self) -> None:
        assert replace_date_in_string("{{DATE:MM-DD+30}}", NOW) == "04-08"

    def test_empty_format_uses_default(self) -> None:
        assert replace_date_in_string("{{DATE:}}", NOW) == "2024-03-09"

    def test_every_occurrence_is_replaced(self) -> None:
        assert replace_date_in_string("{{DATE}} {{DATE:YYYY}} {{DATE}}", NOW) == (
            "2024-03-09 2024 2024-03-09"
        )

    def test_other_placeholders_untouched(self) -> None:
        assert replace_date_in_string("{{title}} {{date}}", NOW) == "{{title}} {{date}}"


class TestApplyTemplateTransformations:
    """Tests for {{date}} / {{time}} in template files."""

    def test_date_default_format(self) -> None:
        assert apply_template_transformations("created: {{date}}", NOW) == "created: 2024-03-09"

    def test_time_with_format(self) -> None:
        assert apply_template_transformations("{{time:HH:mm}}", NOW) == "14:05"

    def test_case_and_spaces(self) -> None:
        assert apply_template_transformations("{{ DATE :YYYY}}", NOW) == "2024"

    @pytest.mark.parametrize(
        ("placeholder", "expected"),
        [
            ("{{date+1d}}", "2024-03-10"),
            ("{{date-1w}}", "2024-03-02"),
            ("{{date+1M}}", "2024-04-09"),
            ("{{date+1q}}", "2024-06-09"),
            ("{{date-1y}}", "2023-03-09"),
            ("{{date+10h:HH}}", "00"),
            ("{{date+55m:HH:mm}}", "15:00"),
            ("{{date+53s:mm:ss}}", "06:00"),
        ],
    )
    def test_offsets(self, placeholder: str, expected: str) -> None:
        assert apply_template_transformations(placeholder, NOW) == expected

    def test_unrelated_text_untouched(self) -> None:
        assert apply_template_transformations("{{title}}", NOW) == "{{title}}"
