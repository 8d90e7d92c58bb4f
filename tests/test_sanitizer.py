"""Tests for transcript validation and sanitization."""

from __future__ import annotations

import pytest

from src.errors import ContentValidationError, InvalidFormatError, TooShortError
from src.ingestion.sanitizer import (
    MAX_CONTENT_LENGTH,
    MIN_CONTENT_LENGTH,
    TRUNCATION_MARKER,
    measured_length,
    truncate_to_tail,
    validate_content,
)
from src.ingestion.timestamps import find_timestamp

# Filler so short samples clear the minimum length.
PAD = " and then everyone agreed to meet again next week at the usual spot"
IOS_LINE = "[3/15/24, 10:30:15 PM] Al: hi"

LRM = chr(0x200E)
RLM = chr(0x200F)
PARTY = chr(0x1F389)


class TestRejection:
    @pytest.mark.parametrize("content", [None, "", 123, ["a" * 60], {"text": "a" * 60}])
    def test_invalid_format(self, content: object) -> None:
        with pytest.raises(InvalidFormatError, match="Invalid content format"):
            validate_content(content)

    @pytest.mark.parametrize("length", [1, 10, MIN_CONTENT_LENGTH - 1])
    def test_too_short(self, length: int) -> None:
        with pytest.raises(TooShortError, match="Content too short for meaningful analysis"):
            validate_content("a" * length)

    def test_minimum_length_is_accepted(self) -> None:
        assert validate_content("a" * MIN_CONTENT_LENGTH) == "a" * MIN_CONTENT_LENGTH

    def test_errors_share_a_base_class(self) -> None:
        assert issubclass(InvalidFormatError, ContentValidationError)
        assert issubclass(TooShortError, ContentValidationError)

    def test_custom_minimum(self) -> None:
        with pytest.raises(TooShortError):
            validate_content("a" * 80, min_length=100, max_length=1000)


class TestTruncation:
    def test_keeps_tail_with_marker(self) -> None:
        content = "a" * 50 + "b" * 100
        result = validate_content(content, max_length=100)
        assert result == TRUNCATION_MARKER + "b" * 100
        assert len(result) == 100 + len(TRUNCATION_MARKER)

    def test_at_limit_is_untouched(self) -> None:
        content = "c" * 100
        assert validate_content(content, max_length=100) == content

    def test_default_limit(self) -> None:
        content = "x" * 10 + "y" * MAX_CONTENT_LENGTH
        result = validate_content(content)
        assert result.startswith(TRUNCATION_MARKER)
        assert result.endswith("y" * MAX_CONTENT_LENGTH)
        assert "x" not in result

    def test_truncate_twice_is_truncate_once(self) -> None:
        once = truncate_to_tail("z" * 500, 120)
        assert truncate_to_tail(once, 120) == once

    def test_rewritten_timestamps_do_not_trigger_truncation(self) -> None:
        content = "\n".join([IOS_LINE] * 10)
        result = validate_content(content, max_length=len(content) + 5)
        assert not result.startswith(TRUNCATION_MARKER)
        assert result.split("\n") == ["2024-03-15T22:30:15.000Z Al: hi"] * 10

    def test_under_limit_is_never_truncated(self) -> None:
        content = "\n".join(f"3/{day}/24, 9:05 - Bo: ok" for day in range(1, 20))
        assert not validate_content(content, max_length=len(content)).startswith(TRUNCATION_MARKER)

    def test_cut_snaps_to_line_start(self) -> None:
        content = "\n".join([IOS_LINE] * 10)
        result = validate_content(content, max_length=len(content) - 10)

        assert result.startswith(TRUNCATION_MARKER)
        kept = result.removeprefix(TRUNCATION_MARKER)
        assert len(kept) <= len(content) - 10
        for line in kept.split("\n"):
            assert line == "2024-03-15T22:30:15.000Z Al: hi"
            assert find_timestamp(line) is not None

    def test_single_line_cut_snaps_to_word_start(self) -> None:
        result = truncate_to_tail("alpha beta gamma delta", 8)
        assert result == TRUNCATION_MARKER + "delta"

    def test_measured_length_discounts_canonical_timestamps(self) -> None:
        assert measured_length("2024-03-15T22:30:15.000Z Al: hi") == 31 - 12
        assert measured_length(TRUNCATION_MARKER + "abc") == 3


class TestCleanup:
    def test_triple_backticks_neutralised(self) -> None:
        result = validate_content("Bob: try ```rm -rf``` instead" + PAD)
        assert "```" not in result
        assert "'''rm -rf'''" in result

    def test_ios_timestamp_rewritten(self) -> None:
        result = validate_content("[3/15/24, 10:30:15 PM] Alice: hello everyone" + PAD)
        assert result.startswith("2024-03-15T22:30:15.000Z Alice: hello everyone")

    def test_android_timestamp_rewritten(self) -> None:
        result = validate_content("3/15/24, 22:30 - Bob: running late" + PAD)
        assert result.startswith("2024-03-15T22:30:00.000Z Bob: running late")

    def test_multiline_timestamps(self) -> None:
        content = (
            "[3/15/24, 10:30:15 PM] Alice: first message here\n"
            "[3/16/24, 8:00:00 AM] Bob: second message here\n"
            "continuation line without a timestamp"
        )
        assert validate_content(content).split("\n") == [
            "2024-03-15T22:30:15.000Z Alice: first message here",
            "2024-03-16T08:00:00.000Z Bob: second message here",
            "continuation line without a timestamp",
        ]

    def test_place_name_after_time_kept(self) -> None:
        result = validate_content("Alice: meet 3/15/24, 10:30 Amsterdam office" + PAD)
        assert result.startswith("Alice: meet 2024-03-15T10:30:00.000Z Amsterdam office")

    def test_three_digit_year_left_alone(self) -> None:
        content = "3/15/202, 10:30 - Carol: typo in the export" + PAD
        assert validate_content(content) == content

    def test_unparseable_timestamp_left_alone(self) -> None:
        content = "[13/45/24, 10:30] Carol: odd export" + PAD
        assert validate_content(content) == content

    def test_directional_marks_removed(self) -> None:
        result = validate_content(f"{LRM}Alice{RLM}: shalom" + PAD)
        assert result.startswith("Alice: shalom")
        assert LRM not in result
        assert RLM not in result

    def test_emoji_removed(self) -> None:
        result = validate_content(f"Alice: great news {PARTY}{PARTY} everyone" + PAD)
        assert PARTY not in result
        assert result.startswith("Alice: great news  everyone")

    def test_bmp_text_kept(self) -> None:
        content = "Zoë: café à côté, привет, 你好" + PAD
        assert validate_content(content) == content

    def test_surrounding_whitespace_trimmed(self) -> None:
        assert validate_content("\n\n   Alice: hi" + PAD + "   \n") == "Alice: hi" + PAD


class TestIdempotence:
    @pytest.mark.parametrize(
        "content",
        [
            "[3/15/24, 10:30:15 PM] Alice: plan ```x``` " + PAD,
            "3/15/24, 22:30 - Bob: ok\n3/16/24, 07:15 - Carol: sure" + PAD,
            f"{LRM}Dan: {PARTY} yay" + PAD,
            "\n".join([IOS_LINE] * 10),
        ],
    )
    def test_sanitizing_twice_is_sanitizing_once(self, content: str) -> None:
        once = validate_content(content)
        assert validate_content(once) == once

    def test_truncated_output_is_stable(self) -> None:
        content = "[3/15/24, 10:30:15 PM] Alice: " + "w" * 300
        once = validate_content(content, max_length=120)
        assert validate_content(once, max_length=120) == once

    def test_line_aligned_truncation_is_stable(self) -> None:
        content = "\n".join([IOS_LINE] * 10)
        once = validate_content(content, max_length=len(content) - 10)
        assert validate_content(once, max_length=len(content) - 10) == once
