"""Tests for styles.py"""

from app.core.styles import apply_inline_styles
from app.providers.content_types import StyleRange


def bold(offset, length):
    return StyleRange(offset=offset, length=length, style="BOLD")


def italic(offset, length):
    return StyleRange(offset=offset, length=length, style="ITALIC")


class TestApplyInlineStyles:
    """Tests for marker insertion."""

    def test_no_ranges_is_identity(self):
        assert apply_inline_styles("Hello world", []) == "Hello world"

    def test_bold_prefix(self):
        assert apply_inline_styles("Hello world", [bold(0, 5)]) == "**Hello** world"

    def test_italic_suffix(self):
        assert apply_inline_styles("Hello world", [italic(6, 5)]) == "Hello *world*"

    def test_two_ranges_order_independent(self):
        ranges = [bold(0, 5), italic(6, 5)]
        expected = "**Hello** *world*"
        assert apply_inline_styles("Hello world", ranges) == expected
        assert apply_inline_styles("Hello world", list(reversed(ranges))) == expected

    def test_zero_length_is_noop(self):
        assert apply_inline_styles("Hello", [bold(2, 0)]) == "Hello"

    def test_unknown_style_ignored(self):
        ranges = [StyleRange(offset=0, length=5, style="UNDERLINE")]
        assert apply_inline_styles("Hello world", ranges) == "Hello world"

    def test_length_past_end_is_clamped(self):
        assert apply_inline_styles("Hello", [bold(3, 50)]) == "Hel**lo**"

    def test_offset_past_end_is_noop(self):
        assert apply_inline_styles("Hello", [bold(10, 3)]) == "Hello"

    def test_whole_text(self):
        assert apply_inline_styles("Hi", [italic(0, 2)]) == "*Hi*"

    def test_offsets_counted_in_utf16_units(self):
        # the emoji occupies two UTF-16 code units
        text = "\U0001F600 Hello"
        assert apply_inline_styles(text, [bold(3, 5)]) == "\U0001F600 **Hello**"

    def test_nested_ranges_spliced_literally(self):
        # ITALIC (offset 6) goes first, then BOLD uses its original
        # positions without adjusting for the inserted markers.
        result = apply_inline_styles("Hello world", [bold(0, 11), italic(6, 5)])
        assert result == "**Hello *worl**d*"

    def test_adjacent_ranges(self):
        result = apply_inline_styles("abcdef", [bold(0, 3), italic(3, 3)])
        assert result == "**abc***def*"
