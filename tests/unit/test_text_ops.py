"""Tests for TextOps line/word utilities."""

import logging

import pytest

from scholarclean.text_ops import TextOps


@pytest.fixture
def ops() -> TextOps:
    """TextOps instance."""
    return TextOps()


class TestCounting:
    """Test line and word counts."""

    def test_empty_has_no_lines(self, ops):
        """Empty string has zero lines."""
        assert ops.count_lines("") == 0

    def test_count_lines(self, ops):
        """Lines are split on newline."""
        assert ops.count_lines("a\nb\nc") == 3

    def test_trailing_newline_counts_empty_line(self, ops):
        """A trailing newline adds an empty last line."""
        assert ops.count_lines("a\nb\n") == 3

    def test_count_words(self, ops):
        """Words are whitespace separated."""
        assert ops.count_words("  one two\nthree\t four ") == 4


class TestRemoveLines:
    """Test single range removal."""

    def test_removes_inclusive_range(self, ops):
        """Both ends are removed."""
        assert ops.remove_lines("a\nb\nc\nd", 1, 2) == "a\nd"

    def test_end_is_clamped(self, ops):
        """End past the last line is clamped."""
        assert ops.remove_lines("a\nb\nc", 1, 99) == "a"

    def test_invalid_start_unchanged(self, ops, caplog):
        """Out-of-range start leaves text unchanged with a warning."""
        with caplog.at_level(logging.WARNING, logger="scholarclean.text_ops"):
            assert ops.remove_lines("a\nb", 5, 6) == "a\nb"
        assert "Cannot remove" in caplog.text

    def test_negative_start_unchanged(self, ops):
        """Negative start leaves text unchanged."""
        assert ops.remove_lines("a\nb", -1, 0) == "a\nb"

    def test_end_before_start_unchanged(self, ops):
        """Inverted range leaves text unchanged."""
        assert ops.remove_lines("a\nb\nc", 2, 1) == "a\nb\nc"


class TestRemoveRanges:
    """Test multi-range removal."""

    def test_ranges_refer_to_original_text(self, ops):
        """Each range uses original line numbers."""
        text = "\n".join(str(i) for i in range(10))
        assert ops.remove_ranges(text, [(1, 2), (6, 7)]) == "0\n3\n4\n5\n8\n9"

    def test_overlapping_ranges(self, ops):
        """Overlapping ranges remove the union."""
        text = "\n".join(str(i) for i in range(6))
        assert ops.remove_ranges(text, [(1, 3), (2, 4)]) == "0\n5"

    def test_invalid_ranges_skipped(self, ops):
        """Invalid ranges are ignored."""
        assert ops.remove_ranges("a\nb\nc", [(5, 6), (2, 1), (0, 0)]) == "b\nc"


class TestSamples:
    """Test head/tail sampling."""

    def test_head(self, ops):
        """head() returns the first lines."""
        assert ops.head("a\nb\nc", 2) == "a\nb"

    def test_tail_offset(self, ops):
        """tail() returns the offset of its first line."""
        sample, offset = ops.tail("a\nb\nc\nd", 2)
        assert sample == "c\nd"
        assert offset == 2

    def test_tail_longer_than_text(self, ops):
        """Short text gives offset zero."""
        sample, offset = ops.tail("a\nb", 10)
        assert sample == "a\nb"
        assert offset == 0

    def test_count_changes(self, ops):
        """Changes are lines in only one text."""
        assert ops.count_changes("a\nb\nc", "a\nc\nd") == 2
