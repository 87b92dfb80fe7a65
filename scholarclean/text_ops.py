"""
Line and word utilities used by the defense chain.

Line numbers are zero-based and always relative to the text passed in.
Lines are split on "\\n" only, so removing lines and joining them back
never changes the remaining lines' content.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class TextOps:
    """Pure line/word operations on document text.

    The chain and pipeline take a TextOps instance as a dependency so a
    caller can substitute its own tokenization rules.

    Usage:
        >>> ops = TextOps()
        >>> ops.remove_lines("a\\nb\\nc", 1, 1)
        'a\\nc'
    """

    def split_lines(self, text: str) -> list[str]:
        return text.split("\n")

    def join_lines(self, lines: Iterable[str]) -> str:
        return "\n".join(lines)

    def count_lines(self, text: str) -> int:
        """Number of lines in text; 0 for the empty string."""
        if not text:
            return 0
        return len(self.split_lines(text))

    def count_words(self, text: str) -> int:
        """Number of whitespace-separated words."""
        return len(text.split())

    def remove_lines(self, text: str, start_line: int, end_line: int) -> str:
        """Remove lines start_line..end_line inclusive.

        An invalid start leaves the text unchanged and logs a warning.
        end_line is clamped to the last line.

        Args:
            text: Document text.
            start_line: First line to remove.
            end_line: Last line to remove.

        Returns:
            Text with the range removed.
        """
        lines = self.split_lines(text)
        if start_line < 0 or start_line >= len(lines):
            logger.warning(
                f"Cannot remove lines {start_line}-{end_line}: start outside "
                f"document of {len(lines)} lines"
            )
            return text

        end = min(end_line, len(lines) - 1)
        if end < start_line:
            logger.warning(f"Cannot remove lines {start_line}-{end_line}: end before start")
            return text

        return self.join_lines(lines[:start_line] + lines[end + 1 :])

    def remove_ranges(self, text: str, ranges: Iterable[tuple[int, int]]) -> str:
        """Remove several inclusive line ranges at once.

        All ranges refer to the original text, so overlapping ranges are
        fine. Invalid ranges are skipped with a warning.
        """
        lines = self.split_lines(text)
        drop: set[int] = set()

        for start, end in ranges:
            if start < 0 or start >= len(lines) or end < start:
                logger.warning(f"Skipping invalid range {start}-{end} ({len(lines)} lines)")
                continue
            drop.update(range(start, min(end, len(lines) - 1) + 1))

        if not drop:
            return text
        return self.join_lines(line for i, line in enumerate(lines) if i not in drop)

    def count_changes(self, original: str, modified: str) -> int:
        """Number of distinct lines present in only one of the two texts."""
        before = set(self.split_lines(original))
        after = set(self.split_lines(modified))
        return len(before ^ after)

    def head(self, text: str, max_lines: int) -> str:
        """First max_lines lines of text."""
        return self.join_lines(self.split_lines(text)[:max_lines])

    def tail(self, text: str, max_lines: int) -> tuple[str, int]:
        """Last max_lines lines of text, plus the index of the first one."""
        lines = self.split_lines(text)
        offset = max(0, len(lines) - max_lines)
        return self.join_lines(lines[offset:]), offset
