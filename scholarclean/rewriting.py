"""
Word-count-preserving text rewrites.

Reflowing hard-wrapped OCR lines and splitting overlong paragraphs may be
delegated to an AI TextRewriter, but its output is only accepted when the
word count matches the input exactly. On a mismatch, a rewriter error, or
when no rewriter is configured, a deterministic heuristic that only
touches whitespace produces the result instead, and the result is marked
as a fallback.

Usage:
    >>> reflower = ParagraphReflower(rewriter)
    >>> result = reflower.reflow(text)
    >>> result.used_fallback
    False
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scholarclean.config import RewriteConfig
from scholarclean.exceptions import WordCountMismatchError
from scholarclean.text_ops import TextOps

if TYPE_CHECKING:
    from scholarclean.proposers import TextRewriter

logger = logging.getLogger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n")

# Lines that must keep their own line: headings, list items, table rows
_STRUCTURAL_LINE = re.compile(r"^(#{1,6}\s|[-*+]\s|\d+[.)]\s|\|)")
_HEADING_LINE = re.compile(r"^#{1,6}\s")

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+(?=[\"'“(\[]?[A-Z0-9])")


@dataclass
class RewriteResult:
    """Outcome of one rewriting step."""

    text: str
    words_before: int
    words_after: int
    used_ai: bool = False
    used_fallback: bool = False
    confidence: float | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def word_count_preserved(self) -> bool:
        return self.words_before == self.words_after


def split_paragraphs(text: str) -> list[str]:
    """Blank-line separated paragraphs, without empty ones."""
    return [para for para in _PARAGRAPH_BREAK.split(text) if para.strip()]


def reflow_paragraphs(text: str) -> str:
    """Join wrapped lines inside each paragraph with single spaces.

    Headings become paragraphs of their own; list items and table rows
    stay on their own lines. Only whitespace changes, so the word count
    is unchanged.
    """
    reflowed: list[str] = []
    for para in split_paragraphs(text):
        block: list[str] = []
        current: list[str] = []
        for line in para.split("\n"):
            stripped = line.strip()
            if not stripped:
                continue
            if not _STRUCTURAL_LINE.match(stripped):
                current.append(stripped)
                continue
            if current:
                block.append(" ".join(current))
                current = []
            if _HEADING_LINE.match(stripped):
                if block:
                    reflowed.append("\n".join(block))
                    block = []
                reflowed.append(stripped)
            else:
                block.append(stripped)
        if current:
            block.append(" ".join(current))
        if block:
            reflowed.append("\n".join(block))
    return "\n\n".join(reflowed)


def is_prose_paragraph(paragraph: str) -> bool:
    """True when no line of the paragraph is a heading, list item or table row."""
    return not any(_STRUCTURAL_LINE.match(line.strip()) for line in paragraph.split("\n"))


def split_long_paragraph(paragraph: str, max_words: int) -> list[str]:
    """Split a paragraph at sentence boundaries into pieces of <= max_words.

    A single sentence longer than max_words is cut between words.
    """
    sentences = _SENTENCE_END.split(" ".join(paragraph.split()))
    pieces: list[str] = []
    current: list[str] = []
    count = 0

    for sentence in sentences:
        words = sentence.split()
        if len(words) > max_words:
            if current:
                pieces.append(" ".join(current))
                current, count = [], 0
            for i in range(0, len(words), max_words):
                pieces.append(" ".join(words[i : i + max_words]))
            continue
        if current and count + len(words) > max_words:
            pieces.append(" ".join(current))
            current, count = [], 0
        current.append(sentence)
        count += len(words)

    if current:
        pieces.append(" ".join(current))
    return pieces


class _WordCountGuard:
    def __init__(self, text_ops: TextOps):
        self.text_ops = text_ops

    def check(self, original: str, rewritten: str) -> None:
        expected = self.text_ops.count_words(original)
        actual = self.text_ops.count_words(rewritten)
        if expected != actual:
            raise WordCountMismatchError(expected, actual)


class ParagraphReflower:
    """Reflows hard-wrapped text into paragraphs."""

    def __init__(
        self,
        rewriter: TextRewriter | None = None,
        config: RewriteConfig | None = None,
        text_ops: TextOps | None = None,
    ):
        """Initialize reflower.

        Args:
            rewriter: Optional AI rewriter.
            config: Confidence settings.
            text_ops: Word counting.
        """
        self.rewriter = rewriter
        self.config = config or RewriteConfig()
        self.text_ops = text_ops or TextOps()
        self._guard = _WordCountGuard(self.text_ops)

    def reflow(self, text: str) -> RewriteResult:
        before = self.text_ops.count_words(text)
        warnings: list[str] = []

        if self.rewriter is not None:
            try:
                candidate = self.rewriter.reflow(text)
                self._guard.check(text, candidate)
                return RewriteResult(
                    text=candidate,
                    words_before=before,
                    words_after=before,
                    used_ai=True,
                    confidence=self.config.ai_confidence,
                )
            except WordCountMismatchError as e:
                warnings.append(f"AI reflow rejected: {e}")
            except Exception as e:
                warnings.append(f"AI reflow failed: {e}")
            logger.warning(f"{warnings[-1]}; using heuristic reflow")

        reflowed = reflow_paragraphs(text)
        changed = reflowed != text
        return RewriteResult(
            text=reflowed,
            words_before=before,
            words_after=self.text_ops.count_words(reflowed),
            used_fallback=changed,
            confidence=self.config.fallback_confidence if changed else None,
            warnings=warnings,
        )


class ParagraphSplitter:
    """Splits paragraphs that are too long for downstream chunking."""

    def __init__(
        self,
        rewriter: TextRewriter | None = None,
        config: RewriteConfig | None = None,
        text_ops: TextOps | None = None,
    ):
        self.rewriter = rewriter
        self.config = config or RewriteConfig()
        self.text_ops = text_ops or TextOps()
        self._guard = _WordCountGuard(self.text_ops)

    def optimize(self, text: str) -> RewriteResult:
        """Split every prose paragraph of at least min_words_to_split words.

        Returns:
            RewriteResult; confidence is the mean over split paragraphs, or
            None when no paragraph needed splitting.
        """
        before = self.text_ops.count_words(text)
        paragraphs = split_paragraphs(text)
        long_ones = [para for para in paragraphs if self._needs_split(para)]
        if not long_ones:
            return RewriteResult(text=text, words_before=before, words_after=before)

        output: list[str] = []
        confidences: list[float] = []
        warnings: list[str] = []
        used_ai = used_fallback = False

        for para in paragraphs:
            if not self._needs_split(para):
                output.append(para)
                continue

            pieces = self._split_with_ai(para, warnings)
            if pieces is not None:
                used_ai = True
                confidences.append(self.config.ai_confidence)
            else:
                pieces = split_long_paragraph(para, self.config.max_words_per_paragraph)
                used_fallback = True
                confidences.append(self.config.fallback_confidence)
            output.extend(pieces)

        result_text = "\n\n".join(output)
        logger.info(f"Split {len(long_ones)} long paragraph(s)")
        return RewriteResult(
            text=result_text,
            words_before=before,
            words_after=self.text_ops.count_words(result_text),
            used_ai=used_ai,
            used_fallback=used_fallback,
            confidence=sum(confidences) / len(confidences),
            warnings=warnings,
        )

    def _needs_split(self, paragraph: str) -> bool:
        return (
            self.text_ops.count_words(paragraph) >= self.config.min_words_to_split
            and is_prose_paragraph(paragraph)
        )

    def _split_with_ai(self, paragraph: str, warnings: list[str]) -> list[str] | None:
        if self.rewriter is None:
            return None
        try:
            pieces = [
                piece.strip()
                for piece in self.rewriter.split_paragraph(
                    paragraph, self.config.max_words_per_paragraph
                )
                if piece.strip()
            ]
            self._guard.check(paragraph, "\n\n".join(pieces))
            return pieces
        except WordCountMismatchError as e:
            warnings.append(f"AI paragraph split rejected: {e}")
        except Exception as e:
            warnings.append(f"AI paragraph split failed: {e}")
        logger.warning(f"{warnings[-1]}; using sentence-boundary split")
        return None
