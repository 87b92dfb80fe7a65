"""
Content verification of proposed regions.

A proposal can pass position/size validation and still point at the wrong
text. The verifier reads the region itself and asks two questions: does it
contain what this section type should contain (headers, entry lines), and
does it contain things a removable section never should (chapter headings,
long narrative prose)?

Every section type follows the same decision shape: negative evidence with
weak positive evidence fails, missing positive evidence fails, anything
else verifies with a confidence that grows with the number of independent
matches and is discounted when negative evidence co-occurs. Front matter
is stricter: any chapter heading inside the candidate region fails it.

Usage:
    >>> verifier = ContentVerifier()
    >>> result = verifier.verify(SectionType.BACK_MATTER, text, start_line=410)
    >>> isinstance(result, Verified)
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from scholarclean.config import VerificationConfig
from scholarclean.defense import patterns as p
from scholarclean.models import (
    Failed,
    NotApplicable,
    SectionType,
    VerificationFailure,
    VerificationResult,
    Verified,
)

logger = logging.getLogger(__name__)

# Multiplier applied when chapter headings co-occur with positive evidence
CHAPTER_PENALTY = 0.7

BACK_MATTER_HEADER_LINES = 30
HEADER_LINES = 10


class ContentVerifier:
    """Checks that a region's text looks like its claimed section type."""

    def __init__(self, config: VerificationConfig | None = None):
        """Initialize verifier.

        Args:
            config: Window sizes. Defaults to VerificationConfig().
        """
        self.config = config or VerificationConfig()

    def verify(
        self,
        section_type: SectionType,
        text: str,
        start_line: int,
        end_line: int | None = None,
    ) -> VerificationResult:
        """Verify the region start_line..end_line of text.

        Args:
            section_type: Section the region claims to be.
            text: Full current document text.
            start_line: First line of the region.
            end_line: Last line of the region; None means document end.

        Returns:
            Verified, Failed or NotApplicable.
        """
        if section_type is SectionType.OTHER:
            return NotApplicable()

        lines = text.split("\n")
        n = len(lines)

        if start_line < 0 or start_line >= n:
            return self._fail(
                section_type,
                VerificationFailure.INSUFFICIENT_CONTENT,
                f"Start line {start_line} is outside document of {n} lines",
            )

        end = n - 1 if end_line is None else min(end_line, n - 1)
        examined = min(self.config.max_lines_to_examine, end - start_line + 1)
        if examined < self.config.min_lines_to_examine:
            return self._fail(
                section_type,
                VerificationFailure.INSUFFICIENT_CONTENT,
                f"Only {max(examined, 0)} lines to examine, need at least "
                f"{self.config.min_lines_to_examine}",
            )

        window = lines[start_line : start_line + examined]

        if section_type is SectionType.FRONT_MATTER:
            result = self._verify_front_matter(window, lines[start_line : end + 1])
        elif section_type is SectionType.BACK_MATTER:
            result = self._verify_back_matter(window)
        elif section_type is SectionType.INDEX:
            result = self._verify_index(window)
        elif section_type is SectionType.TABLE_OF_CONTENTS:
            result = self._verify_toc(window)
        elif section_type is SectionType.AUXILIARY_LISTS:
            result = self._verify_auxiliary_lists(window)
        else:
            result = self._verify_footnotes(window)

        if isinstance(result, Failed):
            logger.warning(
                f"Content verification failed [{section_type.value}] "
                f"{result.reason.value}: {result.explanation}"
            )
        elif isinstance(result, Verified):
            logger.debug(
                f"{section_type.display_name} verified at {result.confidence:.2f}: "
                f"{result.explanation}"
            )
        return result

    # ------------------------------------------------------------------
    # Per-type rules
    # ------------------------------------------------------------------

    def _verify_front_matter(self, window: list[str], region: list[str]) -> VerificationResult:
        # Whole region, not just the window: front matter never holds chapters
        if p.any_line_matches(region, p.CHAPTER_PATTERNS):
            return Failed(
                VerificationFailure.CHAPTER_CONTENT_FOUND,
                "Chapter heading found inside proposed front matter",
            )

        window_text = "\n".join(window)
        lowered = window_text.lower()
        indicators = [i for i in p.FRONT_MATTER_INDICATORS if i in window_text]
        has_copyright = "©" in window_text or "copyright" in lowered or "all rights reserved" in lowered
        has_isbn = "ISBN" in window_text

        if has_copyright and has_isbn:
            confidence = 0.9
        elif has_copyright or len(indicators) >= 3:
            confidence = 0.8
        elif indicators:
            confidence = 0.6
        else:
            confidence = 0.4

        return Verified(
            confidence=confidence,
            matched_patterns=tuple(indicators),
            explanation=f"Front matter with {len(indicators)} indicator(s)",
        )

    def _verify_back_matter(self, window: list[str]) -> VerificationResult:
        headers = p.find_header_words(window[:BACK_MATTER_HEADER_LINES], p.BACK_MATTER_HEADER_WORDS)
        markdown = [r.pattern for r in p.BACK_MATTER_MARKDOWN_PATTERNS if _search_any(r, window)]
        has_chapters = p.any_line_matches(window, p.CHAPTER_PATTERNS)

        if has_chapters and not headers:
            return Failed(
                VerificationFailure.CHAPTER_CONTENT_FOUND,
                "Chapter headings found with no back matter headers",
            )
        if not headers and not markdown:
            return Failed(
                VerificationFailure.NO_EXPECTED_HEADERS,
                "No back matter headers found",
            )

        # A header line is counted once as a word and once per matching heading pattern
        total = len(headers) + len(markdown)
        if total >= self.config.min_matches_for_high_confidence:
            confidence = 0.9
        elif total == 2:
            confidence = 0.75
        else:
            confidence = 0.6
        if has_chapters:
            confidence *= CHAPTER_PENALTY

        return Verified(
            confidence=confidence,
            matched_patterns=tuple(headers + markdown),
            explanation=f"Back matter with {len(headers)} header(s) and {len(markdown)} pattern(s)",
        )

    def _verify_index(self, window: list[str]) -> VerificationResult:
        headers = p.find_header_words(window[:HEADER_LINES], p.INDEX_HEADER_WORDS)
        has_header = bool(headers)
        entries = sum(1 for line in window if p.INDEX_ENTRY_PATTERN.search(line))
        dividers = sum(1 for line in window if p.INDEX_DIVIDER_PATTERN.search(line))
        has_chapters = p.any_line_matches(window, p.CHAPTER_PATTERNS)

        if has_chapters and not has_header and entries < 5:
            return Failed(
                VerificationFailure.CHAPTER_CONTENT_FOUND,
                f"Chapter headings found with only {entries} index entries",
            )
        if not has_header and entries < 10:
            return Failed(
                VerificationFailure.NO_EXPECTED_HEADERS,
                f"No index header and only {entries} index entries",
            )

        if has_header and entries >= 20:
            confidence = 0.95
        elif has_header and entries >= 10:
            confidence = 0.85
        elif entries >= 30:
            confidence = 0.75
        else:
            confidence = 0.65

        matched = tuple(headers) + (f"{entries} index entries", f"{dividers} letter dividers")
        return Verified(
            confidence=confidence,
            matched_patterns=matched,
            explanation=f"Index with {entries} entries and {dividers} dividers",
        )

    def _verify_toc(self, window: list[str]) -> VerificationResult:
        headers = p.find_header_words(window, p.TOC_HEADER_WORDS)
        has_header = bool(headers)
        # A line can count as both an entry and a listing
        entries = sum(1 for line in window if p.TOC_ENTRY_PATTERN.search(line))
        entries += sum(1 for line in window if p.TOC_LISTING_PATTERN.search(line))

        if not has_header and entries < 5:
            return Failed(
                VerificationFailure.NO_EXPECTED_HEADERS,
                f"No contents header and only {entries} contents entries",
            )

        if has_header and entries >= 10:
            confidence = 0.95
        elif has_header and entries >= 5:
            confidence = 0.85
        elif entries >= 10:
            confidence = 0.7
        else:
            confidence = 0.6

        return Verified(
            confidence=confidence,
            matched_patterns=tuple(headers) + (f"{entries} contents entries",),
            explanation=f"Table of contents with {entries} entries",
        )

    def _verify_auxiliary_lists(self, window: list[str]) -> VerificationResult:
        headers = p.find_header_words(window[:HEADER_LINES], p.AUXILIARY_HEADER_WORDS)
        markdown = [r.pattern for r in p.AUXILIARY_MARKDOWN_PATTERNS if _search_any(r, window)]
        has_header = bool(headers or markdown)
        entries = p.count_pattern_matches(window, p.AUXILIARY_ENTRY_PATTERNS)
        narrative = sum(1 for line in window if p.is_narrative_line(line))
        has_chapters = p.any_line_matches(window, p.CHAPTER_PATTERNS)

        if has_chapters and not has_header and entries < 3:
            return Failed(
                VerificationFailure.CHAPTER_CONTENT_FOUND,
                f"Chapter headings found with only {entries} list entries",
            )
        if narrative > 5 and not has_header:
            return Failed(
                VerificationFailure.NARRATIVE_PROSE_FOUND,
                f"{narrative} narrative prose lines and no list header",
            )
        if not has_header and entries < 5:
            return Failed(
                VerificationFailure.NO_EXPECTED_HEADERS,
                f"No list header and only {entries} list entries",
            )

        confidence = self._list_confidence(has_header, entries, has_chapters)
        return Verified(
            confidence=confidence,
            matched_patterns=tuple(headers + markdown) + (f"{entries} list entries",),
            explanation=f"Auxiliary list with {entries} entries",
        )

    def _verify_footnotes(self, window: list[str]) -> VerificationResult:
        headers = p.find_header_words(window[:HEADER_LINES], p.FOOTNOTE_HEADER_WORDS)
        markdown = [r.pattern for r in p.FOOTNOTE_MARKDOWN_PATTERNS if _search_any(r, window)]
        has_header = bool(headers or markdown)
        entries = p.count_pattern_matches(window, p.FOOTNOTE_ENTRY_PATTERNS)
        narrative = p.count_pattern_matches(window, p.FOOTNOTE_NARRATIVE_PATTERNS)
        has_chapters = p.any_line_matches(window, p.CHAPTER_PATTERNS)

        if has_chapters and not has_header:
            return Failed(
                VerificationFailure.CHAPTER_CONTENT_FOUND,
                "Chapter headings found with no notes header",
            )
        if narrative > 3 and not has_header and entries < 5:
            return Failed(
                VerificationFailure.NARRATIVE_PROSE_FOUND,
                f"{narrative} narrative passages and only {entries} note entries",
            )
        if not has_header and entries < 5:
            return Failed(
                VerificationFailure.NO_EXPECTED_HEADERS,
                f"No notes header and only {entries} note entries",
            )

        confidence = self._list_confidence(has_header, entries, has_chapters)
        return Verified(
            confidence=confidence,
            matched_patterns=tuple(headers + markdown) + (f"{entries} note entries",),
            explanation=f"Notes section with {entries} entries",
        )

    @staticmethod
    def _list_confidence(has_header: bool, entries: int, has_chapters: bool) -> float:
        if has_header and entries >= 5:
            confidence = 0.9
        elif has_header and entries >= 2:
            confidence = 0.8
        elif entries >= 10:
            confidence = 0.7
        elif has_header:
            confidence = 0.65
        else:
            confidence = 0.5
        if has_chapters:
            confidence *= CHAPTER_PENALTY
        return confidence

    @staticmethod
    def _fail(section_type: SectionType, reason: VerificationFailure, explanation: str) -> Failed:
        logger.warning(
            f"Content verification failed [{section_type.value}] {reason.value}: {explanation}"
        )
        return Failed(reason=reason, explanation=explanation)


def _search_any(regex, lines: list[str]) -> bool:
    return any(regex.search(line) for line in lines)


@dataclass
class ContentVerificationStats:
    """Running totals of verification outcomes."""

    total: int = 0
    verified: int = 0
    failed: int = 0
    not_applicable: int = 0
    failures_by_reason: dict[VerificationFailure, int] = field(default_factory=dict)
    failures_by_section: dict[SectionType, int] = field(default_factory=dict)

    def record(self, section_type: SectionType, result: VerificationResult) -> None:
        self.total += 1
        if isinstance(result, Verified):
            self.verified += 1
        elif isinstance(result, NotApplicable):
            self.not_applicable += 1
        elif isinstance(result, Failed):
            self.failed += 1
            self.failures_by_reason[result.reason] = self.failures_by_reason.get(result.reason, 0) + 1
            self.failures_by_section[section_type] = (
                self.failures_by_section.get(section_type, 0) + 1
            )

    @property
    def pass_rate(self) -> float:
        checked = self.verified + self.failed
        if checked == 0:
            return 1.0
        return self.verified / checked

    def summary(self) -> str:
        lines = [
            f"Content verification: {self.verified}/{self.verified + self.failed} verified "
            f"({self.pass_rate:.0%})"
        ]
        for reason, count in sorted(self.failures_by_reason.items(), key=lambda kv: kv[0].value):
            lines.append(f"  {reason.value}: {count}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "verified": self.verified,
            "failed": self.failed,
            "not_applicable": self.not_applicable,
            "pass_rate": self.pass_rate,
            "failures_by_reason": {r.value: c for r, c in self.failures_by_reason.items()},
            "failures_by_section": {s.value: c for s, c in self.failures_by_section.items()},
        }
