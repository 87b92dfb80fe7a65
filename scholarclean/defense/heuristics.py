"""
AI-independent heuristic section detection.

When a proposal is missing, rejected or unverifiable, the defense chain
falls back to scanning the document itself. Each detector:

1. Restricts itself to the position window where the section type can
   legally sit (back matter only in the second half, front matter only in
   the first 30%, and so on).
2. Matches weighted header patterns inside that window.
3. Gathers supporting evidence (entry lines, alphabet dividers, other
   headers) near the chosen match and boosts the header weight with it.
4. Reports Found only when the result clears a fixed confidence threshold.

Index and table of contents also have a headerless density scan: a long
uninterrupted run of entry lines is accepted with a capped confidence.

Detection is deterministic: the same text always yields the same result.

Usage:
    >>> detector = HeuristicDetector()
    >>> result = detector.detect(SectionType.BACK_MATTER, text)
    >>> if isinstance(result, Found):
    ...     print(result.boundary_line, result.confidence)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from scholarclean.config import HeuristicConfig
from scholarclean.defense import patterns as p
from scholarclean.defense.constraints import (
    HEURISTIC_AUXILIARY_MAX_END,
    HEURISTIC_BACK_MATTER_EDGE,
    HEURISTIC_BACK_MATTER_MIN_START,
    HEURISTIC_FRONT_MATTER_MAX_END,
    HEURISTIC_INDEX_MIN_START,
    HEURISTIC_TOC_MAX_END,
)
from scholarclean.models import (
    Found,
    HeuristicDetectionResult,
    NotFound,
    SectionType,
)

logger = logging.getLogger(__name__)

NOTES_SECTION_CONFIDENCE = 0.70
EDGE_PENALTY = 0.9
EMPTY_LIST_PENALTY = 0.7
END_SCAN_LINES = 100

_TRAILING_PAGE_NUMBER = re.compile(r"\s+\d+\s*$")


@dataclass(frozen=True)
class AuxiliaryListResult:
    """One auxiliary list (figures, tables, abbreviations...) found heuristically."""

    category: str
    start_line: int
    end_line: int
    confidence: float
    entry_count: int
    matched_pattern: str

    def to_found(self) -> Found:
        return Found(
            boundary_line=self.start_line,
            confidence=self.confidence,
            matched_patterns=(self.matched_pattern,),
            explanation=(
                f"{self.category} detected at lines {self.start_line}-{self.end_line} "
                f"with {self.entry_count} entries"
            ),
            end_line=self.end_line,
        )


class HeuristicDetector:
    """Pattern-based detector for every removable section type."""

    def __init__(self, config: HeuristicConfig | None = None):
        """Initialize detector.

        Args:
            config: Threshold and scan sizes. Defaults to HeuristicConfig().
        """
        self.config = config or HeuristicConfig()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def detect(self, section_type: SectionType, text: str) -> HeuristicDetectionResult:
        """Detect a section of the given type.

        For multi-region types the earliest region is returned.

        Args:
            section_type: Section to look for.
            text: Full current document text.

        Returns:
            Found or NotFound.
        """
        if section_type is SectionType.BACK_MATTER:
            return self.detect_back_matter(text)
        if section_type is SectionType.INDEX:
            return self.detect_index(text)
        if section_type is SectionType.FRONT_MATTER:
            return self.detect_front_matter_end(text)
        if section_type is SectionType.TABLE_OF_CONTENTS:
            return self.detect_toc(text)
        if section_type in (SectionType.AUXILIARY_LISTS, SectionType.FOOTNOTES_ENDNOTES):
            candidates = self.detect_all(section_type, text)
            if candidates:
                return candidates[0]
            return NotFound(f"No {section_type.display_name.lower()} found")
        return NotFound(f"No heuristic rules for {section_type.display_name.lower()}")

    def detect_all(self, section_type: SectionType, text: str) -> list[Found]:
        """Every candidate region of the given type, in document order."""
        if section_type is SectionType.AUXILIARY_LISTS:
            return [r.to_found() for r in self.detect_auxiliary_lists(text)]
        if section_type is SectionType.FOOTNOTES_ENDNOTES:
            if self._too_short(text.split("\n")):
                return []
            return [
                Found(
                    boundary_line=start,
                    confidence=NOTES_SECTION_CONFIDENCE,
                    matched_patterns=("notes section header",),
                    explanation=f"Notes section detected at lines {start}-{end}",
                    end_line=end,
                )
                for start, end in self.detect_notes_sections(text)
            ]
        result = self.detect(section_type, text)
        return [result] if isinstance(result, Found) else []

    # ------------------------------------------------------------------
    # Back matter
    # ------------------------------------------------------------------

    def detect_back_matter(self, text: str) -> HeuristicDetectionResult:
        """Find the start of back matter in the second half of the document."""
        lines = text.split("\n")
        n = len(lines)
        if self._too_short(lines):
            return NotFound(f"Document too short for heuristic detection ({n} lines)")

        window_start = int(n * HEURISTIC_BACK_MATTER_MIN_START)
        matches = p.scan_weighted(lines, p.BACK_MATTER_HEADERS, window_start)
        first = p.earliest(matches)
        if first is None:
            return NotFound("No back matter headers found in second half of document")

        candidate_lines = {m.line_index for m in matches}
        confidence = first.weight
        if len(candidate_lines) >= 3:
            confidence += 0.15
        elif len(candidate_lines) >= 2:
            confidence += 0.1
        confidence = min(confidence, 1.0)

        ratio = first.line_index / n
        if ratio < HEURISTIC_BACK_MATTER_EDGE:
            confidence *= EDGE_PENALTY

        logger.debug(
            f"Back matter candidate at line {first.line_index} ({ratio:.1%}), "
            f"{len(candidate_lines)} header line(s), confidence {confidence:.2f}"
        )
        if confidence < self.config.min_confidence:
            return NotFound(
                f"Back matter candidate at line {first.line_index} below threshold "
                f"({confidence:.2f} < {self.config.min_confidence:.2f})"
            )

        supporting = len(candidate_lines) - 1
        return Found(
            boundary_line=first.line_index,
            confidence=confidence,
            matched_patterns=tuple(dict.fromkeys(m.pattern for m in matches)),
            explanation=(
                f"Back matter detected at line {first.line_index} ({ratio:.0%} into document) "
                f"with {supporting} supporting pattern(s)"
            ),
        )

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def detect_index(self, text: str) -> HeuristicDetectionResult:
        """Find the start of the index, by header or by entry density."""
        lines = text.split("\n")
        n = len(lines)
        if self._too_short(lines):
            return NotFound(f"Document too short for heuristic detection ({n} lines)")

        window_start = int(n * HEURISTIC_INDEX_MIN_START)
        header = p.earliest(p.scan_weighted(lines, p.INDEX_HEADERS, window_start))

        if header is not None:
            scan = lines[header.line_index : header.line_index + self.config.supporting_scan_lines]
            entries = sum(1 for line in scan if p.HEURISTIC_INDEX_ENTRY_PATTERN.search(line))
            dividers = sum(1 for line in scan if p.INDEX_DIVIDER_PATTERN.search(line))

            confidence = header.weight
            if entries >= 20:
                confidence += 0.2
            elif entries >= 10:
                confidence += 0.15
            elif entries >= 5:
                confidence += 0.1
            if dividers >= 5:
                confidence += 0.1
            elif dividers > 0:
                confidence += 0.05
            confidence = min(confidence, 1.0)

            if header.weight < 1.0 and entries < 5:
                logger.debug(
                    f"Weak index header at line {header.line_index} with only {entries} entries"
                )
            elif confidence >= self.config.min_confidence:
                return Found(
                    boundary_line=header.line_index,
                    confidence=confidence,
                    matched_patterns=(header.pattern,),
                    explanation=(
                        f"Index detected at line {header.line_index} ({header.line_index / n:.0%} "
                        f"into document) with {entries} entries and {dividers} dividers"
                    ),
                )

        run_start, run_length = p.longest_run(
            lines,
            lambda line: bool(p.HEURISTIC_INDEX_ENTRY_PATTERN.search(line)),
            window_start,
        )
        if run_length >= self.config.headerless_index_min_entries:
            confidence = min(0.75, 0.5 + run_length / 100)
            return Found(
                boundary_line=run_start,
                confidence=confidence,
                matched_patterns=("index entry density",),
                explanation=(
                    f"Headerless index detected at line {run_start} ({run_start / n:.0%} into "
                    f"document) from {run_length} consecutive entries"
                ),
            )

        return NotFound("No index header or index entry run found in final 30% of document")

    # ------------------------------------------------------------------
    # Front matter
    # ------------------------------------------------------------------

    def detect_front_matter_end(self, text: str) -> HeuristicDetectionResult:
        """Find the last line of front matter.

        Tries the first main-content heading (chapter, part, prologue), then
        falls back to the end of the copyright/publication block.
        """
        lines = text.split("\n")
        n = len(lines)
        if self._too_short(lines):
            return NotFound(f"Document too short for heuristic detection ({n} lines)")

        window_end = int(n * HEURISTIC_FRONT_MATTER_MAX_END)

        main = p.first_by_priority(lines, p.MAIN_CONTENT_HEADERS, 0, window_end)
        if main is not None and main.line_index - 1 >= 3:
            boundary = main.line_index - 1
            indicator_types = sum(
                1
                for entry in p.FRONT_MATTER_INDICATOR_PATTERNS
                if any(entry.regex.search(line) for line in lines[: boundary + 1])
            )
            confidence = main.weight
            if indicator_types >= 3:
                confidence += 0.15
            elif indicator_types >= 1:
                confidence += 0.1
            confidence = min(confidence, 1.0)

            if confidence >= self.config.min_confidence:
                return Found(
                    boundary_line=boundary,
                    confidence=confidence,
                    matched_patterns=(main.pattern,),
                    explanation=(
                        f"Front matter ends at line {boundary}, before main content at line "
                        f"{main.line_index} ({indicator_types} publication indicator type(s))"
                    ),
                )

        hits = p.scan_weighted(lines, p.FRONT_MATTER_INDICATOR_PATTERNS, 0, window_end)
        if len(hits) < 2:
            return NotFound("No main content heading or publication block in first 30% of document")

        last = max(hit.line_index for hit in hits)
        boundary = self._publication_block_end(lines, last, window_end)
        if boundary is None:
            return NotFound(f"No break found after publication block ending at line {last}")

        if len(hits) >= 4:
            confidence = 0.85
        elif len(hits) >= 3:
            confidence = 0.75
        else:
            confidence = 0.6
        if any(hit.weight >= 1.0 for hit in hits):
            confidence += 0.1
        confidence = min(confidence, 1.0)

        if confidence < self.config.min_confidence:
            return NotFound(f"Publication block confidence {confidence:.2f} below threshold")
        return Found(
            boundary_line=boundary,
            confidence=confidence,
            matched_patterns=tuple(dict.fromkeys(hit.pattern for hit in hits)),
            explanation=f"Front matter ends at line {boundary} after {len(hits)} publication indicator(s)",
        )

    @staticmethod
    def _publication_block_end(lines: list[str], last: int, window_end: int) -> int | None:
        n = len(lines)
        for index in range(last + 1, min(last + 20, window_end, n)):
            stripped = lines[index].strip()
            if not stripped:
                for ahead in range(index + 1, min(index + 6, n)):
                    following = lines[ahead].strip()
                    if following:
                        if following.startswith("#") or following.upper().startswith("CHAPTER"):
                            return ahead - 1
                        break
                return index
            if stripped.startswith("#"):
                return index - 1
        return None

    # ------------------------------------------------------------------
    # Table of contents
    # ------------------------------------------------------------------

    def detect_toc(self, text: str) -> HeuristicDetectionResult:
        """Find a table of contents in the first 30% of the document."""
        lines = text.split("\n")
        n = len(lines)
        if self._too_short(lines):
            return NotFound(f"Document too short for heuristic detection ({n} lines)")

        window_end = int(n * HEURISTIC_TOC_MAX_END)
        header = p.first_by_priority(lines, p.TOC_HEADERS, 0, window_end)

        if header is not None:
            entries = self._count_toc_entries(lines, header.line_index + 1)
            confidence = header.weight
            if entries >= 10:
                confidence += 0.2
            elif entries >= 5:
                confidence += 0.15
            elif entries >= 3:
                confidence += 0.1
            elif entries == 0:
                confidence *= EMPTY_LIST_PENALTY
            confidence = min(confidence, 1.0)

            if not (header.weight < 1.0 and entries < 3):
                if confidence < self.config.min_confidence:
                    return NotFound(
                        f"Contents header at line {header.line_index} below threshold "
                        f"({confidence:.2f})"
                    )
                end = self.find_toc_end_line(text, header.line_index)
                return Found(
                    boundary_line=header.line_index,
                    confidence=confidence,
                    matched_patterns=(header.pattern,),
                    explanation=(
                        f"Table of contents detected at lines {header.line_index}-{end} "
                        f"with {entries} entries"
                    ),
                    end_line=end,
                )

        run_start, run_length = p.longest_run(
            lines, _is_toc_entry, 0, window_end, max_blank_gap=2
        )
        if run_length >= self.config.headerless_toc_min_entries:
            confidence = min(0.75, 0.5 + run_length / 50)
            end = self.find_toc_end_line(text, run_start)
            return Found(
                boundary_line=run_start,
                confidence=confidence,
                matched_patterns=("contents entry density",),
                explanation=(
                    f"Headerless table of contents detected at lines {run_start}-{end} "
                    f"from {run_length} entries"
                ),
                end_line=end,
            )

        return NotFound("No contents header or contents entry run found in first 30% of document")

    def _count_toc_entries(self, lines: list[str], start: int) -> int:
        count = 0
        for line in lines[start : start + self.config.supporting_scan_lines]:
            stripped = line.strip()
            if not stripped:
                continue
            if _is_toc_entry(stripped):
                count += 1
            elif stripped.startswith(("# Chapter", "## Chapter", "CHAPTER 1")):
                break
        return count

    def find_toc_end_line(self, text: str, start_line: int) -> int:
        """Last line of the table of contents starting at start_line."""
        lines = text.split("\n")
        last = start_line
        empties = 0

        for index in range(start_line + 1, min(start_line + END_SCAN_LINES + 1, len(lines))):
            stripped = lines[index].strip()
            if not stripped:
                empties += 1
                if empties >= 3:
                    break
                continue
            empties = 0

            if stripped.startswith("#") and "contents" not in stripped.lower():
                break
            if stripped.upper().startswith(p.MAJOR_SECTION_PREFIXES) and not (
                _TRAILING_PAGE_NUMBER.search(stripped)
            ):
                break
            last = index

        return last

    # ------------------------------------------------------------------
    # Auxiliary lists
    # ------------------------------------------------------------------

    def detect_auxiliary_lists(self, text: str) -> list[AuxiliaryListResult]:
        """Every list of figures/tables/abbreviations in the first 40%."""
        lines = text.split("\n")
        if self._too_short(lines):
            return []

        window_end = int(len(lines) * HEURISTIC_AUXILIARY_MAX_END)
        results: list[AuxiliaryListResult] = []
        processed_until = -1
        tried: set[int] = set()

        for match in p.scan_weighted(lines, p.AUXILIARY_HEADERS, 0, window_end):
            if match.line_index <= processed_until or match.line_index in tried:
                continue
            tried.add(match.line_index)

            end = self.find_auxiliary_list_end(lines, match.line_index, window_end)
            entries = p.count_matching_lines(
                lines[match.line_index + 1 : end + 1], p.AUXILIARY_ENTRY_PATTERNS
            )
            confidence = match.weight
            if entries >= 5:
                confidence += 0.15
            elif entries >= 2:
                confidence += 0.1
            elif entries == 0:
                confidence *= EMPTY_LIST_PENALTY
            confidence = min(confidence, 1.0)

            category = p.auxiliary_category(match.pattern)
            if confidence < self.config.min_confidence:
                logger.debug(
                    f"{category} candidate at line {match.line_index} below threshold "
                    f"({confidence:.2f})"
                )
                continue

            results.append(
                AuxiliaryListResult(
                    category=category,
                    start_line=match.line_index,
                    end_line=end,
                    confidence=confidence,
                    entry_count=entries,
                    matched_pattern=match.pattern,
                )
            )
            processed_until = end

        return results

    @staticmethod
    def find_auxiliary_list_end(lines: list[str], start_line: int, window_end: int) -> int:
        """Last line of the auxiliary list whose header is at start_line."""
        last = start_line
        empties = 0
        stop = min(start_line + END_SCAN_LINES, window_end, len(lines))

        for index in range(start_line + 1, stop):
            stripped = lines[index].strip()
            if not stripped:
                empties += 1
                if empties >= 3:
                    break
                continue
            empties = 0

            if stripped.startswith("#"):
                break
            if _looks_like_list_header(stripped):
                break
            if stripped.upper().startswith(p.MAJOR_SECTION_PREFIXES):
                break
            last = index

        return last

    # ------------------------------------------------------------------
    # Notes sections
    # ------------------------------------------------------------------

    def detect_notes_sections(self, text: str) -> list[tuple[int, int]]:
        """Inclusive (start, end) ranges of NOTES/ENDNOTES sections.

        A section ends before the next notes header, chapter heading or
        back matter header, or at document end.
        """
        lines = text.split("\n")
        n = len(lines)
        starts = [
            i
            for i, line in enumerate(lines)
            if any(r.search(line.strip()) for r in p.NOTES_SECTION_HEADERS)
        ]

        sections = []
        for start in starts:
            end = n - 1
            for index in range(start + 1, n):
                stripped = lines[index].strip()
                if (
                    any(r.search(stripped) for r in p.NOTES_SECTION_TERMINATORS)
                    or any(r.search(stripped) for r in p.NOTES_SECTION_HEADERS)
                    or any(r.search(stripped) for r in p.CHAPTER_PATTERNS)
                ):
                    end = index - 1
                    break
            if end > start:
                sections.append((start, end))

        return sections

    def _too_short(self, lines: list[str]) -> bool:
        return len(lines) < self.config.min_document_lines


def _is_toc_entry(line: str) -> bool:
    return bool(
        p.HEURISTIC_TOC_ENTRY_PATTERN.search(line) or p.HEURISTIC_TOC_SIMPLE_ENTRY_PATTERN.search(line)
    )


def _looks_like_list_header(stripped: str) -> bool:
    return (
        4 <= len(stripped) < 50
        and stripped == stripped.upper()
        and "." not in stripped
        and not stripped[0].isdigit()
        and any(entry.regex.search(stripped) for entry in p.AUXILIARY_HEADERS)
    )


@dataclass
class HeuristicDetectionStats:
    """Running totals of heuristic detection outcomes."""

    attempts: int = 0
    successes: int = 0
    failures: int = 0
    attempts_by_section: dict[SectionType, int] = field(default_factory=dict)
    successes_by_section: dict[SectionType, int] = field(default_factory=dict)
    confidences: list[float] = field(default_factory=list)

    def record(self, section_type: SectionType, result: HeuristicDetectionResult) -> None:
        self.attempts += 1
        self.attempts_by_section[section_type] = self.attempts_by_section.get(section_type, 0) + 1
        if isinstance(result, Found):
            self.successes += 1
            self.successes_by_section[section_type] = (
                self.successes_by_section.get(section_type, 0) + 1
            )
            self.confidences.append(result.confidence)
        else:
            self.failures += 1

    @property
    def success_rate(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.successes / self.attempts

    @property
    def average_confidence(self) -> float | None:
        if not self.confidences:
            return None
        return sum(self.confidences) / len(self.confidences)

    def summary(self) -> str:
        average = self.average_confidence
        average_text = "n/a" if average is None else f"{average:.2f}"
        return (
            f"Heuristic detection: {self.successes}/{self.attempts} found "
            f"({self.success_rate:.0%}), average confidence {average_text}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": self.attempts,
            "successes": self.successes,
            "failures": self.failures,
            "success_rate": self.success_rate,
            "average_confidence": self.average_confidence,
            "attempts_by_section": {s.value: c for s, c in self.attempts_by_section.items()},
            "successes_by_section": {s.value: c for s, c in self.successes_by_section.items()},
        }
