"""
Core data models for ScholarClean.

This module defines the shared vocabulary of the defense chain:
- SectionType: the closed set of removable document regions
- BoundaryInfo: an untrusted (start, end, confidence) removal proposal
- Tagged results for each defense phase (validation, verification,
  heuristic detection) and the final DefenseDecision
- CleaningStep / CleaningPhase: pipeline step vocabulary used for
  confidence aggregation

All result types are frozen dataclasses. Each family is exported as a
union alias so callers can match exhaustively with isinstance().

Usage:
    >>> boundary = BoundaryInfo(start_line=410, confidence=0.8)
    >>> result = validator.validate(boundary, SectionType.BACK_MATTER, 500)
    >>> if isinstance(result, Invalid):
    ...     print(result.reason, result.explanation)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from scholarclean.exceptions import MalformedResponseError

# ============================================================================
# Section vocabulary
# ============================================================================


class SectionType(Enum):
    """Removable document regions."""

    FRONT_MATTER = "front_matter"
    TABLE_OF_CONTENTS = "table_of_contents"
    AUXILIARY_LISTS = "auxiliary_lists"
    INDEX = "index"
    BACK_MATTER = "back_matter"
    FOOTNOTES_ENDNOTES = "footnotes_endnotes"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Human-readable name used in log messages and explanations."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    SectionType.FRONT_MATTER: "Front matter",
    SectionType.TABLE_OF_CONTENTS: "Table of contents",
    SectionType.AUXILIARY_LISTS: "Auxiliary lists",
    SectionType.INDEX: "Index",
    SectionType.BACK_MATTER: "Back matter",
    SectionType.FOOTNOTES_ENDNOTES: "Footnotes/endnotes",
    SectionType.OTHER: "Other",
}


class AnchorMode(Enum):
    """How a section type's boundary lines are interpreted.

    START_ANCHORED sections run from start_line to document end,
    END_ANCHORED sections run from line 0 to end_line, and CLOSED
    sections need both lines.
    """

    START_ANCHORED = "start_anchored"
    END_ANCHORED = "end_anchored"
    CLOSED = "closed"


@dataclass(frozen=True)
class BoundaryInfo:
    """
    A candidate removal region proposed for one section type.

    Line numbers are zero-based indexes into the current document text.
    Either side may be None, meaning "no boundary on that side"; how that
    is read depends on the section type's AnchorMode.

    Proposals are untrusted. Nothing here checks that start_line <= end_line
    or that lines are in range: that is the validator's job, and it must be
    able to see the bad values to reject them.
    """

    start_line: int | None = None
    end_line: int | None = None
    confidence: float = 0.0
    notes: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither side of the boundary is present."""
        return self.start_line is None and self.end_line is None

    def shifted(self, offset: int) -> BoundaryInfo:
        """Return a copy with both lines moved by offset."""
        if offset == 0:
            return self
        return BoundaryInfo(
            start_line=None if self.start_line is None else self.start_line + offset,
            end_line=None if self.end_line is None else self.end_line + offset,
            confidence=self.confidence,
            notes=self.notes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "confidence": self.confidence,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BoundaryInfo:
        """Build a BoundaryInfo from an untrusted mapping.

        Accepts snake_case keys as well as the camelCase keys
        (startLine, endLine) that AI responses tend to use.

        Args:
            data: Decoded proposal payload.

        Returns:
            Parsed BoundaryInfo.

        Raises:
            MalformedResponseError: If a field has the wrong type or the
                confidence is outside [0, 1].
        """
        if not isinstance(data, Mapping):
            raise MalformedResponseError(
                f"Boundary proposal must be a mapping, got {type(data).__name__}"
            )

        start = _optional_line(data, "start_line", "startLine")
        end = _optional_line(data, "end_line", "endLine")

        raw_confidence = data.get("confidence")
        if isinstance(raw_confidence, bool) or not isinstance(raw_confidence, (int, float)):
            raise MalformedResponseError(
                f"confidence must be a number, got {raw_confidence!r}"
            )
        confidence = float(raw_confidence)
        if not 0.0 <= confidence <= 1.0:
            raise MalformedResponseError(
                f"confidence must be between 0.0 and 1.0, got {confidence}"
            )

        notes = data.get("notes")
        if notes is not None and not isinstance(notes, str):
            raise MalformedResponseError(f"notes must be a string or null, got {notes!r}")

        return cls(start_line=start, end_line=end, confidence=confidence, notes=notes)


def _optional_line(data: Mapping[str, Any], key: str, alias: str) -> int | None:
    value = data.get(key, data.get(alias))
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedResponseError(f"{key} must be an integer or null, got {value!r}")
    return value


# ============================================================================
# Phase A: position/size validation
# ============================================================================


class RejectionReason(Enum):
    """Why a boundary proposal failed position/size validation."""

    POSITION_TOO_EARLY = "position_too_early"
    POSITION_TOO_LATE = "position_too_late"
    INVALID_RANGE = "invalid_range"
    OUT_OF_BOUNDS = "out_of_bounds"
    EXCESSIVE_REMOVAL = "excessive_removal"
    SECTION_TOO_SMALL = "section_too_small"
    LOW_CONFIDENCE = "low_confidence"


@dataclass(frozen=True)
class Valid:
    """Boundary is inside the safe envelope for its section type."""


@dataclass(frozen=True)
class Invalid:
    """Boundary was rejected."""

    reason: RejectionReason
    explanation: str


@dataclass(frozen=True)
class NoBoundary:
    """Proposal contains nothing to remove."""


ValidationResult = Valid | Invalid | NoBoundary


# ============================================================================
# Phase B: content verification
# ============================================================================


class VerificationFailure(Enum):
    """Why a region's content did not look like its claimed section type."""

    NO_EXPECTED_HEADERS = "no_expected_headers"
    NO_EXPECTED_STRUCTURE = "no_expected_structure"
    CHAPTER_CONTENT_FOUND = "chapter_content_found"
    NARRATIVE_PROSE_FOUND = "narrative_prose_found"
    MAIN_BODY_CONTENT_FOUND = "main_body_content_found"
    INSUFFICIENT_CONTENT = "insufficient_content"
    AMBIGUOUS_PATTERNS = "ambiguous_patterns"


@dataclass(frozen=True)
class Verified:
    """Region content matches the expected patterns."""

    confidence: float
    matched_patterns: tuple[str, ...]
    explanation: str


@dataclass(frozen=True)
class Failed:
    """Region content does not match, or looks like body text."""

    reason: VerificationFailure
    explanation: str


@dataclass(frozen=True)
class NotApplicable:
    """No verification rules exist for this section type."""


VerificationResult = Verified | Failed | NotApplicable


# ============================================================================
# Phase C: heuristic detection
# ============================================================================


@dataclass(frozen=True)
class Found:
    """Heuristic detection located a section.

    boundary_line is the start line for start-anchored and closed sections,
    and the last front-matter line for front matter. end_line is set by
    detectors that also locate the end of a closed section.
    """

    boundary_line: int
    confidence: float
    matched_patterns: tuple[str, ...]
    explanation: str
    end_line: int | None = None


@dataclass(frozen=True)
class NotFound:
    """Heuristic detection found nothing it trusts."""

    explanation: str


HeuristicDetectionResult = Found | NotFound


# ============================================================================
# Defense decisions
# ============================================================================


class DecisionSource(Enum):
    """Which path produced a removal."""

    AI = "ai"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class Remove:
    """Remove lines start_line..end_line (inclusive)."""

    start_line: int
    end_line: int
    confidence: float
    source: DecisionSource

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class Preserve:
    """Leave the document untouched for this section type.

    This is a correct outcome, not an error: the document has no such
    section, or no section could be confirmed safely.
    """

    reason: str


DefenseDecision = Remove | Preserve


# ============================================================================
# Pipeline steps and phases
# ============================================================================


class CleaningPhase(Enum):
    """Groups of steps whose confidences are averaged together."""

    SEMANTIC = "semantic"
    STRUCTURAL = "structural"
    REFERENCE = "reference"
    FINISHING = "finishing"
    OPTIMIZATION = "optimization"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class CleaningStep(Enum):
    """Cleaning pipeline steps, in default execution order."""

    REMOVE_PAGE_NUMBERS = "remove_page_numbers"
    REMOVE_HEADERS_FOOTERS = "remove_headers_footers"
    REMOVE_FRONT_MATTER = "remove_front_matter"
    REMOVE_TABLE_OF_CONTENTS = "remove_table_of_contents"
    REMOVE_BACK_MATTER = "remove_back_matter"
    REMOVE_INDEX = "remove_index"
    REMOVE_AUXILIARY_LISTS = "remove_auxiliary_lists"
    REMOVE_CITATIONS = "remove_citations"
    REMOVE_FOOTNOTES_ENDNOTES = "remove_footnotes_endnotes"
    CLEAN_SPECIAL_CHARACTERS = "clean_special_characters"
    REFLOW_PARAGRAPHS = "reflow_paragraphs"
    OPTIMIZE_PARAGRAPH_LENGTH = "optimize_paragraph_length"

    @property
    def phase(self) -> CleaningPhase:
        return _STEP_PHASES[self]

    @property
    def section_type(self) -> SectionType | None:
        """Section removed by this step, or None for rewriting steps."""
        return _STEP_SECTIONS.get(self)

    @property
    def is_multi_region(self) -> bool:
        """Whether a document can contain several regions of this kind."""
        return self in (
            CleaningStep.REMOVE_AUXILIARY_LISTS,
            CleaningStep.REMOVE_FOOTNOTES_ENDNOTES,
        )


_STEP_PHASES = {
    CleaningStep.REMOVE_PAGE_NUMBERS: CleaningPhase.SEMANTIC,
    CleaningStep.REMOVE_HEADERS_FOOTERS: CleaningPhase.SEMANTIC,
    CleaningStep.REMOVE_FRONT_MATTER: CleaningPhase.STRUCTURAL,
    CleaningStep.REMOVE_TABLE_OF_CONTENTS: CleaningPhase.STRUCTURAL,
    CleaningStep.REMOVE_BACK_MATTER: CleaningPhase.STRUCTURAL,
    CleaningStep.REMOVE_INDEX: CleaningPhase.STRUCTURAL,
    CleaningStep.REMOVE_AUXILIARY_LISTS: CleaningPhase.REFERENCE,
    CleaningStep.REMOVE_CITATIONS: CleaningPhase.REFERENCE,
    CleaningStep.REMOVE_FOOTNOTES_ENDNOTES: CleaningPhase.REFERENCE,
    CleaningStep.CLEAN_SPECIAL_CHARACTERS: CleaningPhase.FINISHING,
    CleaningStep.REFLOW_PARAGRAPHS: CleaningPhase.OPTIMIZATION,
    CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH: CleaningPhase.OPTIMIZATION,
}

_STEP_SECTIONS = {
    CleaningStep.REMOVE_FRONT_MATTER: SectionType.FRONT_MATTER,
    CleaningStep.REMOVE_TABLE_OF_CONTENTS: SectionType.TABLE_OF_CONTENTS,
    CleaningStep.REMOVE_BACK_MATTER: SectionType.BACK_MATTER,
    CleaningStep.REMOVE_INDEX: SectionType.INDEX,
    CleaningStep.REMOVE_AUXILIARY_LISTS: SectionType.AUXILIARY_LISTS,
    CleaningStep.REMOVE_FOOTNOTES_ENDNOTES: SectionType.FOOTNOTES_ENDNOTES,
}
