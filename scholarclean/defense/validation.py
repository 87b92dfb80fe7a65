"""
Position/size validation of boundary proposals.

This is the first gate every AI proposal passes through. It knows nothing
about the document's content: it only checks that the proposed region sits
where that section type can plausibly sit, is neither too large nor too
small, and was proposed with enough confidence.

The position rule for back matter is the one that stops a proposal such as
"back matter starts at line 4 of 500" from deleting the whole book.

Usage:
    >>> validator = BoundaryValidator()
    >>> result = validator.validate(
    ...     BoundaryInfo(start_line=4, confidence=0.9), SectionType.BACK_MATTER, 500
    ... )
    >>> result.reason
    <RejectionReason.POSITION_TOO_EARLY: 'position_too_early'>
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from scholarclean.defense.constraints import ValidationConstraints, get_constraints
from scholarclean.models import (
    AnchorMode,
    BoundaryInfo,
    Invalid,
    NoBoundary,
    RejectionReason,
    SectionType,
    Valid,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def _pct(fraction: float) -> str:
    return f"{fraction * 100:.1f}%"


class BoundaryValidator:
    """Checks proposals against the per-type ValidationConstraints.

    Checks run in a fixed order and stop at the first failure:
    no boundary, bounds, range, position, removal size, minimum size,
    confidence.
    """

    def validate(
        self,
        boundary: BoundaryInfo,
        section_type: SectionType,
        document_line_count: int,
        *,
        enforce_confidence: bool = True,
    ) -> ValidationResult:
        """Validate one proposal.

        Args:
            boundary: Proposed region (untrusted).
            section_type: Section the region claims to be.
            document_line_count: Total lines in the current document text.
            enforce_confidence: Apply the minimum confidence check. The
                defense chain turns this off when re-checking heuristic
                boundaries, which carry their own threshold.

        Returns:
            Valid, Invalid(reason, explanation) or NoBoundary.
        """
        constraints = get_constraints(section_type)
        name = section_type.display_name
        n = document_line_count

        if self._is_missing(boundary, constraints.anchor):
            logger.debug(f"{name}: no boundary proposed")
            return NoBoundary()

        # Bounds
        for label, line in (("start", boundary.start_line), ("end", boundary.end_line)):
            if line is not None and not 0 <= line < n:
                return self._reject(
                    section_type,
                    RejectionReason.OUT_OF_BOUNDS,
                    f"{name} {label} line {line} is outside document of {n} lines",
                )

        # Range
        if (
            boundary.start_line is not None
            and boundary.end_line is not None
            and boundary.start_line > boundary.end_line
        ):
            return self._reject(
                section_type,
                RejectionReason.INVALID_RANGE,
                f"{name} start line {boundary.start_line} is after end line {boundary.end_line}",
            )

        start, end = self._region(boundary, constraints.anchor, n)
        start_pct = start / n
        end_pct = end / n
        removed = end - start + 1
        removal_pct = removed / n

        # Position
        if constraints.min_start_percent is not None and start_pct < constraints.min_start_percent:
            if section_type is SectionType.BACK_MATTER:
                explanation = (
                    f"CRITICAL: Back matter start at line {start} ({_pct(start_pct)}) is before "
                    f"minimum {constraints.min_start_percent * 100:.0f}% of document. "
                    f"This would delete {_pct(removal_pct)} of content"
                )
            else:
                explanation = (
                    f"{name} start at line {start} ({_pct(start_pct)}) is before minimum "
                    f"{constraints.min_start_percent * 100:.0f}% of document"
                )
            return self._reject(section_type, RejectionReason.POSITION_TOO_EARLY, explanation)

        if constraints.max_end_percent is not None and end_pct > constraints.max_end_percent:
            return self._reject(
                section_type,
                RejectionReason.POSITION_TOO_LATE,
                f"{name} end at line {end} ({_pct(end_pct)}) is after maximum "
                f"{constraints.max_end_percent * 100:.0f}% of document",
            )

        # Removal size
        ceiling = constraints.removal_ceiling(start_pct)
        if removal_pct > ceiling:
            return self._reject(
                section_type,
                RejectionReason.EXCESSIVE_REMOVAL,
                f"{name} removal of {removed} lines ({_pct(removal_pct)}) exceeds maximum "
                f"{_pct(ceiling)} of document",
            )

        # Minimum size
        if removed < constraints.min_lines:
            return self._reject(
                section_type,
                RejectionReason.SECTION_TOO_SMALL,
                f"{name} section of {removed} lines is smaller than minimum "
                f"{constraints.min_lines} lines",
            )

        # Confidence
        if not (math.isfinite(boundary.confidence) and 0.0 <= boundary.confidence <= 1.0):
            return self._reject(
                section_type,
                RejectionReason.LOW_CONFIDENCE,
                f"{name} confidence {boundary.confidence} is not a number between 0.0 and 1.0",
            )

        if enforce_confidence and boundary.confidence < constraints.min_confidence:
            return self._reject(
                section_type,
                RejectionReason.LOW_CONFIDENCE,
                f"{name} confidence {boundary.confidence:.2f} is below minimum "
                f"{constraints.min_confidence:.2f}",
            )

        logger.debug(
            f"{name}: lines {start}-{end} valid ({_pct(start_pct)}-{_pct(end_pct)}, "
            f"removing {_pct(removal_pct)})"
        )
        return Valid()

    def resolve_region(
        self, boundary: BoundaryInfo, section_type: SectionType, document_line_count: int
    ) -> tuple[int, int]:
        """Concrete inclusive (start, end) a validated boundary removes."""
        return self._region(boundary, get_constraints(section_type).anchor, document_line_count)

    @staticmethod
    def _is_missing(boundary: BoundaryInfo, anchor: AnchorMode) -> bool:
        if anchor is AnchorMode.END_ANCHORED:
            return boundary.end_line is None
        if anchor is AnchorMode.START_ANCHORED:
            return boundary.start_line is None
        return boundary.start_line is None or boundary.end_line is None

    @staticmethod
    def _region(boundary: BoundaryInfo, anchor: AnchorMode, n: int) -> tuple[int, int]:
        if anchor is AnchorMode.END_ANCHORED:
            return 0, boundary.end_line
        if anchor is AnchorMode.START_ANCHORED:
            end = n - 1 if boundary.end_line is None else boundary.end_line
            return boundary.start_line, end
        return boundary.start_line, boundary.end_line

    @staticmethod
    def _reject(section_type: SectionType, reason: RejectionReason, explanation: str) -> Invalid:
        logger.warning(f"Boundary rejected [{section_type.value}] {reason.value}: {explanation}")
        return Invalid(reason=reason, explanation=explanation)


@dataclass
class BoundaryValidationStats:
    """Running totals of validation outcomes."""

    total: int = 0
    passed: int = 0
    rejected: int = 0
    no_boundary: int = 0
    rejections_by_reason: dict[RejectionReason, int] = field(default_factory=dict)
    rejections_by_section: dict[SectionType, int] = field(default_factory=dict)

    def record(self, section_type: SectionType, result: ValidationResult) -> None:
        self.total += 1
        if isinstance(result, Valid):
            self.passed += 1
        elif isinstance(result, NoBoundary):
            self.no_boundary += 1
        elif isinstance(result, Invalid):
            self.rejected += 1
            self.rejections_by_reason[result.reason] = (
                self.rejections_by_reason.get(result.reason, 0) + 1
            )
            self.rejections_by_section[section_type] = (
                self.rejections_by_section.get(section_type, 0) + 1
            )

    @property
    def pass_rate(self) -> float:
        """Fraction of checked boundaries that passed (1.0 if none checked)."""
        checked = self.passed + self.rejected
        if checked == 0:
            return 1.0
        return self.passed / checked

    def summary(self) -> str:
        lines = [
            f"Boundary validation: {self.passed}/{self.passed + self.rejected} passed "
            f"({self.pass_rate:.0%}), {self.no_boundary} without boundary"
        ]
        for reason, count in sorted(self.rejections_by_reason.items(), key=lambda kv: kv[0].value):
            lines.append(f"  {reason.value}: {count}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "rejected": self.rejected,
            "no_boundary": self.no_boundary,
            "pass_rate": self.pass_rate,
            "rejections_by_reason": {r.value: c for r, c in self.rejections_by_reason.items()},
            "rejections_by_section": {s.value: c for s, c in self.rejections_by_section.items()},
        }
