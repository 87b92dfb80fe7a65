"""Per-section-type safety envelopes.

Each removable section type has a fixed ValidationConstraints row used by
the position/size validator. The values are empirically tuned safety
margins and are module constants, never configuration: loosening any of
them widens what a hallucinated proposal can delete.

The heuristic detector scans inside its own position windows, which sit
inside (or equal to) the validator's envelope for the same type.
"""

from __future__ import annotations

from dataclasses import dataclass

from scholarclean.models import AnchorMode, SectionType


@dataclass(frozen=True)
class ValidationConstraints:
    """Position/size envelope for one section type.

    Attributes:
        section_type: Type these constraints apply to.
        anchor: How start/end lines are interpreted.
        min_start_percent: Earliest allowed start, as a fraction of lines.
        max_end_percent: Latest allowed end, as a fraction of lines.
        max_removal_percent: Largest fraction of the document to remove.
        min_confidence: Lowest accepted proposal confidence.
        min_lines: Smallest plausible section size in lines.
        early_max_removal_percent: Removal ceiling for sections starting
            before early_start_cutoff (footnotes only).
        early_start_cutoff: Start fraction below which the early ceiling applies.
    """

    section_type: SectionType
    anchor: AnchorMode
    min_start_percent: float | None = None
    max_end_percent: float | None = None
    max_removal_percent: float = 1.0
    min_confidence: float = 0.5
    min_lines: int = 1
    early_max_removal_percent: float | None = None
    early_start_cutoff: float = 0.5

    def removal_ceiling(self, start_percent: float) -> float:
        """Maximum removal fraction for a section starting at start_percent."""
        if self.early_max_removal_percent is not None and start_percent < self.early_start_cutoff:
            return self.early_max_removal_percent
        return self.max_removal_percent


FRONT_MATTER_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.FRONT_MATTER,
    anchor=AnchorMode.END_ANCHORED,
    max_end_percent=0.40,
    max_removal_percent=0.40,
    min_confidence=0.60,
    min_lines=3,
)

TABLE_OF_CONTENTS_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.TABLE_OF_CONTENTS,
    anchor=AnchorMode.CLOSED,
    max_end_percent=0.35,
    max_removal_percent=0.20,
    min_confidence=0.60,
    min_lines=5,
)

AUXILIARY_LISTS_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.AUXILIARY_LISTS,
    anchor=AnchorMode.CLOSED,
    max_end_percent=0.40,
    max_removal_percent=0.15,
    min_confidence=0.65,
    min_lines=3,
)

INDEX_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.INDEX,
    anchor=AnchorMode.START_ANCHORED,
    min_start_percent=0.60,
    max_removal_percent=0.25,
    min_confidence=0.65,
    min_lines=10,
)

BACK_MATTER_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.BACK_MATTER,
    anchor=AnchorMode.START_ANCHORED,
    min_start_percent=0.50,
    max_removal_percent=0.45,
    min_confidence=0.70,
    min_lines=5,
)

# Early notes blocks should only ever be small per-chapter notes
FOOTNOTES_ENDNOTES_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.FOOTNOTES_ENDNOTES,
    anchor=AnchorMode.CLOSED,
    max_removal_percent=0.12,
    min_confidence=0.70,
    min_lines=4,
    early_max_removal_percent=0.05,
    early_start_cutoff=0.50,
)

OTHER_CONSTRAINTS = ValidationConstraints(
    section_type=SectionType.OTHER,
    anchor=AnchorMode.CLOSED,
    max_removal_percent=0.50,
    min_confidence=0.50,
    min_lines=1,
)


CONSTRAINTS: dict[SectionType, ValidationConstraints] = {
    SectionType.FRONT_MATTER: FRONT_MATTER_CONSTRAINTS,
    SectionType.TABLE_OF_CONTENTS: TABLE_OF_CONTENTS_CONSTRAINTS,
    SectionType.AUXILIARY_LISTS: AUXILIARY_LISTS_CONSTRAINTS,
    SectionType.INDEX: INDEX_CONSTRAINTS,
    SectionType.BACK_MATTER: BACK_MATTER_CONSTRAINTS,
    SectionType.FOOTNOTES_ENDNOTES: FOOTNOTES_ENDNOTES_CONSTRAINTS,
    SectionType.OTHER: OTHER_CONSTRAINTS,
}


def get_constraints(section_type: SectionType) -> ValidationConstraints:
    """Look up the constraints for a section type.

    Args:
        section_type: Section type to look up.

    Returns:
        The fixed ValidationConstraints row for that type.
    """
    return CONSTRAINTS[section_type]


# Heuristic scan windows (fractions of total document lines)
HEURISTIC_BACK_MATTER_MIN_START = 0.50
HEURISTIC_BACK_MATTER_EDGE = 0.55
HEURISTIC_INDEX_MIN_START = 0.70
HEURISTIC_FRONT_MATTER_MAX_END = 0.30
HEURISTIC_TOC_MAX_END = 0.30
HEURISTIC_AUXILIARY_MAX_END = 0.40
