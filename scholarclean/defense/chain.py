"""
Defense chain orchestration.

For one section type and the current document text, the chain produces a
single DefenseDecision:

1. Ask the boundary proposer for a BoundaryInfo (skipped when there is no
   proposer or it fails).
2. Phase A, position/size validation. Invalid goes to step 4.
3. Phase B, content verification. Failed goes to step 4; otherwise the
   proposal is removed (source AI).
4. Phase C, heuristic detection. A detected region is re-checked against
   the Phase A envelope and removed (source HEURISTIC); anything else
   preserves the document.

Nothing is ever removed without passing A+B or C plus the envelope check.
Preserve is a correct outcome, never an error.

Usage:
    >>> chain = DefenseChain(proposer)
    >>> decision = chain.resolve_section(SectionType.BACK_MATTER, text)
    >>> if isinstance(decision, Remove):
    ...     text = chain.text_ops.remove_lines(text, decision.start_line, decision.end_line)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from scholarclean.config import CleaningConfig
from scholarclean.defense.constraints import get_constraints
from scholarclean.defense.heuristics import HeuristicDetectionStats, HeuristicDetector
from scholarclean.defense.validation import BoundaryValidationStats, BoundaryValidator
from scholarclean.defense.verification import ContentVerificationStats, ContentVerifier
from scholarclean.exceptions import ProposerError
from scholarclean.models import (
    AnchorMode,
    BoundaryInfo,
    DecisionSource,
    DefenseDecision,
    Failed,
    Found,
    HeuristicDetectionResult,
    Invalid,
    NoBoundary,
    NotFound,
    Preserve,
    Remove,
    SectionType,
    Valid,
    ValidationResult,
    VerificationResult,
)
from scholarclean.text_ops import TextOps

if TYPE_CHECKING:
    from scholarclean.proposers import BoundaryProposer

logger = logging.getLogger(__name__)

MULTI_REGION_TYPES = frozenset({SectionType.AUXILIARY_LISTS, SectionType.FOOTNOTES_ENDNOTES})


@dataclass
class DefenseOutcome:
    """Decision for one section type plus everything that led to it."""

    section_type: SectionType
    decision: DefenseDecision
    proposal: BoundaryInfo | None = None
    validation: ValidationResult | None = None
    verification: VerificationResult | None = None
    heuristic: HeuristicDetectionResult | None = None
    processing_log: list[str] = field(default_factory=list)

    @property
    def confidence(self) -> float | None:
        """Confidence of the removal, or None when nothing is removed."""
        if isinstance(self.decision, Remove):
            return self.decision.confidence
        return None


class DefenseChain:
    """Runs the three defense phases for one section type at a time.

    Components are injected so each phase can be replaced or tested on its
    own; defaults are built from the config.

    Usage:
        >>> chain = DefenseChain(UnavailableBoundaryProposer())
        >>> outcome = chain.run(SectionType.INDEX, text)
        >>> outcome.processing_log
    """

    def __init__(
        self,
        proposer: BoundaryProposer | None = None,
        *,
        text_ops: TextOps | None = None,
        validator: BoundaryValidator | None = None,
        verifier: ContentVerifier | None = None,
        detector: HeuristicDetector | None = None,
        config: CleaningConfig | None = None,
    ):
        """Initialize chain.

        Args:
            proposer: Source of AI boundary proposals. None skips straight
                to heuristic detection.
            text_ops: Line/word utilities.
            validator: Phase A validator.
            verifier: Phase B verifier.
            detector: Phase C detector.
            config: Cleaning configuration (sampling, verification and
                heuristic settings).
        """
        self.config = config or CleaningConfig()
        self.proposer = proposer
        self.text_ops = text_ops or TextOps()
        self.validator = validator or BoundaryValidator()
        self.verifier = verifier or ContentVerifier(self.config.verification)
        self.detector = detector or HeuristicDetector(self.config.heuristics)

        self.validation_stats = BoundaryValidationStats()
        self.verification_stats = ContentVerificationStats()
        self.heuristic_stats = HeuristicDetectionStats()

    def resolve_section(self, section_type: SectionType, text: str) -> DefenseDecision:
        """Decide whether and what to remove for section_type."""
        return self.run(section_type, text).decision

    def run(self, section_type: SectionType, text: str) -> DefenseOutcome:
        """Run the full chain and keep every intermediate result.

        Args:
            section_type: Section type to resolve.
            text: Current document text. Line numbers in the result refer
                to this text only.

        Returns:
            DefenseOutcome with the decision and phase results.
        """
        outcome = DefenseOutcome(section_type=section_type, decision=Preserve("undecided"))
        log = outcome.processing_log
        name = section_type.display_name
        n = self.text_ops.count_lines(text)

        if n == 0:
            return self._finish(outcome, Preserve("Document is empty"))

        # Step 1: AI proposal
        proposal = self._request_proposal(section_type, text, n, log)
        outcome.proposal = proposal

        if proposal is not None:
            # Step 2: Phase A
            validation = self.validator.validate(proposal, section_type, n)
            self.validation_stats.record(section_type, validation)
            outcome.validation = validation

            if isinstance(validation, NoBoundary):
                log.append(f"{name}: proposer reports no section")
                return self._finish(outcome, Preserve(f"No {name.lower()} proposed"))

            if isinstance(validation, Invalid):
                log.append(f"Phase A rejected proposal: {validation.reason.value} ({validation.explanation})")
            elif isinstance(validation, Valid):
                start, end = self.validator.resolve_region(proposal, section_type, n)
                log.append(f"Phase A passed: lines {start}-{end}")

                # Step 3: Phase B
                verification = self.verifier.verify(section_type, text, start, end)
                self.verification_stats.record(section_type, verification)
                outcome.verification = verification

                if isinstance(verification, Failed):
                    log.append(
                        f"Phase B rejected proposal: {verification.reason.value} "
                        f"({verification.explanation})"
                    )
                else:
                    log.append(f"Phase B passed: {type(verification).__name__}")
                    decision = Remove(start, end, proposal.confidence, DecisionSource.AI)
                    return self._finish(outcome, decision)

        # Step 4: Phase C
        return self._finish(outcome, self._heuristic_decision(section_type, text, n, outcome))

    def _request_proposal(
        self, section_type: SectionType, text: str, n: int, log: list[str]
    ) -> BoundaryInfo | None:
        if self.proposer is None:
            log.append("No proposer configured")
            return None

        sample, offset = self._sample(section_type, text)
        try:
            proposal = self.proposer.propose(sample, section_type)
        except ProposerError as e:
            logger.warning(f"Proposer {self.proposer.name} failed for {section_type.value}: {e}")
            log.append(f"Proposer unavailable: {e}")
            return None
        except Exception as e:
            logger.warning(
                f"Proposer {self.proposer.name} raised unexpectedly for {section_type.value}: {e}"
            )
            log.append(f"Proposer error: {e}")
            return None

        proposal = proposal.shifted(offset)
        anchor = get_constraints(section_type).anchor
        if anchor is AnchorMode.START_ANCHORED and proposal.start_line is not None:
            proposal = replace(proposal, end_line=n - 1)

        log.append(
            f"Proposal: start={proposal.start_line}, end={proposal.end_line}, "
            f"confidence={proposal.confidence:.2f}"
        )
        return proposal

    def _sample(self, section_type: SectionType, text: str) -> tuple[str, int]:
        sampling = self.config.sampling
        if section_type is SectionType.BACK_MATTER:
            return self.text_ops.tail(text, sampling.back_matter_sample_lines)
        if section_type is SectionType.INDEX:
            return self.text_ops.tail(text, sampling.index_sample_lines)
        return self.text_ops.head(text, sampling.head_sample_lines), 0

    def _heuristic_decision(
        self, section_type: SectionType, text: str, n: int, outcome: DefenseOutcome
    ) -> DefenseDecision:
        log = outcome.processing_log
        result = self.detector.detect(section_type, text)
        self.heuristic_stats.record(section_type, result)
        outcome.heuristic = result

        if isinstance(result, NotFound):
            log.append(f"Phase C found nothing: {result.explanation}")
            return Preserve(result.explanation)

        log.append(f"Phase C: {result.explanation} (confidence {result.confidence:.2f})")
        if section_type in MULTI_REGION_TYPES:
            candidates = self.detector.detect_all(section_type, text)
        else:
            candidates = [result]

        rejection = "no usable heuristic boundary"
        for found in candidates:
            boundary = self._heuristic_boundary(section_type, found)
            if boundary is None:
                continue
            check = self.validator.validate(boundary, section_type, n, enforce_confidence=False)
            if isinstance(check, Valid):
                start, end = self.validator.resolve_region(boundary, section_type, n)
                outcome.heuristic = found
                return Remove(start, end, found.confidence, DecisionSource.HEURISTIC)
            if isinstance(check, Invalid):
                rejection = check.explanation
                log.append(f"Heuristic boundary rejected: {check.reason.value} ({check.explanation})")

        return Preserve(f"Heuristic boundary rejected: {rejection}")

    @staticmethod
    def _heuristic_boundary(section_type: SectionType, found: Found) -> BoundaryInfo | None:
        anchor = get_constraints(section_type).anchor
        if anchor is AnchorMode.END_ANCHORED:
            return BoundaryInfo(start_line=0, end_line=found.boundary_line, confidence=found.confidence)
        if anchor is AnchorMode.START_ANCHORED:
            return BoundaryInfo(start_line=found.boundary_line, confidence=found.confidence)
        if found.end_line is None:
            return None
        return BoundaryInfo(
            start_line=found.boundary_line, end_line=found.end_line, confidence=found.confidence
        )

    @staticmethod
    def _finish(outcome: DefenseOutcome, decision: DefenseDecision) -> DefenseOutcome:
        outcome.decision = decision
        name = outcome.section_type.display_name
        if isinstance(decision, Remove):
            message = (
                f"{name}: remove lines {decision.start_line}-{decision.end_line} "
                f"(confidence {decision.confidence:.2f}, source {decision.source.value})"
            )
        else:
            message = f"{name}: preserve ({decision.reason})"
        outcome.processing_log.append(message)
        logger.info(message)
        return outcome

    def stats_summary(self) -> str:
        return "\n".join(
            [
                self.validation_stats.summary(),
                self.verification_stats.summary(),
                self.heuristic_stats.summary(),
            ]
        )
