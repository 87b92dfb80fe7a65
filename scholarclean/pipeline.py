"""
Sequential cleaning pipeline.

Runs the configured CleaningSteps in order over one document. Each
removal step asks the defense chain for a decision on the *current* text
(line numbers from an earlier snapshot are never reused), applies it, and
records the step's confidence. Artifact steps remove page numbers,
running heads, citations and stray characters by pattern. Rewriting
steps reflow and split paragraphs without changing the word count.

Steps run strictly one after another. Cancellation is checked between
steps; a cancelled run raises CleaningCancelledError carrying the text as
of the last completed step.

Usage:
    >>> pipeline = CleaningPipeline(proposer, on_event=print)
    >>> result = pipeline.clean(text)
    >>> result.confidence.overall
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from scholarclean.artifacts import (
    ArtifactResult,
    clean_special_characters,
    remove_citations,
    remove_headers_footers,
    remove_page_numbers,
)
from scholarclean.confidence import ConfidenceTracker, PipelineConfidence
from scholarclean.config import CleaningConfig
from scholarclean.defense.chain import DefenseChain
from scholarclean.exceptions import (
    CleaningCancelledError,
    ConfigurationError,
    EmptyDocumentError,
)
from scholarclean.models import (
    CleaningStep,
    DecisionSource,
    DefenseDecision,
    Remove,
)
from scholarclean.rewriting import ParagraphReflower, ParagraphSplitter
from scholarclean.text_ops import TextOps

if TYPE_CHECKING:
    from scholarclean.proposers import BoundaryProposer, TextRewriter

logger = logging.getLogger(__name__)


@dataclass
class ProgressEvent:
    """Progress notification pushed to the on_event callback."""

    kind: Literal["step_started", "decision", "step_completed"]
    step: CleaningStep
    step_index: int
    total_steps: int
    decision: DefenseDecision | None = None
    confidence: float | None = None
    message: str = ""

    @property
    def progress(self) -> float:
        """Fraction of steps completed."""
        done = self.step_index + (1 if self.kind == "step_completed" else 0)
        return done / self.total_steps


@dataclass
class StepReport:
    """What one step did."""

    step: CleaningStep
    decisions: list[DefenseDecision] = field(default_factory=list)
    lines_removed: int = 0
    words_before: int = 0
    words_after: int = 0
    changes: int = 0
    confidence: float | None = None
    used_fallback: bool = False
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def removals(self) -> list[Remove]:
        return [d for d in self.decisions if isinstance(d, Remove)]


@dataclass
class CleaningResult:
    """Output of a cleaning run."""

    text: str
    steps: list[StepReport]
    confidence: PipelineConfidence
    original_word_count: int
    final_word_count: int
    processing_log: list[str] = field(default_factory=list)

    def step_report(self, step: CleaningStep) -> StepReport | None:
        for report in self.steps:
            if report.step is step:
                return report
        return None

    @property
    def removed_line_count(self) -> int:
        return sum(report.lines_removed for report in self.steps)


class CleaningPipeline:
    """Runs cleaning steps over a document, one at a time.

    Usage:
        >>> pipeline = CleaningPipeline(
        ...     StaticBoundaryProposer.from_yaml("proposals.yaml"),
        ...     config=load_config("cleaning.yaml"),
        ... )
        >>> result = pipeline.clean(ocr_text)
    """

    def __init__(
        self,
        proposer: BoundaryProposer | None = None,
        *,
        rewriter: TextRewriter | None = None,
        config: CleaningConfig | None = None,
        text_ops: TextOps | None = None,
        chain: DefenseChain | None = None,
        on_event: Callable[[ProgressEvent], None] | None = None,
    ):
        """Initialize pipeline.

        Args:
            proposer: Boundary proposer passed to the default chain.
            rewriter: Optional AI rewriter for reflow and paragraph splitting.
            config: Cleaning configuration.
            text_ops: Line/word utilities.
            chain: Defense chain; built from proposer and config if omitted.
            on_event: Callback receiving ProgressEvents.
        """
        self.config = config or CleaningConfig()
        self.text_ops = text_ops or TextOps()
        self.chain = chain or DefenseChain(proposer, text_ops=self.text_ops, config=self.config)
        self.reflower = ParagraphReflower(rewriter, self.config.rewrite, self.text_ops)
        self.splitter = ParagraphSplitter(rewriter, self.config.rewrite, self.text_ops)
        self.on_event = on_event
        self._cancel_requested = False

    def cancel(self) -> None:
        """Request cancellation; takes effect before the next step."""
        self._cancel_requested = True

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def clean(self, text: str) -> CleaningResult:
        """Run every configured step over text.

        Args:
            text: OCR'd document text.

        Returns:
            CleaningResult with the cleaned text and per-step reports.

        Raises:
            EmptyDocumentError: If text is empty or whitespace.
            ConfigurationError: If no steps are enabled.
            CleaningCancelledError: If cancel() was called during the run.
        """
        if not text or not text.strip():
            raise EmptyDocumentError("Document has no text to clean")
        steps = self.config.steps
        if not steps:
            raise ConfigurationError("No cleaning steps enabled")

        self._cancel_requested = False
        tracker = ConfidenceTracker()
        processing_log: list[str] = []
        reports: list[StepReport] = []
        completed: list[CleaningStep] = []
        current = text
        total = len(steps)

        for index, step in enumerate(steps):
            if self._cancel_requested:
                logger.info(f"Cleaning cancelled before {step.value}")
                raise CleaningCancelledError(current, completed)

            self._emit(ProgressEvent("step_started", step, index, total))
            words_before = self.text_ops.count_words(current)

            try:
                report, updated = self._run_step(step, current, index, total, processing_log)
                tracker.record_step(step, report.confidence, used_fallback=report.used_fallback)
            except Exception as e:
                logger.warning(f"Step {step.value} failed: {e}")
                processing_log.append(f"{step.value}: failed ({e})")
                report = StepReport(step=step, error=str(e))
                updated = current
                tracker.record_step(step, None)

            report.words_before = words_before
            report.words_after = self.text_ops.count_words(updated)
            report.changes = self.text_ops.count_changes(current, updated)
            current = updated

            reports.append(report)
            completed.append(step)

            logger.info(
                f"Step {step.value} complete: {report.lines_removed} line(s) removed, "
                f"{report.changes} line change(s)"
            )
            self._emit(
                ProgressEvent(
                    "step_completed",
                    step,
                    index,
                    total,
                    confidence=report.confidence,
                    message=report.error or "",
                )
            )

        return CleaningResult(
            text=current,
            steps=reports,
            confidence=tracker.pipeline_confidence(),
            original_word_count=self.text_ops.count_words(text),
            final_word_count=self.text_ops.count_words(current),
            processing_log=processing_log,
        )

    def _run_step(
        self,
        step: CleaningStep,
        text: str,
        index: int,
        total: int,
        processing_log: list[str],
    ) -> tuple[StepReport, str]:
        if step is CleaningStep.REFLOW_PARAGRAPHS:
            return self._rewrite_step(step, self.reflower.reflow(text), processing_log)
        if step is CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH:
            return self._rewrite_step(step, self.splitter.optimize(text), processing_log)
        if step.section_type is None:
            return self._artifact_step(step, text, processing_log)
        return self._removal_step(step, text, index, total, processing_log)

    def _removal_step(
        self,
        step: CleaningStep,
        text: str,
        index: int,
        total: int,
        processing_log: list[str],
    ) -> tuple[StepReport, str]:
        section_type = step.section_type
        report = StepReport(step=step)
        passes = self.config.max_section_passes if step.is_multi_region else 1
        confidences: list[float] = []

        for _ in range(passes):
            # Re-detect on the current text every pass
            outcome = self.chain.run(section_type, text)
            processing_log.extend(outcome.processing_log)
            decision = outcome.decision
            report.decisions.append(decision)
            self._emit(
                ProgressEvent(
                    "decision",
                    step,
                    index,
                    total,
                    decision=decision,
                    confidence=outcome.confidence,
                )
            )

            if not isinstance(decision, Remove):
                break

            text = self.text_ops.remove_lines(text, decision.start_line, decision.end_line)
            report.lines_removed += decision.line_count
            confidences.append(decision.confidence)
            if decision.source is DecisionSource.HEURISTIC:
                report.used_fallback = True

        if confidences:
            report.confidence = sum(confidences) / len(confidences)
        return report, text

    def _artifact_step(
        self, step: CleaningStep, text: str, processing_log: list[str]
    ) -> tuple[StepReport, str]:
        artifacts = self.config.artifacts
        removes_lines = True
        if step is CleaningStep.REMOVE_PAGE_NUMBERS:
            result = remove_page_numbers(text, artifacts.page_number_patterns)
        elif step is CleaningStep.REMOVE_HEADERS_FOOTERS:
            result = remove_headers_footers(
                text, artifacts.header_patterns, artifacts.footer_patterns
            )
        elif step is CleaningStep.REMOVE_CITATIONS:
            result = remove_citations(text)
            removes_lines = False
        elif step is CleaningStep.CLEAN_SPECIAL_CHARACTERS:
            result = clean_special_characters(text, artifacts.special_characters)
            removes_lines = False
        else:
            raise ValueError(f"No handler for step {step.value}")

        report = StepReport(step=step, confidence=self._artifact_confidence(step, result))
        if removes_lines:
            report.lines_removed = result.changes
        if result.changed:
            processing_log.append(f"{step.value}: {result.changes} change(s)")
        return report, result.text

    def _artifact_confidence(self, step: CleaningStep, result: ArtifactResult) -> float | None:
        # Deterministic line and character passes carry no confidence of their own
        if step is CleaningStep.REMOVE_CITATIONS and result.changed:
            return self.config.artifacts.citation_confidence
        return None

    @staticmethod
    def _rewrite_step(step: CleaningStep, result, processing_log: list[str]) -> tuple[StepReport, str]:
        for warning in result.warnings:
            processing_log.append(f"{step.value}: {warning}")
        report = StepReport(
            step=step,
            confidence=result.confidence,
            used_fallback=result.used_fallback,
            warnings=list(result.warnings),
        )
        return report, result.text

    def _emit(self, event: ProgressEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)
