"""
Confidence bookkeeping for a cleaning run.

Each executed step records the confidence of what it did: the accepted
boundary's confidence for removal steps, the rewrite confidence for text
steps. A step that removed nothing records None, and None is never turned
into zero: averaging a zero in would make "nothing to remove" look like a
bad removal.

Step confidences are averaged per CleaningPhase, and phase confidences
into a pipeline confidence, skipping absent values at both levels.

Usage:
    >>> tracker = ConfidenceTracker()
    >>> tracker.record_step(CleaningStep.REMOVE_BACK_MATTER, 0.8)
    >>> tracker.record_step(CleaningStep.REMOVE_INDEX, None)
    >>> tracker.pipeline_confidence().overall
    0.8
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from scholarclean.models import CleaningPhase, CleaningStep


class ConfidenceRating(Enum):
    """Human-readable confidence bands."""

    VERY_HIGH = "Very High"
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    VERY_LOW = "Very Low"

    @classmethod
    def from_confidence(cls, confidence: float) -> ConfidenceRating:
        if confidence >= 0.9:
            return cls.VERY_HIGH
        if confidence >= 0.75:
            return cls.HIGH
        if confidence >= 0.6:
            return cls.MODERATE
        if confidence >= 0.4:
            return cls.LOW
        return cls.VERY_LOW


def _mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


@dataclass
class PhaseConfidence:
    """Aggregated confidence for one phase."""

    phase: CleaningPhase
    confidence: float | None
    step_confidences: dict[CleaningStep, float] = field(default_factory=dict)
    fallback_steps: list[CleaningStep] = field(default_factory=list)

    @property
    def rating(self) -> ConfidenceRating | None:
        if self.confidence is None:
            return None
        return ConfidenceRating.from_confidence(self.confidence)


@dataclass
class PipelineConfidence:
    """Aggregated confidence for a whole cleaning run."""

    overall: float | None
    phases: list[PhaseConfidence] = field(default_factory=list)
    fallback_steps: list[CleaningStep] = field(default_factory=list)

    @property
    def rating(self) -> ConfidenceRating | None:
        if self.overall is None:
            return None
        return ConfidenceRating.from_confidence(self.overall)

    @property
    def used_fallback(self) -> bool:
        return bool(self.fallback_steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "rating": self.rating.value if self.rating else None,
            "phases": {
                phase.phase.value: {
                    "confidence": phase.confidence,
                    "steps": {s.value: c for s, c in phase.step_confidences.items()},
                }
                for phase in self.phases
            },
            "fallback_steps": [s.value for s in self.fallback_steps],
        }


class ConfidenceTracker:
    """Collects step confidences during one cleaning run."""

    def __init__(self):
        self._steps: dict[CleaningStep, float] = {}
        self._executed: list[CleaningStep] = []
        self._fallbacks: list[CleaningStep] = []

    def record_step(
        self, step: CleaningStep, confidence: float | None, *, used_fallback: bool = False
    ) -> None:
        """Record the outcome of one executed step.

        Args:
            step: Step that ran.
            confidence: Confidence of what the step did, or None if it
                changed nothing.
            used_fallback: Whether a heuristic fallback produced the result.
        """
        if step not in self._executed:
            self._executed.append(step)
        if confidence is not None:
            if not 0.0 <= confidence <= 1.0:
                raise ValueError(f"confidence must be between 0.0 and 1.0, got {confidence}")
            self._steps[step] = confidence
        if used_fallback and step not in self._fallbacks:
            self._fallbacks.append(step)

    def step_confidence(self, step: CleaningStep) -> float | None:
        return self._steps.get(step)

    @property
    def executed_steps(self) -> list[CleaningStep]:
        return list(self._executed)

    def phase_confidence(self, phase: CleaningPhase) -> PhaseConfidence:
        """Average of recorded step confidences in phase (None if none)."""
        steps = {s: c for s, c in self._steps.items() if s.phase is phase}
        return PhaseConfidence(
            phase=phase,
            confidence=_mean(list(steps.values())),
            step_confidences=steps,
            fallback_steps=[s for s in self._fallbacks if s.phase is phase],
        )

    def pipeline_confidence(self) -> PipelineConfidence:
        """Average of present phase confidences."""
        phases = [self.phase_confidence(phase) for phase in CleaningPhase]
        present = [p.confidence for p in phases if p.confidence is not None]
        return PipelineConfidence(
            overall=_mean(present),
            phases=phases,
            fallback_steps=list(self._fallbacks),
        )

    def reset(self) -> None:
        self._steps.clear()
        self._executed.clear()
        self._fallbacks.clear()
