"""Tests for step, phase and pipeline confidence aggregation."""

import pytest

from scholarclean.confidence import ConfidenceRating, ConfidenceTracker
from scholarclean.models import CleaningPhase, CleaningStep


class TestConfidenceRating:
    """Test confidence bands."""

    @pytest.mark.parametrize(
        "confidence,rating",
        [
            (0.95, ConfidenceRating.VERY_HIGH),
            (0.9, ConfidenceRating.VERY_HIGH),
            (0.8, ConfidenceRating.HIGH),
            (0.65, ConfidenceRating.MODERATE),
            (0.5, ConfidenceRating.LOW),
            (0.1, ConfidenceRating.VERY_LOW),
        ],
    )
    def test_bands(self, confidence, rating):
        """Confidences map onto bands."""
        assert ConfidenceRating.from_confidence(confidence) is rating


class TestConfidenceTracker:
    """Test ConfidenceTracker."""

    def test_absent_is_not_zero(self):
        """A step that removed nothing does not drag the average down."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_BACK_MATTER, 0.8)
        tracker.record_step(CleaningStep.REMOVE_INDEX, None)
        phase = tracker.phase_confidence(CleaningPhase.STRUCTURAL)
        assert phase.confidence == pytest.approx(0.8)
        assert tracker.step_confidence(CleaningStep.REMOVE_INDEX) is None

    def test_executed_steps_include_absent(self):
        """Steps with no confidence still count as executed."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_INDEX, None)
        assert tracker.executed_steps == [CleaningStep.REMOVE_INDEX]

    def test_phase_mean(self):
        """Phase confidence is the mean of its steps."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_FRONT_MATTER, 1.0)
        tracker.record_step(CleaningStep.REMOVE_BACK_MATTER, 0.6)
        assert tracker.phase_confidence(CleaningPhase.STRUCTURAL).confidence == pytest.approx(0.8)

    def test_pipeline_mean_of_phases(self):
        """Pipeline confidence averages phases, not steps."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_FRONT_MATTER, 1.0)
        tracker.record_step(CleaningStep.REMOVE_BACK_MATTER, 1.0)
        tracker.record_step(CleaningStep.REFLOW_PARAGRAPHS, 0.7)
        pipeline = tracker.pipeline_confidence()
        assert pipeline.overall == pytest.approx(0.85)
        assert pipeline.rating is ConfidenceRating.HIGH

    def test_nothing_recorded(self):
        """No confidences means no overall confidence and no rating."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_INDEX, None)
        pipeline = tracker.pipeline_confidence()
        assert pipeline.overall is None
        assert pipeline.rating is None
        assert all(phase.rating is None for phase in pipeline.phases)

    def test_fallback_tracking(self):
        """Fallback steps are reported per phase and overall."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REFLOW_PARAGRAPHS, 0.7, used_fallback=True)
        pipeline = tracker.pipeline_confidence()
        assert pipeline.used_fallback
        assert pipeline.fallback_steps == [CleaningStep.REFLOW_PARAGRAPHS]
        optimization = tracker.phase_confidence(CleaningPhase.OPTIMIZATION)
        assert optimization.fallback_steps == [CleaningStep.REFLOW_PARAGRAPHS]

    @pytest.mark.parametrize("confidence", [-0.1, 1.1])
    def test_out_of_range(self, confidence):
        """Confidences outside [0, 1] are rejected."""
        with pytest.raises(ValueError, match="between 0.0 and 1.0"):
            ConfidenceTracker().record_step(CleaningStep.REMOVE_INDEX, confidence)

    def test_reset(self):
        """reset() clears everything."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_INDEX, 0.9, used_fallback=True)
        tracker.reset()
        assert tracker.executed_steps == []
        assert tracker.pipeline_confidence().overall is None

    def test_to_dict(self):
        """Serialized form uses enum values."""
        tracker = ConfidenceTracker()
        tracker.record_step(CleaningStep.REMOVE_INDEX, 0.9)
        data = tracker.pipeline_confidence().to_dict()
        assert data["overall"] == pytest.approx(0.9)
        assert data["rating"] == "Very High"
        assert data["phases"]["structural"]["steps"] == {"remove_index": 0.9}
        assert data["phases"]["reference"]["confidence"] is None
