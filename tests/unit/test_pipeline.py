"""Tests for the sequential cleaning pipeline."""

import pytest
from helpers import book_with_chapter_notes, join

from scholarclean.config import ArtifactConfig, CleaningConfig
from scholarclean.defense.chain import DefenseChain, DefenseOutcome
from scholarclean.exceptions import (
    CleaningCancelledError,
    ConfigurationError,
    EmptyDocumentError,
)
from scholarclean.models import CleaningStep, DecisionSource, Preserve, Remove
from scholarclean.pipeline import CleaningPipeline


def pipeline_for(*steps, **kwargs) -> CleaningPipeline:
    """Pipeline running only the given steps, without a proposer."""
    config = CleaningConfig(steps=steps, **kwargs)
    return CleaningPipeline(config=config)


class ExplodingChain(DefenseChain):
    """Chain that fails on every call."""

    def run(self, section_type, text):
        raise RuntimeError("detector crashed")


class OverconfidentChain(DefenseChain):
    """Chain whose removals carry a confidence above 1.0."""

    def run(self, section_type, text):
        return DefenseOutcome(
            section_type=section_type,
            decision=Remove(410, 499, 1.5, DecisionSource.AI),
        )


class TestInputChecks:
    """Test rejected inputs."""

    @pytest.mark.parametrize("text", ["", "   \n\t"])
    def test_empty_document(self, text):
        """Blank documents are rejected."""
        with pytest.raises(EmptyDocumentError, match="no text to clean"):
            CleaningPipeline().clean(text)

    def test_no_steps(self, notes_book):
        """An empty step list is a configuration error."""
        with pytest.raises(ConfigurationError, match="No cleaning steps"):
            pipeline_for().clean(notes_book)


class TestRemovalSteps:
    """Test removal steps."""

    def test_back_matter_removed(self, notes_book):
        """The notes section is removed by the heuristic path."""
        result = pipeline_for(CleaningStep.REMOVE_BACK_MATTER).clean(notes_book)
        assert len(result.text.split("\n")) == 410
        assert "# NOTES" not in result.text

        report = result.step_report(CleaningStep.REMOVE_BACK_MATTER)
        assert report.lines_removed == 90
        assert report.used_fallback
        assert report.confidence == pytest.approx(1.0)
        assert report.removals == [Remove(410, 499, 1.0, DecisionSource.HEURISTIC)]
        assert result.removed_line_count == 90
        assert result.confidence.used_fallback

    def test_nothing_to_remove(self, chapters_only_book):
        """A book without removable sections comes back unchanged."""
        result = pipeline_for(
            CleaningStep.REMOVE_BACK_MATTER, CleaningStep.REMOVE_INDEX
        ).clean(chapters_only_book)
        assert result.text == chapters_only_book
        assert result.confidence.overall is None
        assert result.confidence.rating is None
        assert all(isinstance(r.decisions[0], Preserve) for r in result.steps)

    def test_multi_region_passes(self):
        """Each notes block is found again on the updated text."""
        text = book_with_chapter_notes()
        result = pipeline_for(CleaningStep.REMOVE_FOOTNOTES_ENDNOTES).clean(text)
        report = result.step_report(CleaningStep.REMOVE_FOOTNOTES_ENDNOTES)
        assert [(d.start_line, d.end_line) for d in report.removals] == [(150, 162), (300, 312)]
        assert isinstance(report.decisions[-1], Preserve)
        assert report.lines_removed == 26
        assert "## Notes" not in result.text

    def test_pass_limit(self):
        """max_section_passes bounds the number of removals."""
        text = book_with_chapter_notes()
        result = pipeline_for(
            CleaningStep.REMOVE_FOOTNOTES_ENDNOTES, max_section_passes=1
        ).clean(text)
        assert result.removed_line_count == 13
        assert result.text.count("## Notes") == 1

    def test_step_failure_contained(self, notes_book):
        """A crashing step is reported and leaves the text unchanged."""
        config = CleaningConfig(
            steps=(CleaningStep.REMOVE_BACK_MATTER, CleaningStep.REFLOW_PARAGRAPHS)
        )
        pipeline = CleaningPipeline(config=config, chain=ExplodingChain())
        result = pipeline.clean(notes_book)
        report = result.step_report(CleaningStep.REMOVE_BACK_MATTER)
        assert not report.succeeded
        assert "detector crashed" in report.error
        assert result.step_report(CleaningStep.REFLOW_PARAGRAPHS).succeeded

    def test_bad_step_confidence_contained(self, notes_book):
        """An unrecordable step confidence fails only that step."""
        config = CleaningConfig(
            steps=(CleaningStep.REMOVE_BACK_MATTER, CleaningStep.REFLOW_PARAGRAPHS)
        )
        pipeline = CleaningPipeline(config=config, chain=OverconfidentChain())
        result = pipeline.clean(notes_book)
        report = result.step_report(CleaningStep.REMOVE_BACK_MATTER)
        assert not report.succeeded
        assert "between 0.0 and 1.0" in report.error
        assert report.lines_removed == 0
        assert "# NOTES" in result.text
        assert result.confidence.overall == pytest.approx(0.70)
        assert result.step_report(CleaningStep.REFLOW_PARAGRAPHS).succeeded


class TestArtifactSteps:
    """Test pattern-based artifact steps inside the pipeline."""

    def test_page_numbers_before_section_removal(self, notes_book):
        """Page number lines go first; back matter is then found as usual."""
        lines = notes_book.split("\n")
        numbered = []
        for i, line in enumerate(lines):
            numbered.append(line)
            if i % 40 == 39:
                numbered.append(str(i // 40 + 1))
        result = pipeline_for(
            CleaningStep.REMOVE_PAGE_NUMBERS, CleaningStep.REMOVE_BACK_MATTER
        ).clean(join(numbered))

        pages = result.step_report(CleaningStep.REMOVE_PAGE_NUMBERS)
        assert pages.lines_removed == 12
        assert pages.confidence is None
        assert result.text == join(lines[:410])
        assert result.confidence.overall == pytest.approx(1.0)

    def test_headers_from_config(self):
        """Running heads are removed only when patterns are configured."""
        text = "THE QUIET VALLEY\nThe river ran quietly\nTHE QUIET VALLEY\nRain came in"
        assert pipeline_for(CleaningStep.REMOVE_HEADERS_FOOTERS).clean(text).text == text

        artifacts = ArtifactConfig(header_patterns=[r"^the quiet valley$"])
        result = pipeline_for(CleaningStep.REMOVE_HEADERS_FOOTERS, artifacts=artifacts).clean(text)
        assert result.text == "The river ran quietly\nRain came in"
        report = result.step_report(CleaningStep.REMOVE_HEADERS_FOOTERS)
        assert report.lines_removed == 2
        assert report.confidence is None
        assert any("2 change(s)" in entry for entry in result.processing_log)

    def test_citation_confidence(self):
        """Removing citations records the citation confidence."""
        text = "The mill closed early (Smith, 2020). Nobody noticed [4]."
        result = pipeline_for(CleaningStep.REMOVE_CITATIONS).clean(text)
        assert result.text == "The mill closed early. Nobody noticed."
        report = result.step_report(CleaningStep.REMOVE_CITATIONS)
        assert report.confidence == pytest.approx(0.75)
        assert report.lines_removed == 0
        assert result.confidence.overall == pytest.approx(0.75)

    def test_no_citations_no_confidence(self, chapters_only_book):
        """A pass that removes nothing records no confidence."""
        result = pipeline_for(CleaningStep.REMOVE_CITATIONS).clean(chapters_only_book)
        assert result.text == chapters_only_book
        assert result.step_report(CleaningStep.REMOVE_CITATIONS).confidence is None
        assert result.confidence.overall is None

    def test_special_characters_do_not_dilute(self, notes_book):
        """Character cleanup never pulls down the pipeline confidence."""
        text = notes_book.replace("# Chapter 2", "# Chapter 2\nThe **mill** [closed]", 1)
        result = pipeline_for(
            CleaningStep.REMOVE_BACK_MATTER, CleaningStep.CLEAN_SPECIAL_CHARACTERS
        ).clean(text)
        assert "The mill (closed)" in result.text
        assert "**" not in result.text
        report = result.step_report(CleaningStep.CLEAN_SPECIAL_CHARACTERS)
        assert report.confidence is None
        assert result.confidence.overall == pytest.approx(1.0)


class TestRewriteSteps:
    """Test rewriting steps inside the pipeline."""

    def test_reflow(self):
        """Reflow joins wrapped lines and keeps every word."""
        text = "line one\nline two\n\nline three"
        result = pipeline_for(CleaningStep.REFLOW_PARAGRAPHS).clean(text)
        assert result.text == "line one line two\n\nline three"
        assert result.final_word_count == result.original_word_count
        report = result.step_report(CleaningStep.REFLOW_PARAGRAPHS)
        assert report.confidence == pytest.approx(0.70)
        assert report.used_fallback


class TestEvents:
    """Test progress events."""

    def test_event_sequence(self, notes_book):
        """Each step emits start, decisions and completion."""
        events = []
        config = CleaningConfig(steps=(CleaningStep.REMOVE_BACK_MATTER,))
        CleaningPipeline(config=config, on_event=events.append).clean(notes_book)
        assert [e.kind for e in events] == ["step_started", "decision", "step_completed"]
        assert isinstance(events[1].decision, Remove)
        assert events[1].confidence == pytest.approx(1.0)
        assert events[0].progress == 0.0
        assert events[-1].progress == 1.0

    def test_step_indexes(self, notes_book):
        """Events carry the step position."""
        events = []
        config = CleaningConfig(
            steps=(CleaningStep.REMOVE_BACK_MATTER, CleaningStep.REMOVE_INDEX)
        )
        CleaningPipeline(config=config, on_event=events.append).clean(notes_book)
        started = [e for e in events if e.kind == "step_started"]
        assert [(e.step, e.step_index, e.total_steps) for e in started] == [
            (CleaningStep.REMOVE_BACK_MATTER, 0, 2),
            (CleaningStep.REMOVE_INDEX, 1, 2),
        ]


class TestCancellation:
    """Test cancellation between steps."""

    def test_cancel_after_first_step(self, notes_book):
        """Cancelling stops before the next step with the partial text."""
        config = CleaningConfig(
            steps=(CleaningStep.REMOVE_BACK_MATTER, CleaningStep.REMOVE_INDEX)
        )
        pipeline = CleaningPipeline(config=config)

        def cancel_on_completion(event):
            if event.kind == "step_completed":
                pipeline.cancel()

        pipeline.on_event = cancel_on_completion
        with pytest.raises(CleaningCancelledError) as exc_info:
            pipeline.clean(notes_book)

        assert exc_info.value.completed_steps == [CleaningStep.REMOVE_BACK_MATTER]
        assert len(exc_info.value.text.split("\n")) == 410
        assert pipeline.cancel_requested

    def test_new_run_clears_cancel(self, notes_book):
        """A cancel request does not leak into the next run."""
        pipeline = pipeline_for(CleaningStep.REMOVE_BACK_MATTER)
        pipeline.cancel()
        result = pipeline.clean(notes_book)
        assert result.removed_line_count == 90
        assert not pipeline.cancel_requested
