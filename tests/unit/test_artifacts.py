"""Tests for pattern-based artifact cleanup."""

import logging

import pytest

from scholarclean.artifacts import (
    clean_special_characters,
    is_bibliography_line,
    remove_citations,
    remove_headers_footers,
    remove_matching_lines,
    remove_page_numbers,
)


class TestPageNumbers:
    """Test standalone page number removal."""

    @pytest.mark.parametrize(
        "line",
        [
            "42",
            "xvii",
            "XIV",
            "Page 12",
            "page 12",
            "p. 7",
            "p7",
            "12 of 300",
            "- 42 -",
            "\u2014 xii \u2014",
            "[42]",
            "---",
            "--",
            "-- -",
            "\u2014",
        ],
    )
    def test_page_furniture_removed(self, line):
        """Common page number and divider forms are removed."""
        text = f"The river ran quietly\n  {line}  \nShe had never trusted"
        result = remove_page_numbers(text)
        assert result.text == "The river ran quietly\nShe had never trusted"
        assert result.changes == 1

    @pytest.mark.parametrize(
        "line",
        ["mild", "dim", "Chapter 4", "1. See the letter", "42 miles on", "Page twelve", "# 12"],
    )
    def test_ordinary_lines_kept(self, line):
        """Only full-line matches are removed."""
        result = remove_page_numbers(f"Before\n{line}\nAfter")
        assert result.text == f"Before\n{line}\nAfter"
        assert not result.changed

    def test_blank_lines_kept(self):
        """Blank lines never match."""
        text = "One\n\n12\n\nTwo"
        assert remove_page_numbers(text).text == "One\n\n\nTwo"

    def test_custom_patterns(self):
        """Configured patterns replace the defaults."""
        result = remove_page_numbers("Text\n42\n{12}\nMore", [r"^\{\d+\}$"])
        assert result.text == "Text\n42\nMore"


class TestHeadersFooters:
    """Test running header and footer removal."""

    def test_nothing_without_patterns(self):
        """No configured patterns means no change."""
        text = "THE QUIET VALLEY\nThe river ran quietly"
        result = remove_headers_footers(text)
        assert result.text == text
        assert result.changes == 0

    def test_running_heads_removed(self):
        """Header and footer lines are removed case-insensitively."""
        text = "The Quiet Valley\nThe river ran\nJane Author  \nShe had never\nTHE QUIET VALLEY"
        result = remove_headers_footers(
            text, header_patterns=[r"^the quiet valley$"], footer_patterns=[r"^Jane Author$"]
        )
        assert result.text == "The river ran\nShe had never"
        assert result.changes == 3

    def test_partial_match_kept(self):
        """A header pattern inside a sentence does not remove the sentence."""
        text = "We reached the quiet valley at dusk"
        result = remove_matching_lines(text, [r"the quiet valley"])
        assert result.text == text


class TestCitations:
    """Test in-text citation removal."""

    @pytest.mark.parametrize(
        "citation",
        [
            "(Smith, 2020)",
            "(Smith & Jones, 2019, p. 45)",
            "(Smith et al., 2018)",
            "(Smith 2020)",
            "(Smith 2020, 42)",
            "(Smith 2020: 42-45)",
            "(see Smith, 2020)",
            "(Smith, 2020; Jones 2019)",
            "(see Smith, 2015; cf. Jones, 2017)",
            "(Lefevre 1756, as cited in Dubois, 2019)",
            "(Müller, 2018)",
            "(ibid., p. 45)",
            "[3]",
            "[1, 2]",
            "[4-6]",
        ],
    )
    def test_citation_removed(self, citation):
        """Each citation style is removed with its surrounding space."""
        result = remove_citations(f"The mill closed early {citation}. Nobody noticed.")
        assert result.text == "The mill closed early. Nobody noticed."
        assert result.changes >= 1

    def test_superscript_marker(self):
        """Superscript note markers after words are removed."""
        result = remove_citations("The mill closed early¹², and nobody noticed.")
        assert result.text == "The mill closed early, and nobody noticed."

    @pytest.mark.parametrize(
        "text",
        [
            "The ledger (1998 edition) was lost.",
            "See table [Figure 3] for details.",
            "The value was 3.14 in (Chapter 5).",
            "x² + y² = z²",
        ],
    )
    def test_non_citations_kept(self, text):
        """Parenthetical asides and formulas are not citations."""
        result = remove_citations(text)
        assert result.text == text
        assert not result.changed

    @pytest.mark.parametrize(
        "line",
        [
            "Smith, J. (2020). The quiet valley. Harbor Press.",
            "Smith, John. The Quiet Valley. Harbor Press, 1998.",
            "Jones, A. Mills and rivers in (Smith, 2020) revisited. Vol. 3",
        ],
    )
    def test_bibliography_lines_untouched(self, line):
        """Reference list entries keep their years."""
        assert is_bibliography_line(line)
        assert remove_citations(line).text == line

    def test_short_line_is_not_bibliography(self):
        """Lines of 20 characters or fewer are never entries."""
        assert not is_bibliography_line("Smith, J. 2020.")

    def test_changes_logged(self, caplog):
        """The number of removed citations is logged."""
        with caplog.at_level(logging.INFO, logger="scholarclean.artifacts"):
            remove_citations("One (Smith, 2020) and two (Jones, 2019).")
        assert "Removed 2 citation(s)" in caplog.text


class TestSpecialCharacters:
    """Test typography and markdown artifact cleanup."""

    def test_markdown_emphasis(self):
        """Emphasis markers are removed, keeping the words."""
        result = clean_special_characters("A **bold** and *quiet* and __still__ _river_.")
        assert result.text == "A bold and quiet and still river."
        assert result.changes == 1

    def test_brackets_become_parentheses(self):
        """Square brackets are kept as parentheses."""
        assert clean_special_characters("The mill [now gone] stood").text == "The mill (now gone) stood"

    def test_images_and_empty_brackets_removed(self):
        """Image markdown and empty brackets leave nothing behind."""
        result = clean_special_characters("Before ![plate](img/1.png) after [] end")
        assert result.text == "Before after end"

    def test_ligatures_and_invisible_characters(self):
        """Ligatures expand and zero-width characters disappear."""
        result = clean_special_characters("The \ufb01eld was \ufb02ooded\u200b in spring\u00adtime")
        assert result.text == "The field was flooded in springtime"

    def test_curly_quotes(self):
        """Curly quotes become straight quotes."""
        result = clean_special_characters("\u201cNo,\u201d said the clerk\u2019s son.")
        assert result.text == "\"No,\" said the clerk's son."

    def test_configured_characters(self):
        """Only configured characters are stripped."""
        result = clean_special_characters("a*b_c~d", characters=["~"])
        assert result.text == "a*b_cd"

    def test_structure_preserved(self):
        """Headings, bullets and indentation are left alone."""
        text = "# Chapter 1\n* first item\n  - nested item\n1. numbered"
        result = clean_special_characters(text)
        assert result.text == text
        assert not result.changed

    def test_code_blocks_preserved(self):
        """Fenced code is never rewritten."""
        text = "```\nvalue = data[key] * 2\n```\nThe *end*"
        result = clean_special_characters(text)
        assert result.text == "```\nvalue = data[key] * 2\n```\nThe end"
        assert result.changes == 1

    def test_word_count_kept_for_plain_prose(self):
        """Plain prose passes through unchanged."""
        text = "The river ran quietly past the old mill while the town slept"
        assert clean_special_characters(text).text == text
