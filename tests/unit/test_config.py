"""Tests for configuration."""

import pytest

from scholarclean.config import (
    ArtifactConfig,
    CleaningConfig,
    HeuristicConfig,
    RewriteConfig,
    VerificationConfig,
    load_config,
)
from scholarclean.exceptions import ConfigurationError
from scholarclean.models import CleaningStep


class TestDefaults:
    """Test default configuration."""

    def test_cleaning_config(self):
        """Every step except citation removal runs, in default order."""
        config = CleaningConfig()
        assert config.steps == tuple(
            step for step in CleaningStep if step is not CleaningStep.REMOVE_CITATIONS
        )
        assert config.steps[0] is CleaningStep.REMOVE_PAGE_NUMBERS
        assert config.max_section_passes == 3
        assert config.heuristics.min_confidence == 0.6

    def test_sampling(self):
        """Default sample sizes."""
        sampling = CleaningConfig().sampling
        assert sampling.head_sample_lines == 2500
        assert sampling.back_matter_sample_lines == 2000
        assert sampling.index_sample_lines == 1500

    def test_artifacts(self):
        """Page number patterns are built in; running heads are not."""
        artifacts = CleaningConfig().artifacts
        assert r"^\d+$" in artifacts.page_number_patterns
        assert artifacts.header_patterns == ()
        assert artifacts.footer_patterns == ()
        assert artifacts.special_characters == ("[", "]", "*", "_")
        assert artifacts.citation_confidence == 0.75


class TestValidation:
    """Test configuration validation."""

    def test_fraction_out_of_range(self):
        """min_confidence must be a fraction."""
        with pytest.raises(ConfigurationError, match="min_confidence"):
            HeuristicConfig(min_confidence=1.5)

    def test_configuration_error_is_value_error(self):
        """ConfigurationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            HeuristicConfig(min_document_lines=0)

    def test_window_order(self):
        """max_lines_to_examine must not be below the minimum."""
        with pytest.raises(ConfigurationError, match="max_lines_to_examine"):
            VerificationConfig(min_lines_to_examine=10, max_lines_to_examine=5)

    def test_split_threshold(self):
        """min_words_to_split must not be below max_words_per_paragraph."""
        with pytest.raises(ConfigurationError, match="min_words_to_split"):
            RewriteConfig(max_words_per_paragraph=300, min_words_to_split=250)

    def test_invalid_line_pattern(self):
        """Header patterns must be valid regexes."""
        with pytest.raises(ConfigurationError, match="Invalid pattern in header_patterns"):
            ArtifactConfig(header_patterns=["^(unclosed$"])

    def test_pattern_list_not_string(self):
        """A bare string is not a list of patterns."""
        with pytest.raises(ConfigurationError, match="must be a list"):
            ArtifactConfig(footer_patterns="^Page \\d+$")

    def test_empty_special_character(self):
        """Special characters must be non-empty strings."""
        with pytest.raises(ConfigurationError, match="special_characters"):
            ArtifactConfig(special_characters=["*", ""])

    def test_duplicate_steps(self):
        """Steps may not repeat."""
        with pytest.raises(ConfigurationError, match="duplicates"):
            CleaningConfig(steps=(CleaningStep.REMOVE_INDEX, CleaningStep.REMOVE_INDEX))

    def test_step_type(self):
        """Steps must be CleaningStep members."""
        with pytest.raises(ConfigurationError, match="CleaningStep"):
            CleaningConfig(steps=("remove_index",))


class TestFromDict:
    """Test building configuration from mappings."""

    def test_nested_sections(self):
        """Nested sections build their dataclasses."""
        config = CleaningConfig.from_dict(
            {
                "steps": ["remove_back_matter", "remove_index"],
                "max_section_passes": 2,
                "heuristics": {"min_confidence": 0.7},
                "rewrite": {"max_words_per_paragraph": 150},
            }
        )
        assert config.steps == (CleaningStep.REMOVE_BACK_MATTER, CleaningStep.REMOVE_INDEX)
        assert config.max_section_passes == 2
        assert config.heuristics.min_confidence == 0.7
        assert config.rewrite.max_words_per_paragraph == 150

    def test_unknown_step(self):
        """Unknown step names are rejected with the valid list."""
        with pytest.raises(ConfigurationError, match="Unknown cleaning step"):
            CleaningConfig.from_dict({"steps": ["remove_everything"]})

    def test_unknown_top_level_key(self):
        """Unknown top-level keys are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown configuration keys: colour"):
            CleaningConfig.from_dict({"colour": "blue"})

    def test_unknown_section_key(self):
        """Unknown keys inside a section are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown keys in heuristics"):
            CleaningConfig.from_dict({"heuristics": {"min_start": 0.1}})

    def test_artifact_section(self):
        """YAML lists become pattern tuples."""
        config = CleaningConfig.from_dict(
            {"artifacts": {"header_patterns": ["^THE QUIET VALLEY$"], "special_characters": ["*"]}}
        )
        assert config.artifacts.header_patterns == ("^THE QUIET VALLEY$",)
        assert config.artifacts.special_characters == ("*",)

    def test_empty_section(self):
        """A null section uses defaults."""
        assert CleaningConfig.from_dict({"sampling": None}).sampling.head_sample_lines == 2500


class TestLoadConfig:
    """Test loading YAML configuration files."""

    def test_load(self, tmp_path):
        """A YAML file is parsed into a config."""
        path = tmp_path / "cleaning.yaml"
        path.write_text(
            "heuristics:\n  min_confidence: 0.65\nsteps:\n  - remove_front_matter\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.heuristics.min_confidence == 0.65
        assert config.steps == (CleaningStep.REMOVE_FRONT_MATTER,)

    def test_empty_file(self, tmp_path):
        """An empty file gives defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == CleaningConfig()

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Unparseable YAML is a configuration error."""
        path = tmp_path / "bad.yaml"
        path.write_text("heuristics: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        """A YAML list is not a configuration."""
        path = tmp_path / "list.yaml"
        path.write_text("- remove_index\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_config(path)
