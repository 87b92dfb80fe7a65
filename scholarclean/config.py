"""
Configuration for ScholarClean.

All options have sensible defaults; create a config only to customize
behavior. Safety envelopes for boundary validation are deliberately not
configurable: they live as constants in scholarclean.defense.constraints.

Configurations can be loaded from YAML:

    heuristics:
      min_confidence: 0.65
    rewrite:
      max_words_per_paragraph: 180
    artifacts:
      header_patterns:
        - "^THE QUIET VALLEY$"
    steps:
      - remove_front_matter
      - remove_back_matter

Usage:
    >>> config = load_config("cleaning.yaml")
    >>> pipeline = CleaningPipeline(proposer, config=config)
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from scholarclean.artifacts import DEFAULT_PAGE_NUMBER_PATTERNS, DEFAULT_SPECIAL_CHARACTERS
from scholarclean.exceptions import ConfigurationError
from scholarclean.models import CleaningStep


def _check_fraction(name: str, value: float) -> None:
    if value < 0.0 or value > 1.0:
        raise ConfigurationError(f"{name} must be between 0.0 and 1.0, got {value}")


def _check_positive(name: str, value: int) -> None:
    if value < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {value}")


@dataclass
class HeuristicConfig:
    """
    Tunables for heuristic (AI-independent) section detection.

    Example:
        >>> detector = HeuristicDetector(HeuristicConfig(min_confidence=0.7))
    """

    min_confidence: float = 0.6  # Below this a detection is reported as NotFound
    supporting_scan_lines: int = 50  # Lines after a header searched for entries
    min_document_lines: int = 50  # Shorter documents are never scanned
    headerless_index_min_entries: int = 30
    headerless_toc_min_entries: int = 8

    def __post_init__(self):
        """Validate configuration."""
        _check_fraction("min_confidence", self.min_confidence)
        _check_positive("supporting_scan_lines", self.supporting_scan_lines)
        _check_positive("min_document_lines", self.min_document_lines)
        _check_positive("headerless_index_min_entries", self.headerless_index_min_entries)
        _check_positive("headerless_toc_min_entries", self.headerless_toc_min_entries)


@dataclass
class VerificationConfig:
    """Window sizes for content verification."""

    min_lines_to_examine: int = 5
    max_lines_to_examine: int = 100
    min_matches_for_high_confidence: int = 3

    def __post_init__(self):
        """Validate configuration."""
        _check_positive("min_lines_to_examine", self.min_lines_to_examine)
        if self.max_lines_to_examine < self.min_lines_to_examine:
            raise ConfigurationError(
                f"max_lines_to_examine ({self.max_lines_to_examine}) must be >= "
                f"min_lines_to_examine ({self.min_lines_to_examine})"
            )
        _check_positive("min_matches_for_high_confidence", self.min_matches_for_high_confidence)


@dataclass
class SamplingConfig:
    """
    How much of the document a boundary proposer sees.

    Front matter, contents, auxiliary lists and notes are proposed from the
    head of the document; back matter and index from its tail.
    """

    head_sample_lines: int = 2500
    back_matter_sample_lines: int = 2000
    index_sample_lines: int = 1500

    def __post_init__(self):
        """Validate configuration."""
        _check_positive("head_sample_lines", self.head_sample_lines)
        _check_positive("back_matter_sample_lines", self.back_matter_sample_lines)
        _check_positive("index_sample_lines", self.index_sample_lines)


@dataclass
class RewriteConfig:
    """
    Configuration for word-count-preserving rewrites.

    Example:
        >>> RewriteConfig(max_words_per_paragraph=150, min_words_to_split=200)
    """

    max_words_per_paragraph: int = 200
    min_words_to_split: int = 250
    ai_confidence: float = 0.90  # Step confidence when AI output is accepted
    fallback_confidence: float = 0.70  # Step confidence for the heuristic fallback

    def __post_init__(self):
        """Validate configuration."""
        _check_positive("max_words_per_paragraph", self.max_words_per_paragraph)
        if self.min_words_to_split < self.max_words_per_paragraph:
            raise ConfigurationError(
                f"min_words_to_split ({self.min_words_to_split}) must be >= "
                f"max_words_per_paragraph ({self.max_words_per_paragraph})"
            )
        _check_fraction("ai_confidence", self.ai_confidence)
        _check_fraction("fallback_confidence", self.fallback_confidence)


@dataclass
class ArtifactConfig:
    """
    Patterns for page furniture and inline artifact cleanup.

    Line patterns are regexes matched case-insensitively against the whole
    trimmed line. Running headers and footers differ from book to book, so
    none are configured by default.

    Example:
        >>> ArtifactConfig(header_patterns=[r"^THE QUIET VALLEY$"])
    """

    page_number_patterns: tuple[str, ...] = DEFAULT_PAGE_NUMBER_PATTERNS
    header_patterns: tuple[str, ...] = ()
    footer_patterns: tuple[str, ...] = ()
    special_characters: tuple[str, ...] = DEFAULT_SPECIAL_CHARACTERS
    citation_confidence: float = 0.75  # Step confidence when citations were removed

    def __post_init__(self):
        """Validate configuration."""
        for name in ("page_number_patterns", "header_patterns", "footer_patterns"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise ConfigurationError(f"{name} must be a list of patterns, got {value!r}")
            patterns = tuple(value)
            for pattern in patterns:
                if not isinstance(pattern, str):
                    raise ConfigurationError(f"{name} must contain strings, got {pattern!r}")
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise ConfigurationError(
                        f"Invalid pattern in {name}: {pattern!r} ({e})"
                    ) from e
            setattr(self, name, patterns)

        self.special_characters = tuple(self.special_characters)
        for char in self.special_characters:
            if not isinstance(char, str) or not char:
                raise ConfigurationError(
                    f"special_characters must contain non-empty strings, got {char!r}"
                )
        _check_fraction("citation_confidence", self.citation_confidence)


# Citation removal rewrites body sentences, so it is opt-in
DEFAULT_STEPS: tuple[CleaningStep, ...] = tuple(
    step for step in CleaningStep if step is not CleaningStep.REMOVE_CITATIONS
)


@dataclass
class CleaningConfig:
    """
    Configuration for a cleaning run.

    Example:
        >>> config = CleaningConfig(
        ...     steps=(CleaningStep.REMOVE_FRONT_MATTER, CleaningStep.REMOVE_INDEX),
        ...     max_section_passes=2,
        ... )
    """

    # Steps run in this order
    steps: tuple[CleaningStep, ...] = DEFAULT_STEPS

    # Repeated resolution for types with several regions (lists, notes)
    max_section_passes: int = 3

    heuristics: HeuristicConfig = field(default_factory=HeuristicConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    artifacts: ArtifactConfig = field(default_factory=ArtifactConfig)

    def __post_init__(self):
        """Validate configuration."""
        self.steps = tuple(self.steps)
        for step in self.steps:
            if not isinstance(step, CleaningStep):
                raise ConfigurationError(f"steps must contain CleaningStep values, got {step!r}")
        if len(set(self.steps)) != len(self.steps):
            raise ConfigurationError("steps must not contain duplicates")
        _check_positive("max_section_passes", self.max_section_passes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CleaningConfig:
        """Build a config from a plain mapping (as loaded from YAML).

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")

        data = dict(data)
        kwargs: dict[str, Any] = {}

        if "steps" in data:
            raw_steps = data.pop("steps")
            if not isinstance(raw_steps, list):
                raise ConfigurationError(f"steps must be a list, got {raw_steps!r}")
            try:
                kwargs["steps"] = tuple(CleaningStep(s) for s in raw_steps)
            except ValueError as e:
                valid = ", ".join(s.value for s in CleaningStep)
                raise ConfigurationError(f"Unknown cleaning step ({e}). Valid: {valid}") from e

        if "max_section_passes" in data:
            kwargs["max_section_passes"] = data.pop("max_section_passes")

        sections = {
            "heuristics": HeuristicConfig,
            "verification": VerificationConfig,
            "sampling": SamplingConfig,
            "rewrite": RewriteConfig,
            "artifacts": ArtifactConfig,
        }
        for key, section_cls in sections.items():
            if key in data:
                kwargs[key] = _build_section(key, section_cls, data.pop(key))

        if data:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(data))}")

        return cls(**kwargs)


def _build_section(name: str, section_cls: type, values: Any):
    if values is None:
        return section_cls()
    if not isinstance(values, Mapping):
        raise ConfigurationError(f"{name} must be a mapping, got {values!r}")
    known = {f.name for f in fields(section_cls)}
    unknown = set(values) - known
    if unknown:
        raise ConfigurationError(f"Unknown keys in {name}: {', '.join(sorted(unknown))}")
    return section_cls(**values)


def load_config(path: str | Path) -> CleaningConfig:
    """Load a CleaningConfig from a YAML file.

    An empty file gives the default configuration.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed CleaningConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the YAML is invalid or has bad values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return CleaningConfig()
    return CleaningConfig.from_dict(data)
