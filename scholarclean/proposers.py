"""
Collaborator contracts for AI-driven steps.

The defense chain never talks to an AI service directly. It asks a
BoundaryProposer for a BoundaryInfo and, for rewriting steps, a
TextRewriter for rewritten text. Both are untrusted: proposals go through
the defense phases, rewrites through a word-count check.

Implementations here cover replay and testing:
- StaticBoundaryProposer: fixed proposals per section type, optionally
  loaded from a YAML file of recorded proposals
- CallableBoundaryProposer: adapts any function (e.g. an API client)
- UnavailableBoundaryProposer: always fails, forcing heuristic detection

Usage:
    >>> proposer = StaticBoundaryProposer.from_yaml("proposals.yaml")
    >>> chain = DefenseChain(proposer)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from scholarclean.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    ProposerUnavailableError,
)
from scholarclean.models import BoundaryInfo, SectionType

logger = logging.getLogger(__name__)


class BoundaryProposer(ABC):
    """Abstract base for boundary proposers."""

    name: str = "base"

    @abstractmethod
    def propose(self, sample_text: str, section_type: SectionType) -> BoundaryInfo:
        """Propose a boundary for section_type.

        Line numbers are relative to sample_text.

        Raises:
            ProposerUnavailableError: If no proposal can be produced.
            MalformedResponseError: If the response cannot be parsed.
        """
        pass


class TextRewriter(ABC):
    """Abstract base for AI text rewriters.

    Rewrites must keep every word; callers verify the word count and
    discard output that does not.
    """

    name: str = "base"

    @abstractmethod
    def reflow(self, text: str) -> str:
        """Join hard-wrapped lines into flowing paragraphs."""
        pass

    @abstractmethod
    def split_paragraph(self, paragraph: str, max_words: int) -> list[str]:
        """Split one long paragraph into paragraphs of at most max_words."""
        pass


class StaticBoundaryProposer(BoundaryProposer):
    """Returns predetermined proposals.

    A section type may map to a single BoundaryInfo (returned on every call)
    or to a sequence (one per call, then unavailable). Missing types are
    unavailable.
    """

    name = "static"

    def __init__(self, proposals: Mapping[SectionType, BoundaryInfo | Sequence[BoundaryInfo]]):
        """Initialize proposer.

        Args:
            proposals: Proposal(s) per section type.
        """
        self._fixed: dict[SectionType, BoundaryInfo] = {}
        self._queued: dict[SectionType, list[BoundaryInfo]] = {}
        for section_type, value in proposals.items():
            if isinstance(value, BoundaryInfo):
                self._fixed[section_type] = value
            else:
                self._queued[section_type] = list(value)
        self.calls: list[SectionType] = []

    def propose(self, sample_text: str, section_type: SectionType) -> BoundaryInfo:
        self.calls.append(section_type)
        if section_type in self._fixed:
            return self._fixed[section_type]
        queue = self._queued.get(section_type)
        if queue:
            return queue.pop(0)
        raise ProposerUnavailableError(f"No proposal recorded for {section_type.value}")

    @classmethod
    def from_yaml(cls, path: str | Path) -> StaticBoundaryProposer:
        """Load recorded proposals from YAML.

        The file maps section type values to a proposal mapping or a list
        of them:

            back_matter:
              start_line: 410
              confidence: 0.8
            auxiliary_lists:
              - {start_line: 20, end_line: 34, confidence: 0.9}

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the file is not valid YAML or names an
                unknown section type.
            MalformedResponseError: If a proposal is malformed.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Proposal file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Proposal file must contain a mapping: {path}")

        proposals: dict[SectionType, BoundaryInfo | list[BoundaryInfo]] = {}
        for key, value in data.items():
            try:
                section_type = SectionType(key)
            except ValueError as e:
                raise ConfigurationError(f"Unknown section type in {path}: {key!r}") from e
            if isinstance(value, list):
                proposals[section_type] = [BoundaryInfo.from_dict(item) for item in value]
            else:
                proposals[section_type] = BoundaryInfo.from_dict(value)

        logger.debug(f"Loaded proposals for {len(proposals)} section type(s) from {path}")
        return cls(proposals)


class CallableBoundaryProposer(BoundaryProposer):
    """Adapts a function into a proposer.

    The function may return a BoundaryInfo or a decoded mapping, which is
    parsed with BoundaryInfo.from_dict().
    """

    def __init__(
        self,
        func: Callable[[str, SectionType], BoundaryInfo | Mapping[str, Any]],
        name: str = "callable",
    ):
        self.func = func
        self.name = name

    def propose(self, sample_text: str, section_type: SectionType) -> BoundaryInfo:
        result = self.func(sample_text, section_type)
        if isinstance(result, BoundaryInfo):
            return result
        if isinstance(result, Mapping):
            return BoundaryInfo.from_dict(result)
        raise MalformedResponseError(
            f"{self.name} returned {type(result).__name__}, expected BoundaryInfo or mapping"
        )


class UnavailableBoundaryProposer(BoundaryProposer):
    """Proposer that is never available."""

    name = "unavailable"

    def __init__(self, reason: str = "No AI proposer configured"):
        self.reason = reason

    def propose(self, sample_text: str, section_type: SectionType) -> BoundaryInfo:
        raise ProposerUnavailableError(self.reason)
