"""
Exception classes for ScholarClean.

All ScholarClean exceptions inherit from ScholarCleanError,
making it easy to catch all library errors.

The defense chain itself never raises for bad boundaries: rejected
proposals, failed verifications and missed detections are returned as
values. Exceptions are reserved for collaborator failures, invalid
configuration and the few conditions that stop a whole cleaning run.

Example:
    >>> try:
    ...     result = pipeline.clean(text)
    ... except scholarclean.EmptyDocumentError:
    ...     print("Nothing to clean")
    ... except scholarclean.ScholarCleanError as e:
    ...     print(f"ScholarClean error: {e}")
"""


class ScholarCleanError(Exception):
    """
    Base exception for all ScholarClean errors.

    Catch this to handle any ScholarClean-specific error.
    """

    pass


class ConfigurationError(ScholarCleanError, ValueError):
    """
    Raised for invalid configuration.

    Example:
        >>> HeuristicConfig(min_confidence=1.5)
        ConfigurationError: min_confidence must be between 0.0 and 1.0, got 1.5
    """

    pass


class ProposerError(ScholarCleanError):
    """
    Base for failures of a boundary proposer.

    The defense chain treats every ProposerError as "no proposal
    available" and continues with heuristic detection.
    """

    pass


class ProposerUnavailableError(ProposerError):
    """
    Raised when a proposer cannot produce a proposal.

    Covers timeouts, missing credentials and transport failures.
    """

    pass


class MalformedResponseError(ProposerError):
    """
    Raised when a proposal cannot be turned into a BoundaryInfo.

    Example:
        >>> BoundaryInfo.from_dict({"start_line": "four"})
        MalformedResponseError: start_line must be an integer or null, got 'four'
    """

    pass


class WordCountMismatchError(ScholarCleanError):
    """
    Raised when a rewrite does not preserve the word count.

    Rewriting helpers catch this internally and fall back to the
    deterministic heuristic.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Word count changed from {expected} to {actual}")


class EmptyDocumentError(ScholarCleanError):
    """
    Raised when the pipeline receives no text at all.

    Example:
        >>> pipeline.clean("   ")
        EmptyDocumentError: Document has no text to clean
    """

    pass


class CleaningCancelledError(ScholarCleanError):
    """
    Raised when cleaning is cancelled between steps.

    Attributes:
        text: Document text after the last fully completed step.
        completed_steps: Steps that finished before cancellation.
    """

    def __init__(self, text: str, completed_steps: list | None = None):
        self.text = text
        self.completed_steps = list(completed_steps or [])
        super().__init__(f"Cleaning cancelled after {len(self.completed_steps)} completed step(s)")
