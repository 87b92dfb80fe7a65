"""
ScholarClean: safely strip non-body material from OCR'd books.

Front matter, tables of contents, auxiliary lists, notes, index and back
matter are removed only after a proposed boundary survives a multi-layer
defense: position/size validation, content verification, and an
AI-independent heuristic fallback. When nothing can be confirmed, the
content is preserved.

Example:
    >>> import scholarclean
    >>> pipeline = scholarclean.CleaningPipeline(proposer)
    >>> result = pipeline.clean(ocr_text)
    >>> print(result.text)
    >>> print(result.confidence.rating)

    >>> # Resolve one section type directly
    >>> chain = scholarclean.DefenseChain(proposer)
    >>> decision = chain.resolve_section(scholarclean.SectionType.BACK_MATTER, ocr_text)
"""

from scholarclean.artifacts import (
    ArtifactResult,
    clean_special_characters,
    remove_citations,
    remove_headers_footers,
    remove_page_numbers,
)
from scholarclean.confidence import (
    ConfidenceRating,
    ConfidenceTracker,
    PhaseConfidence,
    PipelineConfidence,
)
from scholarclean.config import (
    ArtifactConfig,
    CleaningConfig,
    HeuristicConfig,
    RewriteConfig,
    SamplingConfig,
    VerificationConfig,
    load_config,
)
from scholarclean.defense import (
    AuxiliaryListResult,
    BoundaryValidationStats,
    BoundaryValidator,
    ContentVerificationStats,
    ContentVerifier,
    DefenseChain,
    DefenseOutcome,
    HeuristicDetectionStats,
    HeuristicDetector,
    ValidationConstraints,
    get_constraints,
)
from scholarclean.exceptions import (
    CleaningCancelledError,
    ConfigurationError,
    EmptyDocumentError,
    MalformedResponseError,
    ProposerError,
    ProposerUnavailableError,
    ScholarCleanError,
    WordCountMismatchError,
)
from scholarclean.models import (
    AnchorMode,
    BoundaryInfo,
    CleaningPhase,
    CleaningStep,
    DecisionSource,
    DefenseDecision,
    Failed,
    Found,
    HeuristicDetectionResult,
    Invalid,
    NoBoundary,
    NotApplicable,
    NotFound,
    Preserve,
    RejectionReason,
    Remove,
    SectionType,
    Valid,
    ValidationResult,
    VerificationFailure,
    VerificationResult,
    Verified,
)
from scholarclean.pipeline import (
    CleaningPipeline,
    CleaningResult,
    ProgressEvent,
    StepReport,
)
from scholarclean.proposers import (
    BoundaryProposer,
    CallableBoundaryProposer,
    StaticBoundaryProposer,
    TextRewriter,
    UnavailableBoundaryProposer,
)
from scholarclean.rewriting import (
    ParagraphReflower,
    ParagraphSplitter,
    RewriteResult,
)
from scholarclean.text_ops import TextOps

__version__ = "0.1.0"

__all__ = [
    # Main API
    "CleaningPipeline",
    "CleaningResult",
    "StepReport",
    "ProgressEvent",
    "DefenseChain",
    "DefenseOutcome",
    # Configuration
    "CleaningConfig",
    "HeuristicConfig",
    "VerificationConfig",
    "SamplingConfig",
    "RewriteConfig",
    "ArtifactConfig",
    "load_config",
    # Section model
    "SectionType",
    "AnchorMode",
    "BoundaryInfo",
    "ValidationConstraints",
    "get_constraints",
    # Phase A
    "BoundaryValidator",
    "BoundaryValidationStats",
    "ValidationResult",
    "Valid",
    "Invalid",
    "NoBoundary",
    "RejectionReason",
    # Phase B
    "ContentVerifier",
    "ContentVerificationStats",
    "VerificationResult",
    "Verified",
    "Failed",
    "NotApplicable",
    "VerificationFailure",
    # Phase C
    "HeuristicDetector",
    "HeuristicDetectionStats",
    "HeuristicDetectionResult",
    "AuxiliaryListResult",
    "Found",
    "NotFound",
    # Decisions
    "DefenseDecision",
    "Remove",
    "Preserve",
    "DecisionSource",
    # Confidence
    "CleaningStep",
    "CleaningPhase",
    "ConfidenceTracker",
    "ConfidenceRating",
    "PhaseConfidence",
    "PipelineConfidence",
    # Collaborators
    "BoundaryProposer",
    "StaticBoundaryProposer",
    "CallableBoundaryProposer",
    "UnavailableBoundaryProposer",
    "TextRewriter",
    "TextOps",
    # Artifacts
    "ArtifactResult",
    "remove_page_numbers",
    "remove_headers_footers",
    "remove_citations",
    "clean_special_characters",
    # Rewriting
    "ParagraphReflower",
    "ParagraphSplitter",
    "RewriteResult",
    # Exceptions
    "ScholarCleanError",
    "ConfigurationError",
    "ProposerError",
    "ProposerUnavailableError",
    "MalformedResponseError",
    "WordCountMismatchError",
    "EmptyDocumentError",
    "CleaningCancelledError",
]
