"""
Multi-layer boundary defense.

Every content-removing operation passes through three independent layers:

- Phase A (validation): position/size/confidence envelope per section type
- Phase B (verification): the region's text matches its section type
- Phase C (heuristics): AI-independent detection when A or B reject

DefenseChain orchestrates them and falls back to preserving content.
"""

from scholarclean.defense.chain import DefenseChain, DefenseOutcome
from scholarclean.defense.constraints import (
    CONSTRAINTS,
    ValidationConstraints,
    get_constraints,
)
from scholarclean.defense.heuristics import (
    AuxiliaryListResult,
    HeuristicDetectionStats,
    HeuristicDetector,
)
from scholarclean.defense.validation import BoundaryValidationStats, BoundaryValidator
from scholarclean.defense.verification import ContentVerificationStats, ContentVerifier

__all__ = [
    # Orchestration
    "DefenseChain",
    "DefenseOutcome",
    # Phase A
    "BoundaryValidator",
    "BoundaryValidationStats",
    "ValidationConstraints",
    "CONSTRAINTS",
    "get_constraints",
    # Phase B
    "ContentVerifier",
    "ContentVerificationStats",
    # Phase C
    "HeuristicDetector",
    "HeuristicDetectionStats",
    "AuxiliaryListResult",
]
