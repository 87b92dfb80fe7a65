"""
Pytest configuration and fixtures for ScholarClean tests.
"""

import pytest
from helpers import book_with_notes, plain_book

from scholarclean import (
    BoundaryValidator,
    ContentVerifier,
    HeuristicDetector,
)


@pytest.fixture
def validator() -> BoundaryValidator:
    """Phase A validator."""
    return BoundaryValidator()


@pytest.fixture
def verifier() -> ContentVerifier:
    """Phase B verifier with default windows."""
    return ContentVerifier()


@pytest.fixture
def detector() -> HeuristicDetector:
    """Phase C detector with default thresholds."""
    return HeuristicDetector()


@pytest.fixture(scope="session")
def notes_book() -> str:
    """500-line book with '# NOTES' at line 410."""
    return book_with_notes()


@pytest.fixture(scope="session")
def chapters_only_book() -> str:
    """500-line book with no removable sections."""
    return plain_book()
