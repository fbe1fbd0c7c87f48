"""Extraction and validation of embedded XML directives and LaTeX blocks."""

from .extractor import ExtractionResult, FragmentExtractor, LineKind, Problem, State, TRANSITIONS
from .validation import FragmentValidator

__all__ = [
    "ExtractionResult",
    "FragmentExtractor",
    "FragmentValidator",
    "LineKind",
    "Problem",
    "State",
    "TRANSITIONS",
]
