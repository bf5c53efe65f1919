"""
Section Comparison Module v1.0.0
================================
Structural comparison of two extracted documents.

Features:
- Name-based alignment of document sections
- Per-section status: match, different, added, missing
- Symmetric 0-100 similarity scores (edit distance or token overlap)
- Word-level change highlighting
- CSV, JSON and Excel export of comparison reports

Author: SectionCompare
"""

from .models import (
    Section,
    ComparisonRecord,
    ComparisonReport,
    InvalidInputError,
    STATUS_MATCH,
    STATUS_DIFFERENT,
    STATUS_ADDED,
    STATUS_MISSING,
)
from .similarity import SimilarityScorer, similarity
from .differ import SectionDiffer, compare

__version__ = "1.0.0"
__all__ = [
    'Section',
    'ComparisonRecord',
    'ComparisonReport',
    'InvalidInputError',
    'STATUS_MATCH',
    'STATUS_DIFFERENT',
    'STATUS_ADDED',
    'STATUS_MISSING',
    'SimilarityScorer',
    'similarity',
    'SectionDiffer',
    'compare',
]
