"""
Section Similarity Scoring v1.0.0
=================================
Symmetric, normalized similarity scores (integer 0-100) between two
section texts.

Metrics:
- levenshtein: character edit distance from diff-match-patch, normalized
  by the length of the longer text
- token_jaccard: Jaccard index over case-folded word tokens

Both metrics give 100 for identical text (including two empty texts),
0 when exactly one side is empty or the content is disjoint, and the
same score regardless of argument order.
"""

import re
from typing import Set

import diff_match_patch as dmp_module

from config_logging import SIMILARITY_METRICS

_TOKEN_RE = re.compile(r'\w+')


class SimilarityScorer:
    """
    Scores how close two section texts are.
    """

    def __init__(self, metric: str = 'levenshtein'):
        """
        Initialize the scorer.

        Args:
            metric: 'levenshtein' or 'token_jaccard'

        Raises:
            ValueError: for an unknown metric name
        """
        if metric not in SIMILARITY_METRICS:
            raise ValueError(
                f"Unknown similarity metric: {metric}. "
                f"Must be one of {', '.join(SIMILARITY_METRICS)}"
            )
        self.metric = metric

        self.dmp = dmp_module.diff_match_patch()
        # No timeout: a timed-out diff is not reproducible
        self.dmp.Diff_Timeout = 0

    def score(self, a: str, b: str) -> int:
        """
        Similarity of two texts as an integer 0-100.

        Args:
            a: First text
            b: Second text

        Returns:
            100 for identical text, 0 for disjoint or one-sided content
        """
        if a == b:
            return 100
        if not a or not b:
            return 0

        # Canonical argument order keeps the score symmetric even where the
        # underlying diff would break ties differently
        if b < a:
            a, b = b, a

        if self.metric == 'token_jaccard':
            ratio = self._token_jaccard(a, b)
        else:
            ratio = self._levenshtein_ratio(a, b)

        return int(round(100 * ratio))

    def _levenshtein_ratio(self, a: str, b: str) -> float:
        """1 - edit distance / length of the longer text."""
        diffs = self.dmp.diff_main(a, b, False)
        distance = self.dmp.diff_levenshtein(diffs)
        longest = max(len(a), len(b))
        return max(0.0, 1.0 - distance / longest)

    def _token_jaccard(self, a: str, b: str) -> float:
        """Shared tokens over all tokens."""
        tokens_a = self._tokenize(a)
        tokens_b = self._tokenize(b)
        union = tokens_a | tokens_b
        if not union:
            # Punctuation-only texts that are not identical
            return 0.0
        return len(tokens_a & tokens_b) / len(union)

    @staticmethod
    def _tokenize(text: str) -> Set[str]:
        return set(_TOKEN_RE.findall(text.casefold()))


def similarity(a: str, b: str, metric: str = 'levenshtein') -> int:
    """
    Compute the similarity score of two texts.

    Args:
        a: First text
        b: Second text
        metric: Metric name (see module docstring)

    Returns:
        Integer similarity 0-100
    """
    return SimilarityScorer(metric).score(a, b)
