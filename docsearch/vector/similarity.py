"""
Similarity functions used to score pages against a query vector.
"""

from enum import Enum

import numpy as np


class DimensionMismatchError(ValueError):
    """Query and candidate vectors have different lengths."""


class SimilarityFunction(Enum):
    """
    The scoring rule shared by all sessions.

    Each member carries its ranking direction: COSINE and DOT rank by
    descending score, EUCLIDEAN by ascending distance.
    """

    COSINE = ("COSINE", True)
    DOT = ("DOT", True)
    EUCLIDEAN = ("EUCLIDEAN", False)

    def __init__(self, label: str, higher_is_better: bool):
        self.label = label
        self.higher_is_better = higher_is_better

    @classmethod
    def from_name(cls, name: str) -> "SimilarityFunction":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown similarity function: {name}. Expected one of {[m.name for m in cls]}")

    def score(self, query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        """
        Score every row of candidates (n x D) against query (D,).

        Returns a float64 array of length n.
        """
        query = np.asarray(query, dtype=np.float64)
        candidates = np.asarray(candidates, dtype=np.float64)
        if candidates.ndim == 1:
            candidates = candidates.reshape(1, -1)
        if candidates.shape[0] == 0:
            return np.zeros(0, dtype=np.float64)
        if candidates.shape[1] != query.shape[0]:
            raise DimensionMismatchError(
                f"Query dimension {query.shape[0]} does not match candidate dimension {candidates.shape[1]}"
            )

        if self is SimilarityFunction.DOT:
            return candidates @ query
        if self is SimilarityFunction.EUCLIDEAN:
            return np.linalg.norm(candidates - query, axis=1)

        # Cosine: zero-norm operands score 0.0 rather than NaN
        norms = np.linalg.norm(candidates, axis=1) * np.linalg.norm(query)
        dots = candidates @ query
        scores = np.zeros_like(dots)
        np.divide(dots, norms, out=scores, where=norms > 0)
        return np.clip(scores, -1.0, 1.0)

    def rank(self, scores: np.ndarray) -> list:
        """
        Candidate indices ordered best first.

        The sort is stable, so equal scores keep their original order.
        """
        keyed = -scores if self.higher_is_better else scores
        return np.argsort(keyed, kind="stable").tolist()
