"""
Vector similarity helpers.

Dependencies: numpy
System role: In-process cosine similarity and dimension checks
"""

from typing import Sequence

import numpy as np

from knowledge_center.core.exceptions import EmbeddingDimensionMismatch


def validate_dimension(vector: Sequence[float], expected: int) -> None:
    """
    Raise EmbeddingDimensionMismatch unless len(vector) == expected.

    Args:
        vector: Vector to check
        expected: Configured embedding dimension
    """
    if len(vector) != expected:
        raise EmbeddingDimensionMismatch(expected=expected, actual=len(vector))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    A zero-magnitude vector yields 0.0. The result is clamped to [-1, 1]
    to absorb floating-point drift.

    Args:
        a: First vector
        b: Second vector

    Returns:
        float: Similarity in [-1, 1]

    Raises:
        EmbeddingDimensionMismatch: Vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise EmbeddingDimensionMismatch(expected=va.shape[0], actual=vb.shape[0])

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))
