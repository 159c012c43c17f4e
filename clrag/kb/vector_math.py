"""Vector utilities for client-side similarity scoring."""

import math
from collections.abc import Sequence
from numbers import Real


def _is_vector(value: object) -> bool:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return False
    return all(isinstance(v, Real) and not isinstance(v, bool) for v in value)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns 0.0 instead of raising when either input is not a numeric
    sequence, the lengths differ, or either vector has zero magnitude.
    """
    if not _is_vector(a) or not _is_vector(b) or len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    # Rounding can push identical vectors just past 1.0
    return max(-1.0, min(1.0, similarity))


def normalize(v: Sequence[float]) -> list[float]:
    """Scale a vector to unit length; zero vectors are returned unchanged."""
    magnitude = math.sqrt(sum(x * x for x in v))
    if magnitude == 0.0:
        return list(v)
    return [x / magnitude for x in v]
