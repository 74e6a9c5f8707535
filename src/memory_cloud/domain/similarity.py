"""Similarity primitives shared by family scoring.

All functions are pure and bounded in [0, 1] for well-formed inputs, with
the exception of cosine similarity which can go negative for opposed vectors.
"""

from collections.abc import Iterable, Sequence

import numpy as np

from memory_cloud.core.constants import MIN_EMBEDDING_LENGTH, THEME_AXES
from memory_cloud.domain.models.memory import normalize_tags
from memory_cloud.domain.models.theme import ThemeEntry, ThemeVector, axis_weights


def is_usable_embedding(embedding: Sequence[float] | None) -> bool:
    """An embedding carries signal only if it is long enough and not all zeros."""
    if embedding is None or len(embedding) < MIN_EMBEDDING_LENGTH:
        return False
    return float(np.sum(np.abs(np.asarray(embedding, dtype=float)))) > 0


def axis_similarity(left: Iterable[ThemeEntry] | None, right: Iterable[ThemeEntry] | None) -> float:
    """Dot product of two label->weight maps (not cosine normalized)."""
    left_weights = axis_weights(left)
    right_weights = axis_weights(right)
    if not left_weights or not right_weights:
        return 0.0
    return sum(weight * right_weights.get(label, 0.0) for label, weight in left_weights.items())


def theme_similarity(left: ThemeVector | None, right: ThemeVector | None) -> float:
    """Mean axis similarity over all five axes; a missing side scores 0 on every axis."""
    if left is None or right is None:
        return 0.0
    scores = [axis_similarity(left.axis(name), right.axis(name)) for name in THEME_AXES]
    return sum(scores) / len(scores)


def tag_similarity(left: Iterable[str] | None, right: Iterable[str] | None) -> float:
    """Jaccard index of the normalized tag sets."""
    left_set = set(normalize_tags(list(left or ())))
    right_set = set(normalize_tags(list(right or ())))
    if not left_set or not right_set:
        return 0.0
    intersection = len(left_set & right_set)
    union = len(left_set | right_set)
    return intersection / union if union else 0.0


def embedding_similarity(left: Sequence[float], right: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Vectors of different length are compared over their common prefix.

    Returns:
        Cosine similarity in range [-1, 1], or 0.0 if either vector has zero norm
    """
    length = min(len(left), len(right))
    if length == 0:
        return 0.0
    a = np.asarray(left[:length], dtype=float)
    b = np.asarray(right[:length], dtype=float)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))
