"""
Unit tests for the similarity primitives.

Tests cover:
- Axis dot products and their symmetry
- Theme similarity averaging across axes
- Jaccard tag similarity
- Cosine similarity and embedding usability
"""

import pytest

from memory_cloud.domain.models import ThemeEntry
from memory_cloud.domain.similarity import (
    axis_similarity,
    embedding_similarity,
    is_usable_embedding,
    tag_similarity,
    theme_similarity,
)

from conftest import theme


class TestAxisSimilarity:
    def test_dot_product_of_shared_labels(self):
        left = [ThemeEntry(label="grief", weight=0.5), ThemeEntry(label="love", weight=0.5)]
        right = [ThemeEntry(label="Grief ", weight=1.0)]
        assert axis_similarity(left, right) == pytest.approx(0.5)

    def test_symmetric(self):
        left = [ThemeEntry(label="grief", weight=0.7), ThemeEntry(label="hope", weight=0.3)]
        right = [ThemeEntry(label="hope", weight=0.6), ThemeEntry(label="grief", weight=0.4)]
        assert axis_similarity(left, right) == pytest.approx(axis_similarity(right, left))

    def test_empty_axis_scores_zero(self):
        assert axis_similarity([], [ThemeEntry(label="grief", weight=1.0)]) == 0.0
        assert axis_similarity(None, None) == 0.0

    def test_zero_weights_are_ignored(self):
        left = [ThemeEntry(label="grief", weight=0.0)]
        right = [ThemeEntry(label="grief", weight=1.0)]
        assert axis_similarity(left, right) == 0.0

    def test_duplicate_labels_are_summed(self):
        left = [ThemeEntry(label="grief", weight=0.5), ThemeEntry(label="GRIEF", weight=0.5)]
        right = [ThemeEntry(label="grief", weight=1.0)]
        assert axis_similarity(left, right) == pytest.approx(1.0)


class TestThemeSimilarity:
    def test_identical_vectors_score_one(self):
        vector = theme([("grief", 1.0)])
        assert theme_similarity(vector, vector) == pytest.approx(1.0)

    def test_mean_over_five_axes(self):
        left = theme([("grief", 1.0)])
        right = theme([("joy", 1.0)])
        # Only the emotional core differs; the four fallback axes match exactly
        assert theme_similarity(left, right) == pytest.approx(4 / 5)

    def test_missing_vector_scores_zero(self):
        assert theme_similarity(theme(), None) == 0.0


class TestTagSimilarity:
    def test_jaccard(self):
        assert tag_similarity(["sea", "salt", "father"], ["sea", "salt", "boat"]) == pytest.approx(2 / 4)

    def test_case_and_duplicates_normalized(self):
        assert tag_similarity(["Sea", "sea"], ["SEA"]) == pytest.approx(1.0)

    def test_empty_side_scores_zero(self):
        assert tag_similarity([], ["sea"]) == 0.0


class TestEmbeddings:
    @pytest.mark.parametrize(
        "embedding, usable",
        [
            (None, False),
            ([0.1] * 7, False),
            ([0.0] * 8, False),
            ([0.0] * 7 + [0.2], True),
        ],
    )
    def test_usability(self, embedding, usable):
        assert is_usable_embedding(embedding) is usable

    def test_cosine(self):
        assert embedding_similarity([1, 0, 0], [1, 0, 0]) == pytest.approx(1.0)
        assert embedding_similarity([1, 0, 0], [0, 1, 0]) == pytest.approx(0.0)
        assert embedding_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_zero_norm_scores_zero(self):
        assert embedding_similarity([0, 0, 0], [1, 2, 3]) == 0.0

    def test_different_lengths_use_common_prefix(self):
        assert embedding_similarity([1, 0, 5], [1, 0]) == pytest.approx(1.0)
