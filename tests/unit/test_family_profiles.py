"""
Unit tests for family aggregation and candidate scoring.
"""

import pytest

from memory_cloud.domain.models import Candidate, FamilyProfile
from memory_cloud.infrastructure.repositories.memory import InMemoryMemoryRepository
from memory_cloud.services.clustering import (
    FamilyProfileSource,
    build_family_profiles,
    rank_families,
    score_family_match,
)

from conftest import theme, unit_vector


class TestBuildFamilyProfiles:
    def test_one_profile_per_mood_in_first_seen_order(self, make_memory):
        memories = [make_memory("Grief"), make_memory("Joy"), make_memory("Grief"), make_memory("  ")]
        profiles = build_family_profiles(memories)
        assert [(profile.mood, profile.size) for profile in profiles] == [("Grief", 2), ("Joy", 1)]

    def test_mean_embedding_uses_only_usable_vectors(self, make_memory):
        memories = [
            make_memory("Grief", embedding=unit_vector(0)),
            make_memory("Grief", embedding=unit_vector(1)),
            make_memory("Grief", embedding=[0.0] * 8),
            make_memory("Grief", embedding=[1.0, 1.0]),
        ]
        profile = build_family_profiles(memories)[0]
        assert profile.embedding == pytest.approx([0.5, 0.5, 0, 0, 0, 0, 0, 0])

    def test_first_usable_embedding_fixes_length(self, make_memory):
        memories = [
            make_memory("Grief", embedding=unit_vector(0, size=8)),
            make_memory("Grief", embedding=unit_vector(9, size=10)),
        ]
        profile = build_family_profiles(memories)[0]
        assert len(profile.embedding) == 8
        assert profile.embedding[0] == pytest.approx(0.5)

    def test_no_usable_embeddings_means_no_profile_embedding(self, make_memory):
        profile = build_family_profiles([make_memory("Grief")])[0]
        assert profile.embedding is None

    def test_axes_are_merged_and_renormalized(self, make_memory):
        memories = [
            make_memory("Grief", theme_vector=theme([("Loss", 1.0)])),
            make_memory("Grief", theme_vector=theme([("loss", 0.5), ("love", 0.5)])),
        ]
        core = build_family_profiles(memories)[0].theme_vector.emotional_core
        weights = {entry.label: entry.weight for entry in core}
        assert weights == pytest.approx({"loss": 0.75, "love": 0.25})

    def test_top_tags_by_frequency_then_first_seen(self, make_memory):
        memories = [
            make_memory("Grief", tags=["rain", "door"]),
            make_memory("Grief", tags=["door", "letter"]),
            make_memory("Grief", tags=["letter", "key"]),
        ]
        profile = build_family_profiles(memories)[0]
        assert profile.tags == ["door", "letter", "rain", "key"]

    def test_tags_capped_at_twelve(self, make_memory):
        memories = [make_memory("Grief", tags=[f"t{i}" for i in range(12)]), make_memory("Grief", tags=["x", "y"])]
        assert len(build_family_profiles(memories)[0].tags) == 12


class TestScoreFamilyMatch:
    def test_embedding_weights(self):
        vector = theme([("grief", 1.0)])
        candidate = Candidate(embedding=unit_vector(0), theme_vector=vector, tags=["sea"])
        family = FamilyProfile(mood="Grief", embedding=unit_vector(0), theme_vector=vector, tags=["sea"])
        match = score_family_match(candidate, family)
        assert match.components.has_embedding is True
        assert match.score == pytest.approx(1.0)

    def test_without_embedding_theme_and_tags_carry_the_weight(self):
        vector = theme([("grief", 1.0)])
        candidate = Candidate(embedding=[], theme_vector=vector, tags=["sea", "salt"])
        family = FamilyProfile(mood="Grief", embedding=unit_vector(0), theme_vector=vector, tags=["sea"])
        match = score_family_match(candidate, family)
        assert match.components.has_embedding is False
        assert match.components.embedding_score == 0.0
        assert match.score == pytest.approx(0.65 * 1.0 + 0.35 * 0.5)

    def test_score_stays_in_unit_interval(self):
        candidate = Candidate(embedding=unit_vector(0), theme_vector=theme([("joy", 1.0)]), tags=["a"])
        family = FamilyProfile(mood="Grief", embedding=unit_vector(1), theme_vector=theme([("grief", 1.0)]), tags=["b"])
        match = score_family_match(candidate, family)
        assert 0.0 <= match.score <= 1.0

    def test_rank_is_descending(self):
        candidate = Candidate(embedding=[], theme_vector=theme([("grief", 1.0)]), tags=["sea"])
        profiles = [
            FamilyProfile(mood="Joy", theme_vector=theme([("joy", 1.0)]), tags=[]),
            FamilyProfile(mood="Grief", theme_vector=theme([("grief", 1.0)]), tags=["sea"]),
        ]
        assert [match.mood for match in rank_families(candidate, profiles)] == ["Grief", "Joy"]


class TestFamilyProfileSource:
    @pytest.mark.asyncio
    async def test_excludes_memory_from_sample(self, make_memory):
        target = make_memory("Grief")
        repository = InMemoryMemoryRepository([make_memory("Joy"), target])
        source = FamilyProfileSource(repository, sample_limit=400)

        profiles = await source.build_profiles(exclude_id=target.id)

        assert [profile.mood for profile in profiles] == ["Joy"]

    @pytest.mark.asyncio
    async def test_empty_archive_has_no_profiles(self):
        source = FamilyProfileSource(InMemoryMemoryRepository())
        assert await source.build_profiles() == []
