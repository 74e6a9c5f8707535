"""Family profiles and candidate-to-family scoring."""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING
from uuid import UUID

import numpy as np

from memory_cloud.core.constants import (
    EMBEDDING_WEIGHTS,
    MAX_TAGS,
    NO_EMBEDDING_WEIGHTS,
    PROFILE_AXIS_FALLBACK,
    THEME_AXES,
)
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.models import (
    Candidate,
    FamilyMatch,
    FamilyProfile,
    MatchComponents,
    Memory,
    ThemeVector,
    axis_weights,
    normalize_axis,
    normalize_tags,
)
from memory_cloud.domain.similarity import (
    embedding_similarity,
    is_usable_embedding,
    tag_similarity,
    theme_similarity,
)

if TYPE_CHECKING:
    from memory_cloud.services import MemoryRepository

logger = get_logger(__name__)


class _FamilyAccumulator:
    def __init__(self, mood: str):
        self.mood = mood
        self.size = 0
        self.embedding_sum: np.ndarray | None = None
        self.embedding_count = 0
        self.axis_sums: dict[str, dict[str, float]] = {name: {} for name in THEME_AXES}
        # dict preserves first-seen order, which breaks frequency ties
        self.tag_counts: dict[str, int] = {}

    def add(self, memory: Memory) -> None:
        self.size += 1

        if is_usable_embedding(memory.embedding):
            vector = np.asarray(memory.embedding, dtype=float)
            if self.embedding_sum is None:
                self.embedding_sum = vector.copy()
            else:
                # The first usable embedding fixes the length
                width = len(self.embedding_sum)
                padded = np.zeros(width)
                padded[: min(width, len(vector))] = vector[:width]
                self.embedding_sum += padded
            self.embedding_count += 1

        for name in THEME_AXES:
            sums = self.axis_sums[name]
            for label, weight in axis_weights(memory.theme_vector.axis(name)).items():
                sums[label] = sums.get(label, 0.0) + weight

        for tag in normalize_tags(memory.tags):
            self.tag_counts[tag] = self.tag_counts.get(tag, 0) + 1

    def profile(self) -> FamilyProfile:
        embedding = None
        if self.embedding_sum is not None and self.embedding_count:
            embedding = (self.embedding_sum / self.embedding_count).tolist()

        theme_vector = ThemeVector(
            **{
                name: normalize_axis(
                    [{"label": label, "weight": weight} for label, weight in sums.items()],
                    PROFILE_AXIS_FALLBACK,
                )
                for name, sums in self.axis_sums.items()
            }
        )

        ranked = sorted(self.tag_counts.items(), key=lambda item: item[1], reverse=True)
        return FamilyProfile(
            mood=self.mood,
            embedding=embedding,
            theme_vector=theme_vector,
            tags=[tag for tag, _ in ranked[:MAX_TAGS]],
            size=self.size,
        )


def build_family_profiles(memories: Iterable[Memory]) -> list[FamilyProfile]:
    """Aggregate a sample of memories into one profile per mood.

    Profiles come back in the order each mood is first seen in the sample.
    Memories with a blank mood are ignored.
    """
    families: dict[str, _FamilyAccumulator] = {}
    for memory in memories:
        mood = memory.mood.strip() if isinstance(memory.mood, str) else ""
        if not mood:
            continue
        if mood not in families:
            families[mood] = _FamilyAccumulator(mood)
        families[mood].add(memory)
    return [accumulator.profile() for accumulator in families.values()]


def score_family_match(candidate: Candidate, family: FamilyProfile) -> FamilyMatch:
    """Weighted blend of embedding, theme and tag similarity.

    When either side lacks a usable embedding the theme and tag signals carry
    the whole weight.
    """
    has_embedding = is_usable_embedding(candidate.embedding) and is_usable_embedding(family.embedding)
    embedding_score = embedding_similarity(candidate.embedding, family.embedding) if has_embedding else 0.0
    theme_score = theme_similarity(candidate.theme_vector, family.theme_vector)
    tag_score = tag_similarity(candidate.tags, family.tags)

    weights = EMBEDDING_WEIGHTS if has_embedding else NO_EMBEDDING_WEIGHTS
    total_weight = sum(weights.values()) or 1.0
    score = (
        embedding_score * weights["embedding"] + theme_score * weights["theme"] + tag_score * weights["tags"]
    ) / total_weight

    return FamilyMatch(
        mood=family.mood,
        score=score,
        components=MatchComponents(
            embedding_score=embedding_score,
            theme_score=theme_score,
            tag_score=tag_score,
            has_embedding=has_embedding,
        ),
    )


def rank_families(candidate: Candidate, profiles: Iterable[FamilyProfile]) -> list[FamilyMatch]:
    """Score the candidate against every profile, best first (stable on ties)."""
    matches = [score_family_match(candidate, profile) for profile in profiles]
    return sorted(matches, key=lambda match: match.score, reverse=True)


class FamilyProfileSource:
    """Builds family profiles from a fresh repository sample on every call."""

    def __init__(self, repository: "MemoryRepository", sample_limit: int = 400):
        self.repository = repository
        self.sample_limit = sample_limit

    async def existing_moods(self) -> list[str]:
        return await self.repository.distinct_moods()

    async def build_profiles(
        self, exclude_id: UUID | None = None, moods: Sequence[str] | None = None
    ) -> list[FamilyProfile]:
        if moods is None:
            moods = await self.repository.distinct_moods()
        if not moods:
            return []
        sample = await self.repository.sample_for_families(moods, self.sample_limit, exclude_id=exclude_id)
        profiles = build_family_profiles(sample)
        logger.debug(
            f"Built {len(profiles)} family profiles",
            sample_size=len(sample),
            excluded=str(exclude_id) if exclude_id else None,
        )
        return profiles
