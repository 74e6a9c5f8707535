"""Family assignment for new and re-processed memories.

The policy, in order, once a candidate has been scored against every
existing family:

1. similarity: reuse the best family when it clears the threshold and either
   leads the runner-up by the margin or clears the strong threshold;
2. ai-new: accept the suggested name when no family carries it yet;
3. ai-existing: accept the suggested existing family when its own score is
   within the slack of the threshold;
4. ai-override: ask for a fresh name, falling back to the suggestion.

New names then get one broadening pass towards a more archetypal label.
"""

import random
from collections.abc import Sequence

from memory_cloud.core.base import ErrorLevel
from memory_cloud.core.constants import (
    DECISION_MARGIN,
    FAILED_PARSE_COLOR,
    FAILED_PARSE_MOOD,
    FALLBACK_TAGS,
    OFFLINE_MOODS,
    OFFLINE_REASONING,
    OFFLINE_TAGS,
    STRONG_THRESHOLD_WITH_EMBEDDING,
    STRONG_THRESHOLD_WITHOUT_EMBEDDING,
    SUGGESTED_EXISTING_SLACK,
    THRESHOLD_WITH_EMBEDDING,
    THRESHOLD_WITHOUT_EMBEDDING,
)
from memory_cloud.core.decorators import with_error_handling
from memory_cloud.core.errors import MalformedResponseError, RateLimitError, ServiceError
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.models import (
    Candidate,
    ClassificationResult,
    DecidedBy,
    DecisionTrace,
    FamilyMatch,
    Memory,
    TextAnalysis,
    ThemeVector,
)
from memory_cloud.domain.similarity import is_usable_embedding
from memory_cloud.services import EmbeddingService, TextAnalysisService
from memory_cloud.services.clustering import FamilyProfileSource, rank_families

logger = get_logger(__name__)


def thresholds_for(candidate: Candidate, best: FamilyMatch | None) -> tuple[float, float]:
    """Return (threshold, strong_threshold) for the winning comparison."""
    embedding_backed = (
        is_usable_embedding(candidate.embedding) and best is not None and best.components.has_embedding
    )
    if embedding_backed:
        return THRESHOLD_WITH_EMBEDDING, STRONG_THRESHOLD_WITH_EMBEDDING
    return THRESHOLD_WITHOUT_EMBEDDING, STRONG_THRESHOLD_WITHOUT_EMBEDDING


def offline_analysis(rng: random.Random | None = None) -> TextAnalysis:
    """Placeholder analysis used while the capability budget is exhausted."""
    mood, color = (rng or random).choice(OFFLINE_MOODS)
    return TextAnalysis(
        mood=mood,
        tags=list(OFFLINE_TAGS),
        color=color,
        theme_vector=ThemeVector.fallback(),
        reasoning=OFFLINE_REASONING,
        offline=True,
    )


def failed_parse_analysis() -> TextAnalysis:
    """Analysis used when the provider answered with something unusable."""
    return TextAnalysis(
        mood=FAILED_PARSE_MOOD,
        tags=list(FALLBACK_TAGS),
        color=FAILED_PARSE_COLOR,
        theme_vector=ThemeVector.fallback(),
    )


class ClassificationService:
    """Decides which family a story belongs to."""

    def __init__(
        self,
        analysis: TextAnalysisService,
        embeddings: EmbeddingService,
        profiles: FamilyProfileSource,
        rng: random.Random | None = None,
    ):
        self.analysis = analysis
        self.embeddings = embeddings
        self.profiles = profiles
        self.rng = rng or random.Random()

    async def analyze(self, text: str, existing: Sequence[str]) -> TextAnalysis:
        """Run the classification capability, absorbing its failures."""
        try:
            return await self.analysis.classify(text, existing)
        except RateLimitError:
            logger.warning("Classification budget exhausted, using offline mode")
            return offline_analysis(self.rng)
        except (MalformedResponseError, ServiceError) as e:
            logger.error(f"Classification failed, using defaults: {e.message}", error_code=e.code.value)
            return failed_parse_analysis()

    async def embed(self, text: str) -> list[float]:
        embedding = await self.embeddings.embed_text(text)
        return embedding if embedding is not None else []

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False, default=None)
    async def _propose_new_name(self, text: str, existing: Sequence[str]) -> str | None:
        name = await self.analysis.propose_new_name(text, existing)
        return name.strip() if isinstance(name, str) and name.strip() else None

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False, default=None)
    async def _broaden_name(self, name: str, existing: Sequence[str]) -> str | None:
        broadened = await self.analysis.broaden_name(name, existing)
        return broadened.strip() if isinstance(broadened, str) and broadened.strip() else None

    async def _broaden(self, mood: str, existing: Sequence[str]) -> tuple[str, bool]:
        """One broadening pass; newness is re-evaluated by name only."""
        broadened = await self._broaden_name(mood, existing)
        if broadened and broadened != mood:
            logger.info(f"Broadened family name '{mood}' -> '{broadened}'")
            mood = broadened
        return mood, mood not in existing

    async def decide(
        self,
        text: str,
        suggested: str,
        candidate: Candidate,
        ranked: Sequence[FamilyMatch],
        existing: Sequence[str],
    ) -> tuple[str, bool, DecisionTrace]:
        """Apply the assignment policy to a ranked list of family matches."""
        best = ranked[0] if ranked else None
        second_score = ranked[1].score if len(ranked) > 1 else 0.0
        best_margin = best.score - second_score if best else 0.0
        threshold, strong_threshold = thresholds_for(candidate, best)

        def trace(decided_by: DecidedBy) -> DecisionTrace:
            return DecisionTrace(
                decided_by=decided_by,
                best_match=best.mood if best else None,
                best_score=best.score if best else None,
            )

        if best and best.score >= threshold and (best_margin >= DECISION_MARGIN or best.score >= strong_threshold):
            return best.mood, False, trace(DecidedBy.SIMILARITY)

        if suggested not in existing:
            return suggested, True, trace(DecidedBy.AI_NEW)

        suggested_match = next((match for match in ranked if match.mood == suggested), None)
        if suggested_match and suggested_match.score >= threshold - SUGGESTED_EXISTING_SLACK:
            return suggested, False, trace(DecidedBy.AI_EXISTING)

        proposed = await self._propose_new_name(text, existing)
        final_mood = proposed or suggested
        return final_mood, final_mood not in existing, trace(DecidedBy.AI_OVERRIDE)

    async def classify_and_assign(self, text: str) -> ClassificationResult:
        """Analyze a new story and assign it to a family."""
        existing = await self.profiles.existing_moods()
        analysis = await self.analyze(text, existing)
        embedding = await self.embed(text)
        candidate = Candidate(embedding=embedding, theme_vector=analysis.theme_vector, tags=analysis.tags)

        if analysis.offline or not existing:
            final_mood = analysis.mood
            is_new_family = not existing
            decision = DecisionTrace(decided_by=DecidedBy.OFFLINE if analysis.offline else DecidedBy.AI_NEW)
        else:
            profiles = await self.profiles.build_profiles(moods=existing)
            ranked = rank_families(candidate, profiles)
            final_mood, is_new_family, decision = await self.decide(
                text, analysis.mood, candidate, ranked, existing
            )
            if ranked:
                logger.info(
                    f"Best family match '{ranked[0].mood}'",
                    score=round(ranked[0].score, 3),
                    decided_by=decision.decided_by.value,
                )
            if is_new_family:
                final_mood, is_new_family = await self._broaden(final_mood, existing)

        if analysis.offline:
            logger.info(f"Offline classification: {final_mood}")
        elif is_new_family:
            logger.info(f"New family created: {final_mood}")
        else:
            logger.info(f"Added to existing family: {final_mood}")

        return ClassificationResult(
            final_mood=final_mood,
            is_new_family=is_new_family,
            decision_trace=decision,
            theme_vector=analysis.theme_vector,
            tags=analysis.tags,
            embedding=embedding,
            color=analysis.color,
            reasoning=analysis.reasoning,
            offline=analysis.offline,
        )

    async def reclassify(self, memory: Memory) -> Memory:
        """Re-run classification for a memory stored while offline.

        Uses the simpler policy of the sweep: reuse the best family whenever it
        clears the threshold, otherwise keep the suggestion. RateLimitError and
        MalformedResponseError propagate so the caller can stop or skip.

        Returns:
            An updated copy of the memory with ``offline`` cleared
        """
        existing = await self.profiles.existing_moods()
        analysis = await self.analysis.classify(memory.text, existing)
        embedding = await self.embed(memory.text)
        candidate = Candidate(embedding=embedding, theme_vector=analysis.theme_vector, tags=analysis.tags)

        final_mood = analysis.mood
        profiles = await self.profiles.build_profiles(exclude_id=memory.id, moods=existing)
        if profiles:
            ranked = rank_families(candidate, profiles)
            best = ranked[0]
            threshold, _ = thresholds_for(candidate, best)
            if best.score >= threshold:
                final_mood = best.mood

        if final_mood not in existing:
            final_mood, _ = await self._broaden(final_mood, existing)

        return memory.model_copy(
            update={
                "mood": final_mood,
                "tags": analysis.tags,
                "color": analysis.color,
                "theme_vector": analysis.theme_vector,
                "embedding": embedding,
                "offline": False,
            }
        )
