"""Analysis, family profile and classification decision models."""

from enum import Enum

from pydantic import Field, field_validator

from memory_cloud.core.constants import FALLBACK_COLOR, FALLBACK_MOOD
from memory_cloud.domain.models.base import CamelModel
from memory_cloud.domain.models.memory import Memory, normalize_tags
from memory_cloud.domain.models.theme import ThemeVector


class TextAnalysis(CamelModel):
    """Cleaned output of the text-analysis capability for one story."""

    mood: str = FALLBACK_MOOD
    tags: list[str] = Field(default_factory=list)
    color: str = FALLBACK_COLOR
    theme_vector: ThemeVector = Field(default_factory=ThemeVector.fallback)
    reasoning: str | None = None
    offline: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return normalize_tags(v)


class Candidate(CamelModel):
    """The signals a new story brings to family scoring."""

    embedding: list[float] = Field(default_factory=list)
    theme_vector: ThemeVector = Field(default_factory=ThemeVector.fallback)
    tags: list[str] = Field(default_factory=list)


class FamilyProfile(CamelModel):
    """Aggregate statistics of one family, derived from a sample of its memories."""

    mood: str
    embedding: list[float] | None = None
    theme_vector: ThemeVector
    tags: list[str] = Field(default_factory=list)
    size: int = 0


class MatchComponents(CamelModel):
    embedding_score: float = 0.0
    theme_score: float = 0.0
    tag_score: float = 0.0
    has_embedding: bool = False


class FamilyMatch(CamelModel):
    """How well a candidate fits one family."""

    mood: str
    score: float
    components: MatchComponents


class DecidedBy(str, Enum):
    """Which branch of the assignment policy produced the family."""

    OFFLINE = "offline"
    SIMILARITY = "similarity"
    AI_NEW = "ai-new"
    AI_EXISTING = "ai-existing"
    AI_OVERRIDE = "ai-override"


class DecisionTrace(CamelModel):
    decided_by: DecidedBy
    best_match: str | None = None
    best_score: float | None = None


class ClassificationResult(CamelModel):
    """Everything ingestion needs to persist a classified memory."""

    final_mood: str
    is_new_family: bool
    decision_trace: DecisionTrace
    theme_vector: ThemeVector
    tags: list[str] = Field(default_factory=list)
    embedding: list[float] = Field(default_factory=list)
    color: str = FALLBACK_COLOR
    reasoning: str | None = None
    offline: bool = False


class IngestionResult(CamelModel):
    """A stored memory together with how its family was chosen."""

    memory: Memory
    is_new_family: bool
    reasoning: str
    cluster_decision: DecisionTrace
    offline_mode: bool = False

    def to_wire(self) -> dict:
        """Flatten into the memory document plus decision fields."""
        payload = self.memory.to_wire()
        payload.update(
            isNewFamily=self.is_new_family,
            reasoning=self.reasoning,
            clusterDecision=self.cluster_decision.to_wire(),
            offlineMode=self.offline_mode,
        )
        return payload
