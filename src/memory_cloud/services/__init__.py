"""Service layer interfaces and implementations."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from memory_cloud.domain.models import Memory, ResponseLink, TextAnalysis, ThemeVector


@runtime_checkable
class EmbeddingService(Protocol):
    """Protocol for embedding services."""

    async def embed_text(self, text: str) -> list[float] | None:
        """Generate an embedding for one text, or None when no usable vector is available."""
        ...


@runtime_checkable
class TextAnalysisService(Protocol):
    """Protocol for the generative text-analysis capability."""

    async def classify(self, text: str, existing: Sequence[str]) -> TextAnalysis:
        """Suggest a mood, tags, color and theme vector for a story.

        Raises RateLimitError when the budget is exhausted and
        MalformedResponseError when the output cannot be parsed.
        """
        ...

    async def propose_new_name(self, text: str, existing: Sequence[str]) -> str | None:
        """Suggest a fresh family name distinct from ``existing``."""
        ...

    async def broaden_name(self, name: str, existing: Sequence[str]) -> str | None:
        """Suggest a more archetypal label for a new family name."""
        ...

    async def family_brief(self, mood: str, stories: Sequence[str], count: int) -> dict[str, Any]:
        """Filmmaker brief for a whole family."""
        ...

    async def memory_brief(self, text: str, mood: str, tags: Sequence[str]) -> dict[str, Any]:
        """Filmmaker brief for a single memory."""
        ...


@runtime_checkable
class MemoryRepository(Protocol):
    """Protocol for memory persistence."""

    async def add(self, memory: Memory) -> Memory: ...

    async def update_classification(
        self,
        memory_id: UUID,
        *,
        mood: str,
        tags: Sequence[str],
        color: str,
        theme_vector: ThemeVector,
        embedding: Sequence[float],
    ) -> Memory | None: ...

    async def get(self, memory_id: UUID) -> Memory | None: ...

    async def list_recent(self, limit: int) -> list[Memory]: ...

    async def distinct_moods(self) -> list[str]: ...

    async def sample_for_families(
        self, moods: Sequence[str], limit: int, exclude_id: UUID | None = None
    ) -> list[Memory]: ...

    async def find_by_mood(self, mood: str, limit: int) -> list[Memory]: ...

    async def find_offline(self, limit: int) -> list[Memory]: ...

    async def attach_link(self, memory_id: UUID, link: ResponseLink) -> Memory | None: ...


__all__ = ["EmbeddingService", "MemoryRepository", "TextAnalysisService"]
