"""Memory service: ingestion, listing, links, clusters and filmmaker briefs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from memory_cloud.core.base import ErrorLevel, ResourceErrorDetails
from memory_cloud.core.constants import (
    BRIEF_FAMILY_LIMIT,
    BRIEF_SAMPLE_SIZE,
    DEFAULT_LOCATION,
    OFFLINE_REASONING,
)
from memory_cloud.core.decorators import with_error_handling
from memory_cloud.core.errors import NotFoundError, ProcessingError
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.models import (
    IngestionResult,
    Link,
    Memory,
    MemoryMetadata,
    ResponseLink,
)
from memory_cloud.services.clustering import compute_links, resolve_cluster_labels

if TYPE_CHECKING:
    from memory_cloud.core.config import Settings
    from memory_cloud.services import MemoryRepository, TextAnalysisService
    from memory_cloud.services.classification_service import ClassificationService

logger = get_logger(__name__)


def _not_found(resource_type: str, action: str, resource_id: str | None, message: str) -> NotFoundError:
    return NotFoundError(
        message=message,
        details=ResourceErrorDetails(
            source="MemoryService",
            operation=action,
            resource_id=resource_id,
            resource_type=resource_type,
            action=action,
        ),
    )


class MemoryService:
    """Coordinates the repository, the classifier and the analysis capability."""

    def __init__(
        self,
        repository: MemoryRepository,
        classifier: ClassificationService,
        analysis: TextAnalysisService,
        settings: Settings,
    ):
        self.repository = repository
        self.classifier = classifier
        self.analysis = analysis
        self.settings = settings

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def ingest(
        self,
        text: str,
        voice_note_url: str | None = None,
        metadata: dict[str, Any] | MemoryMetadata | None = None,
    ) -> IngestionResult:
        """Classify a new story, place it in a family and store it.

        Args:
            text: The story
            voice_note_url: Optional link to a recording
            metadata: Optional emotion / setting / timeDistance / confusion

        Raises:
            ProcessingError: If the text is empty
        """
        if not isinstance(text, str) or not text.strip():
            raise ProcessingError(
                message="Text is required",
                details={"source": "MemoryService", "operation": "ingest"},
            )

        logger.info(f"Ingesting: {text[:50]}...")
        result = await self.classifier.classify_and_assign(text)

        if isinstance(metadata, MemoryMetadata):
            cleaned_metadata = metadata
        else:
            cleaned_metadata = MemoryMetadata.model_validate(metadata or {})

        memory = Memory(
            text=text,
            mood=result.final_mood,
            tags=result.tags,
            color=result.color,
            theme_vector=result.theme_vector,
            embedding=result.embedding,
            voice_note_url=voice_note_url.strip() if isinstance(voice_note_url, str) else "",
            metadata=cleaned_metadata,
            location=DEFAULT_LOCATION,
            offline=result.offline,
        )
        await self.repository.add(memory)

        return IngestionResult(
            memory=memory,
            is_new_family=result.is_new_family,
            reasoning=result.reasoning or OFFLINE_REASONING,
            cluster_decision=result.decision_trace,
            offline_mode=result.offline,
        )

    async def list_recent(self, limit: int | None = None) -> list[Memory]:
        return await self.repository.list_recent(limit or self.settings.listing_limit)

    async def families(self) -> list[str]:
        """Distinct family names currently in use."""
        return await self.repository.distinct_moods()

    async def get_memory(self, memory_id: UUID) -> Memory:
        memory = await self.repository.get(memory_id)
        if memory is None:
            raise _not_found("memory", "read", str(memory_id), "Memory not found")
        return memory

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def family_brief(self, mood: str) -> dict[str, Any]:
        """Filmmaker brief for a whole family.

        Raises:
            ProcessingError: If no mood is given
            NotFoundError: If the family has no memories
            RateLimitError: If the capability budget is exhausted
        """
        if not isinstance(mood, str) or not mood.strip():
            raise ProcessingError(
                message="Mood family required",
                details={"source": "MemoryService", "operation": "family_brief"},
            )

        memories = await self.repository.find_by_mood(mood, BRIEF_FAMILY_LIMIT)
        if not memories:
            raise _not_found("family", "family_brief", mood, "No memories found for this mood")

        stories = [memory.text for memory in memories[:BRIEF_SAMPLE_SIZE]]
        brief = await self.analysis.family_brief(mood, stories, len(memories))
        return {**brief, "mood": mood, "count": len(memories)}

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def memory_brief(self, memory_id: UUID) -> dict[str, Any]:
        """Filmmaker brief for one memory.

        Raises:
            NotFoundError: If the memory does not exist
            RateLimitError: If the capability budget is exhausted
        """
        memory = await self.get_memory(memory_id)
        return await self.analysis.memory_brief(memory.text, memory.mood, memory.tags)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def attach_link(self, memory_id: UUID, payload: Any) -> Memory:
        """Attach an external response (URL string or object) to a memory.

        Raises:
            ProcessingError: If the payload carries no URL
            NotFoundError: If the memory does not exist
        """
        link = ResponseLink.from_payload(payload)
        if link is None:
            raise ProcessingError(
                message="Valid link required",
                details={"source": "MemoryService", "operation": "attach_link", "memory_id": str(memory_id)},
            )

        memory = await self.repository.attach_link(memory_id, link)
        if memory is None:
            raise _not_found("memory", "attach_link", str(memory_id), "Memory not found")
        return memory

    async def _link_window(self) -> list[Memory]:
        return await self.repository.list_recent(self.settings.link_window)

    async def links(self) -> list[Link]:
        """Links over the most recent window of memories."""
        return compute_links(await self._link_window(), cap=self.settings.link_cap)

    async def cluster_labels(self) -> dict[UUID, str]:
        """Cluster label per memory for the same window the links use."""
        window = await self._link_window()
        return resolve_cluster_labels(window, compute_links(window, cap=self.settings.link_cap))
