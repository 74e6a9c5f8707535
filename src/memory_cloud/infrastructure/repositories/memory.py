"""In-process memory store.

Stands in for the document database: writes are serialized with an
``asyncio.Lock`` and reads return snapshots ordered by ``created_at``.
"""

import asyncio
import itertools
from collections.abc import Iterable, Sequence
from uuid import UUID

from memory_cloud.core.base import ErrorLevel
from memory_cloud.core.decorators import with_error_handling
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.models import Memory, ResponseLink, ThemeVector, normalize_tags

logger = get_logger(__name__)


class InMemoryMemoryRepository:
    """Memory repository keeping every memory in a dict keyed by id."""

    def __init__(self, memories: Iterable[Memory] = ()):
        self._memories: dict[UUID, Memory] = {}
        # Insertion sequence breaks created_at ties
        self._sequence: dict[UUID, int] = {}
        self._counter = itertools.count()
        self._lock = asyncio.Lock()
        for memory in memories:
            self._store(memory)

    def _store(self, memory: Memory) -> None:
        if memory.id not in self._sequence:
            self._sequence[memory.id] = next(self._counter)
        self._memories[memory.id] = memory

    def _ordered(self, newest_first: bool = True) -> list[Memory]:
        return sorted(
            self._memories.values(),
            key=lambda memory: (memory.created_at, self._sequence[memory.id]),
            reverse=newest_first,
        )

    def __len__(self) -> int:
        return len(self._memories)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def add(self, memory: Memory) -> Memory:
        """Store a new memory."""
        async with self._lock:
            self._store(memory)
        logger.debug(f"Stored memory {memory.id}", mood=memory.mood)
        return memory

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def update_classification(
        self,
        memory_id: UUID,
        *,
        mood: str,
        tags: Sequence[str],
        color: str,
        theme_vector: ThemeVector,
        embedding: Sequence[float],
    ) -> Memory | None:
        """Write a new classification onto the stored memory and clear ``offline``.

        Only the classification fields change; links attached since the caller
        read the memory are kept. Returns None if the memory does not exist.
        """
        async with self._lock:
            current = self._memories.get(memory_id)
            if current is None:
                return None
            updated = current.model_copy(
                update={
                    "mood": mood,
                    "tags": normalize_tags(list(tags)),
                    "color": color,
                    "theme_vector": theme_vector,
                    "embedding": list(embedding),
                    "offline": False,
                }
            )
            self._store(updated)
        return updated

    async def get(self, memory_id: UUID) -> Memory | None:
        return self._memories.get(memory_id)

    async def list_recent(self, limit: int) -> list[Memory]:
        """Most recent memories first."""
        return self._ordered()[:limit]

    async def distinct_moods(self) -> list[str]:
        """Every mood in use, in the order it first appeared."""
        moods: dict[str, None] = {}
        for memory in self._ordered(newest_first=False):
            if memory.mood:
                moods.setdefault(memory.mood, None)
        return list(moods)

    async def sample_for_families(
        self, moods: Sequence[str], limit: int, exclude_id: UUID | None = None
    ) -> list[Memory]:
        """Most recent memories whose mood is in ``moods``, for profiling."""
        wanted = set(moods)
        sample = [
            memory for memory in self._ordered() if memory.mood in wanted and memory.id != exclude_id
        ]
        return sample[:limit]

    async def find_by_mood(self, mood: str, limit: int) -> list[Memory]:
        return [memory for memory in self._ordered(newest_first=False) if memory.mood == mood][:limit]

    async def find_offline(self, limit: int) -> list[Memory]:
        """Memories classified in offline mode, oldest first."""
        return [memory for memory in self._ordered(newest_first=False) if memory.offline][:limit]

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def attach_link(self, memory_id: UUID, link: ResponseLink) -> Memory | None:
        """Append a response link; None if the memory does not exist."""
        async with self._lock:
            memory = self._memories.get(memory_id)
            if memory is None:
                return None
            updated = memory.model_copy(update={"links": [*memory.links, link]})
            self._store(updated)
        logger.info(f"Attached response link to memory {memory_id}", url=link.url)
        return updated
