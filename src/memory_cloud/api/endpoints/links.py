"""Link graph endpoints."""

from fastapi import APIRouter, Depends

from memory_cloud.api.dependencies import get_memory_service
from memory_cloud.services.memory_service import MemoryService

router = APIRouter()


@router.get("", operation_id="list_links")
async def list_links(service: MemoryService = Depends(get_memory_service)) -> list[dict]:
    """Strongest links among the most recent memories."""
    return [link.to_wire() for link in await service.links()]


@router.get("/clusters", operation_id="cluster_labels")
async def cluster_labels(service: MemoryService = Depends(get_memory_service)) -> dict[str, str]:
    """Cluster label for every memory in the link window."""
    labels = await service.cluster_labels()
    return {str(memory_id): label for memory_id, label in labels.items()}
