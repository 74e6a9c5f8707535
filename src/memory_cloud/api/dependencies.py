"""API dependencies."""

from fastapi import HTTPException

from memory_cloud.services.memory_service import MemoryService
from memory_cloud.services.reprocessing import ReclassificationOrchestrator

# These will be set by the main.py lifespan
memory_service: MemoryService | None = None
orchestrator: ReclassificationOrchestrator | None = None


async def get_memory_service() -> MemoryService:
    """Get the application-wide memory service."""
    if memory_service is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return memory_service


async def get_orchestrator() -> ReclassificationOrchestrator:
    """Get the re-classification orchestrator instance."""
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Re-classification orchestrator not initialized")
    return orchestrator
