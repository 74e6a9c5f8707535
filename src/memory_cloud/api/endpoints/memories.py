"""Memory API endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from memory_cloud.api.dependencies import get_memory_service
from memory_cloud.core.base import ResourceErrorDetails
from memory_cloud.core.errors import NotFoundError
from memory_cloud.domain.models import CamelModel
from memory_cloud.services.memory_service import MemoryService

router = APIRouter()


class IngestRequest(CamelModel):
    """Request model for submitting a story."""

    text: str = ""
    voice_note_url: str | None = None
    metadata: dict[str, Any] | None = None


class FamilyBriefRequest(CamelModel):
    mood: str = ""


class MemoryBriefRequest(CamelModel):
    memory_id: str = ""


def parse_memory_id(raw: str, action: str) -> UUID:
    """Unknown and malformed ids are both reported as a missing memory."""
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise NotFoundError(
            message="Memory not found",
            details=ResourceErrorDetails(
                source="memories_api",
                operation=action,
                resource_id=str(raw),
                resource_type="memory",
                action=action,
            ),
        ) from e


@router.get("", operation_id="list_memories")
async def list_memories(service: MemoryService = Depends(get_memory_service)) -> list[dict]:
    """The most recent memories, newest first."""
    return [memory.to_wire() for memory in await service.list_recent()]


@router.get("/families", operation_id="list_families")
async def list_families(service: MemoryService = Depends(get_memory_service)) -> list[str]:
    return await service.families()


@router.post("", operation_id="ingest_memory")
async def ingest_memory(request: IngestRequest, service: MemoryService = Depends(get_memory_service)) -> dict:
    """Classify a story into a family and store it."""
    result = await service.ingest(request.text, voice_note_url=request.voice_note_url, metadata=request.metadata)
    return result.to_wire()


@router.post("/family/brief", operation_id="family_brief")
async def family_brief(request: FamilyBriefRequest, service: MemoryService = Depends(get_memory_service)) -> dict:
    """Filmmaker brief for a whole family."""
    return await service.family_brief(request.mood)


@router.post("/competition/brief", operation_id="memory_brief")
async def memory_brief(request: MemoryBriefRequest, service: MemoryService = Depends(get_memory_service)) -> dict:
    """Filmmaker brief for a single memory."""
    return await service.memory_brief(parse_memory_id(request.memory_id, "memory_brief"))


@router.post("/{memory_id}/links", operation_id="attach_response_link")
async def attach_response_link(
    memory_id: str,
    payload: Any = Body(None),
    service: MemoryService = Depends(get_memory_service),
) -> dict:
    """Attach an external response (URL string or link object) to a memory."""
    memory = await service.attach_link(parse_memory_id(memory_id, "attach_link"), payload)
    return memory.to_wire()
