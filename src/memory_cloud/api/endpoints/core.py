"""Core API endpoints for Memory Cloud."""

from fastapi import APIRouter

from memory_cloud import __version__
from memory_cloud.domain.models import utc_now

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with application status."""
    return {
        "message": "Memory Cloud API",
        "version": __version__,
        "status": "running",
        "features": [
            "family_assignment",
            "idea_links",
            "cluster_labels",
            "offline_reclassification",
            "filmmaker_briefs",
        ],
    }


@router.get("/health", operation_id="health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": utc_now().isoformat()}
