"""API module."""

from fastapi import APIRouter

from .endpoints import links, memories

router = APIRouter()

# Include endpoint routers
router.include_router(memories.router, prefix="/memories", tags=["memories"])
router.include_router(links.router, prefix="/links", tags=["links"])
