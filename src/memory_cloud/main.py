"""Memory Cloud FastAPI application.

Wires the repository, capability adapters, classifier and background
re-classification sweep into the application lifecycle.
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import logfire
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from memory_cloud import __version__
from memory_cloud.api import dependencies, router as api_router
from memory_cloud.api.endpoints import admin, core
from memory_cloud.core.base import ApplicationError
from memory_cloud.core.budget import CapabilityBudget
from memory_cloud.core.config import Settings, settings as default_settings
from memory_cloud.core.handlers import GlobalErrorHandler
from memory_cloud.core.logging import get_logger, setup_logging
from memory_cloud.infrastructure.embeddings.voyage import VoyageEmbeddingService
from memory_cloud.infrastructure.llm.anthropic_analysis import AnthropicTextAnalysisService
from memory_cloud.infrastructure.repositories.memory import InMemoryMemoryRepository
from memory_cloud.services import EmbeddingService, MemoryRepository, TextAnalysisService
from memory_cloud.services.classification_service import ClassificationService
from memory_cloud.services.clustering import FamilyProfileSource
from memory_cloud.services.memory_service import MemoryService
from memory_cloud.services.reprocessing import ReclassificationOrchestrator

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    repository: MemoryRepository | None = None,
    analysis: TextAnalysisService | None = None,
    embeddings: EmbeddingService | None = None,
    budget: CapabilityBudget | None = None,
) -> FastAPI:
    """Build the application; any collaborator left as None gets its default."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
        """Application lifecycle manager with re-classification sweep integration."""
        orchestrator: ReclassificationOrchestrator | None = None
        logger.info("Starting Memory Cloud application...")

        try:
            gate = budget or CapabilityBudget(
                "provider",
                quota=settings.capability_quota,
                window_seconds=settings.capability_window_seconds,
            )
            store = repository if repository is not None else InMemoryMemoryRepository()
            text_analysis = analysis or AnthropicTextAnalysisService(gate, settings=settings)
            embedding_service = embeddings or VoyageEmbeddingService(gate, settings=settings)

            classifier = ClassificationService(
                analysis=text_analysis,
                embeddings=embedding_service,
                profiles=FamilyProfileSource(store, sample_limit=settings.family_sample_limit),
            )

            # Set global dependencies for API endpoints
            dependencies.memory_service = MemoryService(store, classifier, text_analysis, settings)
            orchestrator = ReclassificationOrchestrator(store, classifier, gate, settings)
            dependencies.orchestrator = orchestrator

            if not settings.disable_reclassification:
                await orchestrator.start()
            else:
                logger.info("Background re-classification disabled by configuration")

            logger.info("Memory Cloud application started successfully!")
            yield

        except Exception as e:
            logger.error(f"Failed to start Memory Cloud: {e}", exc_info=True)
            raise

        finally:
            logger.info("Shutting down Memory Cloud...")
            if orchestrator:
                await orchestrator.shutdown()
            dependencies.memory_service = None
            dependencies.orchestrator = None
            logger.info("Memory Cloud shutdown complete")

    app = FastAPI(
        title="Memory Cloud API",
        description="Emotional family assignment and idea links for short personal stories",
        version=__version__,
        lifespan=lifespan,
    )

    # Enable FastAPI instrumentation for request tracing
    logfire.instrument_fastapi(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApplicationError, GlobalErrorHandler())

    app.include_router(api_router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    app.include_router(core.router)
    return app


def configure_observability() -> None:
    """Configure Logfire and structlog for a server process."""
    logfire.configure(
        service_name="memory-cloud",
        token=os.getenv("LOGFIRE_TOKEN"),
        send_to_logfire="if-token-present",
    )
    setup_logging()


if __name__ == "__main__":
    """Development server entry point."""
    configure_observability()
    logger.info("Starting Memory Cloud development server...")

    uvicorn.run(
        "memory_cloud.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=default_settings.debug,
        log_level="info",
        access_log=True,
    )
