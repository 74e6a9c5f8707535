"""Voyage AI embedding service."""

from typing import Any

import voyageai
import voyageai.error

from memory_cloud.core.base import ErrorLevel, ServiceErrorDetails
from memory_cloud.core.budget import CapabilityBudget
from memory_cloud.core.config import Settings, settings as default_settings
from memory_cloud.core.decorators import with_error_handling
from memory_cloud.core.errors import RateLimitError, ServiceError
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.similarity import is_usable_embedding

logger = get_logger(__name__)


class VoyageEmbeddingService:
    """Voyage AI embedding service implementation.

    Every call first takes a slot from the shared capability budget. Denied,
    failed or degenerate calls all come back as None, which scoring treats as
    "no embedding".
    """

    def __init__(
        self,
        budget: CapabilityBudget,
        client: Any | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the Voyage embedding service.

        Args:
            budget: Shared capability budget gate
            client: Optional pre-built ``voyageai.AsyncClient``
            settings: Optional settings override
        """
        self.settings = settings or default_settings
        self.model = self.settings.voyage_model
        self.budget = budget

        if client is None and self.settings.voyage_api_key:
            client = voyageai.AsyncClient(api_key=self.settings.voyage_api_key)
        if client is None:
            logger.warning("Voyage API key not configured, embeddings disabled")
        # voyageai client doesn't expose a public type, so we use Any here
        self.client: Any = client

    def _details(self, operation: str, status_code: int | None = None) -> ServiceErrorDetails:
        return ServiceErrorDetails(
            source="VoyageEmbeddingService",
            operation=operation,
            service_name="Voyage AI",
            endpoint="/embeddings",
            status_code=status_code,
        )

    async def _generate_embedding(self, text: str) -> list[float]:
        """Generate a fresh embedding via the Voyage API."""
        try:
            response = await self.client.embed(texts=[text], model=self.model, input_type="document")
        except voyageai.error.RateLimitError as e:
            raise RateLimitError(
                message=f"Voyage rate limit hit: {e}",
                details=self._details("embed_text", status_code=429),
            ) from e
        except voyageai.error.VoyageError as e:
            raise ServiceError(
                message=f"Voyage embedding failed: {e}",
                details=self._details("embed_text"),
            ) from e

        embeddings = getattr(response, "embeddings", None) or []
        if not embeddings:
            raise ServiceError(
                message="Voyage API returned no embeddings",
                details=self._details("embed_text", status_code=200),
            )
        return [float(value) for value in embeddings[0]]

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False, default=None)
    async def embed_text(self, text: str) -> list[float] | None:
        """Generate an embedding vector for the provided text.

        Returns:
            The embedding, or None when it was skipped, failed or carries no signal
        """
        if self.client is None or not text.strip():
            return None
        if not self.budget.try_acquire():
            logger.warning("Capability budget exhausted, skipping embedding")
            return None

        embedding = await self._generate_embedding(text)
        if not is_usable_embedding(embedding):
            logger.warning("Discarding unusable embedding", length=len(embedding))
            return None
        return embedding
