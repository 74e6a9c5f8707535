"""
Unit tests for the Voyage embedding adapter.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import voyageai.error

from memory_cloud.core.budget import CapabilityBudget
from memory_cloud.infrastructure.embeddings.voyage import VoyageEmbeddingService

from conftest import unit_vector


def make_client(*responses) -> MagicMock:
    client = MagicMock()
    client.embed = AsyncMock(side_effect=list(responses))
    return client


def make_service(client, test_settings, clock, quota: int = 14) -> VoyageEmbeddingService:
    budget = CapabilityBudget("test", quota=quota, window_seconds=60, clock=clock)
    return VoyageEmbeddingService(budget=budget, client=client, settings=test_settings)


class TestEmbedText:
    @pytest.mark.asyncio
    async def test_returns_vector(self, test_settings, clock):
        client = make_client(SimpleNamespace(embeddings=[unit_vector(2, size=16)]))
        service = make_service(client, test_settings, clock)

        embedding = await service.embed_text("the sea at night")

        assert embedding == unit_vector(2, size=16)
        client.embed.assert_awaited_once_with(
            texts=["the sea at night"], model=test_settings.voyage_model, input_type="document"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("vector", [[0.0] * 16, [1.0, 2.0], [1.0] * 7 + [float("nan")]])
    async def test_unusable_vectors_become_none(self, test_settings, clock, vector):
        service = make_service(make_client(SimpleNamespace(embeddings=[vector])), test_settings, clock)
        assert await service.embed_text("a story") is None

    @pytest.mark.asyncio
    async def test_denied_budget_skips_call(self, test_settings, clock):
        client = make_client()
        service = make_service(client, test_settings, clock, quota=0)

        assert await service.embed_text("a story") is None
        client.embed.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_errors_become_none(self, test_settings, clock):
        client = make_client(voyageai.error.RateLimitError("too many"), voyageai.error.ServiceUnavailableError("down"))
        service = make_service(client, test_settings, clock)

        assert await service.embed_text("a story") is None
        assert await service.embed_text("a story") is None

    @pytest.mark.asyncio
    async def test_empty_response(self, test_settings, clock):
        service = make_service(make_client(SimpleNamespace(embeddings=[])), test_settings, clock)
        assert await service.embed_text("a story") is None

    @pytest.mark.asyncio
    async def test_no_client_or_blank_text(self, test_settings, clock):
        assert await make_service(None, test_settings, clock).embed_text("a story") is None

        client = make_client()
        assert await make_service(client, test_settings, clock).embed_text("   ") is None
        client.embed.assert_not_called()
