"""
Integration tests for the HTTP API.

Tests cover:
- Story submission and listing
- Error mapping (400, 404, 429)
- Filmmaker briefs and response links
- Link graph and cluster labels
- Admin job status and manual trigger
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from memory_cloud.core.budget import CapabilityBudget
from memory_cloud.core.errors import RateLimitError
from memory_cloud.domain.models import TextAnalysis
from memory_cloud.infrastructure.repositories.memory import InMemoryMemoryRepository
from memory_cloud.main import create_app

from conftest import FakeAnalysis, FakeEmbeddings, theme


@pytest.fixture
def repository():
    return InMemoryMemoryRepository()


@pytest.fixture
def analysis():
    return FakeAnalysis(TextAnalysis(mood="Longing", tags=["sea"], theme_vector=theme([("ache", 1.0)])))


@pytest.fixture
def client(test_settings, repository, analysis, clock):
    app = create_app(
        test_settings,
        repository=repository,
        analysis=analysis,
        embeddings=FakeEmbeddings(),
        budget=CapabilityBudget("test", quota=14, window_seconds=60, clock=clock),
    )
    with TestClient(app) as test_client:
        yield test_client


class TestMemories:
    def test_submit_and_list(self, client):
        response = client.post(
            "/api/memories",
            json={
                "text": "the harbor at dusk",
                "voiceNoteUrl": "https://example.com/v.mp3",
                "metadata": {"emotion": "calm"},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["mood"] == "Longing"
        assert body["isNewFamily"] is True
        assert body["clusterDecision"]["decidedBy"] == "ai-new"
        assert body["offlineMode"] is False
        assert body["voiceNoteUrl"] == "https://example.com/v.mp3"
        assert body["metadata"]["emotion"] == "calm"

        listed = client.get("/api/memories").json()
        assert [memory["id"] for memory in listed] == [body["id"]]
        assert client.get("/api/memories/families").json() == ["Longing"]

    def test_newest_first(self, client):
        first = client.post("/api/memories", json={"text": "one"}).json()
        second = client.post("/api/memories", json={"text": "two"}).json()

        listed = client.get("/api/memories").json()

        assert [memory["id"] for memory in listed] == [second["id"], first["id"]]

    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   "}])
    def test_empty_text_is_bad_request(self, client, repository, payload):
        response = client.post("/api/memories", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Text is required"
        assert len(repository) == 0

    def test_offline_submission(self, client, analysis):
        client.post("/api/memories", json={"text": "first"})
        analysis.analysis = RateLimitError("exhausted")

        body = client.post("/api/memories", json={"text": "second"}).json()

        assert body["offlineMode"] is True
        assert body["tags"] == ["offline", "auto-classified"]
        assert body["clusterDecision"]["decidedBy"] == "offline"


class TestBriefs:
    def test_family_brief(self, client):
        client.post("/api/memories", json={"text": "one"})

        response = client.post("/api/memories/family/brief", json={"mood": "Longing"})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["mood"] == "Longing"

    def test_family_brief_errors(self, client):
        assert client.post("/api/memories/family/brief", json={"mood": ""}).status_code == 400
        assert client.post("/api/memories/family/brief", json={"mood": "Nobody"}).status_code == 404

    def test_memory_brief(self, client):
        memory = client.post("/api/memories", json={"text": "one"}).json()

        response = client.post("/api/memories/competition/brief", json={"memoryId": memory["id"]})

        assert response.status_code == 200
        assert response.json()["title"] == "Salt"

    @pytest.mark.parametrize("memory_id", ["not-a-uuid", str(uuid4())])
    def test_memory_brief_unknown(self, client, memory_id):
        response = client.post("/api/memories/competition/brief", json={"memoryId": memory_id})
        assert response.status_code == 404

    def test_brief_rate_limited(self, client, analysis):
        memory = client.post("/api/memories", json={"text": "one"}).json()
        analysis.analysis = RateLimitError("exhausted")

        response = client.post("/api/memories/competition/brief", json={"memoryId": memory["id"]})

        assert response.status_code == 429
        assert response.json()["error_code"] == "2003"


class TestResponseLinks:
    def test_attach_link(self, client):
        memory = client.post("/api/memories", json={"text": "one"}).json()

        response = client.post(
            f"/api/memories/{memory['id']}/links", json={"url": "https://example.com/film", "label": "Film"}
        )

        assert response.status_code == 200
        links = response.json()["links"]
        assert links[0]["url"] == "https://example.com/film"
        assert links[0]["label"] == "Film"
        assert "createdAt" in links[0]

    def test_attach_bare_url(self, client):
        memory = client.post("/api/memories", json={"text": "one"}).json()
        response = client.post(f"/api/memories/{memory['id']}/links", json="https://example.com/reply")
        assert response.json()["links"][0]["type"] == "External"

    def test_attach_link_errors(self, client):
        memory = client.post("/api/memories", json={"text": "one"}).json()

        assert client.post(f"/api/memories/{memory['id']}/links", json={"label": "x"}).status_code == 400
        assert client.post(f"/api/memories/{uuid4()}/links", json="https://example.com").status_code == 404
        assert client.post("/api/memories/nope/links", json="https://example.com").status_code == 404


class TestLinks:
    def test_links_and_clusters(self, client):
        first = client.post("/api/memories", json={"text": "one"}).json()
        second = client.post("/api/memories", json={"text": "two"}).json()

        links = client.get("/api/links").json()
        clusters = client.get("/api/links/clusters").json()

        assert len(links) == 1
        link = links[0]
        assert {link["fromId"], link["toId"]} == {first["id"], second["id"]}
        assert link["type"] == "family"
        assert clusters == {first["id"]: "Longing", second["id"]: "Longing"}

    def test_empty_archive(self, client):
        assert client.get("/api/links").json() == []
        assert client.get("/api/links/clusters").json() == {}


class TestAdmin:
    def test_job_status(self, client):
        response = client.get("/api/admin/jobs/status")

        assert response.status_code == 200
        body = response.json()
        assert body["scheduler_running"] is False
        assert body["budget"]["quota"] == 14

    def test_trigger_reclassification(self, client, analysis):
        analysis.analysis = RateLimitError("exhausted")
        client.post("/api/memories", json={"text": "one"})
        analysis.analysis = TextAnalysis(mood="Longing", tags=["sea"], theme_vector=theme([("ache", 1.0)]))

        response = client.post("/api/admin/jobs/trigger/reclassify_offline")

        assert response.status_code == 200
        report = response.json()["report"]
        assert (report["found"], report["reprocessed"]) == (1, 1)
        assert client.get("/api/memories").json()[0]["offline"] is False

    def test_trigger_unknown_job(self, client):
        assert client.post("/api/admin/jobs/trigger/nope").status_code == 404


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
