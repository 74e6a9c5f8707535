"""Pytest configuration and fixtures for Memory Cloud tests."""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from memory_cloud.core.config import Settings
from memory_cloud.core.errors import RateLimitError
from memory_cloud.domain.models import Memory, TextAnalysis, ThemeVector

BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


def theme(core: Sequence[tuple[str, float]] = (("memory", 1.0),), **axes: Sequence[tuple[str, float]]) -> ThemeVector:
    """Build a normalized theme vector from (label, weight) pairs."""
    raw: dict[str, Any] = {"emotional_core": [{"label": label, "weight": weight} for label, weight in core]}
    for name, entries in axes.items():
        raw[name] = [{"label": label, "weight": weight} for label, weight in entries]
    return ThemeVector.normalized(raw)


def unit_vector(index: int, size: int = 8) -> list[float]:
    vector = [0.0] * size
    vector[index] = 1.0
    return vector


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEmbeddings:
    """Embedding capability returning canned vectors per text."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, default: list[float] | None = None):
        self.vectors = vectors or {}
        self.default = default
        self.calls: list[str] = []

    async def embed_text(self, text: str) -> list[float] | None:
        self.calls.append(text)
        return self.vectors.get(text, self.default)


class FakeAnalysis:
    """Text-analysis capability with scripted answers."""

    def __init__(
        self,
        analysis: TextAnalysis | Exception | None = None,
        proposed: str | Exception | None = None,
        broadened: str | Exception | None = None,
    ):
        self.analysis = analysis or TextAnalysis(mood="Longing", tags=["sea"], theme_vector=theme())
        self.proposed = proposed
        self.broadened = broadened
        self.brief: dict[str, Any] = {"title": "Salt", "logline": "A coastline remembered."}
        self.calls: list[tuple[str, Any]] = []

    async def classify(self, text: str, existing: Sequence[str]) -> TextAnalysis:
        self.calls.append(("classify", list(existing)))
        if isinstance(self.analysis, Exception):
            raise self.analysis
        return self.analysis

    async def propose_new_name(self, text: str, existing: Sequence[str]) -> str | None:
        self.calls.append(("propose_new_name", list(existing)))
        if isinstance(self.proposed, Exception):
            raise self.proposed
        return self.proposed

    async def broaden_name(self, name: str, existing: Sequence[str]) -> str | None:
        self.calls.append(("broaden_name", name))
        if isinstance(self.broadened, Exception):
            raise self.broadened
        return self.broadened

    async def family_brief(self, mood: str, stories: Sequence[str], count: int) -> dict[str, Any]:
        self.calls.append(("family_brief", (mood, list(stories), count)))
        if isinstance(self.analysis, RateLimitError):
            raise self.analysis
        return dict(self.brief)

    async def memory_brief(self, text: str, mood: str, tags: Sequence[str]) -> dict[str, Any]:
        self.calls.append(("memory_brief", (text, mood, list(tags))))
        if isinstance(self.analysis, RateLimitError):
            raise self.analysis
        return dict(self.brief)

    def called(self, name: str) -> list[Any]:
        return [args for call, args in self.calls if call == name]


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def make_memory() -> Callable[..., Memory]:
    """Factory for memories with increasing creation times."""
    counter = {"n": 0}

    def factory(mood: str = "Longing", **fields: Any) -> Memory:
        counter["n"] += 1
        fields.setdefault("text", f"story {counter['n']}")
        fields.setdefault("created_at", BASE_TIME + timedelta(minutes=counter["n"]))
        return Memory(mood=mood, **fields)

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no provider keys and no background scheduler."""
    return Settings(
        _env_file=None,
        voyage_api_key="",
        anthropic_api_key="",
        disable_reclassification=True,
        reclassify_pause_seconds=0,
    )
