"""Memory, link and attachment models."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from memory_cloud.core.constants import DEFAULT_LOCATION, FALLBACK_COLOR, MAX_TAGS
from memory_cloud.domain.models.base import CamelModel, utc_now
from memory_cloud.domain.models.theme import ThemeVector


def normalize_tags(tags: Any) -> list[str]:
    """Lower-case, trim, de-duplicate and cap a tag list, keeping order."""
    if not isinstance(tags, list | tuple | set | frozenset):
        return []
    normalized: list[str] = []
    for tag in tags:
        if tag is None:
            continue
        cleaned = str(tag).strip().lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
        if len(normalized) == MAX_TAGS:
            break
    return normalized


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class MemoryMetadata(CamelModel):
    """Free-form context the storyteller may add at submission."""

    emotion: str = ""
    setting: str = ""
    time_distance: str = ""
    confusion: str = ""

    @field_validator("emotion", "setting", "time_distance", "confusion", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return _clean_text(v)


class ResponseLink(CamelModel):
    """An external response attached to a memory (a film, a reply, an article)."""

    url: str
    label: str = "Response"
    type: str = "External"
    notes: str = ""
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_payload(cls, payload: Any) -> "ResponseLink | None":
        """Build a link from a bare URL string or a loose mapping; None if no URL."""
        if not payload:
            return None
        if isinstance(payload, str):
            url = payload.strip()
            return cls(url=url) if url else None
        if not isinstance(payload, dict):
            return None
        url = _clean_text(payload.get("url"))
        if not url:
            return None
        return cls(
            url=url,
            label=_clean_text(payload.get("label")) or "Response",
            type=_clean_text(payload.get("type")) or "External",
            notes=_clean_text(payload.get("notes")),
        )


class Memory(CamelModel):
    """A short story placed in exactly one emotional family."""

    id: UUID = Field(default_factory=uuid4)
    text: str
    mood: str
    tags: list[str] = Field(default_factory=list)
    color: str = FALLBACK_COLOR
    theme_vector: ThemeVector = Field(default_factory=ThemeVector.fallback)
    embedding: list[float] = Field(default_factory=list)
    voice_note_url: str = ""
    metadata: MemoryMetadata = Field(default_factory=MemoryMetadata)
    location: str = DEFAULT_LOCATION
    links: list[ResponseLink] = Field(default_factory=list)
    offline: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str]:
        return normalize_tags(v)

    def __str__(self) -> str:
        return f"Memory(mood='{self.mood}', text='{self.text[:40]}...')"


class LinkType(str, Enum):
    """Kinds of edges drawn between memories."""

    FAMILY = "family"
    IDEA = "idea"
    CURATED = "curated"
    DIRECTIONAL = "directional"


class Link(CamelModel):
    """A scored edge between two memories, recomputed on every request."""

    id: str
    from_id: UUID
    to_id: UUID
    type: LinkType
    score: int
    reason: str
