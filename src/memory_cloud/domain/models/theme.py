"""Theme vectors: five small weighted-categorical distributions per memory."""

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from memory_cloud.core.constants import MAX_AXIS_ENTRIES, THEME_AXES, THEME_AXIS_FALLBACKS
from memory_cloud.domain.models.base import CamelModel


class ThemeEntry(BaseModel):
    """One weighted label on a theme axis."""

    label: str
    weight: float = Field(ge=0)


def _entry_parts(entry: Any) -> tuple[Any, Any]:
    if isinstance(entry, ThemeEntry):
        return entry.label, entry.weight
    if isinstance(entry, Mapping):
        return entry.get("label"), entry.get("weight")
    if isinstance(entry, tuple | list) and len(entry) == 2:
        return entry[0], entry[1]
    return None, None


def _clean_weight(weight: Any) -> float:
    # bool is an int subclass but never a meaningful weight
    if isinstance(weight, bool) or not isinstance(weight, int | float):
        return 0.0
    if not math.isfinite(weight):
        return 0.0
    return max(0.0, float(weight))


def normalize_axis(entries: Any, fallback_label: str) -> list[ThemeEntry]:
    """Clean raw axis entries into at most four weights summing to one.

    Entries without a non-empty string label are dropped, unusable weights
    count as zero, and only the first four survivors are kept. When nothing
    with positive weight is left the axis collapses to ``fallback_label``.
    """
    if not isinstance(entries, list | tuple):
        return [ThemeEntry(label=fallback_label, weight=1.0)]

    cleaned: list[tuple[str, float]] = []
    for entry in entries:
        label, weight = _entry_parts(entry)
        if not isinstance(label, str) or not label.strip():
            continue
        cleaned.append((label.strip(), _clean_weight(weight)))
        if len(cleaned) == MAX_AXIS_ENTRIES:
            break

    total = sum(weight for _, weight in cleaned)
    if not cleaned or total <= 0:
        return [ThemeEntry(label=fallback_label, weight=1.0)]
    return [ThemeEntry(label=label, weight=weight / total) for label, weight in cleaned]


def axis_weights(axis: Iterable[ThemeEntry] | None) -> dict[str, float]:
    """Map lower-cased labels to summed positive weights."""
    weights: dict[str, float] = {}
    for entry in axis or ():
        label = entry.label.strip().lower()
        if not label or entry.weight <= 0:
            continue
        weights[label] = weights.get(label, 0.0) + entry.weight
    return weights


class ThemeVector(CamelModel):
    """The five fixed theme axes of a memory.

    Every construction path goes through ``normalize_axis``, so each axis
    holds one to four entries whose weights sum to one.
    """

    emotional_core: list[ThemeEntry] = Field(default_factory=list)
    narrative_state: list[ThemeEntry] = Field(default_factory=list)
    relational_focus: list[ThemeEntry] = Field(default_factory=list)
    temporal_orientation: list[ThemeEntry] = Field(default_factory=list)
    spatial_intimacy: list[ThemeEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_axes(cls, data: Any) -> Any:
        if isinstance(data, ThemeVector):
            data = {name: data.axis(name) for name in THEME_AXES}
        source: Mapping[str, Any] = data if isinstance(data, Mapping) else {}
        return {
            name: normalize_axis(source.get(to_camel(name), source.get(name)), THEME_AXIS_FALLBACKS[name])
            for name in THEME_AXES
        }

    def axis(self, name: str) -> list[ThemeEntry]:
        return getattr(self, name)

    @classmethod
    def normalized(cls, raw: Any) -> "ThemeVector":
        """Build a vector from loosely shaped provider output.

        Accepts camelCase or snake_case axis keys; every axis of the result is
        non-empty.
        """
        return cls.model_validate(raw if isinstance(raw, ThemeVector | Mapping) else {})

    @classmethod
    def fallback(cls) -> "ThemeVector":
        """Vector used by degraded classifications."""
        return cls.normalized(None)
