"""Domain models for Memory Cloud."""

from .analysis import (
    Candidate,
    ClassificationResult,
    DecidedBy,
    DecisionTrace,
    FamilyMatch,
    FamilyProfile,
    IngestionResult,
    MatchComponents,
    TextAnalysis,
)
from .base import CamelModel, utc_now
from .memory import Link, LinkType, Memory, MemoryMetadata, ResponseLink, normalize_tags
from .theme import ThemeEntry, ThemeVector, axis_weights, normalize_axis

__all__ = [
    # Analysis
    "Candidate",
    "ClassificationResult",
    "DecidedBy",
    "DecisionTrace",
    "FamilyMatch",
    "FamilyProfile",
    "IngestionResult",
    "MatchComponents",
    "TextAnalysis",
    # Base
    "CamelModel",
    "utc_now",
    # Memory
    "Link",
    "LinkType",
    "Memory",
    "MemoryMetadata",
    "ResponseLink",
    "normalize_tags",
    # Theme
    "ThemeEntry",
    "ThemeVector",
    "axis_weights",
    "normalize_axis",
]
