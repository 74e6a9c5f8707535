"""Cleaning of free-form model output into typed analysis results."""

import json
import re
from typing import Any

from memory_cloud.core.base import AIServiceErrorDetails
from memory_cloud.core.constants import ANALYSIS_MAX_TAGS, FALLBACK_COLOR, FALLBACK_MOOD, FALLBACK_TAGS
from memory_cloud.core.errors import MalformedResponseError
from memory_cloud.domain.models import TextAnalysis, ThemeVector

_FENCE = re.compile(r"```(?:json)?")
_MOOD_KEYS = ("mood", "emotion", "Mood", "Emotion")


def _details(source: str, raw_response: str) -> AIServiceErrorDetails:
    return AIServiceErrorDetails(
        source=source,
        operation="parse",
        service_name="text-analysis",
        raw_response=raw_response[:500],
    )


def clean_ai_response(text: str) -> str:
    """Strip code fences and return the outermost JSON object in ``text``.

    Raises:
        MalformedResponseError: If no braces are found
    """
    clean = _FENCE.sub("", text or "").strip()
    start = clean.find("{")
    end = clean.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponseError(
            message="No JSON object found in model response",
            details=_details("clean_ai_response", text or ""),
        )
    return clean[start : end + 1]


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse the JSON object embedded in a model response."""
    payload = clean_ai_response(text)
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            message=f"Model response is not valid JSON: {e.msg}",
            details=_details("parse_json_object", payload),
        ) from e
    if not isinstance(parsed, dict):
        raise MalformedResponseError(
            message="Model response is not a JSON object",
            details=_details("parse_json_object", payload),
        )
    return parsed


def _first_text(raw: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = raw.get(key)
        if value:
            return value.strip() if isinstance(value, str) else ""
    return ""


def normalize_analysis(raw: dict[str, Any]) -> TextAnalysis:
    """Turn a parsed classification payload into a TextAnalysis.

    A missing name becomes ``Fragment``, missing tags become ``raw, unsorted``
    and the theme vector is cleaned axis by axis.
    """
    mood = _first_text(raw, _MOOD_KEYS) or FALLBACK_MOOD

    tags_raw = raw.get("tags")
    if isinstance(tags_raw, list):
        tags = [tag for tag in tags_raw if tag][:ANALYSIS_MAX_TAGS]
    else:
        tags = list(FALLBACK_TAGS)

    color = raw.get("color")
    color = color.strip() if isinstance(color, str) and color.strip() else FALLBACK_COLOR

    reasoning = raw.get("reasoning")
    return TextAnalysis(
        mood=mood,
        tags=tags,
        color=color,
        theme_vector=ThemeVector.normalized(raw.get("themeVector", raw.get("theme_vector"))),
        reasoning=reasoning if isinstance(reasoning, str) and reasoning.strip() else None,
    )


def parse_mood_name(text: str) -> str | None:
    """Read ``{"mood": ...}`` from a naming response; None if absent or blank."""
    parsed = parse_json_object(text)
    mood = parsed.get("mood")
    if isinstance(mood, str) and mood.strip():
        return mood.strip()
    return None
