"""Text analysis backed by the Anthropic Messages API."""

from collections.abc import Sequence
from typing import Any

import anthropic

from memory_cloud.core.base import AIServiceErrorDetails, ErrorLevel
from memory_cloud.core.budget import CapabilityBudget
from memory_cloud.core.config import Settings, settings as default_settings
from memory_cloud.core.decorators import with_error_handling
from memory_cloud.core.errors import RateLimitError, ServiceError
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.models import TextAnalysis
from memory_cloud.infrastructure.llm.parsing import normalize_analysis, parse_json_object, parse_mood_name

logger = get_logger(__name__)

_THEME_VECTOR_SHAPE = """{
    "emotionalCore": [{"label": "primary_emotion", "weight": 0.7}, {"label": "secondary_emotion", "weight": 0.3}],
    "narrativeState": [{"label": "unfinished", "weight": 0.6}, {"label": "resolved", "weight": 0.4}],
    "relationalFocus": [{"label": "self", "weight": 0.5}, {"label": "family", "weight": 0.5}],
    "temporalOrientation": [{"label": "memory", "weight": 0.8}, {"label": "present", "weight": 0.2}],
    "spatialIntimacy": [{"label": "private", "weight": 0.7}, {"label": "public", "weight": 0.3}]
  }"""


def _bullets(names: Sequence[str]) -> str:
    return "\n".join(f"- {name}" for name in names)


def classification_prompt(text: str, existing: Sequence[str]) -> str:
    if existing:
        context = (
            f"Existing mood families in the archive:\n{_bullets(existing)}\n\n"
            "Reuse one of these exact names if the story fits it. Only name a new family when the "
            "story's emotion is clearly outside all of them."
        )
    else:
        context = "This is one of the first stories in the archive. Name an evocative mood family."

    return f"""Classify this personal story by emotion: "{text}"

{context}

Family names are poetic but clear (e.g. "Grief", "Quiet Joy", "Longing", "Relief") and broad enough
to hold many stories.

Return ONLY valid JSON:
{{
  "mood": "Family name (existing or new)",
  "reasoning": "Why this family fits, or why a new one was needed",
  "tags": ["keyword1", "keyword2", "keyword3"],
  "color": "#HEXCODE",
  "themeVector": {_THEME_VECTOR_SHAPE}
}}"""


class AnthropicTextAnalysisService:
    """Classification, naming and filmmaker briefs through Claude.

    Every request takes a slot from the shared capability budget first; a
    denied slot raises RateLimitError without touching the network.
    """

    def __init__(
        self,
        budget: CapabilityBudget,
        client: Any | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.model = self.settings.anthropic_model
        self.max_tokens = self.settings.anthropic_max_tokens
        self.budget = budget

        if client is None and self.settings.anthropic_api_key:
            client = anthropic.AsyncAnthropic(api_key=self.settings.anthropic_api_key)
        if client is None:
            logger.warning("Anthropic API key not configured, text analysis disabled")
        self.client: Any = client

    def _details(self, operation: str, status_code: int | None = None) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="AnthropicTextAnalysisService",
            operation=operation,
            service_name="Anthropic",
            endpoint="/v1/messages",
            status_code=status_code,
            model_name=self.model,
        )

    async def _complete(self, prompt: str, operation: str) -> str:
        """Send one prompt and return the concatenated text blocks of the reply."""
        if self.client is None:
            raise ServiceError(message="Anthropic client not configured", details=self._details(operation))
        if not self.budget.try_acquire():
            raise RateLimitError(
                message=f"Capability budget exhausted before {operation}",
                details=self._details(operation, status_code=429),
            )

        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                message=f"Anthropic rate limit hit during {operation}",
                details=self._details(operation, status_code=429),
            ) from e
        except anthropic.APIError as e:
            error_msg = str(e).lower()
            if "quota" in error_msg or "limit" in error_msg:
                raise RateLimitError(
                    message=f"Anthropic quota hit during {operation}",
                    details=self._details(operation, status_code=429),
                ) from e
            raise ServiceError(
                message=f"Anthropic request failed during {operation}: {e}",
                details=self._details(operation, status_code=getattr(e, "status_code", None)),
            ) from e

        return "".join(block.text for block in message.content if getattr(block, "type", None) == "text")

    async def classify(self, text: str, existing: Sequence[str]) -> TextAnalysis:
        """Suggest mood, tags, color and theme vector for a story."""
        reply = await self._complete(classification_prompt(text, existing), "classify")
        analysis = normalize_analysis(parse_json_object(reply))
        logger.info(f"Model classification: {analysis.mood}", reasoning=analysis.reasoning)
        return analysis

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False, default=None)
    async def propose_new_name(self, text: str, existing: Sequence[str]) -> str | None:
        prompt = f"""You are naming a new emotional family for a personal story.

Existing families:
{_bullets(existing)}

Story:
"{text}"

Return ONLY valid JSON:
{{
  "mood": "New family name, distinct from the existing families"
}}"""
        return parse_mood_name(await self._complete(prompt, "propose_new_name"))

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False, default=None)
    async def broaden_name(self, name: str, existing: Sequence[str]) -> str | None:
        if not name or not name.strip():
            return None
        prompt = f"""Refine this emotional family name into a broader, more archetypal one.

Current family name:
"{name}"

Existing families:
{_bullets(existing)}

Rules:
- One to three words.
- No verbs, events or overly specific phrases.
- Prefer timeless emotional categories such as "Longing", "Grief", "Quiet Joy", "Tension", "Relief".
- If the name is already broad enough, return it unchanged.

Return ONLY valid JSON:
{{
  "mood": "Broader family name"
}}"""
        return parse_mood_name(await self._complete(prompt, "broaden_name"))

    async def family_brief(self, mood: str, stories: Sequence[str], count: int) -> dict[str, Any]:
        """Filmmaker brief for a whole family, from a few sample stories."""
        sample = " ... ".join(stories)
        prompt = f"""You are a creative director reading personal stories classified as "{mood}".

Sample stories from this emotional family:
"{sample}"

Total stories in this family: {count}

Write a filmmaker's brief for a short film exploring this emotional territory.

Return ONLY valid JSON:
{{
  "title": "Suggested film title",
  "logline": "One sentence premise",
  "visualStyle": "Cinematography and lighting direction (2-3 sentences)",
  "soundscape": "Audio design suggestions",
  "directorNote": "Guidance for capturing this emotion authentically",
  "keyMoments": ["Scene idea 1", "Scene idea 2", "Scene idea 3"]
}}"""
        return parse_json_object(await self._complete(prompt, "family_brief"))

    async def memory_brief(self, text: str, mood: str, tags: Sequence[str]) -> dict[str, Any]:
        """Filmmaker brief for one story."""
        prompt = f"""Write a filmmaker's brief for this personal story: "{text}"

Mood family: {mood}
Tags: {", ".join(tags)}

Return ONLY valid JSON:
{{
  "logline": "One sentence story summary",
  "visualStyle": "Camera angles, lighting, color palette (2-3 sentences)",
  "soundDesign": "Audio atmosphere and music suggestions",
  "directorNote": "Key advice for an authentic emotional portrayal",
  "castingNote": "Character guidance"
}}"""
        return parse_json_object(await self._complete(prompt, "memory_brief"))
