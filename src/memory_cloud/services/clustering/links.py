"""Pairwise link scoring between memories."""

from collections.abc import Sequence

from memory_cloud.core.constants import (
    ABSENCE_SCORE,
    ABSENCE_TAGS,
    CONTRADICTION_PAIRS,
    CONTRADICTION_SCORE,
    MAX_SHARED_TAG_SCORE,
    MIN_LINK_SCORE,
    SAME_MOOD_SCORE,
    SHARED_CORE_SCORE,
    WEAK_FAMILY_LINK_SCORE,
)
from memory_cloud.core.logging import get_logger
from memory_cloud.domain.models import Link, LinkType, Memory

logger = get_logger(__name__)

DEFAULT_LINK_CAP = 140


def _mood_key(memory: Memory) -> str:
    return memory.mood.strip().lower() if isinstance(memory.mood, str) else ""


def has_contradiction(mood_a: str, mood_b: str) -> bool:
    """True when the two moods sit on opposite ends of a known pair (substring match)."""
    return any(
        (left in mood_a and right in mood_b) or (right in mood_a and left in mood_b)
        for left, right in CONTRADICTION_PAIRS
    )


def _core_labels(memory: Memory) -> list[str]:
    return [entry.label.strip().lower() for entry in memory.theme_vector.emotional_core if entry.label.strip()]


def _has_absence(memory: Memory) -> bool:
    return any(tag.lower() in ABSENCE_TAGS for tag in memory.tags)


def score_pair(a: Memory, b: Memory) -> Link | None:
    """Score one ordered pair; `a` is the memory seen first in the window.

    Returns None when the pair is not worth drawing.
    """
    mood_a = _mood_key(a)
    mood_b = _mood_key(b)
    same_mood = bool(mood_a) and mood_a == mood_b

    # Signals other than mood equality, with reasons in priority order
    reasons: list[str] = []
    signal_score = 0

    if has_contradiction(mood_a, mood_b):
        signal_score += CONTRADICTION_SCORE
        reasons.append("shared contradiction")
    if same_mood:
        reasons.append("shared mood")

    core_b = set(_core_labels(b))
    if any(label in core_b for label in _core_labels(a)):
        signal_score += SHARED_CORE_SCORE
        reasons.append("shared emotional core")

    shared_tags = [tag for tag in a.tags if tag in b.tags]
    if shared_tags:
        signal_score += min(len(shared_tags), MAX_SHARED_TAG_SCORE)
        reasons.append("shared image")

    if _has_absence(a) and _has_absence(b):
        signal_score += ABSENCE_SCORE
        reasons.append("shared absence")

    # Same-mood pairs are always at least weakly linked
    if same_mood and signal_score < MIN_LINK_SCORE:
        return Link(
            id=f"family:{a.id}-{b.id}",
            from_id=a.id,
            to_id=b.id,
            type=LinkType.FAMILY,
            score=WEAK_FAMILY_LINK_SCORE,
            reason="shared family",
        )

    score = signal_score + (SAME_MOOD_SCORE if same_mood else 0)
    if score < MIN_LINK_SCORE:
        return None

    return Link(
        id=f"idea:{a.id}-{b.id}",
        from_id=a.id,
        to_id=b.id,
        type=LinkType.FAMILY if same_mood else LinkType.IDEA,
        score=score,
        reason=reasons[0],
    )


def compute_links(memories: Sequence[Memory], cap: int = DEFAULT_LINK_CAP) -> list[Link]:
    """Score every unordered pair in the window and keep the strongest links.

    The window is expected most-recent-first. Ties keep scan order, so the
    result is deterministic for an unchanged window.
    """
    links: list[Link] = []
    for i, a in enumerate(memories):
        for b in memories[i + 1 :]:
            link = score_pair(a, b)
            if link is not None:
                links.append(link)

    links.sort(key=lambda link: link.score, reverse=True)
    logger.debug(f"Scored {len(links)} links", window=len(memories), cap=cap)
    return links[:cap]
