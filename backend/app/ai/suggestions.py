from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from .openai_client import AIUnavailable, OpenAIClient
from .templates import SYSTEM_PROMPT, suggestion_prompt, table_suggestions

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3

_NUMBERED_RE = re.compile(r"^\d+\.\s*")
_BULLET_RE = re.compile(r"^[•\-*]\s*")


def parse_suggestions(text: str, limit: int = MAX_SUGGESTIONS) -> list[str]:
    """Pull numbered or bulleted list items out of free-form generated text."""

    suggestions: list[str] = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        if not (_NUMBERED_RE.match(line) or _BULLET_RE.match(line)):
            continue
        suggestions.append(_BULLET_RE.sub("", _NUMBERED_RE.sub("", line, count=1), count=1).strip())
        if len(suggestions) == limit:
            break
    return suggestions


def dominant_mood(recent_moods: Sequence[str]) -> str | None:
    """Most frequent mood; ties go to the mood counted first."""

    counts: dict[str, int] = {}
    for mood in recent_moods:
        counts[mood] = counts.get(mood, 0) + 1
    best: str | None = None
    best_count = 0
    for mood, count in counts.items():
        if count > best_count:
            best, best_count = mood, count
    return best


@dataclass
class SuggestionResult:
    suggestions: list[str]
    source: str
    mood: str | None = None


class SuggestionSelector:
    """Choose coping suggestions from generated text or the canned table.

    With a configured text generator its answer is the only source: a failed
    call or an answer without list items raises :class:`AIUnavailable`. The
    table is used only when no generator is configured.
    """

    def __init__(self, client: OpenAIClient, *, window: int = 7) -> None:
        self._client = client
        self._window = max(1, window)

    @property
    def window(self) -> int:
        return self._window

    async def select(
        self,
        recent_moods: Sequence[str] | str,
    ) -> SuggestionResult:
        if isinstance(recent_moods, str):
            recent_moods = [recent_moods]
        moods = list(recent_moods)[-self._window:]
        if not moods:
            raise ValueError("at least one mood is required")
        mood = dominant_mood(moods)

        if not self._client.available:
            return SuggestionResult(table_suggestions(mood or ""), "table", mood)

        text = await self._client.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": suggestion_prompt(moods)},
            ],
            kind="suggestions",
        )
        suggestions = parse_suggestions(text)
        if not suggestions:
            logger.warning("generated suggestions had no list items")
            raise AIUnavailable("no suggestions in generated text")
        return SuggestionResult(suggestions, "openai", mood)
