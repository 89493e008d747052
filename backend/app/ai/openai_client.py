from __future__ import annotations

import logging
from collections.abc import Sequence

from openai import AsyncOpenAI

from ..metrics import AI_REQUESTS

logger = logging.getLogger(__name__)


class AIUnavailable(RuntimeError):
    """Text generation was configured but did not produce a usable answer."""


class OpenAIClient:
    """Thin wrapper above the OpenAI async SDK.

    ``available`` is false when no API key is configured; callers then take
    their scripted path instead of calling :meth:`complete`.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gpt-4o-mini",
        max_tokens: int = 300,
        temperature: float = 0.8,
        timeout: float = 10.0,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = (
            AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0) if api_key else None
        )

    @property
    def available(self) -> bool:
        return self._client is not None

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        messages: Sequence[dict[str, str]],
        *,
        kind: str = "chat",
    ) -> str:
        """Send role-tagged messages and return the stripped reply text."""

        if self._client is None:
            raise AIUnavailable("text generation is not configured")

        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=list(messages),
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as exc:
            AI_REQUESTS.labels(kind=kind, outcome="error").inc()
            logger.warning("OpenAI request failed: %s", exc, extra={"extra_fields": {"kind": kind}})
            raise AIUnavailable("text generation failed") from exc

        content = completion.choices[0].message.content or ""
        AI_REQUESTS.labels(kind=kind, outcome="ok").inc()
        logger.info("OpenAI response received", extra={"extra_fields": {"kind": kind}})
        return content.strip()
