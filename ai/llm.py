"""Thin async wrapper around an OpenAI-compatible chat completions API.

One request per call. Failures are raised as ``LLMError`` and never retried;
callers decide on the fallback.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from openai import AsyncOpenAI

from be.config import LLMSettings, settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the text-generation service is unavailable or returns nothing usable."""
    pass


class LLMClient:
    """Chat-completion client configured from ``settings.llm``."""

    def __init__(self, config: LLMSettings | None = None, client: AsyncOpenAI | None = None) -> None:
        self.config = config or settings.llm
        self._client = client

    @property
    def available(self) -> bool:
        return self.config.enabled and (self._client is not None or bool(self.config.api_key))

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.config.api_key, base_url=self.config.base_url)
        return self._client

    async def complete(self, system: str, user: str, *, max_tokens: int | None = None) -> str:
        """Send one system+user exchange and return the reply text.

        Raises:
            LLMError: If the service is disabled, unconfigured, fails, or replies empty
        """
        if not self.available:
            raise LLMError("Text-generation service is not configured")

        kwargs = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": self.config.temperature,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await self._get_client().chat.completions.create(**kwargs)
        except Exception as e:
            raise LLMError(f"AI service error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise LLMError("AI service returned an empty response")
        return content


@lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    """Process-wide client; also used as a FastAPI dependency."""
    return LLMClient()
