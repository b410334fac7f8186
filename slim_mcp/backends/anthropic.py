"""Anthropic Messages API backend."""

from __future__ import annotations

import logging

import anthropic
import httpx

from ..exceptions import SummarizerError
from .base import SummarizerBackend

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-3-5-haiku-latest"


class AnthropicBackend(SummarizerBackend):
    """Summarize through the Anthropic Messages API.

    Requires ANTHROPIC_API_KEY unless a client is passed in. Retries are
    disabled so the configured timeout bounds the whole call.
    """

    def __init__(
        self,
        model: str | None = None,
        max_tokens: int = 1024,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.model = model or DEFAULT_ANTHROPIC_MODEL
        self.max_tokens = max_tokens
        self._client = client or anthropic.AsyncAnthropic(max_retries=0)
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return f"anthropic-{self.model}"

    async def complete(self, prompt: str, timeout: float) -> str:
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
                timeout=httpx.Timeout(timeout, connect=min(10.0, timeout)),
            )
        except anthropic.APITimeoutError as e:
            raise SummarizerError(
                "Summarizer timed out", details={"backend": self.name, "timeout": timeout}
            ) from e
        except anthropic.APIError as e:
            raise SummarizerError(
                "Summarizer request failed", details={"backend": self.name, "error": str(e)}
            ) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise SummarizerError("Summarizer returned no text", details={"backend": self.name})
        return text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.close()
