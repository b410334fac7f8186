"""Base interface for summarization backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SummarizerBackend(ABC):
    """Abstract base class for text-completion backends.

    A backend takes a fully built prompt and returns the completion text.
    It knows nothing about page snapshots; policy lives in
    slim_mcp.summarize.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name used in logs."""
        pass

    @abstractmethod
    async def complete(self, prompt: str, timeout: float) -> str:
        """
        Return the completion for prompt.

        Args:
            prompt: Instruction payload.
            timeout: Seconds before the call is abandoned.

        Returns:
            Non-empty completion text.

        Raises:
            SummarizerError: On timeout, backend failure, or empty output.
        """
        pass

    async def aclose(self) -> None:
        """Release clients or processes held by the backend."""
        return None
