"""Custom exceptions for slim-mcp.

All exceptions inherit from SlimError, so a caller embedding the proxy can
catch every slim-mcp failure in one place.

Example:
    from slim_mcp import SlimError, SummarizerError

    try:
        text = await summarizer.summarize(tool_text)
    except SummarizerError as e:
        print(f"Summarizer unavailable: {e}")
    except SlimError as e:
        print(f"slim-mcp error: {e}")
"""

from __future__ import annotations

from typing import Any


class SlimError(Exception):
    """Base exception for all slim-mcp errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(SlimError):
    """Raised when slim-mcp is misconfigured.

    This includes:
    - Unknown summarizer backend names
    - Non-numeric timeouts or thresholds
    - Invalid failure policies

    Example:
        ConfigurationError(
            "Invalid failure policy 'ignore'",
            details={"valid": ["error", "passthrough"]}
        )
    """

    pass


class SummarizerError(SlimError):
    """Raised when the summarization backend fails.

    This includes:
    - Timeouts
    - Non-zero exit of the command-line summarizer
    - API errors from the remote completion service
    - Responses carrying no text

    The proxy turns this into a JSON-RPC error response for the request
    that produced the snapshot.
    """

    pass


class CorrelationError(SlimError):
    """Raised when a request id is reused while a call with that id is pending."""

    pass
