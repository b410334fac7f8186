"""slim-mcp summarization backends.

Backends turn a prompt into a completion and nothing else:

- anthropic: Anthropic Messages API (needs ANTHROPIC_API_KEY)
- claude-cli: the `claude` command-line tool in print mode

Usage:
    slim-mcp proxy --backend claude-cli
"""

from __future__ import annotations

from ..config import SummarizerConfig
from ..exceptions import ConfigurationError
from .anthropic import AnthropicBackend
from .base import SummarizerBackend
from .claude_cli import ClaudeCLIBackend


def create_backend(config: SummarizerConfig) -> SummarizerBackend:
    """Create the backend named by config.backend."""
    if config.backend == "anthropic":
        return AnthropicBackend(model=config.model, max_tokens=config.max_tokens)
    if config.backend == "claude-cli":
        return ClaudeCLIBackend(
            command=config.cli_command,
            model=config.model,
            max_output_bytes=config.max_output_bytes,
        )
    raise ConfigurationError(
        f"Unknown summarizer backend '{config.backend}'",
        details={"valid": ["anthropic", "claude-cli"]},
    )


__all__ = [
    "SummarizerBackend",
    "AnthropicBackend",
    "ClaudeCLIBackend",
    "create_backend",
]
