"""Configuration models for slim-mcp."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .exceptions import ConfigurationError

BackendName = Literal["anthropic", "claude-cli"]
FailurePolicy = Literal["error", "passthrough"]

VALID_BACKENDS: tuple[str, ...] = ("anthropic", "claude-cli")
VALID_FAILURE_POLICIES: tuple[str, ...] = ("error", "passthrough")

ENV_PREFIX = "SLIM_MCP_"

DEFAULT_UPSTREAM_COMMAND: list[str] = ["npx", "@playwright/mcp"]
DEFAULT_LOG_DIR = Path.home() / ".slim-mcp" / "logs"


@dataclass(frozen=True)
class ToolAlias:
    """An extra public tool name that forwards to an existing tool.

    The alias is advertised in tool listings as its own capability, but calls
    to it reach the upstream server under the target's name.
    """

    alias: str
    target: str
    description: str
    title: str | None = None


DEFAULT_TOOL_ALIASES: tuple[ToolAlias, ...] = (
    ToolAlias(
        alias="browser_snapshot_full",
        target="browser_snapshot",
        description="Capture full accessibility snapshot without summarization",
        title="Full page snapshot (unsummarized)",
    ),
)

# Tools whose responses are never summarized, matched by the name the client used
DEFAULT_SKIP_TOOLS: frozenset[str] = frozenset({"browser_snapshot_full"})


@dataclass
class SummarizerConfig:
    """Configuration for the summarization backend.

    GOTCHAS:
    - The "claude-cli" backend needs the `claude` executable on PATH and
      spawns one process per summary (slower, but uses the CLI's own auth).
    - The "anthropic" backend needs ANTHROPIC_API_KEY in the environment.
    - timeout_seconds bounds a single summary; a timed-out summary is a
      failure, handled according to SummarizationConfig.on_failure.
    """

    backend: BackendName = "anthropic"
    model: str | None = None  # None = backend default
    timeout_seconds: float = 30.0
    max_tokens: int = 1024
    cli_command: str = "claude"
    max_output_bytes: int = 5 * 1024 * 1024


@dataclass
class SummarizationConfig:
    """Policy for when and how page snapshots are summarized."""

    enabled: bool = True
    min_snapshot_chars: int = 500  # Snapshots shorter than this are kept verbatim
    on_failure: FailurePolicy = "error"
    collapse_events: bool = True


@dataclass
class ProxyConfig:
    """Proxy configuration."""

    # Upstream
    upstream_command: list[str] = field(default_factory=lambda: list(DEFAULT_UPSTREAM_COMMAND))

    # Rewriting
    aliases: tuple[ToolAlias, ...] = DEFAULT_TOOL_ALIASES
    skip_tools: frozenset[str] = DEFAULT_SKIP_TOOLS
    summarizer: SummarizerConfig = field(default_factory=SummarizerConfig)
    summarization: SummarizationConfig = field(default_factory=SummarizationConfig)

    # Logging
    log_dir: Path | None = DEFAULT_LOG_DIR
    log_level: str = "INFO"
    call_log: bool = False  # Write one JSONL record per tool call to the log dir

    # Streams
    stream_limit_bytes: int = 8 * 1024 * 1024

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ProxyConfig:
        """Build a config from SLIM_MCP_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        config = cls()

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name, "").strip()
            return value or None

        backend = get("BACKEND")
        if backend is not None:
            config.summarizer.backend = _validate_choice("backend", backend, VALID_BACKENDS)  # type: ignore[assignment]

        model = get("MODEL")
        if model is not None:
            config.summarizer.model = model

        timeout = get("TIMEOUT")
        if timeout is not None:
            config.summarizer.timeout_seconds = _parse_positive_float("timeout", timeout)

        cli_command = get("CLI_COMMAND")
        if cli_command is not None:
            config.summarizer.cli_command = cli_command

        min_chars = get("MIN_SNAPSHOT_CHARS")
        if min_chars is not None:
            config.summarization.min_snapshot_chars = _parse_non_negative_int(
                "min_snapshot_chars", min_chars
            )

        on_failure = get("ON_FAILURE")
        if on_failure is not None:
            config.summarization.on_failure = _validate_choice(  # type: ignore[assignment]
                "on_failure", on_failure, VALID_FAILURE_POLICIES
            )

        if (get("DISABLE_SUMMARIZATION") or "").lower() in ("1", "true", "yes"):
            config.summarization.enabled = False

        log_dir = get("LOG_DIR")
        if log_dir is not None:
            config.log_dir = None if log_dir.lower() == "none" else Path(log_dir).expanduser()

        log_level = get("LOG_LEVEL")
        if log_level is not None:
            config.log_level = log_level.upper()

        call_log = get("CALL_LOG")
        if call_log is not None:
            config.call_log = call_log.lower() in ("1", "true", "yes")

        return config


def _validate_choice(name: str, value: str, valid: tuple[str, ...]) -> str:
    normalized = value.lower()
    if normalized not in valid:
        raise ConfigurationError(f"Invalid {name} '{value}'", details={"valid": list(valid)})
    return normalized


def _parse_positive_float(name: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid {name} '{value}'", details={"expected": "number"}) from None
    if parsed <= 0:
        raise ConfigurationError(f"Invalid {name} '{value}'", details={"expected": "> 0"})
    return parsed


def _parse_non_negative_int(name: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid {name} '{value}'", details={"expected": "integer"}) from None
    if parsed < 0:
        raise ConfigurationError(f"Invalid {name} '{value}'", details={"expected": ">= 0"})
    return parsed
