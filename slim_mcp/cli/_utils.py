"""Shared CLI helpers: config loading and common options."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from ..config import VALID_BACKENDS, VALID_FAILURE_POLICIES, ProxyConfig
from ..exceptions import ConfigurationError


def summarizer_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that summarizes."""
    options = [
        click.option(
            "--backend",
            type=click.Choice(list(VALID_BACKENDS)),
            default=None,
            help="Summarizer backend (default: $SLIM_MCP_BACKEND or anthropic)",
        ),
        click.option("--model", default=None, help="Summarizer model name"),
        click.option(
            "--timeout",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Seconds allowed per summary (default: 30)",
        ),
        click.option(
            "--min-chars",
            type=click.IntRange(min=0),
            default=None,
            help="Only summarize snapshots at least this long (default: 500)",
        ),
        click.option(
            "--on-failure",
            type=click.Choice(list(VALID_FAILURE_POLICIES)),
            default=None,
            help="On summarizer failure: return an error, or pass the snapshot through",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_config(
    backend: str | None = None,
    model: str | None = None,
    timeout: float | None = None,
    min_chars: int | None = None,
    on_failure: str | None = None,
) -> ProxyConfig:
    """Load config from the environment, then apply command-line overrides."""
    try:
        config = ProxyConfig.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from None

    if backend is not None:
        config.summarizer.backend = backend  # type: ignore[assignment]
    if model is not None:
        config.summarizer.model = model
    if timeout is not None:
        config.summarizer.timeout_seconds = timeout
    if min_chars is not None:
        config.summarization.min_snapshot_chars = min_chars
    if on_failure is not None:
        config.summarization.on_failure = on_failure  # type: ignore[assignment]
    return config
