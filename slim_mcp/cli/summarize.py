"""Offline summarization command."""

import asyncio
import logging

import click

from ..backends import create_backend
from ..config import ProxyConfig
from ..exceptions import SummarizerError
from ..summarize import SnapshotSummarizer, SummarizationResult
from ..transforms.event_log import collapse_events
from ._utils import load_config, summarizer_options
from .main import main


async def _summarize_text(text: str, config: ProxyConfig) -> SummarizationResult:
    backend = create_backend(config.summarizer)
    summarizer = SnapshotSummarizer(
        backend=backend,
        config=config.summarization,
        summarizer_config=config.summarizer,
    )
    try:
        return await summarizer.summarize_with_metrics(text)
    finally:
        await backend.aclose()


@main.command()
@click.argument("source", type=click.File("r"), default="-")
@summarizer_options
@click.option("--events-only", is_flag=True, help="Only collapse repeated events")
@click.option("--stats", is_flag=True, help="Print sizes to stderr")
def summarize(
    source,
    backend: str | None,
    model: str | None,
    timeout: float | None,
    min_chars: int | None,
    on_failure: str | None,
    events_only: bool,
    stats: bool,
) -> None:
    """Apply the tool-output rewrite to a saved tool response.

    SOURCE is a text file holding the tool's text output ('-' for stdin).

    \b
    Examples:
        slim-mcp summarize response.txt
        pbpaste | slim-mcp summarize --events-only
    """
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    config = load_config(
        backend=backend,
        model=model,
        timeout=timeout,
        min_chars=min_chars,
        on_failure=on_failure,
    )
    if events_only:
        config.summarization.enabled = False

    text = source.read()
    try:
        result = asyncio.run(_summarize_text(text, config))
    except SummarizerError as e:
        raise click.ClickException(str(e)) from None

    output = collapse_events(result.text)
    click.echo(output, nl=not output.endswith("\n"))

    if stats:
        status = "summarized" if result.was_summarized else f"unchanged ({result.skip_reason})"
        click.echo(f"snapshot: {status}", err=True)
        click.echo(f"chars: {len(text)} -> {len(output)}", err=True)
