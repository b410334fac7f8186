"""Proxy CLI command."""

import asyncio
import shlex
import sys
from pathlib import Path

import click

from ..logging_setup import configure_logging
from ._utils import load_config, summarizer_options
from .main import main


@main.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option(
    "--upstream",
    default=None,
    help="Upstream MCP server command (default: 'npx @playwright/mcp')",
)
@summarizer_options
@click.option("--no-summarize", is_flag=True, help="Disable snapshot summarization")
@click.option("--log-dir", default=None, help="Directory for log files (default: ~/.slim-mcp/logs)")
@click.option("--no-log-file", is_flag=True, help="Log to stderr only")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: INFO)",
)
@click.option("--call-log", is_flag=True, help="Write one JSONL record per tool call")
@click.argument("upstream_args", nargs=-1, type=click.UNPROCESSED)
def proxy(
    upstream: str | None,
    backend: str | None,
    model: str | None,
    timeout: float | None,
    min_chars: int | None,
    on_failure: str | None,
    no_summarize: bool,
    log_dir: str | None,
    no_log_file: bool,
    log_level: str | None,
    call_log: bool,
    upstream_args: tuple[str, ...],
) -> None:
    """Run the MCP proxy on stdin/stdout.

    Extra arguments are appended to the upstream command.

    \b
    Examples:
        slim-mcp proxy
        slim-mcp proxy -- --headless --browser chromium
        slim-mcp proxy --backend claude-cli --on-failure passthrough

    \b
    Claude Code MCP config:
        {"command": "slim-mcp", "args": ["proxy", "--", "--headless"]}
    """
    from ..proxy.server import run_proxy

    config = load_config(
        backend=backend,
        model=model,
        timeout=timeout,
        min_chars=min_chars,
        on_failure=on_failure,
    )
    if upstream is not None:
        config.upstream_command = shlex.split(upstream)
    if not config.upstream_command:
        raise click.UsageError("Upstream command is empty")
    config.upstream_command = [*config.upstream_command, *upstream_args]

    if no_summarize:
        config.summarization.enabled = False
    if log_dir is not None:
        config.log_dir = Path(log_dir).expanduser()
    if no_log_file:
        config.log_dir = None
    if log_level is not None:
        config.log_level = log_level.upper()
    if call_log:
        config.call_log = True

    log_file = configure_logging(config.log_level, config.log_dir)
    if log_file is not None:
        click.echo(f"[slim-mcp] logging to {log_file}", err=True)

    try:
        exit_code = asyncio.run(run_proxy(config))
    except KeyboardInterrupt:
        exit_code = 0
    except OSError as e:
        raise click.ClickException(
            f"Could not start upstream server {config.upstream_command}: {e}"
        ) from None
    sys.exit(exit_code)
