"""Main CLI entry point for slim-mcp."""

import click
from dotenv import load_dotenv


def get_version() -> str:
    """Get the current version."""
    try:
        from slim_mcp import __version__

        return __version__
    except ImportError:
        return "unknown"


@click.group()
@click.version_option(version=get_version(), prog_name="slim-mcp")
@click.pass_context
def main(ctx: click.Context) -> None:
    """slim-mcp - Shrink browser MCP tool output before it reaches the model.

    Wraps an MCP server (by default the Playwright MCP server), summarizes
    large page snapshots and collapses repeated console events.

    \b
    Examples:
        slim-mcp proxy                          Wrap npx @playwright/mcp
        slim-mcp proxy -- --headless            Pass extra args upstream
        slim-mcp summarize response.txt         Summarize a saved response
    """
    load_dotenv()
    ctx.ensure_object(dict)


# Import subcommands - these register themselves with the main group
def _register_commands() -> None:
    """Register all subcommands."""
    from . import (
        proxy,  # noqa: F401
        summarize,  # noqa: F401
    )


_register_commands()

if __name__ == "__main__":
    main()
