"""
slim-mcp - A slimming proxy for browser MCP servers.

Browser automation servers return a full accessibility snapshot of the page
after every action. slim-mcp wraps such a server on stdio and:

- Summarizes large page snapshots, keeping the [ref=...] handles the model
  needs for its next action
- Collapses repeated console events into "[repeated N times]" markers
- Adds alias tools (browser_snapshot_full) that bypass summarization

Quick Start:

    # As an MCP server command (e.g. in Claude Code's MCP config)
    slim-mcp proxy -- --headless

    # As a library
    from slim_mcp import SnapshotSummarizer, ToolResponseRewriter
    from slim_mcp.backends import AnthropicBackend

    rewriter = ToolResponseRewriter(
        SnapshotSummarizer(AnthropicBackend()),
        skip_tools={"browser_snapshot_full"},
    )
    result = await rewriter.rewrite("browser_click", tool_result)

Error Handling:

    from slim_mcp import SlimError, SummarizerError

    try:
        result = await rewriter.rewrite("browser_click", tool_result)
    except SummarizerError as e:
        print(f"Summarizer failed: {e.details}")
"""

from .config import (
    DEFAULT_SKIP_TOOLS,
    DEFAULT_TOOL_ALIASES,
    ProxyConfig,
    SummarizationConfig,
    SummarizerConfig,
    ToolAlias,
)
from .exceptions import ConfigurationError, CorrelationError, SlimError, SummarizerError
from .proxy import CorrelationTable, McpProxy, ToolAliasTable, create_proxy, run_proxy
from .rewriter import RewriteResult, ToolResponseRewriter
from .summarize import SUMMARIZED_MARKER, SnapshotSummarizer, SummarizationResult
from .transforms import PageSnapshot, collapse_events, parse_page_snapshot

__version__ = "0.2.0"

__all__ = [
    # Config
    "ProxyConfig",
    "SummarizerConfig",
    "SummarizationConfig",
    "ToolAlias",
    "DEFAULT_TOOL_ALIASES",
    "DEFAULT_SKIP_TOOLS",
    # Exceptions
    "SlimError",
    "ConfigurationError",
    "SummarizerError",
    "CorrelationError",
    # Transforms
    "PageSnapshot",
    "parse_page_snapshot",
    "collapse_events",
    # Summarization
    "SUMMARIZED_MARKER",
    "SnapshotSummarizer",
    "SummarizationResult",
    "ToolResponseRewriter",
    "RewriteResult",
    # Proxy
    "CorrelationTable",
    "ToolAliasTable",
    "McpProxy",
    "create_proxy",
    "run_proxy",
]
