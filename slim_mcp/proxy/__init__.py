"""MCP stdio proxy: correlation, aliasing and the bidirectional loop."""

from .aliases import ToolAliasTable
from .call_log import ToolCallLog, ToolCallRecord
from .correlation import CorrelationTable, request_key
from .server import McpProxy, create_proxy, run_proxy

__all__ = [
    "ToolAliasTable",
    "ToolCallLog",
    "ToolCallRecord",
    "CorrelationTable",
    "request_key",
    "McpProxy",
    "create_proxy",
    "run_proxy",
]
