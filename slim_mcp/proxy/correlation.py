"""Request-id to tool-name correlation.

MCP responses carry only the id of their request, so the proxy remembers
which tool each pending `tools/call` invoked. An entry lives from the moment
the request is forwarded until its response (result or error) comes back.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import CorrelationError

RequestKey = tuple[str, Any]


def request_key(request_id: Any) -> RequestKey | None:
    """Normalize a JSON-RPC id into a hashable key.

    Integer 1 and string "1" are different ids. Booleans, floats, null and
    structured values are not valid ids and return None.
    """
    if isinstance(request_id, bool):
        return None
    if isinstance(request_id, int):
        return ("int", request_id)
    if isinstance(request_id, str):
        return ("str", request_id)
    return None


class CorrelationTable:
    """Pending tool calls keyed by request id."""

    def __init__(self) -> None:
        self._pending: dict[RequestKey, str] = {}

    def record(self, request_id: Any, tool_name: str) -> None:
        """Remember that request_id invoked tool_name.

        Raises:
            CorrelationError: If the id is invalid or already pending.
        """
        key = request_key(request_id)
        if key is None:
            raise CorrelationError("Invalid request id", details={"id": request_id})
        if key in self._pending:
            raise CorrelationError(
                "Request id reused while pending",
                details={"id": request_id, "pending_tool": self._pending[key]},
            )
        self._pending[key] = tool_name

    def consume(self, request_id: Any) -> str | None:
        """Remove and return the tool name for request_id, if any."""
        key = request_key(request_id)
        if key is None:
            return None
        return self._pending.pop(key, None)

    def __contains__(self, request_id: Any) -> bool:
        key = request_key(request_id)
        return key is not None and key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
