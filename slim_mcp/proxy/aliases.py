"""Tool aliases.

An alias is a second public name for an upstream tool. Calls to the alias
are forwarded under the real name; tool listings advertise the alias as a
tool of its own. The proxy can then treat the two names differently (the
default alias skips summarization).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..config import DEFAULT_TOOL_ALIASES, ToolAlias

logger = logging.getLogger(__name__)


class ToolAliasTable:
    """Static alias -> real tool mapping."""

    def __init__(self, aliases: Iterable[ToolAlias] = DEFAULT_TOOL_ALIASES):
        self._aliases: dict[str, ToolAlias] = {a.alias: a for a in aliases}

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    def resolve(self, name: str) -> str:
        """Return the real tool name for name (name itself if not an alias)."""
        alias = self._aliases.get(name)
        return alias.target if alias else name

    def make_descriptor(self, alias: ToolAlias, real_tool: dict[str, Any]) -> dict[str, Any]:
        """Build the advertised descriptor for alias from the real tool's."""
        descriptor = {**real_tool, "name": alias.alias, "description": alias.description}
        if alias.title is not None:
            annotations = real_tool.get("annotations")
            base = annotations if isinstance(annotations, dict) else {}
            descriptor["annotations"] = {**base, "title": alias.title}
        return descriptor

    def inject(self, tools: list[Any]) -> list[Any]:
        """Return a new tool list with one extra entry per alias.

        Aliases whose target is not listed, or which are already listed, are
        not added. Existing entries are left as they are.
        """
        by_name: dict[str, dict[str, Any]] = {}
        for tool in tools:
            if isinstance(tool, dict) and isinstance(tool.get("name"), str):
                by_name.setdefault(tool["name"], tool)

        injected = list(tools)
        for alias in self._aliases.values():
            real_tool = by_name.get(alias.target)
            if real_tool is None or alias.alias in by_name:
                continue
            injected.append(self.make_descriptor(alias, real_tool))
            logger.debug("Advertising alias %s for %s", alias.alias, alias.target)
        return injected

    def __len__(self) -> int:
        return len(self._aliases)
