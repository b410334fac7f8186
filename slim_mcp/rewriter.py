"""Tool-call result rewriting.

An MCP tool result looks like:

    {"content": [{"type": "text", "text": "..."}, {"type": "image", ...}],
     "isError": false}

Every text item goes through the snapshot summarizer and then the event-log
collapser. Everything else is copied through untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .summarize import SnapshotSummarizer, SummarizationResult
from .transforms.event_log import collapse_events

logger = logging.getLogger(__name__)


@dataclass
class RewriteResult:
    """A rewritten tool result plus what was done to it."""

    result: Any
    skipped: bool = False
    text_items: int = 0
    summaries: list[SummarizationResult] = field(default_factory=list)
    chars_before: int = 0
    chars_after: int = 0

    @property
    def was_summarized(self) -> bool:
        return any(s.was_summarized for s in self.summaries)


def _is_text_item(item: Any) -> bool:
    return isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str)


class ToolResponseRewriter:
    """Shrinks text content of tool-call results.

    Tools listed in skip_tools are never rewritten. The caller's result is
    never mutated; a rewritten result is a new dict with a new content list.
    """

    def __init__(
        self,
        summarizer: SnapshotSummarizer,
        skip_tools: Iterable[str] = (),
        collapse_events: bool = True,
    ):
        self.summarizer = summarizer
        self.skip_tools = frozenset(skip_tools)
        self.collapse_events = collapse_events

    def should_rewrite(self, tool_name: str) -> bool:
        return tool_name not in self.skip_tools

    async def rewrite(self, tool_name: str, result: Any) -> Any:
        """Return the rewritten result (or result itself when nothing applies).

        Raises:
            SummarizerError: Propagated from the summarizer.
        """
        rewritten = await self.rewrite_with_metrics(tool_name, result)
        return rewritten.result

    async def rewrite_with_metrics(self, tool_name: str, result: Any) -> RewriteResult:
        """Same as rewrite() but reports sizes and summaries."""
        if not self.should_rewrite(tool_name):
            logger.debug("Tool %s is in the skip set, not rewriting", tool_name)
            return RewriteResult(result=result, skipped=True)

        if not isinstance(result, dict) or not isinstance(result.get("content"), list):
            return RewriteResult(result=result)

        report = RewriteResult(result=result)
        new_content: list[Any] = []
        # One item at a time, in order.
        for item in result["content"]:
            if not _is_text_item(item):
                new_content.append(item)
                continue

            original = item["text"]
            summary = await self.summarizer.summarize_with_metrics(original)
            text = summary.text
            if self.collapse_events:
                text = collapse_events(text)

            report.text_items += 1
            report.summaries.append(summary)
            report.chars_before += len(original)
            report.chars_after += len(text)
            new_content.append({**item, "text": text} if text != original else item)

        report.result = {**result, "content": new_content}
        return report
