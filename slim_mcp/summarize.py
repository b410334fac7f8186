"""Page snapshot summarization.

Accessibility snapshots of real pages run to tens of kilobytes, most of it
layout containers the model never acts on. SnapshotSummarizer swaps a large
snapshot body for a short summary that keeps every element reference the
model needs for its next action, and leaves everything else in the tool
output byte-for-byte intact.

Example:
    ```python
    summarizer = SnapshotSummarizer(backend=AnthropicBackend())
    text = await summarizer.summarize(tool_output_text)
    ```
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from .backends.base import SummarizerBackend
from .config import SummarizationConfig, SummarizerConfig
from .exceptions import SummarizerError
from .transforms.page_snapshot import PageSnapshot, parse_page_snapshot

logger = logging.getLogger(__name__)

SUMMARIZED_MARKER = "(summarized)"

SUMMARY_PROMPT = """Summarize this page accessibility snapshot very concisely (max ~10 lines).
Include the main headings, key interactive elements, and any form fields.
Keep [ref=XXX] values for ALL interactive elements (buttons, links, inputs, tabs, checkboxes), unless they are repeating elements like buttons in a table. In that case include the first 3 of that type and then describe the rest as "N more similar items".
Format: Brief description, then list key elements with their refs.
Omit: decorative images, generic containers, style details.

Page: {title}
URL: {url}

```yaml
{snapshot}
```"""


@dataclass
class SummarizationResult:
    """Outcome of summarizing one text blob."""

    text: str
    was_summarized: bool
    original_chars: int = 0
    summary_chars: int = 0
    latency_ms: float = 0.0
    skip_reason: str | None = None  # "no_snapshot", "below_threshold", "disabled", "failed"
    error: str | None = None


def build_prompt(snapshot: PageSnapshot) -> str:
    """Build the summarization instructions for a snapshot."""
    return SUMMARY_PROMPT.format(
        title=snapshot.title,
        url=snapshot.url,
        snapshot=snapshot.snapshot_yaml,
    )


def render_summary_block(snapshot: PageSnapshot, summary: str) -> str:
    """Render the replacement for a snapshot's block.

    The page header (URL, title and any metadata lines) is repeated verbatim,
    followed by a "- Page Snapshot (summarized):" line and the summary.
    """
    return f"{snapshot.header}- Page Snapshot {SUMMARIZED_MARKER}:\n{summary}"


def splice(text: str, snapshot: PageSnapshot, replacement: str) -> str:
    """Replace exactly the span snapshot occupied in text."""
    return text[: snapshot.start] + replacement + text[snapshot.end :]


class SnapshotSummarizer:
    """Decide whether a snapshot is worth summarizing and summarize it."""

    def __init__(
        self,
        backend: SummarizerBackend,
        config: SummarizationConfig | None = None,
        summarizer_config: SummarizerConfig | None = None,
    ):
        """Initialize summarizer.

        Args:
            backend: Completion backend used for summaries.
            config: Threshold and failure policy.
            summarizer_config: Backend settings; only the timeout is used here.
        """
        self.backend = backend
        self.config = config or SummarizationConfig()
        self.timeout = (summarizer_config or SummarizerConfig()).timeout_seconds

    async def summarize(self, text: str) -> str:
        """Return text with its page snapshot summarized, or text unchanged.

        Raises:
            SummarizerError: When the backend fails and the failure policy
                is "error".
        """
        result = await self.summarize_with_metrics(text)
        return result.text

    async def summarize_with_metrics(self, text: str) -> SummarizationResult:
        """Same as summarize() but reports what happened."""
        if not self.config.enabled:
            return SummarizationResult(text=text, was_summarized=False, skip_reason="disabled")

        snapshot = parse_page_snapshot(text)
        if snapshot is None:
            return SummarizationResult(text=text, was_summarized=False, skip_reason="no_snapshot")

        original_chars = len(snapshot.snapshot_yaml)
        if original_chars < self.config.min_snapshot_chars:
            logger.debug("Skipping summarization for small snapshot (%d chars)", original_chars)
            return SummarizationResult(
                text=text,
                was_summarized=False,
                original_chars=original_chars,
                skip_reason="below_threshold",
            )

        logger.info(
            "Summarizing snapshot url=%s title=%r size=%d", snapshot.url, snapshot.title, original_chars
        )

        start = time.perf_counter()
        try:
            summary = await self.backend.complete(build_prompt(snapshot), timeout=self.timeout)
        except SummarizerError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            if self.config.on_failure == "error":
                logger.error("Summarization failed: %s", e)
                raise
            logger.warning("Summarization failed, returning original snapshot: %s", e)
            return SummarizationResult(
                text=text,
                was_summarized=False,
                original_chars=original_chars,
                latency_ms=latency_ms,
                skip_reason="failed",
                error=str(e),
            )
        latency_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "Summarization complete: %d -> %d chars in %.0fms",
            original_chars,
            len(summary),
            latency_ms,
        )

        return SummarizationResult(
            text=splice(text, snapshot, render_summary_block(snapshot, summary)),
            was_summarized=True,
            original_chars=original_chars,
            summary_chars=len(summary),
            latency_ms=latency_ms,
        )
