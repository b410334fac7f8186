"""Text transforms applied to tool output.

Both transforms are pure functions on a text blob:

- parse_page_snapshot: locate the page-state block (URL, title, snapshot body)
- collapse_events: run-length encode duplicate lines in the events block
"""

from .event_log import EVENTS_PATTERN, REPEAT_MARKER, collapse_events, collapse_runs
from .page_snapshot import PAGE_SNAPSHOT_PATTERN, PageSnapshot, parse_page_snapshot

__all__ = [
    "EVENTS_PATTERN",
    "REPEAT_MARKER",
    "collapse_events",
    "collapse_runs",
    "PAGE_SNAPSHOT_PATTERN",
    "PageSnapshot",
    "parse_page_snapshot",
]
