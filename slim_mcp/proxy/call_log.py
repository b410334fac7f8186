"""JSONL log of completed tool calls."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class ToolCallRecord:
    """One completed tool call as seen by the proxy."""

    request_id: Any
    tool: str
    timestamp: str
    is_error: bool
    summarized: bool
    skipped: bool
    chars_before: int
    chars_after: int
    rewrite_latency_ms: float
    error: str | None = None


class ToolCallLog:
    """Append tool-call records to a JSONL file and keep recent ones in memory."""

    def __init__(self, log_file: str | Path | None = None, max_in_memory: int = 1000):
        self.log_file = Path(log_file) if log_file else None
        self.max_in_memory = max_in_memory
        self._records: list[ToolCallRecord] = []

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def log(self, record: ToolCallRecord) -> None:
        self._records.append(record)
        if len(self._records) > self.max_in_memory:
            del self._records[: len(self._records) - self.max_in_memory]

        if self.log_file:
            with open(self.log_file, "a") as f:
                f.write(json.dumps(asdict(record)) + "\n")

    def get_recent(self, n: int = 100) -> list[dict]:
        return [asdict(r) for r in self._records[-n:]]

    def stats(self) -> dict:
        """Totals over the records kept in memory."""
        summarized = [r for r in self._records if r.summarized]
        return {
            "total_logged": len(self._records),
            "summarized": len(summarized),
            "chars_saved": sum(r.chars_before - r.chars_after for r in self._records),
            "log_file": str(self.log_file) if self.log_file else None,
        }


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
