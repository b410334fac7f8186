"""Logging configuration for the proxy process.

Stdout carries the MCP protocol, so log output goes to stderr and,
when a log directory is configured, to a timestamped file in it.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_file_name(now: datetime | None = None) -> str:
    """mcp-<ISO timestamp>.log with filesystem-safe separators."""
    stamp = (now or datetime.now()).isoformat(timespec="milliseconds")
    return "mcp-" + stamp.replace(":", "-").replace(".", "-") + ".log"


def configure_logging(level: str = "INFO", log_dir: Path | None = None) -> Path | None:
    """Send slim_mcp logs to stderr and, if possible, to a file in log_dir.

    Returns:
        Path of the log file, or None when file logging is off or the
        directory cannot be created.
    """
    root = logging.getLogger("slim_mcp")
    root.setLevel(level.upper())
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    root.addHandler(stderr_handler)

    if log_dir is None:
        return None

    log_file = Path(log_dir) / log_file_name()
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        root.warning("File logging disabled, cannot write to %s: %s", log_dir, e)
        return None

    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    return log_file
