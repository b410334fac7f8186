"""Event-log deduplication for browser tool output.

Pages that log in a loop fill the "### Events" section with hundreds of
identical console lines. Consecutive duplicates are collapsed:

    - [LOG] tick                    - [LOG] tick
    - [LOG] tick            ->        [repeated 3 times]
    - [LOG] tick                    - [ERROR] boom
    - [ERROR] boom

Only consecutive runs are collapsed, so the relative order of distinct
events is preserved.
"""

from __future__ import annotations

import re

EVENTS_HEADER = "### Events\n"

# Body runs until the next line starting with "### " or the end of the text,
# and may be empty when a header follows immediately.
EVENTS_PATTERN = re.compile(r"### Events\n(.*?)(?=^### |\Z)", re.DOTALL | re.MULTILINE)

REPEAT_MARKER = "  [repeated {count} times]"


def collapse_runs(lines: list[str]) -> list[str]:
    """Run-length encode consecutive identical lines.

    Each run of two or more identical lines becomes the line followed by a
    repeat marker; lone lines are kept as they are.
    """
    collapsed: list[str] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        run_end = i + 1
        while run_end < len(lines) and lines[run_end] == line:
            run_end += 1

        collapsed.append(line)
        count = run_end - i
        if count > 1:
            collapsed.append(REPEAT_MARKER.format(count=count))
        i = run_end
    return collapsed


def collapse_events(text: str) -> str:
    """Collapse repeated lines in the first events block of text.

    Returns text unchanged when it has no events block or when collapsing
    would not remove at least one line.
    """
    if EVENTS_HEADER not in text:
        return text

    match = EVENTS_PATTERN.search(text)
    if match is None:
        return text

    lines = match.group(1).split("\n")
    collapsed = collapse_runs(lines)
    if len(collapsed) >= len(lines):
        return text

    start, end = match.span(1)
    return text[:start] + "\n".join(collapsed) + text[end:]
