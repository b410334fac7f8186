"""Page-state block extraction for browser tool output.

Browser automation tools append the current page state to the text of every
action result:

    ### Page
    - Page URL: https://example.com/
    - Page Title: Example
    - Console: 2 errors, 0 warnings      (optional metadata, any number)
    ### Snapshot
    ```yaml
    - button "Submit" [ref=e12]
    ```
    ### Events                           (optional, never part of the match)
    - [LOG] ...

The snapshot body is the accessibility tree of the page and is by far the
largest part of the response. This module locates it so it can be replaced
verbatim; the body is treated as an opaque string and never parsed as YAML.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

PAGE_HEADER = "### Page\n"

# Metadata lines may be anything that is not another "### " header, so the
# match can never run past the page section into a following one.
PAGE_SNAPSHOT_PATTERN = re.compile(
    r"### Page\n"
    r"- Page URL: (?P<url>[^\n]+)\n"
    r"- Page Title: (?P<title>[^\n]+)\n"
    r"(?:(?!### )[^\n]*\n)*"
    r"(?P<snapshot>### Snapshot\n)"
    r"```yaml\n"
    r"(?P<body>.*?)"
    r"```",
    re.DOTALL,
)


@dataclass(frozen=True)
class PageSnapshot:
    """A page-state block found in tool output.

    Attributes:
        url: Page URL, verbatim.
        title: Page title, verbatim.
        snapshot_yaml: Text between the opening and closing fence.
        full_match: The exact substring the block occupied.
        header: Page header lines (URL, title and metadata) that precede
            the snapshot section.
        start: Offset of full_match in the source text.
        end: Offset just past full_match in the source text.
    """

    url: str
    title: str
    snapshot_yaml: str
    full_match: str
    header: str
    start: int
    end: int


def parse_page_snapshot(text: str) -> PageSnapshot | None:
    """Find the first page-state block in text.

    Returns:
        PageSnapshot, or None when the text carries no page state. A missing
        block is the normal case for most tool output, not an error.
    """
    if PAGE_HEADER not in text:
        return None

    match = PAGE_SNAPSHOT_PATTERN.search(text)
    if match is None:
        return None

    return PageSnapshot(
        url=match.group("url"),
        title=match.group("title"),
        snapshot_yaml=match.group("body"),
        full_match=match.group(0),
        header=text[match.start() : match.start("snapshot")],
        start=match.start(),
        end=match.end(),
    )
