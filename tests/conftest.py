"""Shared pytest fixtures for slim-mcp tests."""

import asyncio

import pytest

from slim_mcp.backends.base import SummarizerBackend
from slim_mcp.config import SummarizationConfig
from slim_mcp.exceptions import SummarizerError
from slim_mcp.rewriter import ToolResponseRewriter
from slim_mcp.summarize import SnapshotSummarizer

DEFAULT_SUMMARY = (
    "User dashboard with navigation, stats and a projects table.\n"
    '- link "Home" [ref=nav-home], link "Settings" [ref=nav-settings]\n'
    '- button "New Project" [ref=btn-new-project]\n'
    '- table rows: button "Edit" [ref=edit-1], [ref=edit-2], [ref=edit-3] + 3 more similar items'
)


class FakeBackend(SummarizerBackend):
    """In-memory summarizer backend.

    Records every prompt; replies with a fixed summary after an optional
    delay, or raises SummarizerError when configured to fail.
    """

    def __init__(self, reply=DEFAULT_SUMMARY, delay=0.0, fail=False):
        self.reply = reply
        self.delay = delay
        self.fail = fail
        self.prompts = []
        self.timeouts = []
        self.closed = False

    @property
    def name(self):
        return "fake"

    async def complete(self, prompt, timeout):
        self.prompts.append(prompt)
        self.timeouts.append(timeout)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise SummarizerError("Summarizer exited with an error", details={"status": 1})
        return self.reply

    async def aclose(self):
        self.closed = True


@pytest.fixture
def make_backend():
    """Factory for FakeBackend instances."""
    return FakeBackend


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def summarizer(fake_backend):
    return SnapshotSummarizer(backend=fake_backend)


@pytest.fixture
def rewriter(summarizer):
    return ToolResponseRewriter(summarizer, skip_tools={"browser_snapshot_full"})


@pytest.fixture
def passthrough_config():
    return SummarizationConfig(on_failure="passthrough")


# Tool output fixtures


@pytest.fixture
def small_snapshot():
    """A page-state block well under the summarization threshold."""
    return """### Page
- Page URL: https://example.com
- Page Title: Simple Page
### Snapshot
```yaml
- heading "Welcome" [ref=h1]
- button "Submit" [ref=btn1]
- link "Home" [ref=link1]
```"""


@pytest.fixture
def small_snapshot_with_console():
    return """### Page
- Page URL: https://example.com
- Page Title: Simple Page
- Console: 1 errors, 0 warnings
### Snapshot
```yaml
- heading "Welcome" [ref=h1]
- button "Submit" [ref=btn1]
```"""


LARGE_SNAPSHOT_YAML = """- banner:
  - heading "My Application" [level=1]
  - navigation:
    - link "Home" [ref=nav-home]
    - link "Dashboard" [ref=nav-dash]
    - link "Settings" [ref=nav-settings]
    - link "Profile" [ref=nav-profile]
    - link "Logout" [ref=nav-logout]
- main:
  - heading "Welcome back, John!" [level=2]
  - region "Statistics":
    - text "Total Projects: 42"
    - text "Active Tasks: 17"
    - text "Completed: 156"
  - region "Recent Activity":
    - list:
      - listitem "Created new project 'Website Redesign'" [ref=activity-1]
      - listitem "Completed task 'Update documentation'" [ref=activity-2]
      - listitem "Added comment on 'Bug fix #234'" [ref=activity-3]
  - region "Quick Actions":
    - button "New Project" [ref=btn-new-project]
    - button "Create Task" [ref=btn-new-task]
    - button "View Reports" [ref=btn-reports]
  - table "Projects":
    - row:
      - cell "Website Redesign"
      - button "Edit" [ref=edit-1]
      - button "Delete" [ref=del-1]
    - row:
      - cell "Mobile App"
      - button "Edit" [ref=edit-2]
      - button "Delete" [ref=del-2]
    - row:
      - cell "API Integration"
      - button "Edit" [ref=edit-3]
      - button "Delete" [ref=del-3]
- footer:
  - link "Privacy Policy" [ref=footer-privacy]
  - link "Terms of Service" [ref=footer-terms]
"""


@pytest.fixture
def large_snapshot_yaml():
    return LARGE_SNAPSHOT_YAML


@pytest.fixture
def large_snapshot():
    """A page-state block over the summarization threshold."""
    return (
        "### Page\n"
        "- Page URL: https://example.com/dashboard\n"
        "- Page Title: User Dashboard - My Application\n"
        "### Snapshot\n"
        "```yaml\n" + LARGE_SNAPSHOT_YAML + "```"
    )


@pytest.fixture
def large_snapshot_with_console(large_snapshot):
    return large_snapshot.replace(
        "- Page Title: User Dashboard - My Application\n",
        "- Page Title: User Dashboard - My Application\n- Console: 5 errors, 2 warnings\n",
    )


@pytest.fixture
def events_with_repeats():
    return """### Events
- [LOG] MOCKED: Segment tracked "Exp Assignment" wit...js?v=78a91138:7431
- [LOG] MOCKED: Segment tracked "Exp Assignment" wit...js?v=78a91138:7431
- [LOG] MOCKED: Segment tracked "Exp Assignment" wit...js?v=78a91138:7431
- [LOG] MOCKED: Segment tracked "Exp Assignment" wit...js?v=78a91138:7431
- [LOG] MOCKED: Segment tracked "Exp Assignment" wit...js?v=78a91138:7431
- [LOG] MOCKED: Segment tracked "Command Center Open"...js?v=78a91138:7431
- [ERROR] Warning: validateDOMNesting(...): %s canno...js?v=78a91138:7431"""


@pytest.fixture
def events_no_repeats():
    return """### Events
- [LOG] First message
- [LOG] Second message
- [ERROR] Some error"""


@pytest.fixture
def no_snapshot_text():
    return (
        "This is just some regular text without any page snapshot.\n"
        "It should pass through completely unchanged."
    )
