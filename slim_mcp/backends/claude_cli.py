"""Claude command-line backend.

Runs `claude --print <prompt>` in a subprocess. Useful for subscription
users without API access: the CLI brings its own authentication.
"""

from __future__ import annotations

import asyncio
import logging
import os

from ..exceptions import SummarizerError
from .base import SummarizerBackend

logger = logging.getLogger(__name__)

DEFAULT_CLI_MODEL = "haiku"
READ_CHUNK_BYTES = 64 * 1024
STDERR_KEEP_BYTES = 500


class ClaudeCLIBackend(SummarizerBackend):
    """Summarize by spawning the Claude CLI once per prompt."""

    def __init__(
        self,
        command: str = "claude",
        model: str | None = None,
        max_output_bytes: int = 5 * 1024 * 1024,
    ):
        self.command = command
        self.model = model or DEFAULT_CLI_MODEL
        self.max_output_bytes = max_output_bytes

    @property
    def name(self) -> str:
        return f"claude-cli-{self.model}"

    def build_command(self, prompt: str) -> list[str]:
        return [
            self.command,
            "--print",
            prompt,
            "--model",
            self.model,
            "--no-session-persistence",
        ]

    async def complete(self, prompt: str, timeout: float) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.build_command(prompt),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ},
            )
        except OSError as e:
            raise SummarizerError(
                "Could not start summarizer", details={"command": self.command, "error": str(e)}
            ) from e

        try:
            stdout, stderr, returncode = await asyncio.wait_for(
                self._communicate(proc), timeout=timeout
            )
        except asyncio.TimeoutError:
            raise SummarizerError(
                "Summarizer timed out", details={"backend": self.name, "timeout": timeout}
            ) from None
        finally:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if returncode != 0:
            raise SummarizerError(
                "Summarizer exited with an error",
                details={
                    "backend": self.name,
                    "status": returncode,
                    "stderr": stderr.decode("utf-8", errors="replace"),
                },
            )

        text = stdout.decode("utf-8", errors="replace").strip()
        if not text:
            raise SummarizerError("Summarizer returned no text", details={"backend": self.name})
        return text

    async def _communicate(self, proc: asyncio.subprocess.Process) -> tuple[bytes, bytes, int]:
        assert proc.stdout is not None and proc.stderr is not None
        stderr_task = asyncio.ensure_future(_read_head(proc.stderr, STDERR_KEEP_BYTES))
        try:
            stdout = await self._read_stdout(proc.stdout)
            stderr = await stderr_task
        finally:
            if not stderr_task.done():
                stderr_task.cancel()
                try:
                    await stderr_task
                except asyncio.CancelledError:
                    pass
        return stdout, stderr, await proc.wait()

    async def _read_stdout(self, stream: asyncio.StreamReader) -> bytes:
        """Read stdout to EOF, failing as soon as it passes max_output_bytes."""
        chunks = []
        total = 0
        while True:
            chunk = await stream.read(READ_CHUNK_BYTES)
            if not chunk:
                return b"".join(chunks)
            total += len(chunk)
            if total > self.max_output_bytes:
                raise SummarizerError(
                    "Summarizer output too large",
                    details={"backend": self.name, "limit": self.max_output_bytes},
                )
            chunks.append(chunk)


async def _read_head(stream: asyncio.StreamReader, keep: int) -> bytes:
    """Read a stream to EOF, keeping only its first `keep` bytes."""
    head = b""
    while True:
        chunk = await stream.read(READ_CHUNK_BYTES)
        if not chunk:
            return head
        if len(head) < keep:
            head += chunk[: keep - len(head)]
