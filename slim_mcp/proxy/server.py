"""slim-mcp stdio proxy.

Sits between an MCP client and an MCP server subprocess, both speaking
newline-delimited JSON-RPC over stdio:

    client stdin  --> [aliasing, correlation]       --> upstream stdin
    client stdout <-- [tool listing, summarization] <-- upstream stdout

Every line passes through unchanged unless one of the rewrites applies.
Lines that are not JSON objects are forwarded verbatim in both directions.

Upstream lines are handled strictly one at a time: a response that waits
on the summarizer holds back every line that arrived after it, so the
client sees responses in the order the upstream produced them.

Usage:
    slim-mcp proxy -- npx @playwright/mcp --headless
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Protocol

from ..backends import create_backend
from ..config import ProxyConfig
from ..exceptions import CorrelationError
from ..rewriter import ToolResponseRewriter
from ..summarize import SnapshotSummarizer
from .aliases import ToolAliasTable
from .call_log import ToolCallLog, ToolCallRecord, now_iso
from .correlation import CorrelationTable, request_key

logger = logging.getLogger(__name__)

TOOLS_CALL_METHOD = "tools/call"
INTERNAL_ERROR_CODE = -32603
UPSTREAM_EXIT_GRACE_SECONDS = 0.5
UPSTREAM_KILL_TIMEOUT_SECONDS = 5.0

SendLine = Callable[[str], Awaitable[None]]


class LineReader(Protocol):
    async def readuntil(self, separator: bytes = b"\n") -> bytes: ...

    async def readexactly(self, n: int) -> bytes: ...


async def read_line(reader: LineReader, direction: str) -> bytes:
    """Read one line including its terminator; b"" at end of stream.

    Lines longer than the reader's limit are discarded and logged, and
    reading continues with the next line.
    """
    dropped = 0
    while True:
        try:
            line = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            if dropped:
                logger.error(
                    "Dropped oversized %s line (%d bytes) at end of stream", direction, dropped
                )
                return b""
            return e.partial
        except asyncio.LimitOverrunError as e:
            # The overrun data stays buffered; discard it and keep scanning.
            await reader.readexactly(e.consumed)
            dropped += e.consumed
            continue

        if dropped:
            logger.error("Dropped oversized %s line (%d bytes)", direction, dropped + len(line))
            dropped = 0
            continue
        return line


def decode_line(raw: bytes) -> str:
    """Decode one raw line without its terminator.

    Undecodable bytes survive a decode/encode round trip unchanged.
    """
    line = raw.decode("utf-8", errors="surrogateescape")
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def encode_line(line: str) -> bytes:
    return (line + "\n").encode("utf-8", errors="surrogateescape")


def parse_message(line: str) -> dict[str, Any] | None:
    """Parse a line as a JSON-RPC envelope; None if it is not a JSON object."""
    try:
        message = json.loads(line)
    except (json.JSONDecodeError, UnicodeError):
        return None
    return message if isinstance(message, dict) else None


def serialize_message(message: dict[str, Any]) -> str:
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False)


def is_response(message: dict[str, Any]) -> bool:
    return "id" in message and "method" not in message


def make_error_response(message: dict[str, Any], error_message: str, tool_name: str) -> dict:
    """Replace a response with a JSON-RPC error for the same id."""
    return {
        "jsonrpc": message.get("jsonrpc", "2.0"),
        "id": message["id"],
        "error": {
            "code": INTERNAL_ERROR_CODE,
            "message": error_message,
            "data": {"tool": tool_name},
        },
    }


class McpProxy:
    """Message-level proxy logic, independent of processes and pipes.

    Owns the correlation table for one upstream server; separate instances
    share no state.
    """

    def __init__(
        self,
        rewriter: ToolResponseRewriter,
        aliases: ToolAliasTable | None = None,
        call_log: ToolCallLog | None = None,
    ):
        self.rewriter = rewriter
        self.aliases = aliases if aliases is not None else ToolAliasTable()
        self.call_log = call_log
        self.correlations = CorrelationTable()

    # ------------------------------------------------------------------
    # Client -> upstream
    # ------------------------------------------------------------------

    def handle_client_line(self, line: str) -> str:
        """Process one line from the client; returns the line to forward."""
        message = parse_message(line)
        if message is None:
            return line

        if message.get("method") != TOOLS_CALL_METHOD or "id" not in message:
            return line

        params = message.get("params")
        name = params.get("name") if isinstance(params, dict) else None
        tool_name = name if isinstance(name, str) else ""

        try:
            self.correlations.record(message["id"], tool_name)
        except CorrelationError as e:
            logger.error("Protocol violation from client: %s", e)

        logger.info("Tool call id=%s tool=%s", message["id"], tool_name)

        if isinstance(params, dict) and self.aliases.is_alias(tool_name):
            real_name = self.aliases.resolve(tool_name)
            logger.debug("Rewriting aliased tool %s -> %s", tool_name, real_name)
            return serialize_message({**message, "params": {**params, "name": real_name}})

        return line

    # ------------------------------------------------------------------
    # Upstream -> client
    # ------------------------------------------------------------------

    async def handle_upstream_line(self, line: str) -> str:
        """Process one line from the upstream server; returns the line to forward."""
        message = parse_message(line)
        if message is None:
            return line

        changed = False

        result = message.get("result")
        if isinstance(result, dict) and isinstance(result.get("tools"), list):
            tools = self.aliases.inject(result["tools"])
            if len(tools) != len(result["tools"]):
                message = {**message, "result": {**result, "tools": tools}}
                changed = True

        if is_response(message):
            rewritten = await self._handle_response(message)
            if rewritten is not message:
                message = rewritten
                changed = True

        return serialize_message(message) if changed else line

    async def _handle_response(self, message: dict[str, Any]) -> dict[str, Any]:
        request_id = message["id"]
        tool_name = self.correlations.consume(request_id)
        if tool_name is None:
            if request_key(request_id) is not None:
                logger.debug("Response id=%s has no pending tool call", request_id)
            return message

        if "error" in message or "result" not in message:
            logger.info("Tool response id=%s tool=%s error=True", request_id, tool_name)
            self._log_call(request_id, tool_name, is_error=True)
            return message

        logger.info(
            "Tool response id=%s tool=%s will_rewrite=%s",
            request_id,
            tool_name,
            self.rewriter.should_rewrite(tool_name),
        )

        start = time.perf_counter()
        try:
            report = await self.rewriter.rewrite_with_metrics(tool_name, message["result"])
        except Exception as e:
            logger.exception("Rewriting response id=%s tool=%s failed", request_id, tool_name)
            self._log_call(
                request_id,
                tool_name,
                is_error=True,
                latency_ms=(time.perf_counter() - start) * 1000,
                error=str(e),
            )
            return make_error_response(message, f"Failed to process tool result: {e}", tool_name)

        self._log_call(
            request_id,
            tool_name,
            is_error=False,
            summarized=report.was_summarized,
            skipped=report.skipped,
            chars_before=report.chars_before,
            chars_after=report.chars_after,
            latency_ms=(time.perf_counter() - start) * 1000,
        )

        if report.result is message["result"] or report.result == message["result"]:
            return message
        return {**message, "result": report.result}

    def _log_call(
        self,
        request_id: Any,
        tool_name: str,
        *,
        is_error: bool,
        summarized: bool = False,
        skipped: bool = False,
        chars_before: int = 0,
        chars_after: int = 0,
        latency_ms: float = 0.0,
        error: str | None = None,
    ) -> None:
        if self.call_log is None:
            return
        self.call_log.log(
            ToolCallRecord(
                request_id=request_id,
                tool=tool_name,
                timestamp=now_iso(),
                is_error=is_error,
                summarized=summarized,
                skipped=skipped,
                chars_before=chars_before,
                chars_after=chars_after,
                rewrite_latency_ms=round(latency_ms, 2),
                error=error,
            )
        )

    # ------------------------------------------------------------------
    # Stream pumps
    # ------------------------------------------------------------------

    async def pump_client(self, reader: LineReader, send: SendLine) -> None:
        """Forward client lines upstream until the client closes its stream."""
        while True:
            raw = await read_line(reader, "client")
            if not raw:
                logger.info("Client closed its stream")
                return
            await send(self.handle_client_line(decode_line(raw)))

    async def pump_upstream(self, reader: LineReader, send: SendLine) -> None:
        """Forward upstream lines to the client, in arrival order, until EOF.

        Each line is fully processed and written before the next one is read.
        """
        while True:
            raw = await read_line(reader, "upstream")
            if not raw:
                logger.info("Upstream closed its stream")
                return
            await send(await self.handle_upstream_line(decode_line(raw)))


# ----------------------------------------------------------------------
# Process wiring
# ----------------------------------------------------------------------


def create_proxy(config: ProxyConfig) -> McpProxy:
    """Build an McpProxy (backend, summarizer, rewriter, aliases) from config."""
    backend = create_backend(config.summarizer)
    summarizer = SnapshotSummarizer(
        backend=backend,
        config=config.summarization,
        summarizer_config=config.summarizer,
    )
    rewriter = ToolResponseRewriter(
        summarizer=summarizer,
        skip_tools=config.skip_tools,
        collapse_events=config.summarization.collapse_events,
    )
    call_log = None
    if config.call_log and config.log_dir is not None:
        call_log = ToolCallLog(Path(config.log_dir) / "tool-calls.jsonl")
    return McpProxy(rewriter=rewriter, aliases=ToolAliasTable(config.aliases), call_log=call_log)


def _exit_code(returncode: int | None) -> int:
    if returncode is None:
        return 1
    if returncode < 0:
        # Killed by a signal: shell convention.
        return 128 - returncode
    return returncode


async def _stop_upstream(proc: asyncio.subprocess.Process, timeout: float | None = None) -> None:
    """Terminate the upstream, then kill it if it outlives the timeout."""
    if proc.returncode is not None:
        return
    if timeout is None:
        timeout = UPSTREAM_KILL_TIMEOUT_SECONDS
    proc.terminate()
    try:
        await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Upstream ignored SIGTERM for %.1fs, killing (pid=%s)", timeout, proc.pid)
        proc.kill()
        await proc.wait()


async def _open_stdin(limit: int) -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=limit)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def _write_stdout(line: str) -> None:
    sys.stdout.buffer.write(encode_line(line))
    sys.stdout.buffer.flush()


async def run_proxy(
    config: ProxyConfig,
    proxy: McpProxy | None = None,
    client_reader: LineReader | None = None,
    client_send: SendLine | None = None,
) -> int:
    """Spawn the upstream server and proxy stdio until it exits.

    Args:
        config: Proxy configuration.
        proxy: Message handler; built from config when omitted.
        client_reader: Client-side input; this process's stdin when omitted.
        client_send: Client-side output; this process's stdout when omitted.

    Returns:
        Exit code for this process: the upstream's, or 0 after SIGINT/SIGTERM.
    """
    proxy = proxy or create_proxy(config)
    send_client = client_send or _write_stdout
    command = config.upstream_command

    logger.info("Starting upstream server: %s", command)
    proc = await asyncio.create_subprocess_exec(
        *command,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        limit=config.stream_limit_bytes,
    )
    logger.info("Upstream server started (pid=%s)", proc.pid)

    assert proc.stdin is not None and proc.stdout is not None
    upstream_stdin = proc.stdin
    stopped_by_signal = False

    def on_signal(signame: str) -> None:
        nonlocal stopped_by_signal
        logger.info("Received %s, shutting down", signame)
        stopped_by_signal = True
        if proc.returncode is None:
            proc.terminate()

    loop = asyncio.get_running_loop()
    installed_signals = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal, sig.name)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers not supported here, skipping %s", sig.name)
        else:
            installed_signals.append(sig)

    async def send_upstream(line: str) -> None:
        upstream_stdin.write(encode_line(line))
        await upstream_stdin.drain()

    async def client_side() -> None:
        reader = client_reader
        if reader is None:
            reader = await _open_stdin(config.stream_limit_bytes)
        try:
            await proxy.pump_client(reader, send_upstream)
        except (BrokenPipeError, ConnectionResetError):
            logger.info("Upstream stdin closed")
            return
        upstream_stdin.close()
        try:
            await asyncio.wait_for(proc.wait(), timeout=UPSTREAM_EXIT_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.info("Upstream still running after client EOF, terminating")
            await _stop_upstream(proc)

    client_task = asyncio.create_task(client_side())
    try:
        await proxy.pump_upstream(proc.stdout, send_client)
        returncode = await proc.wait()
    finally:
        client_task.cancel()
        try:
            await client_task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Client stream failed")
        await _stop_upstream(proc)
        for sig in installed_signals:
            loop.remove_signal_handler(sig)
        await proxy.rewriter.summarizer.backend.aclose()

    logger.info("Upstream server exited (code=%s)", returncode)
    return 0 if stopped_by_signal else _exit_code(returncode)
