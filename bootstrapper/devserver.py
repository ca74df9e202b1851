"""Dev server launch and readiness detection.

The server is spawned with stdout and stderr piped. Stdout is read chunk by
chunk, echoed verbatim to the console and scanned for a readiness marker by a
``ReadinessScanner``. The scanner keeps only the trailing characters needed
to match a marker split across two chunks and gives up after a byte ceiling;
the launcher adds a wall-clock ceiling on top. Once a marker is seen the
scanner stops matching, output keeps being forwarded, and the launcher waits
for the server to exit.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from bootstrapper.config import ServerConfig
from bootstrapper.errors import ProcessError
from bootstrapper.frameworks import SERVER_COMMANDS, SERVER_ENV, ServerCommand, check_exhaustive
from bootstrapper.models import CommandSpec, Framework, ReadinessEvent
from bootstrapper.utils import ProcessRunner, console, print_warning

# Union of the start-up banners printed by Vite, the Angular CLI and
# create-react-app's webpack dev server.
READINESS_MARKERS: tuple[str, ...] = (
    "VITE v",
    "ready in",
    "Local:",
    "Compiled successfully",
    "webpack compiled",
    "Angular Live Development Server",
)

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

STDERR_TAIL_BYTES = 65_536
STOP_GRACE_SECONDS = 5.0


class ReadinessScanner:
    """Incremental matcher for readiness markers in a byte stream.

    Args:
        port: Port reported in the ``ReadinessEvent``.
        markers: Substrings whose appearance means the server is ready.
        max_bytes: Bytes to scan before declaring the stream exhausted.
    """

    def __init__(
        self,
        port: str,
        markers: tuple[str, ...] = READINESS_MARKERS,
        max_bytes: int = 1_048_576,
    ) -> None:
        if not markers:
            raise ValueError("At least one readiness marker is required")
        self.port = port
        self.markers = markers
        self.max_bytes = max_bytes
        self.bytes_scanned = 0
        self.chunks_scanned = 0
        self.event: ReadinessEvent | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._keep = max(len(marker) for marker in markers) - 1
        self._tail = ""

    @property
    def detected(self) -> bool:
        return self.event is not None

    @property
    def exhausted(self) -> bool:
        """True once the byte ceiling is reached without a match."""
        return self.event is None and self.bytes_scanned >= self.max_bytes

    def feed(self, chunk: bytes | str) -> str:
        """Decode *chunk*, scan it unless already finished, and return the text.

        After detection (or exhaustion) chunks are only decoded.
        """
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        text = self._decoder.decode(chunk)
        if self.event is not None or self.exhausted:
            return text

        self.bytes_scanned += len(chunk)
        self.chunks_scanned += 1

        window = _ANSI_ESCAPE.sub("", self._tail + text)
        for marker in self.markers:
            if marker in window:
                self.event = ReadinessEvent(detected=True, port=self.port, marker=marker)
                self._tail = ""
                return text

        self._tail = window[-self._keep:] if self._keep else ""
        return text

    def finish(self) -> str:
        """Flush any bytes held back by the incremental decoder."""
        return self._decoder.decode(b"", final=True)


@dataclass(frozen=True)
class DevServerResult:
    """Outcome of a dev server run that reached readiness."""

    event: ReadinessEvent
    exit_code: int


class _NotReady(Exception):
    """Internal signal: the scan ended without a readiness marker."""


class _StderrTail:
    """Keeps the last *limit* bytes of a stream while it is drained."""

    def __init__(self, limit: int = STDERR_TAIL_BYTES) -> None:
        self.limit = limit
        self._buffer = bytearray()

    async def drain(self, stream: asyncio.StreamReader | None) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(4096)
            if not chunk:
                return
            self._buffer.extend(chunk)
            if len(self._buffer) > self.limit:
                del self._buffer[: len(self._buffer) - self.limit]

    def text(self) -> str:
        return self._buffer.decode("utf-8", errors="replace").strip()


class DevServerLauncher:
    """Starts a framework's dev server and reports when it is ready.

    ``stop_grace`` bounds how long the launcher waits for a killed server to
    exit and for its stderr to close.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        settings: ServerConfig | None = None,
        commands: dict[Framework, ServerCommand] | None = None,
        markers: tuple[str, ...] = READINESS_MARKERS,
        stop_grace: float = STOP_GRACE_SECONDS,
    ) -> None:
        self.runner = runner
        self.settings = settings or ServerConfig()
        self.commands = dict(commands if commands is not None else SERVER_COMMANDS)
        self.markers = markers
        self.stop_grace = stop_grace
        check_exhaustive(self.commands, "server command table")

    def build_command(self, framework: Framework | str, cwd: Path) -> tuple[CommandSpec, str]:
        """Return the start command and the port the server declares."""
        server = self.commands[Framework.parse(framework)]
        return CommandSpec.from_argv(server.argv, cwd=cwd, env=SERVER_ENV), server.port

    async def launch(
        self,
        framework: Framework | str,
        cwd: Path,
        on_ready: Callable[[ReadinessEvent], None] | None = None,
    ) -> DevServerResult:
        """Run the dev server for *framework* in *cwd* until it exits.

        *on_ready* is called once, as soon as a readiness marker appears.

        Raises:
            ProcessError: If the server cannot be started, or its output ends,
                exceeds the byte ceiling or the readiness timeout without a
                marker. The server is killed first and the captured stderr
                is attached.
        """
        fw = Framework.parse(framework)
        spec, port = self.build_command(fw, cwd)
        console.print(f"  Starting [bold]{fw.value}[/bold] development server...")

        process = await self.runner.spawn(spec)
        stderr_tail = _StderrTail()
        stderr_task = asyncio.create_task(stderr_tail.drain(process.stderr))
        scanner = ReadinessScanner(port, self.markers, self.settings.max_scan_bytes)
        finished = False

        try:
            try:
                event = await self._scan_for_readiness(process, scanner)
            except _NotReady as exc:
                await self._stop(process)
                await self._settle(stderr_task)
                finished = True
                raise ProcessError(
                    f"Development server did not signal readiness: {exc}",
                    command=spec.display(),
                    exit_code=process.returncode,
                    stderr=stderr_tail.text(),
                ) from None

            console.print()
            console.print(
                f"[bold green]Development server for {fw.value} is running at {event.url}[/bold green]"
            )
            if on_ready is not None:
                on_ready(event)

            await self._forward_remaining(process, scanner)
            exit_code = await process.wait()
            await self._settle(stderr_task)
            finished = True
        finally:
            # Cancellation (Ctrl-C) must not leave the server orphaned.
            if not finished:
                await self._stop(process)
            if not stderr_task.done():
                stderr_task.cancel()

        stderr = stderr_tail.text()
        if exit_code != 0 and stderr:
            print_warning(f"Development server exited with code {exit_code}:\n{stderr}")
        return DevServerResult(event=event, exit_code=exit_code)

    async def _stop(self, process: asyncio.subprocess.Process) -> None:
        """Kill the server's process group and reap it."""
        self.runner.kill(process)
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(process.wait(), timeout=self.stop_grace)

    async def _settle(self, stderr_task: asyncio.Task) -> None:
        """Give the stderr drain up to ``stop_grace`` seconds to reach EOF."""
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stderr_task, timeout=self.stop_grace)

    async def _scan_for_readiness(
        self,
        process: asyncio.subprocess.Process,
        scanner: ReadinessScanner,
    ) -> ReadinessEvent:
        assert process.stdout is not None  # guaranteed by PIPE
        loop = asyncio.get_running_loop()
        timeout = self.settings.readiness_timeout
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                raise _NotReady(f"no readiness marker within {timeout}s")
            try:
                chunk = await asyncio.wait_for(
                    process.stdout.read(self.settings.chunk_size), timeout=remaining
                )
            except asyncio.TimeoutError:
                raise _NotReady(f"no readiness marker within {timeout}s") from None

            if not chunk:
                tail = scanner.finish()
                if tail:
                    console.out(tail, end="", highlight=False)
                raise _NotReady("output ended before a readiness marker appeared")

            console.out(scanner.feed(chunk), end="", highlight=False)
            if scanner.event is not None:
                return scanner.event
            if scanner.exhausted:
                raise _NotReady(
                    f"scanned {scanner.bytes_scanned} bytes without a readiness marker"
                )

    async def _forward_remaining(
        self,
        process: asyncio.subprocess.Process,
        scanner: ReadinessScanner,
    ) -> None:
        assert process.stdout is not None
        while True:
            chunk = await process.stdout.read(self.settings.chunk_size)
            if not chunk:
                break
            console.out(scanner.feed(chunk), end="", highlight=False)
        tail = scanner.finish()
        if tail:
            console.out(tail, end="", highlight=False)
