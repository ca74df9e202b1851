"""Shared utilities for the bootstrapper.

Provides the async process runner used by every step, Rich-based console
output helpers and small formatting functions.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from bootstrapper.errors import ProcessError
from bootstrapper.models import CommandOutcome, CommandSpec

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


def _merged_env(overrides: dict[str, str]) -> dict[str, str] | None:
    if not overrides:
        return None
    return {**os.environ, **overrides}


class ProcessRunner:
    """Spawns external commands described by ``CommandSpec``.

    The pipeline only talks to processes through this class so tests can
    substitute a fake.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def _exec(
        self,
        spec: CommandSpec,
        stdout: int | None,
        stderr: int | None,
        new_session: bool = False,
    ) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *spec.argv,
                stdout=stdout,
                stderr=stderr,
                cwd=str(spec.cwd) if spec.cwd else None,
                env=_merged_env(spec.env),
                start_new_session=new_session,
            )
        except FileNotFoundError:
            raise ProcessError(
                f"Executable not found: '{spec.program}'. Ensure it is installed and in PATH.",
                command=spec.display(),
                exit_code=127,
            ) from None
        except PermissionError:
            raise ProcessError(
                f"Permission denied executing: '{spec.program}'.",
                command=spec.display(),
                exit_code=126,
            ) from None

    async def run(self, spec: CommandSpec) -> CommandOutcome:
        """Run *spec* to completion.

        When ``spec.capture`` is false the child inherits the terminal and the
        returned stdout/stderr are empty.

        Raises:
            ProcessError: If the executable cannot be started.
        """
        pipe = asyncio.subprocess.PIPE if spec.capture else None
        process = await self._exec(spec, stdout=pipe, stderr=pipe)

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return CommandOutcome(
                succeeded=False,
                exit_code=-1,
                stderr=f"Command timed out after {self.timeout}s: {spec.display()}",
            )

        exit_code = process.returncode if process.returncode is not None else -1
        return CommandOutcome(
            succeeded=exit_code == 0,
            exit_code=exit_code,
            stdout=(stdout_bytes or b"").decode("utf-8", errors="replace").strip(),
            stderr=(stderr_bytes or b"").decode("utf-8", errors="replace").strip(),
        )

    async def spawn(self, spec: CommandSpec) -> asyncio.subprocess.Process:
        """Start a long-running command with stdout and stderr piped.

        Stdin is inherited. On POSIX the command leads a new session, so
        ``kill`` can reach the processes it starts (npm and npx run the
        real server as a grandchild that holds the pipes open).
        """
        return await self._exec(
            spec,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            new_session=os.name == "posix",
        )

    def kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill a process started by ``spawn`` together with its process group."""
        if os.name == "posix":
            with contextlib.suppress(ProcessLookupError, PermissionError):
                os.killpg(process.pid, signal.SIGKILL)
                return
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()


async def run_checked(
    runner: ProcessRunner,
    spec: CommandSpec,
    failure: str,
) -> CommandOutcome:
    """Run *spec* and raise ``ProcessError`` carrying stderr on a non-zero exit."""
    outcome = await runner.run(spec)
    if not outcome.succeeded:
        raise ProcessError(
            f"{failure} (exit {outcome.exit_code}): {spec.display()}",
            command=spec.display(),
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
        )
    return outcome


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STEP_NAMES: dict[int, str] = {
    1: "PROVISION",
    2: "SCAFFOLD",
    3: "INSTALL",
    4: "SERVE",
}

STEP_COLORS: dict[int, str] = {
    1: "bright_cyan",
    2: "bright_green",
    3: "bright_yellow",
    4: "bright_magenta",
}


def print_step_header(step: int, name: str) -> None:
    """Print a full-width rule announcing a pipeline step."""
    color = STEP_COLORS.get(step, "white")
    console.print()
    console.print(
        Rule(
            f"[bold {color}] Step {step}: {name.upper()} [/bold {color}]",
            style=color,
        )
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(escape(key), escape(str(value)))

    console.print(table)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message on stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
