"""Shared pytest fixtures for the bootstrapper test suite.

Provides reusable fakes for:
- The process runner (records every command, fails on demand)
- A spawned dev server process with scripted stdout/stderr
- The GitHub client
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from bootstrapper.config import Config, ServerConfig
from bootstrapper.github_client import CreatedRepository
from bootstrapper.models import CommandOutcome, CommandSpec


# ---------------------------------------------------------------------------
# Fake processes
# ---------------------------------------------------------------------------


class FakeProcess:
    """Stand-in for ``asyncio.subprocess.Process``.

    Must be constructed inside a running event loop (``StreamReader`` needs
    one). With ``hold_open=True`` stdout never reaches EOF until ``kill()``.
    With ``stderr_open=True`` stderr never reaches EOF at all, like a pipe
    still held by a grandchild.
    """

    def __init__(
        self,
        stdout_chunks: list[bytes] | None = None,
        stderr: bytes = b"",
        returncode: int = 0,
        hold_open: bool = False,
        stderr_open: bool = False,
    ) -> None:
        self.stdout = asyncio.StreamReader()
        for chunk in stdout_chunks or []:
            self.stdout.feed_data(chunk)
        if not hold_open:
            self.stdout.feed_eof()

        self.stderr = asyncio.StreamReader()
        if stderr:
            self.stderr.feed_data(stderr)
        if not stderr_open:
            self.stderr.feed_eof()

        self.returncode: int | None = None
        self.killed = False
        self._final_code = returncode
        self._hold_open = hold_open

    def kill(self) -> None:
        self.killed = True
        if self._hold_open:
            self.stdout.feed_eof()

    async def wait(self) -> int:
        if self.returncode is None:
            self.returncode = -9 if self.killed else self._final_code
        return self.returncode


class FakeRunner:
    """Records commands instead of running them.

    Args:
        fail_when: Predicate selecting commands that should exit non-zero.
        stderr: Stderr reported for failing commands.
        process_factory: Builds the process returned by ``spawn``.
    """

    def __init__(
        self,
        fail_when: Callable[[CommandSpec], bool] | None = None,
        stderr: str = "npm ERR! something went wrong",
        process_factory: Callable[[], FakeProcess] | None = None,
    ) -> None:
        self.calls: list[CommandSpec] = []
        self.spawned: list[CommandSpec] = []
        self.killed: list[FakeProcess] = []
        self.fail_when = fail_when
        self.stderr = stderr
        self.process_factory = process_factory

    @property
    def argvs(self) -> list[list[str]]:
        return [spec.argv for spec in self.calls]

    async def run(self, spec: CommandSpec) -> CommandOutcome:
        self.calls.append(spec)
        if self.fail_when is not None and self.fail_when(spec):
            return CommandOutcome(succeeded=False, exit_code=1, stderr=self.stderr)
        return CommandOutcome(succeeded=True, exit_code=0, stdout="done")

    async def spawn(self, spec: CommandSpec) -> FakeProcess:
        self.spawned.append(spec)
        if self.process_factory is None:
            raise AssertionError(f"Unexpected spawn: {spec.display()}")
        return self.process_factory()

    def kill(self, process: FakeProcess) -> None:
        self.killed.append(process)
        process.kill()


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A runner where every command succeeds and nothing may be spawned."""
    return FakeRunner()


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Factory for runners with custom failure rules or spawned processes."""
    return FakeRunner


@pytest.fixture
def make_process() -> type[FakeProcess]:
    """Factory for scripted dev server processes (call inside an async test)."""
    return FakeProcess


# ---------------------------------------------------------------------------
# GitHub
# ---------------------------------------------------------------------------


@pytest.fixture
def created_repo() -> CreatedRepository:
    return CreatedRepository(
        html_url="https://github.com/octocat/my-app",
        clone_url="https://github.com/octocat/my-app.git",
        name="my-app",
        private=True,
    )


@pytest.fixture
def mock_github(created_repo: CreatedRepository) -> MagicMock:
    """GitHub client whose ``create_repository`` succeeds."""
    client = MagicMock()
    client.create_repository = AsyncMock(return_value=created_repo)
    return client


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@pytest.fixture
def bootstrap_config(tmp_path: Path) -> Config:
    """Config rooted at ``tmp_path`` with tight readiness limits."""
    return Config(
        base_dir=tmp_path,
        token_env="BOOTSTRAP_TEST_TOKEN",
        server=ServerConfig(readiness_timeout=5.0, max_scan_bytes=4096, chunk_size=64),
    )
