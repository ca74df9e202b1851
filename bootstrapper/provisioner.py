"""Working-directory provisioning.

Either creates a GitHub repository and clones it, or creates a plain local
directory. The existence check always runs first so a doomed clone never
follows a successful remote creation.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from rich.markup import escape

from bootstrapper.errors import ConflictError, InputError, ProcessError
from bootstrapper.github_client import GitHubClient
from bootstrapper.models import CommandSpec, LocalRepo, RemoteRepo, RepoSource
from bootstrapper.utils import ProcessRunner, console, run_checked


class RepoProvisioner:
    """Produces the single working directory every later step runs in.

    Args:
        runner: Process runner used for ``git clone``.
        base_dir: Directory the project directory is created under.
        github: Client used when a remote repository is requested. May be
            ``None`` for local-only runs.
        exists: Existence check for the candidate directory.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        base_dir: Path = Path("."),
        github: GitHubClient | None = None,
        exists: Callable[[Path], bool] | None = None,
    ) -> None:
        self.runner = runner
        self.base_dir = Path(base_dir)
        self.github = github
        self.exists = exists or (lambda path: path.exists())

    async def provision(self, name: str, private: bool = True, remote: bool = False) -> RepoSource:
        """Create the working directory for *name*.

        Raises:
            ConflictError: If the directory already exists.
            InputError: If a remote repository is requested without a client.
            RemoteError: If repository creation fails.
            ProcessError: If cloning or directory creation fails.
        """
        target = self.base_dir / name
        if self.exists(target):
            raise ConflictError(str(target))

        if remote:
            return await self._create_remote(name, private, target)
        return self._create_local(target)

    async def _create_remote(self, name: str, private: bool, target: Path) -> RemoteRepo:
        if self.github is None:
            raise InputError("A GitHub client is required to create a remote repository.")

        visibility = "private" if private else "public"
        console.print(f"  Creating {visibility} repository [bold]{name}[/bold] on GitHub...")
        created = await self.github.create_repository(name, private=private)
        console.print(f"  [green]+[/green] Repository '{name}' created successfully: {escape(created.html_url)}")

        clone = CommandSpec.from_argv(
            ["git", "clone", created.clone_url, name],
            cwd=self.base_dir,
        )
        await run_checked(self.runner, clone, "Error cloning the repository")
        console.print(f"  [green]+[/green] Repository cloned successfully into '{escape(str(target))}'")

        return RemoteRepo(html_url=created.html_url, clone_url=created.clone_url, path=target)

    def _create_local(self, target: Path) -> LocalRepo:
        try:
            target.mkdir(parents=False, exist_ok=False)
        except FileExistsError:
            raise ConflictError(str(target)) from None
        except OSError as exc:
            raise ProcessError(
                f"Error creating directory '{target}': {exc}",
                command=f"mkdir {target}",
            ) from exc
        console.print(f"  [green]+[/green] Created local directory '{escape(str(target))}'")
        return LocalRepo(path=target)
