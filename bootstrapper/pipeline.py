"""Bootstrapper pipeline orchestrator.

Runs the four bootstrap steps strictly in order:

Step 1: PROVISION -- create the GitHub repository and clone it, or create a local directory.
Step 2: SCAFFOLD  -- run the framework's scaffolding tool in the working directory.
Step 3: INSTALL   -- install dependencies and the selected CSS framework.
Step 4: SERVE     -- start the dev server and wait for it to report readiness.

Any failure stops the run. Nothing created by earlier steps is rolled back.

Usage::

    python -m bootstrapper --name "My App" --framework vue --css tailwind --local
    bootstrapper            # asks for everything interactively
"""

from __future__ import annotations

import asyncio
import sys
import time
import traceback
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.panel import Panel

from bootstrapper.config import Config
from bootstrapper.devserver import DevServerLauncher
from bootstrapper.errors import BootstrapError
from bootstrapper.github_client import GitHubClient
from bootstrapper.initializer import FrameworkInitializer
from bootstrapper.installer import PackageInstaller
from bootstrapper.models import (
    CssFramework,
    Framework,
    ProjectRequest,
    ReadinessEvent,
    RemoteRepo,
    RepoSource,
)
from bootstrapper.prompts import Answers, ask_missing
from bootstrapper.provisioner import RepoProvisioner
from bootstrapper.utils import (
    STEP_NAMES,
    ProcessRunner,
    console,
    err_console,
    format_duration,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
)


class Pipeline:
    """Drives one bootstrap run for a ``ProjectRequest``.

    Collaborators can be injected for testing; by default a real
    ``ProcessRunner`` is used and a ``GitHubClient`` is built from the
    configured token when a remote repository is requested.

    Attributes:
        config: Global configuration.
        request: The operator's immutable request.
        state: Results accumulated by each step.
        source: The provisioned repository, once step 1 has run.
    """

    _STEP_METHODS: dict[int, str] = {
        1: "step1_provision",
        2: "step2_scaffold",
        3: "step3_install",
        4: "step4_serve",
    }

    def __init__(
        self,
        config: Config,
        request: ProjectRequest,
        runner: ProcessRunner | None = None,
        github: GitHubClient | None = None,
        exists: Callable[[Path], bool] | None = None,
    ) -> None:
        self.config = config
        self.request = request
        self.runner = runner or ProcessRunner()
        self.github = github
        self.exists = exists
        self.source: RepoSource | None = None
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "project_name": request.normalized_name,
            "steps_completed": [],
            "steps_failed": [],
            "ready": False,
            "success": False,
        }

        self.initializer = FrameworkInitializer(self.runner)
        self.installer = PackageInstaller(self.runner)
        self.launcher = DevServerLauncher(self.runner, config.server)

    # ------------------------------------------------------------------
    # Pre-flight checks
    # ------------------------------------------------------------------

    def _preflight(self) -> None:
        """Resolve credentials before anything touches the network or disk."""
        req = self.request
        if req.remote:
            source = f"GitHub ({'private' if req.private else 'public'})"
        else:
            source = "local directory"
        console.print(
            Panel(
                f"[bold bright_cyan]Frontend Bootstrapper[/bold bright_cyan]\n"
                f"Project   : {escape(req.normalized_name)}\n"
                f"Directory : {escape(str(self.config.project_path(req.normalized_name).resolve()))}\n"
                f"Source    : {source}\n"
                f"Framework : {req.framework.value}\n"
                f"CSS       : {escape(req.css_framework)}",
                title="[bold]Bootstrap Start[/bold]",
                border_style="bright_cyan",
            )
        )
        if req.remote and self.github is None:
            self.github = GitHubClient(
                token=self.config.github_token(),
                api_base=self.config.github.api_base,
                timeout=self.config.github.timeout,
            )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute every step in order, stopping at the first failure.

        Returns:
            The state dictionary, including a top-level ``success`` boolean.
        """
        run_start = time.monotonic()

        try:
            self._preflight()
        except BootstrapError as exc:
            self._report_failure(0, "PREFLIGHT", exc, time.monotonic() - run_start)
            self.state["error"] = str(exc)
            self._finish(run_start)
            return self.state

        all_success = True
        for step_num in sorted(self._STEP_METHODS):
            step_name = STEP_NAMES[step_num]
            print_step_header(step_num, step_name)

            step_start = time.monotonic()
            try:
                result = await getattr(self, self._STEP_METHODS[step_num])()
                self.state[f"step{step_num}"] = result
                self.state["steps_completed"].append(step_num)
                print_success(
                    f"Step {step_num} ({step_name}) completed in "
                    f"{format_duration(time.monotonic() - step_start)}"
                )

            except BootstrapError as exc:
                all_success = False
                self.state["steps_failed"].append(step_num)
                self.state["error"] = str(exc)
                self._report_failure(step_num, step_name, exc, time.monotonic() - step_start)
                break

            except Exception as exc:
                all_success = False
                self.state["steps_failed"].append(step_num)
                tb = traceback.format_exc()
                self.state["error"] = tb
                self._report_failure(step_num, step_name, exc, time.monotonic() - step_start)
                err_console.print(f"[dim]{escape(tb)}[/dim]")
                break

        self.state["success"] = all_success
        self._finish(run_start)
        return self.state

    def _report_failure(self, step: int, name: str, exc: BaseException, elapsed: float) -> None:
        print_error(f"Step {step} ({name}) FAILED after {format_duration(elapsed)}: {exc}")
        details = exc.details() if isinstance(exc, BootstrapError) else ""
        if details:
            err_console.print(escape(details), style="red", highlight=False)

    def _finish(self, run_start: float) -> None:
        total = time.monotonic() - run_start
        self.state["total_duration"] = format_duration(total)
        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()
        self._print_final_summary(total)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def step1_provision(self) -> dict[str, Any]:
        """Create the working directory (remote clone or local mkdir)."""
        provisioner = RepoProvisioner(
            self.runner,
            base_dir=self.config.base_dir,
            github=self.github,
            exists=self.exists,
        )
        self.source = await provisioner.provision(
            self.request.normalized_name,
            private=self.request.private,
            remote=self.request.remote,
        )
        result: dict[str, Any] = {
            "path": str(self.source.path),
            "source": self.source.describe(),
        }
        if isinstance(self.source, RemoteRepo):
            result["html_url"] = self.source.html_url
        return result

    async def step2_scaffold(self) -> dict[str, Any]:
        """Run the scaffolding tool for the requested framework."""
        workdir = self._workdir()
        framework = await self.initializer.initialize(
            self.request.framework, self.request.normalized_name, workdir
        )
        return {"framework": framework.value}

    async def step3_install(self) -> dict[str, Any]:
        """Install dependencies, then the CSS framework if one is known."""
        workdir = self._workdir()
        await self.installer.install_dependencies(workdir)
        css_installed = await self.installer.install_css(self.request.css_framework, workdir)
        return {"css_framework": self.request.css_framework, "css_installed": css_installed}

    async def step4_serve(self) -> dict[str, Any]:
        """Start the dev server and block until it exits."""
        result = await self.launcher.launch(
            self.request.framework, self._workdir(), on_ready=self._on_ready
        )
        return {"port": result.event.port, "exit_code": result.exit_code}

    def _workdir(self) -> Path:
        if self.source is None:
            raise BootstrapError("No working directory has been provisioned (run step 1 first)")
        return self.source.path

    def _on_ready(self, event: ReadinessEvent) -> None:
        self.state["ready"] = True
        self.state["port"] = event.port
        print_summary_table(
            {
                "Project": self.request.normalized_name,
                "Source": self.source.describe() if self.source else "-",
                "Directory": str(self._workdir()),
                "Framework": self.request.framework.value,
                "CSS": self.request.css_framework,
                "URL": event.url,
            },
            title="Project Ready",
        )

    def _print_final_summary(self, total_elapsed: float) -> None:
        """Print the final run summary panel."""
        steps_ok = self.state.get("steps_completed", [])
        steps_fail = self.state.get("steps_failed", [])

        if self.state.get("success"):
            border_style = "bold green"
            status_text = "[bold green]BOOTSTRAP SUCCEEDED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]BOOTSTRAP FAILED[/bold red]"

        detail_lines = [
            status_text,
            "",
            f"Duration  : {format_duration(total_elapsed)}",
            f"Completed : {', '.join(str(s) for s in steps_ok) or 'none'}",
        ]
        if steps_fail:
            detail_lines.append(f"Failed    : {', '.join(str(s) for s in steps_fail)}")
        if self.source is not None:
            detail_lines.append(f"Directory : {escape(str(self.source.path))}")

        console.print()
        console.print(
            Panel(
                "\n".join(detail_lines),
                title="[bold]Bootstrap Complete[/bold]",
                border_style=border_style,
            )
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="bootstrapper",
        description="Bootstrap a front-end project: repository, scaffold, install, dev server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  bootstrapper\n"
            "  bootstrapper --name 'My App' --framework react --css tailwind --local\n"
            "  bootstrapper --name shop --framework vue --remote --public\n"
        ),
    )
    parser.add_argument("--name", help="Repository / project name (normalised)")
    parser.add_argument(
        "--framework",
        help=f"Front-end framework: {', '.join(Framework.choices())}",
    )
    parser.add_argument(
        "--css",
        dest="css_framework",
        help=f"CSS framework: {', '.join(CssFramework.choices())}",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--remote", dest="remote", action="store_true", default=None,
        help="Create a GitHub repository and clone it",
    )
    source.add_argument(
        "--local", dest="remote", action="store_false",
        help="Create a local directory only",
    )

    visibility = parser.add_mutually_exclusive_group()
    visibility.add_argument(
        "--private", dest="private", action="store_true", default=None,
        help="Make the GitHub repository private (default)",
    )
    visibility.add_argument(
        "--public", dest="private", action="store_false",
        help="Make the GitHub repository public",
    )

    parser.add_argument(
        "--base-dir",
        default=None,
        help="Directory to create the project in (default: current directory)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``bootstrapper`` / ``python -m bootstrapper``."""
    args = _build_parser().parse_args(argv)

    config = Config.from_env()
    if args.base_dir:
        config.base_dir = Path(args.base_dir)

    answers = ask_missing(
        Answers(
            name=args.name,
            remote=args.remote,
            private=args.private,
            framework=args.framework,
            css_framework=args.css_framework,
        ),
        config,
    )

    try:
        request = ProjectRequest.from_input(
            answers.name,
            framework=answers.framework or config.default_framework,
            css_framework=answers.css_framework or config.default_css.value,
            private=bool(answers.private),
            remote=bool(answers.remote),
        )
    except BootstrapError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    if request.was_renamed:
        console.print(f"Repository name normalized to: [bold]{request.normalized_name}[/bold]")

    pipeline = Pipeline(config, request)
    try:
        result = asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        if pipeline.state.get("ready"):
            print_warning("Development server stopped.")
            return
        print_error("Interrupted before the development server became ready.")
        sys.exit(1)

    if not result.get("success"):
        sys.exit(1)
