"""Framework scaffolding step."""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from bootstrapper.frameworks import (
    EXTRA_DEPENDENCIES,
    SCAFFOLD_COMMANDS,
    SCAFFOLD_ENV,
    ScaffoldBuilder,
    check_exhaustive,
)
from bootstrapper.models import CommandSpec, Framework
from bootstrapper.utils import ProcessRunner, console, run_checked


class FrameworkInitializer:
    """Runs the scaffolding tool for the selected framework.

    The command table is validated on construction: every ``Framework``
    member must have a builder.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        commands: dict[Framework, ScaffoldBuilder] | None = None,
        extra_dependencies: dict[Framework, list[str]] | None = None,
    ) -> None:
        self.runner = runner
        self.commands = dict(commands if commands is not None else SCAFFOLD_COMMANDS)
        self.extra_dependencies = dict(
            extra_dependencies if extra_dependencies is not None else EXTRA_DEPENDENCIES
        )
        check_exhaustive(self.commands, "scaffold command table")

    def build_command(self, selection: Framework | str, target_name: str, cwd: Path) -> CommandSpec:
        """Resolve *selection* to a ready-to-run scaffold command.

        Raises:
            UnsupportedSelectionError: If *selection* is not a ``Framework``.
        """
        framework = Framework.parse(selection)
        argv = self.commands[framework](target_name)
        return CommandSpec.from_argv(argv, cwd=cwd, env=SCAFFOLD_ENV)

    async def initialize(self, selection: Framework | str, target_name: str, cwd: Path) -> Framework:
        """Scaffold the project in *cwd*.

        Returns:
            The resolved ``Framework``.

        Raises:
            UnsupportedSelectionError: Before any process is spawned.
            ProcessError: If the scaffolding tool (or a follow-up dependency
                install) exits non-zero.
        """
        spec = self.build_command(selection, target_name, cwd)
        framework = Framework.parse(selection)

        console.print(f"  Initializing [bold]{framework.value}[/bold] project...")
        console.print(f"  [dim]Executing: {escape(spec.display())}[/dim]")
        outcome = await run_checked(
            self.runner, spec, f"Error initializing {framework.value} project"
        )
        if outcome.stdout:
            console.out(outcome.stdout)

        extras = self.extra_dependencies.get(framework, [])
        if extras:
            console.print(f"  Installing additional {framework.value} dependencies...")
            await run_checked(
                self.runner,
                CommandSpec.from_argv(["npm", "install", *extras], cwd=cwd),
                f"Error installing additional {framework.value} dependencies",
            )

        return framework
