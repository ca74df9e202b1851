"""Dependency and CSS framework installation."""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from bootstrapper.frameworks import CSS_INSTALL_ARGS
from bootstrapper.models import CommandSpec, CssFramework
from bootstrapper.utils import ProcessRunner, console, run_checked


def _css_key(selection: CssFramework | str) -> str:
    if isinstance(selection, CssFramework):
        return selection.value
    return str(selection).strip().lower()


class PackageInstaller:
    """Installs declared dependencies and, optionally, a CSS framework.

    Unlike framework selection, an unknown CSS selection is not an error:
    anything missing from the table simply installs nothing.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        css_commands: dict[str, list[str]] | None = None,
    ) -> None:
        self.runner = runner
        self.css_commands = dict(css_commands if css_commands is not None else CSS_INSTALL_ARGS)

    async def install_dependencies(self, cwd: Path) -> None:
        """Run ``npm install`` in *cwd*; a failure aborts with ``ProcessError``."""
        console.print("  Installing project dependencies...")
        await run_checked(
            self.runner,
            CommandSpec.from_argv(["npm", "install"], cwd=cwd),
            "Error installing project dependencies",
        )

    def css_command(self, selection: CssFramework | str, cwd: Path) -> CommandSpec | None:
        """Return the install command for *selection*, or ``None`` for a no-op."""
        argv = self.css_commands.get(_css_key(selection))
        if argv is None:
            return None
        return CommandSpec.from_argv(argv, cwd=cwd)

    async def install_css(self, selection: CssFramework | str, cwd: Path) -> bool:
        """Install the CSS framework for *selection*.

        Returns:
            ``True`` if an install command ran, ``False`` for a no-op.
        """
        key = _css_key(selection)
        spec = self.css_command(key, cwd)
        if spec is None:
            console.print(f"  [dim]No CSS framework to install for '{escape(key)}'.[/dim]")
            return False

        console.print(f"  Installing {key.capitalize()} CSS...")
        await run_checked(self.runner, spec, f"Error installing {key} CSS")
        return True
