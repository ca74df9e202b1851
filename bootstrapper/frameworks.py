"""Dispatch tables for every supported framework.

Each table keyed by ``Framework`` must cover every member; ``check_exhaustive``
runs at import so a missing entry fails loudly instead of surfacing as a
``KeyError`` halfway through a run.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from bootstrapper.models import CssFramework, Framework

ScaffoldBuilder = Callable[[str], list[str]]


@dataclass(frozen=True)
class ServerCommand:
    """How to start a framework's dev server and the port it listens on."""

    argv: tuple[str, ...]
    port: str


SCAFFOLD_COMMANDS: dict[Framework, ScaffoldBuilder] = {
    Framework.ANGULAR: lambda name: [
        "npx",
        "@angular/cli@latest",
        "new",
        name,
        "--directory",
        ".",
        "--skip-install",
        "--strict",
    ],
    Framework.REACT: lambda name: ["npx", "create-react-app", "."],
    Framework.VUE: lambda name: [
        "npm",
        "create",
        "vite@latest",
        ".",
        "--",
        "--template",
        "vue",
    ],
    Framework.SVELTE: lambda name: ["npx", "create-vite", ".", "--template", "svelte"],
}

# Packages installed straight after scaffolding.
EXTRA_DEPENDENCIES: dict[Framework, list[str]] = {
    Framework.ANGULAR: [],
    Framework.REACT: [],
    Framework.VUE: ["vue-router@next", "vuex@next"],
    Framework.SVELTE: [],
}

SERVER_COMMANDS: dict[Framework, ServerCommand] = {
    Framework.ANGULAR: ServerCommand(argv=("npx", "ng", "serve"), port="4200"),
    Framework.REACT: ServerCommand(argv=("npm", "start"), port="3000"),
    Framework.VUE: ServerCommand(argv=("npm", "run", "dev"), port="5173"),
    Framework.SVELTE: ServerCommand(argv=("npm", "run", "dev"), port="5173"),
}

# Keyed by plain strings: any selection missing here is silently skipped.
CSS_INSTALL_ARGS: dict[str, list[str]] = {
    CssFramework.TAILWIND.value: ["npm", "install", "-D", "tailwindcss"],
    CssFramework.BOOTSTRAP.value: ["npm", "install", "bootstrap"],
    CssFramework.BULMA.value: ["npm", "install", "bulma"],
}

SCAFFOLD_ENV: dict[str, str] = {
    "NODE_ENV": "production",
    "NPM_CONFIG_LOGLEVEL": "error",
}

SERVER_ENV: dict[str, str] = {
    "NODE_ENV": "development",
    "FORCE_COLOR": "true",
}


def check_exhaustive(table: Mapping[Framework, Any], name: str) -> None:
    """Raise ``ValueError`` unless *table* has an entry for every ``Framework``."""
    missing = [member.value for member in Framework if member not in table]
    if missing:
        raise ValueError(f"{name} has no entry for: {', '.join(missing)}")


check_exhaustive(SCAFFOLD_COMMANDS, "SCAFFOLD_COMMANDS")
check_exhaustive(EXTRA_DEPENDENCIES, "EXTRA_DEPENDENCIES")
check_exhaustive(SERVER_COMMANDS, "SERVER_COMMANDS")
