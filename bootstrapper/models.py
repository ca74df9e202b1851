"""Data model shared by every pipeline step.

Request and repository values are frozen Pydantic models; command and
readiness records are frozen dataclasses passed between the steps and the
process runner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from bootstrapper.errors import UnsupportedSelectionError
from bootstrapper.naming import require_name


class Framework(str, Enum):
    """Front-end frameworks with a scaffolding command and a dev server."""

    ANGULAR = "angular"
    REACT = "react"
    VUE = "vue"
    SVELTE = "svelte"

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: "Framework | str") -> "Framework":
        """Coerce *value* into a member or raise ``UnsupportedSelectionError``."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedSelectionError(key, cls.choices()) from None


class CssFramework(str, Enum):
    """Known CSS framework selections. ``NONE`` installs nothing."""

    TAILWIND = "tailwind"
    BOOTSTRAP = "bootstrap"
    BULMA = "bulma"
    NONE = "none"

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class ProjectRequest(BaseModel):
    """Everything the operator asked for, fixed before the first step runs."""

    model_config = ConfigDict(frozen=True)

    raw_name: str
    normalized_name: str = Field(pattern=r"^[a-z0-9-]+$")
    private: bool = True
    framework: Framework = Framework.REACT
    css_framework: str = Field(
        default=CssFramework.TAILWIND.value,
        description="Lower-cased CSS selection; unknown values install nothing",
    )
    remote: bool = False

    @classmethod
    def from_input(
        cls,
        raw_name: str | None,
        *,
        framework: Framework | str = Framework.REACT,
        css_framework: str = CssFramework.TAILWIND.value,
        private: bool = True,
        remote: bool = False,
    ) -> "ProjectRequest":
        """Build a request from raw answers.

        Raises:
            InputError: If no usable name can be derived.
            UnsupportedSelectionError: If *framework* is not a known key.
        """
        normalized = require_name(raw_name)
        return cls(
            raw_name=raw_name or "",
            normalized_name=normalized,
            private=private,
            framework=Framework.parse(framework),
            css_framework=(css_framework or CssFramework.NONE.value).strip().lower(),
            remote=remote,
        )

    @property
    def was_renamed(self) -> bool:
        return self.normalized_name != self.raw_name


# ---------------------------------------------------------------------------
# Repository source
# ---------------------------------------------------------------------------


class RemoteRepo(BaseModel):
    """A repository created on the host and cloned into ``path``."""

    model_config = ConfigDict(frozen=True)

    html_url: str
    clone_url: str
    path: Path

    def describe(self) -> str:
        return f"remote ({self.html_url})"


class LocalRepo(BaseModel):
    """A plain local directory with no remote counterpart."""

    model_config = ConfigDict(frozen=True)

    path: Path

    def describe(self) -> str:
        return "local directory"


RepoSource = RemoteRepo | LocalRepo


# ---------------------------------------------------------------------------
# Process records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandSpec:
    """A fully-resolved external command."""

    program: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    capture: bool = True

    @classmethod
    def from_argv(
        cls,
        argv: list[str] | tuple[str, ...],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        capture: bool = True,
    ) -> "CommandSpec":
        if not argv:
            raise ValueError("Command vector must not be empty")
        return cls(
            program=argv[0],
            args=tuple(argv[1:]),
            cwd=cwd,
            env=dict(env or {}),
            capture=capture,
        )

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def display(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class CommandOutcome:
    """Result of a completed command."""

    succeeded: bool
    exit_code: int
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class ReadinessEvent:
    """Emitted once a dev server printed one of the readiness markers."""

    detected: bool
    port: str
    marker: str = ""

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"
