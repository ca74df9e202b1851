"""Bootstrapper configuration.

Typed settings for the pipeline. All settings use Pydantic v2 models so they
are validated at construction time and can be read from environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from bootstrapper.errors import InputError
from bootstrapper.models import CssFramework, Framework


class GitHubConfig(BaseModel):
    """Where and how to talk to the GitHub REST API."""

    api_base: str = Field(default="https://api.github.com")
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")


class ServerConfig(BaseModel):
    """Limits applied while watching the dev server for readiness."""

    readiness_timeout: float | None = Field(
        default=300.0,
        gt=0,
        description="Seconds to wait for a readiness marker; None waits forever",
    )
    max_scan_bytes: int = Field(
        default=1_048_576,
        ge=1024,
        description="Stdout bytes to scan before giving up on readiness",
    )
    chunk_size: int = Field(default=4096, ge=64)


class Config(BaseModel):
    """Global bootstrapper configuration.

    Created once by the CLI entry point (usually via ``from_env``) and passed
    to ``Pipeline``.
    """

    base_dir: Path = Field(default=Path("."))
    token_env: str = Field(default="GITHUB_TOKEN")
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    default_framework: Framework = Framework.REACT
    default_css: CssFramework = CssFramework.TAILWIND

    def project_path(self, normalized_name: str) -> Path:
        """Working directory for a project called *normalized_name*."""
        return self.base_dir / normalized_name

    def github_token(self) -> str:
        """Return the bearer token from the environment.

        Raises:
            InputError: If the variable named by ``token_env`` is unset or empty.
        """
        token = os.environ.get(self.token_env, "").strip()
        if not token:
            raise InputError(
                f"GitHub token is not set. Set it using "
                f"`export {self.token_env}=your_token_here`"
            )
        return token

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            BOOTSTRAP_BASE_DIR, BOOTSTRAP_TOKEN_ENV,
            BOOTSTRAP_GITHUB_API, BOOTSTRAP_GITHUB_TIMEOUT,
            BOOTSTRAP_READINESS_TIMEOUT, BOOTSTRAP_MAX_SCAN_BYTES.

        ``BOOTSTRAP_READINESS_TIMEOUT=0`` disables the readiness deadline.
        """
        github_kwargs: dict[str, Any] = {}
        if os.environ.get("BOOTSTRAP_GITHUB_API"):
            github_kwargs["api_base"] = os.environ["BOOTSTRAP_GITHUB_API"].rstrip("/")
        if os.environ.get("BOOTSTRAP_GITHUB_TIMEOUT"):
            github_kwargs["timeout"] = float(os.environ["BOOTSTRAP_GITHUB_TIMEOUT"])

        server_kwargs: dict[str, Any] = {}
        if os.environ.get("BOOTSTRAP_READINESS_TIMEOUT"):
            timeout = float(os.environ["BOOTSTRAP_READINESS_TIMEOUT"])
            server_kwargs["readiness_timeout"] = timeout if timeout > 0 else None
        if os.environ.get("BOOTSTRAP_MAX_SCAN_BYTES"):
            server_kwargs["max_scan_bytes"] = int(os.environ["BOOTSTRAP_MAX_SCAN_BYTES"])

        return cls(
            base_dir=Path(os.environ.get("BOOTSTRAP_BASE_DIR", ".")),
            token_env=os.environ.get("BOOTSTRAP_TOKEN_ENV", "GITHUB_TOKEN"),
            github=GitHubConfig(**github_kwargs),
            server=ServerConfig(**server_kwargs),
        )
