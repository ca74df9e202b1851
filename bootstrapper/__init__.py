"""Frontend project bootstrapper.

Normalises a project name, provisions a GitHub repository or a local
directory, scaffolds an Angular / React / Vue / Svelte app, installs
dependencies plus an optional CSS framework, and starts the dev server.

Quick usage::

    from bootstrapper import Config, Pipeline, ProjectRequest

    request = ProjectRequest.from_input("My App", framework="vue", css_framework="bulma")
    state = asyncio.run(Pipeline(Config(), request).run())
"""

from bootstrapper.config import Config
from bootstrapper.errors import (
    BootstrapError,
    ConflictError,
    InputError,
    ProcessError,
    RemoteError,
    UnsupportedSelectionError,
)
from bootstrapper.models import CssFramework, Framework, ProjectRequest
from bootstrapper.naming import normalize_name
from bootstrapper.pipeline import Pipeline

__all__ = [
    "Config",
    "Pipeline",
    "ProjectRequest",
    "Framework",
    "CssFramework",
    "normalize_name",
    # Errors
    "BootstrapError",
    "InputError",
    "ConflictError",
    "RemoteError",
    "ProcessError",
    "UnsupportedSelectionError",
]
