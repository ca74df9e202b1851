"""Exception hierarchy for the bootstrap pipeline.

Every error aborts the run. The orchestrator catches ``BootstrapError``,
prints the failing step together with whatever diagnostic the error carries
(captured stderr, response body) and exits non-zero.
"""

from __future__ import annotations


class BootstrapError(Exception):
    """Base class for all pipeline failures."""

    def details(self) -> str:
        """Extra diagnostic text to print below the message (may be empty)."""
        return ""


class InputError(BootstrapError):
    """Missing or unusable user input (name, credential)."""


class ConflictError(BootstrapError):
    """The target working directory already exists."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"The directory '{path}' already exists.")


class RemoteError(BootstrapError):
    """The hosting provider rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def details(self) -> str:
        return self.body


class ProcessError(BootstrapError):
    """An external command failed or a dev server never became ready."""

    def __init__(
        self,
        message: str,
        command: str = "",
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)

    def details(self) -> str:
        return self.stderr


class UnsupportedSelectionError(BootstrapError):
    """A framework key that has no scaffolding command."""

    def __init__(self, selection: str, supported: list[str]) -> None:
        self.selection = selection
        self.supported = supported
        super().__init__(
            f"Unsupported framework '{selection}'. "
            f"Choose one of: {', '.join(supported)}"
        )
