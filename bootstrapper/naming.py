"""Project name normalisation."""

from __future__ import annotations

import re

from bootstrapper.errors import InputError

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-{2,}")


def normalize_name(raw: str) -> str:
    """Convert arbitrary user input into a directory/repository-safe name.

    * Trims surrounding whitespace and lowercases.
    * Replaces each run of whitespace with a single dash.
    * Drops every character outside ``[a-z0-9-]``.
    * Collapses runs of dashes.

    Leading and trailing dashes are kept, so the function is idempotent.

    Examples::

        normalize_name("  My Cool App!! ") -> "my-cool-app"
        normalize_name("a---b") -> "a-b"
        normalize_name("@@@") -> ""
    """
    result = _WHITESPACE.sub("-", raw.strip().lower())
    result = _DISALLOWED.sub("", result)
    return _DASH_RUNS.sub("-", result)


def require_name(raw: str | None) -> str:
    """Normalise *raw* or raise ``InputError`` if nothing usable remains."""
    if not raw or not raw.strip():
        raise InputError("Repository name is required.")
    normalized = normalize_name(raw)
    if not normalized:
        raise InputError(
            f"Could not derive a valid repository name from '{raw}'. "
            "Use letters, digits, spaces or dashes."
        )
    return normalized
