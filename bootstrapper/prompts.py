"""Interactive questions for values not supplied on the command line."""

from __future__ import annotations

from dataclasses import dataclass

from rich.prompt import Confirm, Prompt

from bootstrapper.config import Config
from bootstrapper.models import CssFramework, Framework


@dataclass
class Answers:
    """Raw operator answers; ``None`` means "ask"."""

    name: str | None = None
    remote: bool | None = None
    private: bool | None = None
    framework: str | None = None
    css_framework: str | None = None


def ask_missing(answers: Answers, config: Config) -> Answers:
    """Prompt for every field of *answers* that is still ``None``.

    The privacy question is only asked when a remote repository is wanted.
    Framework and CSS answers are returned as typed; validation happens when
    the ``ProjectRequest`` is built.
    """
    name = answers.name
    if name is None:
        name = Prompt.ask("Enter the repository name")

    remote = answers.remote
    if remote is None:
        remote = not Confirm.ask("Create a local directory only (no GitHub repository)?", default=True)

    private = answers.private
    if private is None:
        private = Confirm.ask("Should the repository be private?", default=True) if remote else True

    framework = answers.framework
    if framework is None:
        framework = Prompt.ask(
            f"Which framework do you want to use? ({'/'.join(Framework.choices())})",
            default=config.default_framework.value,
        )

    css_framework = answers.css_framework
    if css_framework is None:
        css_framework = Prompt.ask(
            f"Which CSS framework do you want to use? ({'/'.join(CssFramework.choices())})",
            default=config.default_css.value,
        )

    return Answers(
        name=name,
        remote=remote,
        private=private,
        framework=framework,
        css_framework=css_framework,
    )
