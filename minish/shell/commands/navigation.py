"""Working-directory builtins."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from loguru import logger

from ..common import CommandResult
from ..registry import COMMAND_REGISTRY
from ...shell_parser import CommandSpec

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


@COMMAND_REGISTRY.command("pwd")
def pwd(shell: "Shell", _: CommandSpec) -> CommandResult:
    return CommandResult(stdout=f"{os.getcwd()}\n")


def _expand_home(target: str, home: str | None) -> str | None:
    if target == "~":
        return home
    if target.startswith("~/"):
        return None if home is None else os.path.join(home, target[2:])
    return target


@COMMAND_REGISTRY.command("cd")
def cd(shell: "Shell", command: CommandSpec) -> CommandResult:
    args = command.args
    if len(args) > 1:
        return CommandResult(stderr="cd: too many arguments\n", exit_code=1)
    target = args[0] if args else "~"
    resolved = _expand_home(target, shell.settings.home)
    if resolved is None:
        return CommandResult(stderr="cd: HOME not set\n", exit_code=1)
    try:
        os.chdir(resolved)
    except OSError as exc:
        return CommandResult(stderr=f"cd: {target}: {exc.strerror}\n", exit_code=1)
    logger.debug("changed directory to {}", os.getcwd())
    return CommandResult()
