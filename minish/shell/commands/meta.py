"""Meta commands for shell introspection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..common import CommandResult
from ..registry import COMMAND_REGISTRY
from ...shell_parser import CommandSpec

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell


@COMMAND_REGISTRY.command("type")
def type_(shell: "Shell", command: CommandSpec) -> CommandResult:
    lines: list[str] = []
    exit_code = 0
    for name in command.args:
        resolution = shell.resolve(name)
        if resolution.kind == "builtin":
            lines.append(f"{name} is a shell builtin")
        elif resolution.kind == "external":
            lines.append(f"{name} is {resolution.path}")
        else:
            lines.append(f"{name}: not found")
            exit_code = 1
    return CommandResult(stdout="".join(f"{line}\n" for line in lines), exit_code=exit_code)
