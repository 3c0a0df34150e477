"""Builtins that act on the shell session itself."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..common import CommandResult
from ..registry import COMMAND_REGISTRY
from ...exceptions import ShellExit
from ...shell_parser import CommandSpec

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell

_FILE_FLAGS = ("-r", "-w", "-a")


@COMMAND_REGISTRY.command("history")
def history(shell: "Shell", command: CommandSpec) -> CommandResult:
    store = shell.state.history
    args = command.args
    if not args:
        return CommandResult(stdout=store.format())

    flag = args[0]
    if flag in _FILE_FLAGS:
        if len(args) < 2:
            return CommandResult(stderr=f"history: {flag}: option requires an argument\n", exit_code=2)
        path = args[1]
        try:
            if flag == "-r":
                store.load(path)
            elif flag == "-w":
                store.write(path)
            else:
                store.append_to(path)
        except OSError as exc:
            return CommandResult(stderr=f"history: {path}: {exc.strerror}\n", exit_code=1)
        return CommandResult()

    if flag.startswith("-") and flag != "-":
        return CommandResult(stderr=f"history: {flag}: invalid option\n", exit_code=2)
    if not flag.isdigit():
        return CommandResult(stderr=f"history: {flag}: numeric argument required\n", exit_code=2)
    return CommandResult(stdout=store.format(int(flag)))


@COMMAND_REGISTRY.command("exit")
def exit_(shell: "Shell", command: CommandSpec) -> CommandResult:
    args = command.args
    if not args:
        raise ShellExit(shell.state.last_status)
    try:
        code = int(args[0])
    except ValueError:
        shell.write_stderr(f"exit: {args[0]}: numeric argument required\n")
        raise ShellExit(2) from None
    raise ShellExit(code & 0xFF)
