"""Text output builtins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..common import CommandResult
from ..registry import COMMAND_REGISTRY
from ...shell_parser import Argument, CommandSpec

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from ..core import Shell

_ECHO_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
}


def decode_escapes(text: str) -> str:
    """Decode the echo escape set, keeping any other backslash pair as is."""
    out: list[str] = []
    idx = 0
    while idx < len(text):
        char = text[idx]
        if char == "\\" and idx + 1 < len(text):
            nxt = text[idx + 1]
            out.append(_ECHO_ESCAPES.get(nxt, char + nxt))
            idx += 2
            continue
        out.append(char)
        idx += 1
    return "".join(out)


def _render(arg: Argument) -> str:
    return arg.text if arg.single_quoted else decode_escapes(arg.text)


@COMMAND_REGISTRY.command("echo")
def echo(shell: "Shell", command: CommandSpec) -> CommandResult:
    words = [_render(arg) for arg in command.argv[1:]]
    return CommandResult(stdout=" ".join(words) + "\n")
