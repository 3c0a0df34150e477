"""Shared shell types."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..history import HistoryStore
from ..shell_parser import CommandSpec

if TYPE_CHECKING:
    from .core import Shell


@dataclass(slots=True)
class CommandResult:
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


@dataclass(slots=True)
class ShellState:
    """Mutable state owned by one running shell."""

    history: HistoryStore = field(default_factory=HistoryStore)
    last_status: int = 0


CommandHandler = Callable[[CommandSpec], CommandResult]
BuiltinCommand = Callable[["Shell", CommandSpec], CommandResult]


__all__ = ["BuiltinCommand", "CommandHandler", "CommandResult", "ShellState"]
