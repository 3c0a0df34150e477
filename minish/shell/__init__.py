"""Shell package: builtins, dispatcher and pipeline executor."""

from .common import CommandResult, ShellState
from .core import Shell

__all__ = ["Shell", "ShellState", "CommandResult"]
