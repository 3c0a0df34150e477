"""minish package: an interactive shell with pipelines, redirection and line editing."""

from loguru import logger

from .config import ShellSettings, get_settings
from .exceptions import (
    CommandNotFound,
    RedirectError,
    ShellError,
    ShellExit,
    ShellSyntaxError,
    SpawnError,
)
from .history import HistoryStore
from .line_editor import Completer, LineEditor, RawTerminal
from .resolver import BUILTIN_NAMES, Resolution, resolve_command
from .shell import CommandResult, Shell, ShellState
from .shell_parser import Argument, CommandSpec, Pipeline, Redirect, parse_pipeline

# Library code stays quiet until the CLI configures a sink.
logger.disable("minish")

__all__ = [
    "Shell",
    "ShellState",
    "ShellSettings",
    "get_settings",
    "CommandResult",
    "HistoryStore",
    "LineEditor",
    "Completer",
    "RawTerminal",
    "BUILTIN_NAMES",
    "Resolution",
    "resolve_command",
    "Argument",
    "CommandSpec",
    "Pipeline",
    "Redirect",
    "parse_pipeline",
    "ShellError",
    "ShellSyntaxError",
    "CommandNotFound",
    "RedirectError",
    "SpawnError",
    "ShellExit",
]
