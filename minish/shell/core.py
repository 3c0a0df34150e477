"""Core Shell implementation."""

from __future__ import annotations

import sys

from loguru import logger

from ..config import ShellSettings
from ..exceptions import ShellError, ShellSyntaxError
from ..resolver import Resolution, resolve_command
from ..shell_parser import CommandSpec, parse_pipeline
from .common import BuiltinCommand, CommandHandler, CommandResult, ShellState
from .pipeline import PipelineExecutor
from .registry import COMMAND_REGISTRY


class Shell:
    """Parses command lines and runs them as builtins or host processes."""

    def __init__(
        self,
        settings: ShellSettings | None = None,
        *,
        state: ShellState | None = None,
    ) -> None:
        self.settings = settings or ShellSettings()
        self.state = state or ShellState()
        self.commands: dict[str, CommandHandler] = {}
        self.executor = PipelineExecutor(self)
        self._register_builtin_commands()

    # ------------------------------------------------------------------
    # Command registration
    # ------------------------------------------------------------------
    def register_command(self, name: str, handler: CommandHandler) -> None:
        self.commands[name] = handler

    def available_commands(self) -> list[str]:
        return sorted(self.commands)

    def _bind_registered_handler(self, func: BuiltinCommand) -> CommandHandler:
        def bound(command: CommandSpec) -> CommandResult:
            return func(self, command)

        return bound

    def _register_builtin_commands(self) -> None:
        # Import command modules for their side effects (registration)
        from . import commands  # noqa: F401

        for spec in COMMAND_REGISTRY:
            self.register_command(spec.name, self._bind_registered_handler(spec.handler))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def write_stdout(self, text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_stderr(self, text: str) -> None:
        sys.stderr.write(text)
        sys.stderr.flush()

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------
    def resolve(self, name: str) -> Resolution:
        return resolve_command(name, self.settings.search_path, self.commands)

    def run_builtin(self, command: CommandSpec) -> CommandResult:
        handler = self.commands[command.name]
        try:
            return handler(command)
        except ShellError as exc:
            return CommandResult(stderr=f"{command.name}: {exc}\n", exit_code=1)
        except Exception as exc:  # unexpected failure path
            logger.opt(exception=exc).debug("builtin {} raised", command.name)
            return CommandResult(stderr=f"{command.name} failed: {exc}\n", exit_code=1)

    def exec(self, command_line: str) -> int:
        """Run one line and return the status of its last pipeline stage."""
        try:
            pipeline = parse_pipeline(command_line)
        except ShellSyntaxError as exc:
            self.write_stderr(f"minish: syntax error: {exc}\n")
            self.state.last_status = 2
            return 2
        if not pipeline.commands:
            return self.state.last_status
        status = self.executor.run(pipeline)
        self.state.last_status = status
        return status

    def submit(self, command_line: str) -> int:
        """Record ``command_line`` in history, then run it."""
        self.state.history.add(command_line)
        return self.exec(command_line)

    # ------------------------------------------------------------------
    # History file
    # ------------------------------------------------------------------
    def load_history_file(self) -> None:
        path = self.settings.histfile
        if path is None or not path.is_file():
            return
        try:
            self.state.history.load(path)
        except OSError as exc:
            logger.warning("could not read history file {}: {}", path, exc)
            return
        self.state.history.mark_flushed()

    def save_history_file(self) -> None:
        path = self.settings.histfile
        if path is None:
            return
        try:
            self.state.history.write(path)
        except OSError as exc:
            logger.warning("could not write history file {}: {}", path, exc)


__all__ = ["Shell"]
