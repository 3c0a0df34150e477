"""Spawn pipeline stages and wire their standard streams together."""

from __future__ import annotations

import contextlib
import os
import subprocess
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from ..exceptions import CommandNotFound, RedirectError, ShellExit, SpawnError
from ..resolver import Resolution
from ..shell_parser import CommandSpec, Pipeline, Redirect

if TYPE_CHECKING:
    from .common import CommandResult
    from .core import Shell

REDIRECT_MODE = 0o644
STATUS_NOT_FOUND = 127
STATUS_CANNOT_EXECUTE = 126


class _Stage(Protocol):
    def wait(self) -> int: ...


@dataclass
class _SkippedStage:
    status: int

    def wait(self) -> int:
        return self.status


@dataclass
class _ForkedBuiltin:
    name: str
    pid: int

    def wait(self) -> int:
        _, status = os.waitpid(self.pid, 0)
        return os.waitstatus_to_exitcode(status)


@dataclass
class _ExternalProcess:
    name: str
    process: subprocess.Popen

    @property
    def pid(self) -> int:
        return self.process.pid

    def wait(self) -> int:
        return self.process.wait()


def _shell_status(code: int) -> int:
    # Children killed by a signal report -signum; shells show 128 + signum.
    return 128 - code if code < 0 else code


def open_redirect(redirect: Redirect) -> int:
    flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if redirect.append else os.O_TRUNC)
    try:
        return os.open(redirect.path, flags, REDIRECT_MODE)
    except OSError as exc:
        raise RedirectError(redirect.path, exc.strerror or str(exc)) from exc


@contextlib.contextmanager
def opened_redirects(command: CommandSpec) -> Iterator[tuple[int | None, int | None]]:
    """Open the command's redirect targets and close them on exit."""

    opened: list[int] = []
    try:
        stdout_fd = None
        stderr_fd = None
        if command.stdout is not None:
            stdout_fd = open_redirect(command.stdout)
            opened.append(stdout_fd)
        if command.stderr is not None:
            stderr_fd = open_redirect(command.stderr)
            opened.append(stderr_fd)
        yield stdout_fd, stderr_fd
    finally:
        for fd in opened:
            os.close(fd)


def write_all(fd: int, text: str) -> None:
    data = text.encode("utf-8", errors="surrogateescape")
    while data:
        written = os.write(fd, data)
        data = data[written:]


class PipelineExecutor:
    """Runs a parsed pipeline on behalf of a :class:`Shell`."""

    def __init__(self, shell: "Shell") -> None:
        self.shell = shell

    def run(self, pipeline: Pipeline) -> int:
        if not pipeline.commands:
            return 0
        if len(pipeline) == 1:
            return self._run_single(pipeline.commands[0])
        return self._run_pipeline(pipeline.commands)

    # ------------------------------------------------------------------
    # Single command
    # ------------------------------------------------------------------
    def _lookup(self, command: CommandSpec) -> Resolution:
        resolution = self.shell.resolve(command.name)
        if not resolution.found:
            raise CommandNotFound(command.name)
        return resolution

    def _run_single(self, command: CommandSpec) -> int:
        try:
            resolution = self._lookup(command)
        except CommandNotFound as exc:
            self.shell.write_stdout(f"{exc}\n")
            return STATUS_NOT_FOUND
        if resolution.kind == "builtin":
            return self._run_builtin_inline(command)
        try:
            with opened_redirects(command) as (stdout_fd, stderr_fd):
                stage = self._spawn_external(command, resolution.path, None, stdout_fd, stderr_fd)
        except RedirectError as exc:
            self.shell.write_stderr(f"minish: {exc}\n")
            return 1
        except SpawnError as exc:
            self.shell.write_stderr(f"{exc}\n")
            return STATUS_CANNOT_EXECUTE
        return self._collect([stage])[-1]

    def _run_builtin_inline(self, command: CommandSpec) -> int:
        try:
            with opened_redirects(command) as (stdout_fd, stderr_fd):
                result = self.shell.run_builtin(command)
                self._deliver_inline(result, stdout_fd, stderr_fd)
        except RedirectError as exc:
            self.shell.write_stderr(f"minish: {exc}\n")
            return 1
        return result.exit_code

    def _deliver_inline(self, result: "CommandResult", stdout_fd: int | None, stderr_fd: int | None) -> None:
        if result.stdout:
            if stdout_fd is None:
                self.shell.write_stdout(result.stdout)
            else:
                write_all(stdout_fd, result.stdout)
        if result.stderr:
            if stderr_fd is None:
                self.shell.write_stderr(result.stderr)
            else:
                write_all(stderr_fd, result.stderr)

    # ------------------------------------------------------------------
    # Multi-stage pipelines
    # ------------------------------------------------------------------
    def _run_pipeline(self, commands: list[CommandSpec]) -> int:
        channels = [os.pipe() for _ in range(len(commands) - 1)]
        channel_fds = [fd for pair in channels for fd in pair]
        stages: list[_Stage] = []
        try:
            for idx, command in enumerate(commands):
                stdin_fd = channels[idx - 1][0] if idx > 0 else None
                stdout_fd = channels[idx][1] if idx < len(commands) - 1 else None
                stages.append(self._spawn_stage(command, stdin_fd, stdout_fd, channel_fds))
        finally:
            # Readers only see end-of-stream once the parent's copies are gone.
            for fd in channel_fds:
                os.close(fd)
        return self._collect(stages)[-1]

    def _spawn_stage(
        self,
        command: CommandSpec,
        stdin_fd: int | None,
        stdout_fd: int | None,
        channel_fds: list[int],
    ) -> _Stage:
        try:
            resolution = self._lookup(command)
        except CommandNotFound as exc:
            self.shell.write_stdout(f"{exc}\n")
            return _SkippedStage(STATUS_NOT_FOUND)
        if resolution.kind == "builtin":
            return self._fork_builtin(command, stdin_fd, stdout_fd, channel_fds)
        try:
            with opened_redirects(command) as (redirect_out, redirect_err):
                out_fd = redirect_out if redirect_out is not None else stdout_fd
                return self._spawn_external(command, resolution.path, stdin_fd, out_fd, redirect_err)
        except RedirectError as exc:
            self.shell.write_stderr(f"minish: {exc}\n")
            return _SkippedStage(1)
        except SpawnError as exc:
            self.shell.write_stderr(f"{exc}\n")
            return _SkippedStage(STATUS_CANNOT_EXECUTE)

    def _spawn_external(
        self,
        command: CommandSpec,
        path: str | None,
        stdin_fd: int | None,
        stdout_fd: int | None,
        stderr_fd: int | None,
    ) -> _ExternalProcess:
        argv = [arg.text for arg in command.argv]
        try:
            process = subprocess.Popen(
                argv,
                executable=path,
                stdin=stdin_fd,
                stdout=stdout_fd,
                stderr=stderr_fd,
                close_fds=True,
            )
        except OSError as exc:
            raise SpawnError(f"{command.name}: {exc.strerror or exc}") from exc
        logger.debug("spawned {} as pid {}", command.name, process.pid)
        return _ExternalProcess(command.name, process)

    def _fork_builtin(
        self,
        command: CommandSpec,
        stdin_fd: int | None,
        stdout_fd: int | None,
        channel_fds: list[int],
    ) -> _Stage:
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            pid = os.fork()
        except OSError as exc:
            self.shell.write_stderr(f"{command.name}: {exc.strerror or exc}\n")
            return _SkippedStage(STATUS_CANNOT_EXECUTE)
        if pid:
            logger.debug("forked builtin {} as pid {}", command.name, pid)
            return _ForkedBuiltin(command.name, pid)

        # Child: never returns into the caller.
        code = 1
        try:
            if stdin_fd is not None:
                os.dup2(stdin_fd, 0)
            if stdout_fd is not None:
                os.dup2(stdout_fd, 1)
            for fd in channel_fds:
                os.close(fd)
            code = self._run_builtin_in_child(command)
        except ShellExit as exc:
            code = exc.code
        except BaseException:  # noqa: BLE001 - the child must always reach _exit
            logger.exception("builtin {} failed in pipeline child", command.name)
        finally:
            os._exit(code)

    def _run_builtin_in_child(self, command: CommandSpec) -> int:
        try:
            with opened_redirects(command) as (stdout_fd, stderr_fd):
                result = self.shell.run_builtin(command)
                if result.stdout:
                    write_all(stdout_fd if stdout_fd is not None else 1, result.stdout)
                if result.stderr:
                    write_all(stderr_fd if stderr_fd is not None else 2, result.stderr)
        except RedirectError as exc:
            write_all(2, f"minish: {exc}\n")
            return 1
        except BrokenPipeError:
            return 1
        return result.exit_code

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    def _collect(self, stages: list[_Stage]) -> list[int]:
        statuses: list[int] = []
        for stage in stages:
            while True:
                try:
                    status = _shell_status(stage.wait())
                except KeyboardInterrupt:
                    # The terminal delivers SIGINT to the children as well.
                    continue
                break
            pid = getattr(stage, "pid", None)
            if pid is not None:
                logger.debug("pid {} exited with status {}", pid, status)
            statuses.append(status)
        return statuses


__all__ = ["PipelineExecutor", "open_redirect", "opened_redirects", "write_all"]
