"""Command-line interface for minish."""

from __future__ import annotations

import argparse

from .config import get_settings
from .exceptions import ShellExit
from .line_editor import Completer, LineEditor
from .logging_utils import configure_logging
from .shell import Shell


def _add_common_flags(parser: argparse.ArgumentParser, *, suppress: bool = False) -> None:
    default = argparse.SUPPRESS if suppress else None
    parser.add_argument(
        "--histfile",
        default=default,
        help="History file to preload and write at exit (defaults to $HISTFILE).",
    )
    parser.add_argument(
        "--log-level",
        default=default,
        help="Diagnostic log level written to stderr (defaults to $MINISH_LOG_LEVEL or WARNING).",
    )


def _build_shell(args: argparse.Namespace) -> Shell:
    settings = get_settings(histfile=args.histfile, log_level=args.log_level)
    configure_logging(settings.log_level)
    return Shell(settings)


def _run_exec(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    try:
        return shell.exec(args.command)
    except ShellExit as exc:
        return exc.code


def _run_shell(args: argparse.Namespace) -> int:
    shell = _build_shell(args)
    shell.load_history_file()
    completer = Completer(shell.available_commands(), shell.settings.search_path)
    editor = LineEditor(shell.state.history, completer, prompt=shell.settings.prompt)
    try:
        while True:
            try:
                line = editor.read_line()
            except KeyboardInterrupt:
                continue
            except EOFError:
                exit_code = shell.state.last_status
                break
            try:
                shell.submit(line)
            except KeyboardInterrupt:
                shell.write_stdout("\n")
    except ShellExit as exc:
        exit_code = exc.code
    shell.save_history_file()
    return exit_code


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="minish")
    parser.add_argument("-c", dest="command", help="Run a single command line and exit")
    _add_common_flags(parser)
    subparsers = parser.add_subparsers(dest="command_name")

    exec_parser = subparsers.add_parser("exec", help="Run a single command line")
    _add_common_flags(exec_parser, suppress=True)
    exec_parser.add_argument("command", help="Command line to execute")
    exec_parser.set_defaults(func=_run_exec)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive shell")
    _add_common_flags(shell_parser, suppress=True)
    shell_parser.set_defaults(func=_run_shell)

    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        func = _run_exec if args.command is not None else _run_shell
    exit_code = func(args)
    raise SystemExit(exit_code)


__all__ = ["main"]
