"""Exception hierarchy for minish."""

from __future__ import annotations


class ShellError(Exception):
    """Base class for recoverable shell errors."""


class ShellSyntaxError(ShellError, ValueError):
    """Raised when a command line cannot be parsed."""


class CommandNotFound(ShellError):
    """Raised when a name matches neither a builtin nor an executable."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: command not found")
        self.name = name


class RedirectError(ShellError):
    """Raised when a redirect target cannot be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class SpawnError(ShellError):
    """Raised when a child process cannot be created."""


class ShellExit(BaseException):
    """Unwinds the read-eval loop when the ``exit`` builtin runs."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


__all__ = [
    "ShellError",
    "ShellSyntaxError",
    "CommandNotFound",
    "RedirectError",
    "SpawnError",
    "ShellExit",
]
