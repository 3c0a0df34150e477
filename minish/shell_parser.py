"""Quote-aware tokenizer and pipe splitter for command lines."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from loguru import logger

from .exceptions import ShellSyntaxError

_BLANKS = " \t"
_DOUBLE_QUOTE_ESCAPABLE = '"\\$`'
# Longest operators first so "1>>" is never read as "1>" followed by ">".
_REDIRECT_OPERATORS = (
    ("1>>", "stdout", True),
    ("2>>", "stderr", True),
    (">>", "stdout", True),
    ("1>", "stdout", False),
    ("2>", "stderr", False),
    (">", "stdout", False),
)


class QuoteState(enum.Enum):
    UNQUOTED = "unquoted"
    SINGLE = "single"
    DOUBLE = "double"


@dataclass(frozen=True)
class Argument:
    text: str
    single_quoted: bool = False


@dataclass(frozen=True)
class Redirect:
    path: str
    append: bool = False


@dataclass
class CommandSpec:
    argv: list[Argument] = field(default_factory=list)
    stdout: Redirect | None = None
    stderr: Redirect | None = None

    @property
    def name(self) -> str:
        return self.argv[0].text if self.argv else ""

    @property
    def args(self) -> list[str]:
        return [arg.text for arg in self.argv[1:]]


@dataclass
class Pipeline:
    commands: list[CommandSpec]

    def __len__(self) -> int:
        return len(self.commands)


class _Tokenizer:
    """Finite-state machine turning one pipeline stage into a CommandSpec."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.state = QuoteState.UNQUOTED
        self.escape_pending = False
        self.word: list[str] = []
        self.in_word = False
        self.word_single_quoted = False
        self.pending_target: tuple[str, bool] | None = None
        self.command = CommandSpec()

    def run(self) -> CommandSpec:
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if self.escape_pending:
                self._consume_escaped(char)
            elif self.state is QuoteState.SINGLE:
                self._consume_single(char)
            elif self.state is QuoteState.DOUBLE:
                self._consume_double(char)
            else:
                self._consume_unquoted(char)
            self.pos += 1
        self._finish()
        return self.command

    def _consume_escaped(self, char: str) -> None:
        self.escape_pending = False
        if self.state is QuoteState.DOUBLE and char not in _DOUBLE_QUOTE_ESCAPABLE:
            self.word.append("\\")
        self.word.append(char)
        self.in_word = True

    def _consume_single(self, char: str) -> None:
        if char == "'":
            self.state = QuoteState.UNQUOTED
            self.word_single_quoted = True
            return
        self.word.append(char)

    def _consume_double(self, char: str) -> None:
        if char == "\\":
            self.escape_pending = True
        elif char == '"':
            self.state = QuoteState.UNQUOTED
            self.word_single_quoted = False
        else:
            self.word.append(char)

    def _consume_unquoted(self, char: str) -> None:
        if char in _BLANKS:
            self._flush_word()
            return
        if char == "\\":
            self.escape_pending = True
            return
        if char == "'":
            self.state = QuoteState.SINGLE
            self.in_word = True
            return
        if char == '"':
            self.state = QuoteState.DOUBLE
            self.in_word = True
            return
        if char in "12>" and self._match_redirect():
            return
        self.word.append(char)
        self.in_word = True

    def _match_redirect(self) -> bool:
        for operator, stream, append in _REDIRECT_OPERATORS:
            if not self.text.startswith(operator, self.pos):
                continue
            if operator[0].isdigit() and self.in_word:
                # "file1>out" is the word "file1" followed by ">".
                continue
            self._flush_word()
            if self.pending_target is not None:
                raise ShellSyntaxError(f"unexpected token `{operator}' after redirection")
            self.pending_target = (stream, append)
            self.pos += len(operator) - 1
            return True
        return False

    def _flush_word(self) -> None:
        if not self.in_word:
            return
        text = "".join(self.word)
        if self.pending_target is not None:
            stream, append = self.pending_target
            # A later redirect of the same stream replaces the earlier one.
            setattr(self.command, stream, Redirect(text, append))
            self.pending_target = None
        else:
            self.command.argv.append(Argument(text, self.word_single_quoted))
        self.word = []
        self.in_word = False
        self.word_single_quoted = False

    def _finish(self) -> None:
        if self.escape_pending:
            self.escape_pending = False
            self.word.append("\\")
            self.in_word = True
        if self.state is QuoteState.SINGLE:
            raise ShellSyntaxError("unexpected end of input while looking for matching `''")
        if self.state is QuoteState.DOUBLE:
            raise ShellSyntaxError("unexpected end of input while looking for matching `\"'")
        self._flush_word()
        if self.pending_target is not None:
            raise ShellSyntaxError("missing redirection target")


def parse_command(stage: str) -> CommandSpec:
    """Tokenize a single pipeline stage."""
    return _Tokenizer(stage).run()


def split_pipeline(line: str) -> list[str]:
    """Split ``line`` on unquoted, unescaped ``|`` characters.

    Stages keep their quoting and escapes untouched so they can be tokenized
    independently; only surrounding blanks are stripped.
    """

    stages: list[str] = []
    state = QuoteState.UNQUOTED
    escape_pending = False
    start = 0
    for idx, char in enumerate(line):
        if escape_pending:
            escape_pending = False
            continue
        if state is QuoteState.SINGLE:
            if char == "'":
                state = QuoteState.UNQUOTED
            continue
        if char == "\\":
            escape_pending = True
        elif state is QuoteState.DOUBLE:
            if char == '"':
                state = QuoteState.UNQUOTED
        elif char == "'":
            state = QuoteState.SINGLE
        elif char == '"':
            state = QuoteState.DOUBLE
        elif char == "|":
            stages.append(line[start:idx].strip(_BLANKS))
            start = idx + 1
    stages.append(line[start:].strip(_BLANKS))
    return stages


def parse_pipeline(command_line: str) -> Pipeline:
    if not command_line.strip(_BLANKS + "\r\n"):
        return Pipeline(commands=[])
    commands: list[CommandSpec] = []
    for stage in split_pipeline(command_line.strip("\r\n")):
        command = parse_command(stage)
        _finalize_command(commands, command)
    logger.debug("parsed {} stage(s): {}", len(commands), [cmd.name for cmd in commands])
    return Pipeline(commands=commands)


def _finalize_command(commands: list[CommandSpec], command: CommandSpec) -> None:
    if not command.argv:
        if command.stdout or command.stderr:
            raise ShellSyntaxError("redirection without command is not supported")
        raise ShellSyntaxError("missing command before pipe or end of line")
    commands.append(command)


__all__ = [
    "Argument",
    "CommandSpec",
    "Pipeline",
    "QuoteState",
    "Redirect",
    "parse_command",
    "parse_pipeline",
    "split_pipeline",
]
