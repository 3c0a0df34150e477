"""Raw-mode line editing with history recall and tab completion."""

from __future__ import annotations

import codecs
import enum
import os
import shutil
import sys
import termios
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from loguru import logger

from .history import HistoryStore
from .resolver import iter_executables

BELL = "\a"
CLEAR_TO_END = "\x1b[J"
_ENTER = ("\r", "\n")
_BACKSPACE = ("\x7f", "\b")
_CTRL_C = "\x03"
_CTRL_D = "\x04"
_ESC = "\x1b"


class RawTerminal:
    """Puts a terminal into unbuffered, non-echoing mode for one ``with`` block.

    The previous attributes are restored on every exit path, including
    exceptions raised while the block runs.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: list | None = None

    def __enter__(self) -> "RawTerminal":
        self._saved = termios.tcgetattr(self.fd)
        raw = termios.tcgetattr(self.fd)
        raw[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
        raw[6][termios.VMIN] = 1
        raw[6][termios.VTIME] = 0
        termios.tcsetattr(self.fd, termios.TCSADRAIN, raw)
        logger.debug("raw mode enabled on fd {}", self.fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        if self._saved is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        self._saved = None
        logger.debug("raw mode released on fd {}", self.fd)


class KeyState(enum.Enum):
    NORMAL = "normal"
    ESCAPE1 = "escape1"
    ESCAPE2 = "escape2"


class Completer:
    """Completes command names from the builtin set and the search path."""

    def __init__(self, builtins: Iterable[str], search_path: str | None) -> None:
        self.builtins = tuple(builtins)
        self.search_path = search_path

    def candidates(self, prefix: str) -> list[str]:
        names = set(self.builtins)
        names.update(iter_executables(self.search_path))
        return sorted(name for name in names if name.startswith(prefix))


@dataclass
class LineEditorState:
    buffer: str = ""
    history_index: int = 0
    saved_buffer: str = ""
    tab_count: int = 0
    last_tab_buffer: str | None = None
    key_state: KeyState = KeyState.NORMAL


class LineEditor:
    def __init__(
        self,
        history: HistoryStore,
        completer: Completer,
        *,
        prompt: str = "$ ",
        stdin: TextIO | None = None,
        output: TextIO | None = None,
        columns: int | None = None,
    ) -> None:
        self.history = history
        self.completer = completer
        self.prompt = prompt
        self.stdin = stdin
        self.output = output
        self.columns = columns
        self.state = LineEditorState(history_index=len(history))

    def _write(self, text: str) -> None:
        out = self.output or sys.stdout
        out.write(text)
        out.flush()

    def _terminal_columns(self) -> int:
        if self.columns:
            return self.columns
        return shutil.get_terminal_size().columns

    def begin(self) -> None:
        """Reset per-line state and draw the prompt."""
        self.state = LineEditorState(history_index=len(self.history))
        self._write(self.prompt)

    def read_line(self) -> str:
        """Collect one line; raises ``EOFError`` when input is exhausted."""
        stream = self.stdin or sys.stdin
        fd = stream.fileno()
        self.begin()
        if not os.isatty(fd):
            return self._read_unbuffered(fd)

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        with RawTerminal(fd):
            while True:
                data = os.read(fd, 1)
                if not data:
                    raise EOFError
                for char in decoder.decode(data):
                    line = self.feed(char)
                    if line is not None:
                        return line

    def _read_unbuffered(self, fd: int) -> str:
        # Byte at a time: anything past the newline belongs to the commands we spawn.
        data = bytearray()
        while True:
            chunk = os.read(fd, 1)
            if not chunk:
                if not data:
                    raise EOFError
                break
            if chunk == b"\n":
                break
            data += chunk
        return data.decode("utf-8", errors="replace").rstrip("\r")

    def feed(self, char: str) -> str | None:
        """Apply one keystroke; return the line once Enter is pressed."""
        state = self.state
        if state.key_state is KeyState.ESCAPE1:
            state.key_state = KeyState.ESCAPE2 if char == "[" else KeyState.NORMAL
            return None
        if state.key_state is KeyState.ESCAPE2:
            state.key_state = KeyState.NORMAL
            if char == "A":
                self._history_up()
            elif char == "B":
                self._history_down()
            return None

        if char in _ENTER:
            self._write("\n")
            return state.buffer
        if char == _ESC:
            state.key_state = KeyState.ESCAPE1
        elif char in _BACKSPACE:
            if state.buffer:
                state.buffer = state.buffer[:-1]
                self._write("\b \b")
        elif char == "\t":
            self._complete()
        elif char == _CTRL_D:
            if not state.buffer:
                self._write("\n")
                raise EOFError
        elif char == _CTRL_C:
            self._write("^C\n")
            raise KeyboardInterrupt
        elif char.isprintable():
            self._insert(char)
        return None

    def _insert(self, text: str) -> None:
        self.state.buffer += text
        self._write(text)

    def _replace_buffer(self, text: str) -> None:
        state = self.state
        # The cursor ends the old line; climb back to the prompt's row if it wrapped.
        rows_above = max(len(self.prompt) + len(state.buffer) - 1, 0) // self._terminal_columns()
        move_up = f"\x1b[{rows_above}A" if rows_above else ""
        state.buffer = text
        self._write(f"{move_up}\r{CLEAR_TO_END}{self.prompt}{text}")

    def _history_up(self) -> None:
        state = self.state
        if state.history_index <= 0:
            return
        if state.history_index == len(self.history):
            state.saved_buffer = state.buffer
        state.history_index -= 1
        self._replace_buffer(self.history[state.history_index])

    def _history_down(self) -> None:
        state = self.state
        if state.history_index >= len(self.history):
            return
        state.history_index += 1
        if state.history_index == len(self.history):
            self._replace_buffer(state.saved_buffer)
        else:
            self._replace_buffer(self.history[state.history_index])

    def _complete(self) -> None:
        state = self.state
        if state.buffer != state.last_tab_buffer:
            state.tab_count = 0
        candidates = self.completer.candidates(state.buffer)
        if not candidates:
            self._write(BELL)
        elif len(candidates) == 1:
            self._insert(candidates[0][len(state.buffer) :] + " ")
        else:
            prefix = os.path.commonprefix(candidates)
            if len(prefix) > len(state.buffer):
                self._insert(prefix[len(state.buffer) :])
            else:
                state.tab_count += 1
                if state.tab_count == 1:
                    self._write(BELL)
                else:
                    self._write(f"\n{'  '.join(candidates)}\n{self.prompt}{state.buffer}")
        state.last_tab_buffer = state.buffer


__all__ = ["BELL", "Completer", "KeyState", "LineEditor", "LineEditorState", "RawTerminal"]
