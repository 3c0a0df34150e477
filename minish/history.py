"""In-memory command history with file persistence."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger


class HistoryStore:
    """Ordered record of submitted lines.

    ``flush_cursor`` is the index of the first entry that has not yet been
    appended to a history file with :meth:`append_to`.
    """

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        self.entries: list[str] = []
        self.flush_cursor = 0
        for entry in entries or ():
            self.add(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> str:
        return self.entries[index]

    def add(self, line: str) -> bool:
        text = line.strip()
        if not text:
            return False
        self.entries.append(text)
        return True

    def tail(self, count: int | None = None) -> list[tuple[int, str]]:
        """Return ``(index, text)`` pairs with 1-based indices."""
        start = 0
        if count is not None and 0 < count < len(self.entries):
            start = len(self.entries) - count
        return [(idx + 1, self.entries[idx]) for idx in range(start, len(self.entries))]

    def format(self, count: int | None = None) -> str:
        return "".join(f"{idx:>5}  {text}\n" for idx, text in self.tail(count))

    def mark_flushed(self) -> None:
        self.flush_cursor = len(self.entries)

    def load(self, path: str | Path) -> int:
        """Append every non-blank line of ``path``; return how many were read."""
        added = 0
        with open(path, encoding="utf-8") as handle:
            for line in handle:
                if self.add(line):
                    added += 1
        logger.debug("loaded {} history entries from {}", added, path)
        return added

    def write(self, path: str | Path) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            handle.writelines(f"{entry}\n" for entry in self.entries)
        self.mark_flushed()
        logger.debug("wrote {} history entries to {}", len(self.entries), path)

    def append_to(self, path: str | Path) -> int:
        pending = self.entries[self.flush_cursor :]
        with open(path, "a", encoding="utf-8") as handle:
            handle.writelines(f"{entry}\n" for entry in pending)
        self.mark_flushed()
        logger.debug("appended {} history entries to {}", len(pending), path)
        return len(pending)


__all__ = ["HistoryStore"]
