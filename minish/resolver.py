"""Classify command names as builtins or executables on the search path."""

from __future__ import annotations

import os
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from typing import Literal

from loguru import logger

BUILTIN_NAMES: tuple[str, ...] = ("echo", "exit", "type", "pwd", "cd", "history")

ResolutionKind = Literal["builtin", "external", "missing"]


@dataclass(frozen=True)
class Resolution:
    name: str
    kind: ResolutionKind
    path: str | None = None

    @property
    def found(self) -> bool:
        return self.kind != "missing"


def search_dirs(search_path: str | None) -> list[str]:
    if not search_path:
        return []
    return [entry for entry in search_path.split(os.pathsep) if entry]


def is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_executable(name: str, search_path: str | None) -> str | None:
    """Return the first executable called ``name`` in path-list order."""
    if not name:
        return None
    if os.sep in name:
        return name if is_executable(name) else None
    for directory in search_dirs(search_path):
        candidate = os.path.join(directory, name)
        if is_executable(candidate):
            return candidate
    return None


def iter_executables(search_path: str | None) -> Iterator[str]:
    """Yield the names of executables found in every search directory."""
    for directory in search_dirs(search_path):
        try:
            entries = list(os.scandir(directory))
        except OSError:
            continue
        for entry in entries:
            if is_executable(entry.path):
                yield entry.name


def resolve_command(
    name: str,
    search_path: str | None,
    builtins: Collection[str] = BUILTIN_NAMES,
) -> Resolution:
    if name in builtins:
        return Resolution(name, "builtin")
    path = find_executable(name, search_path)
    if path is None:
        logger.debug("no executable for {!r}", name)
        return Resolution(name, "missing")
    logger.debug("resolved {!r} to {}", name, path)
    return Resolution(name, "external", path)


__all__ = [
    "BUILTIN_NAMES",
    "Resolution",
    "find_executable",
    "is_executable",
    "iter_executables",
    "resolve_command",
    "search_dirs",
]
