"""Registry of builtin commands, filled in as command modules are imported."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .common import BuiltinCommand


@dataclass(slots=True, frozen=True)
class BuiltinSpec:
    name: str
    handler: BuiltinCommand


class CommandRegistry:
    def __init__(self) -> None:
        self._builtins: dict[str, BuiltinSpec] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._builtins

    def __iter__(self) -> Iterator[BuiltinSpec]:
        return iter(self._builtins.values())

    def register(self, name: str, handler: BuiltinCommand) -> BuiltinCommand:
        if name in self._builtins:
            raise ValueError(f"builtin {name!r} is already registered")
        self._builtins[name] = BuiltinSpec(name, handler)
        return handler

    def command(self, name: str) -> Callable[[BuiltinCommand], BuiltinCommand]:
        """Register the decorated function as the builtin ``name``."""

        def decorator(func: BuiltinCommand) -> BuiltinCommand:
            return self.register(name, func)

        return decorator

    def names(self) -> tuple[str, ...]:
        return tuple(self._builtins)


COMMAND_REGISTRY = CommandRegistry()


__all__ = ["COMMAND_REGISTRY", "BuiltinSpec", "CommandRegistry"]
