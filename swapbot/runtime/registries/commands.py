"""Command registry -- dispatch tokens mapped to command implementations."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..messaging.commands import Command


class CommandRegistry:
    """Ordered, read-only table of commands keyed by their ``name``.

    Iteration follows registration order, which is also the order ``/help``
    lists them in.
    """

    def __init__(self, commands: Iterable[Command]) -> None:
        self._commands: dict[str, Command] = {}
        for command in commands:
            if not command.name:
                raise ValueError(f"{command!r} has no name")
            if command.name in self._commands:
                raise ValueError(f"duplicate command name: {command.name}")
            self._commands[command.name] = command

    def get(self, name: str) -> Command | None:
        if not name:
            return None
        return self._commands.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


def default_registry() -> CommandRegistry:
    from ..messaging.commands import (
        EchoCommand,
        HelpCommand,
        PoemCommand,
        PriceCommand,
        SwapCommand,
    )

    return CommandRegistry([
        HelpCommand(),
        EchoCommand(),
        PoemCommand(),
        PriceCommand(),
        SwapCommand(),
    ])
