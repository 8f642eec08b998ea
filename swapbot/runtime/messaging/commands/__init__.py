"""Slash-command implementations.

Sub-modules group commands by domain:

- ``general`` -- echo, help, poem
- ``trading`` -- price quotes and swaps
"""

from ._base import Command, CommandDeps, CommandResult, QuoteSource, TransferCapability
from .general import EchoCommand, HelpCommand, PoemCommand
from .trading import PriceCommand, SwapCommand

__all__ = [
    "Command",
    "CommandDeps",
    "CommandResult",
    "EchoCommand",
    "HelpCommand",
    "PoemCommand",
    "PriceCommand",
    "QuoteSource",
    "SwapCommand",
    "TransferCapability",
]
