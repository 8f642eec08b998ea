"""Command contract shared by every slash command.

A command receives an immutable :class:`Session` snapshot, the decoded
inbound message (with the command token already stripped on the first
step) and its explicit dependencies. It returns the updated session plus an
optional reply, or raises :class:`~swapbot.runtime.errors.CommandError` to
abort the flow with a message for the user.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar, Protocol

from ...state.session_store import Session
from ..models import MessageRequest, MessageView

if TYPE_CHECKING:
    from ...registries.assets import AssetDirectory
    from ...registries.commands import CommandRegistry
    from ...services.mixin import Asset
    from ...services.quotes import Quote


class QuoteSource(Protocol):
    async def fetch(self) -> Quote: ...


class TransferCapability(Protocol):
    async def handle(self, msg: MessageView, target: Asset | None = None) -> MessageRequest | None: ...


@dataclass(frozen=True)
class CommandDeps:
    registry: CommandRegistry
    assets: AssetDirectory
    transfers: TransferCapability
    quotes: QuoteSource
    client_id: str


@dataclass(frozen=True)
class CommandResult:
    session: Session
    reply: MessageRequest | None = None


class Command:
    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    step_count: ClassVar[int] = 1

    async def execute(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        raise NotImplementedError

    def is_last_step(self, session: Session) -> bool:
        return session.current_step >= self.step_count - 1

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def format_decimal(value: Decimal) -> str:
    """Plain notation without trailing zeros (``Decimal('1.50')`` -> ``1.5``)."""
    if value == value.to_integral_value():
        return format(value.quantize(Decimal(1)), "f")
    return format(value.normalize(), "f")
