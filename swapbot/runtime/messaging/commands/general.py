"""General-purpose commands: echo, help, and the poem of the day."""

from __future__ import annotations

from ...state.session_store import Session
from ..models import MessageView, reply_to
from ._base import Command, CommandDeps, CommandResult

ECHO_PROMPT = "Please send the text to echo."


class EchoCommand(Command):
    name = "/echo"
    description = "Echo back the text you send"
    step_count = 2

    async def execute(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        if session.current_step == 0 and not msg.data.strip():
            return CommandResult(session.advance(), reply_to(msg, ECHO_PROMPT))
        return CommandResult(session.close(), reply_to(msg, msg.data))


class HelpCommand(Command):
    name = "/help"
    description = "List all available commands"

    async def execute(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        lines = [f"{cmd.name} - {cmd.description}" for cmd in deps.registry]
        return CommandResult(session.close(), reply_to(msg, "\n".join(lines)))


class PoemCommand(Command):
    name = "/poem"
    description = "Send a poem of the day"

    async def execute(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        quote = await deps.quotes.fetch()
        return CommandResult(session.close(), reply_to(msg, quote.format()))
