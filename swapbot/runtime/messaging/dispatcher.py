"""Message dispatcher -- routes relay messages to sessions and commands.

Routing order for each inbound message:

1. drop senders that are not valid user ids (transfer notifications are
   exempt),
2. decode the base64 payload, dropping malformed messages,
3. continue the user's session if its command is still registered,
   otherwise discard the stale session,
4. refund unsolicited transfer notifications,
5. start a new session when the first token of a text message names a
   registered command,
6. otherwise answer with the unsupported-command reply.

Messages from the same user are handled one at a time. A failed refund or
swap settlement is re-raised after the user is told, so the relay leaves the
payment unacknowledged and redelivers it; with the session gone the
redelivered payment is refunded under its deterministic trace id.

Session changes are committed only after the reply has been sent, so a
message redelivered after a failed send sees the session it saw the first
time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol

from ..errors import CommandError
from ..registries.commands import CommandRegistry
from ..state.session_store import Session, SessionStore
from ..util.identifiers import is_user_id
from .commands import Command, CommandDeps, CommandResult
from .models import MessageRequest, MessageView, reply_to

logger = logging.getLogger(__name__)

UNSUPPORTED_REPLY = "Unsupported command, send '/help' to get all available commands."
GENERIC_ERROR_REPLY = "An error occurred while processing your command."


class MessageSender(Protocol):
    async def send_message(self, request: MessageRequest) -> None: ...


def _should_redeliver(msg: MessageView, exc: Exception) -> bool:
    """Unexpected failures while handling a payment must not be acknowledged."""
    return msg.is_transfer and not isinstance(exc, ValueError)


@dataclass
class _UserLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class Dispatcher:

    def __init__(
        self,
        registry: CommandRegistry,
        sessions: SessionStore,
        deps: CommandDeps,
        sender: MessageSender,
    ) -> None:
        self._registry = registry
        self._sessions = sessions
        self._deps = deps
        self._sender = sender
        self._user_locks: dict[str, _UserLock] = {}

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    async def handle_message(self, msg: MessageView) -> None:
        if not msg.is_transfer and not is_user_id(msg.user_id):
            logger.debug(
                "[dispatch.filter] dropping message_id=%s from non-user sender=%r",
                msg.message_id, msg.user_id,
            )
            return
        try:
            msg = msg.decode()
        except ValueError as exc:
            logger.warning("[dispatch.decode] dropping message_id=%s: %s", msg.message_id, exc)
            return

        async with self._user_turn(msg.user_id):
            await self._dispatch(msg)

    async def _dispatch(self, msg: MessageView) -> None:
        session = self._sessions.get(msg.user_id)
        if session is not None:
            command = self._registry.get(session.command)
            if command is not None:
                await self._execute(command, session, msg)
                return
            logger.info(
                "[dispatch.stale] user=%s dropping session for unknown command %r",
                msg.user_id, session.command,
            )
            self._sessions.delete(msg.user_id)

        if msg.is_transfer:
            await self._handle_unsolicited_transfer(msg)
            return

        if msg.is_text:
            token, _, rest = msg.data.strip().partition(" ")
            command = self._registry.get(token)
            if command is not None:
                session = Session(
                    user_id=msg.user_id,
                    command=command.name,
                    conversation_id=msg.conversation_id,
                )
                logger.info("[dispatch.start] user=%s command=%s", msg.user_id, command.name)
                await self._execute(command, session, msg.with_data(rest))
                return

        await self._sender.send_message(reply_to(msg, UNSUPPORTED_REPLY))

    async def _execute(self, command: Command, session: Session, msg: MessageView) -> None:
        try:
            result = await command.execute(session, msg, self._deps)
        except CommandError as exc:
            logger.info(
                "[dispatch.execute] user=%s command=%s step=%d aborted: %s",
                session.user_id, command.name, session.current_step, exc,
            )
            await self._abort(msg, str(exc))
            return
        except Exception as exc:
            logger.error(
                "[dispatch.execute] user=%s command=%s step=%d failed: %s",
                session.user_id, command.name, session.current_step, exc,
                exc_info=True,
            )
            await self._abort(msg, GENERIC_ERROR_REPLY)
            if _should_redeliver(msg, exc):
                raise
            return
        await self.handle_result(result)

    async def handle_result(self, result: CommandResult) -> None:
        """Send the reply if any, then persist or drop the returned session.

        A failed send propagates before the store is touched.
        """
        if result.reply is not None:
            await self._sender.send_message(result.reply)
        session = result.session
        if session.active:
            self._sessions.put(session)
        else:
            self._sessions.delete(session.user_id)

    async def _handle_unsolicited_transfer(self, msg: MessageView) -> None:
        try:
            reply = await self._deps.transfers.handle(msg)
        except CommandError as exc:
            await self._abort(msg, str(exc))
            return
        except ValueError as exc:
            # nothing refundable in a malformed payment
            logger.warning("[dispatch.transfer] dropping message_id=%s: %s", msg.message_id, exc)
            return
        except Exception as exc:
            logger.error(
                "[dispatch.transfer] refund for message_id=%s failed: %s",
                msg.message_id, exc,
                exc_info=True,
            )
            await self._abort(msg, GENERIC_ERROR_REPLY)
            raise
        if reply is not None:
            await self._sender.send_message(reply)

    async def _abort(self, msg: MessageView, text: str) -> None:
        """Delete the user's session and report *text*; send failures are only logged."""
        self._sessions.delete(msg.user_id)
        try:
            await self._sender.send_message(reply_to(msg, text))
        except Exception as exc:
            logger.error("[dispatch.abort] failed to report error to user=%s: %s", msg.user_id, exc)

    @asynccontextmanager
    async def _user_turn(self, user_id: str) -> AsyncIterator[None]:
        entry = self._user_locks.get(user_id)
        if entry is None:
            entry = self._user_locks[user_id] = _UserLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._user_locks.pop(user_id, None)
