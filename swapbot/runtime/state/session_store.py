"""Per-user conversational session state.

A :class:`Session` records which multi-step command a user is in the middle
of, the step cursor, and a typed payload carried between steps. Sessions are
immutable values: a command returns an updated copy and the dispatcher puts
it back into the :class:`SessionStore`.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ..services.mixin import Asset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceData:
    """Assets resolved by ``/price`` step 0, quoted in step 1."""

    assets: tuple[Asset, ...] = ()


@dataclass(frozen=True)
class SwapData:
    """Asset the user asked ``/swap`` to buy, awaiting their payment."""

    target: Asset


SessionData = Union[PriceData, SwapData, None]


@dataclass(frozen=True)
class Session:
    user_id: str
    command: str = ""
    current_step: int = 0
    data: SessionData = None
    conversation_id: str = ""
    updated_at: float = field(default_factory=time.monotonic)

    @property
    def active(self) -> bool:
        return bool(self.command)

    def advance(self, data: SessionData = None) -> Session:
        """Move to the next step, replacing the payload when one is given."""
        return replace(
            self,
            current_step=self.current_step + 1,
            data=self.data if data is None else data,
        )

    def close(self) -> Session:
        """Mark the session finished; the dispatcher deletes it."""
        return replace(self, command="", data=None)

    def touch(self) -> Session:
        return replace(self, updated_at=time.monotonic())


class SessionStore:
    """Thread-safe in-memory session table keyed by user id.

    Sessions idle for longer than *ttl_seconds* are treated as absent and
    dropped on access; :meth:`prune_expired` sweeps the rest. A TTL of zero
    or less disables expiry.
    """

    def __init__(self, ttl_seconds: float = 0) -> None:
        self._ttl = ttl_seconds
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, user_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                return None
            if self._expired(session, time.monotonic()):
                del self._sessions[user_id]
                logger.info(
                    "[sessions.expire] user=%s command=%s step=%d",
                    user_id, session.command, session.current_step,
                )
                return None
            return session

    def put(self, session: Session) -> Session:
        stored = session.touch()
        with self._lock:
            self._sessions[stored.user_id] = stored
        logger.debug(
            "[sessions.put] user=%s command=%s step=%d",
            stored.user_id, stored.command, stored.current_step,
        )
        return stored

    def delete(self, user_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(user_id, None)
        if removed is not None:
            logger.debug("[sessions.delete] user=%s command=%s", user_id, removed.command)
        return removed is not None

    def prune_expired(self) -> int:
        now = time.monotonic()
        with self._lock:
            stale = [uid for uid, s in self._sessions.items() if self._expired(s, now)]
            for uid in stale:
                del self._sessions[uid]
        if stale:
            logger.info("[sessions.prune] removed %d expired session(s)", len(stale))
        return len(stale)

    def clear(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return isinstance(user_id, str) and self.get(user_id) is not None

    def _expired(self, session: Session, now: float) -> bool:
        return self._ttl > 0 and now - session.updated_at > self._ttl
