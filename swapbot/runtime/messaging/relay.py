"""Blaze relay -- websocket stream of inbound messages.

Frames are gzip-compressed JSON objects ``{"id", "action", "params"}``
(outbound) or ``{"id", "action", "data"}`` (inbound). After connecting the
bot asks for pending messages, then receives one ``CREATE_MESSAGE`` frame
per message and acknowledges each once it has been handled. A message whose
handler raises is left unacknowledged so the relay redelivers it after the
next reconnect.
"""

from __future__ import annotations

import gzip
import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp

from ..config.settings import DEFAULT_BLAZE_URL
from .models import MessageView

logger = logging.getLogger(__name__)

BLAZE_PROTOCOL = "Mixin-Blaze-1"

LIST_PENDING_MESSAGES = "LIST_PENDING_MESSAGES"
CREATE_MESSAGE = "CREATE_MESSAGE"
ACKNOWLEDGE_MESSAGE_RECEIPT = "ACKNOWLEDGE_MESSAGE_RECEIPT"

MessageHandler = Callable[[MessageView], Awaitable[None]]


def encode_frame(action: str, params: dict[str, Any] | None = None, frame_id: str | None = None) -> bytes:
    frame: dict[str, Any] = {"id": frame_id or str(uuid.uuid4()), "action": action}
    if params is not None:
        frame["params"] = params
    return gzip.compress(json.dumps(frame).encode("utf-8"))


def decode_frame(payload: bytes) -> dict[str, Any]:
    """Inflate and parse one inbound frame; raises ``ValueError`` if malformed."""
    try:
        frame = json.loads(gzip.decompress(payload))
    except (OSError, EOFError, UnicodeDecodeError) as exc:
        raise ValueError(f"malformed frame: {exc}") from exc
    if not isinstance(frame, dict):
        raise ValueError("frame must be a JSON object")
    return frame


def ack_frame(message_id: str) -> bytes:
    return encode_frame(
        ACKNOWLEDGE_MESSAGE_RECEIPT,
        {"message_id": message_id, "status": "READ"},
    )


async def handle_frame(frame: dict[str, Any], handler: MessageHandler) -> str | None:
    """Run *handler* for a ``CREATE_MESSAGE`` frame.

    Returns the message id to acknowledge, or ``None`` for frames that
    carry no message.
    """
    if frame.get("error"):
        logger.warning("[relay.frame] error frame id=%s: %s", frame.get("id"), frame["error"])
        return None
    if frame.get("action") != CREATE_MESSAGE:
        return None
    data = frame.get("data")
    if not isinstance(data, dict) or not data.get("message_id"):
        return None

    view = MessageView.from_dict(data)
    await handler(view)
    return view.message_id


class BlazeRelay:

    def __init__(
        self,
        token: str,
        *,
        url: str = DEFAULT_BLAZE_URL,
        heartbeat: float = 15.0,
        timeout: float = 10.0,
    ) -> None:
        self._token = token
        self._url = url
        self._heartbeat = heartbeat
        self._timeout = aiohttp.ClientTimeout(total=None, connect=timeout)

    @property
    def url(self) -> str:
        return self._url

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def loop(self, handler: MessageHandler) -> None:
        """Receive messages until the socket closes.

        Connection errors and handler exceptions propagate to the caller,
        which owns the reconnect policy.
        """
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.ws_connect(
                self._url,
                protocols=(BLAZE_PROTOCOL,),
                headers=self._headers(),
                heartbeat=self._heartbeat,
            ) as ws:
                logger.info("[relay.connect] connected to %s", self._url)
                await ws.send_bytes(encode_frame(LIST_PENDING_MESSAGES))

                async for raw in ws:
                    if raw.type == aiohttp.WSMsgType.BINARY:
                        try:
                            frame = decode_frame(raw.data)
                        except ValueError as exc:
                            logger.warning("[relay.frame] dropping frame: %s", exc)
                            continue
                        message_id = await handle_frame(frame, handler)
                        if message_id:
                            await ws.send_bytes(ack_frame(message_id))
                    elif raw.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.ERROR):
                        break

                logger.info("[relay.connect] connection closed code=%s", ws.close_code)
