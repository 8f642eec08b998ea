"""Message envelopes exchanged with the relay.

Payloads travel base64-encoded on the wire. :class:`MessageView` keeps the
raw wire form until the dispatcher decodes it; :class:`MessageRequest`
holds plain text and encodes it in :meth:`MessageRequest.to_dict`.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, replace
from typing import Any

from ..util.identifiers import reply_id

PLAIN_TEXT = "PLAIN_TEXT"
APP_BUTTON_GROUP = "APP_BUTTON_GROUP"
SYSTEM_ACCOUNT_SNAPSHOT = "SYSTEM_ACCOUNT_SNAPSHOT"


def encode_payload(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_payload(data: str) -> str:
    """Decode a base64 wire payload into text.

    Raises ``ValueError`` for malformed base64 or non UTF-8 content.
    """
    try:
        return base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValueError(f"malformed payload: {exc}") from exc


@dataclass(frozen=True)
class MessageView:
    conversation_id: str
    user_id: str
    message_id: str
    category: str
    data: str = ""
    created_at: str = ""
    decoded: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MessageView:
        return cls(
            conversation_id=str(raw.get("conversation_id", "")),
            user_id=str(raw.get("user_id", "")),
            message_id=str(raw.get("message_id", "")),
            category=str(raw.get("category", "")),
            data=str(raw.get("data", "")),
            created_at=str(raw.get("created_at", "")),
        )

    @property
    def is_text(self) -> bool:
        return self.category == PLAIN_TEXT

    @property
    def is_transfer(self) -> bool:
        return self.category == SYSTEM_ACCOUNT_SNAPSHOT

    def decode(self) -> MessageView:
        if self.decoded:
            return self
        return replace(self, data=decode_payload(self.data), decoded=True)

    def with_data(self, data: str) -> MessageView:
        return replace(self, data=data)


@dataclass(frozen=True)
class MessageRequest:
    conversation_id: str
    recipient_id: str
    message_id: str
    category: str
    data: str

    def to_dict(self) -> dict[str, str]:
        return {
            "conversation_id": self.conversation_id,
            "recipient_id": self.recipient_id,
            "message_id": self.message_id,
            "category": self.category,
            "data": encode_payload(self.data),
        }


def reply_to(msg: MessageView, text: str, category: str = PLAIN_TEXT) -> MessageRequest:
    """Build the reply to *msg*; its id is derived from the inbound id."""
    return MessageRequest(
        conversation_id=msg.conversation_id,
        recipient_id=msg.user_id,
        message_id=reply_id(msg.message_id),
        category=category,
        data=text,
    )


@dataclass(frozen=True)
class TransferView:
    """Body of a ``SYSTEM_ACCOUNT_SNAPSHOT`` message."""

    snapshot_id: str
    asset_id: str
    amount: str
    counter_user_id: str = ""
    trace_id: str = ""
    memo: str = ""
    created_at: str = ""

    @classmethod
    def parse(cls, text: str) -> TransferView:
        """Parse the decoded JSON payload; raises ``ValueError`` if malformed."""
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError("transfer payload must be a JSON object")
        for key in ("asset_id", "amount"):
            if not raw.get(key):
                raise ValueError(f"transfer payload is missing {key}")
        return cls(
            snapshot_id=str(raw.get("snapshot_id", "")),
            asset_id=str(raw["asset_id"]),
            amount=str(raw["amount"]),
            counter_user_id=str(raw.get("counter_user_id", "")),
            trace_id=str(raw.get("trace_id", "")),
            memo=str(raw.get("memo", "")),
            created_at=str(raw.get("created_at", "")),
        )
