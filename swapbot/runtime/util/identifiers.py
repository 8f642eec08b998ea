"""Deterministic identifiers derived from inbound message ids."""

from __future__ import annotations

import uuid

REPLY_TAG = "reply"
REFUND_TAG = "refund"
SWAP_TAG = "swap"
FOLLOW_TAG = "follow"


def parse_uuid(value: str) -> uuid.UUID:
    """Parse *value*, falling back to the nil UUID when it is malformed."""
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        return uuid.UUID(int=0)


def is_user_id(value: str) -> bool:
    """True for a well-formed, non-nil UUID."""
    return parse_uuid(value).int != 0


def derive_id(message_id: str, tag: str) -> str:
    """Return ``uuid5(message_id, tag)`` as a string.

    The same inbound id always yields the same derived id, which lets the
    relay deduplicate replies and refunds on redelivery.
    """
    return str(uuid.uuid5(parse_uuid(message_id), tag))


def reply_id(message_id: str) -> str:
    return derive_id(message_id, REPLY_TAG)


def refund_trace_id(message_id: str) -> str:
    return derive_id(message_id, REFUND_TAG)


def swap_trace_id(message_id: str) -> str:
    return derive_id(message_id, SWAP_TAG)


def random_id() -> str:
    return str(uuid.uuid4())
