"""Messaging pipeline -- envelopes, relay stream, dispatcher, and commands."""

from .cards import Button, button_group, pay_button
from .models import (
    APP_BUTTON_GROUP,
    PLAIN_TEXT,
    SYSTEM_ACCOUNT_SNAPSHOT,
    MessageRequest,
    MessageView,
    TransferView,
    reply_to,
)

__all__ = [
    "APP_BUTTON_GROUP",
    "Button",
    "MessageRequest",
    "MessageView",
    "PLAIN_TEXT",
    "SYSTEM_ACCOUNT_SNAPSHOT",
    "TransferView",
    "button_group",
    "pay_button",
    "reply_to",
]
