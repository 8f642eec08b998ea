"""Test doubles and sample data shared by the runtime tests."""

from __future__ import annotations

import json
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock

from swapbot.runtime.messaging.models import (
    PLAIN_TEXT,
    SYSTEM_ACCOUNT_SNAPSHOT,
    MessageView,
    encode_payload,
)
from swapbot.runtime.services.mixin import Asset

USER_ID = "6a7b2c4d-1e2f-4a5b-8c9d-0e1f2a3b4c5d"
BOT_ID = "0c3f1c5e-98e4-4a47-9a2c-55e4f2c8d301"
CONVERSATION_ID = "f1d2c3b4-a5b6-4c7d-8e9f-0a1b2c3d4e5f"

BTC = Asset(
    asset_id="c6d0c728-2624-429b-8e0d-d9d19b6592fa",
    symbol="BTC",
    name="Bitcoin",
    price_usd=Decimal("50000"),
)
ETH = Asset(
    asset_id="43d61dcd-e413-450d-80b8-101d5e903357",
    symbol="ETH",
    name="Ether",
    price_usd=Decimal("2500"),
)
# listed by the exchange but without a USD price
XIN = Asset(
    asset_id="c94ac88f-4671-3976-b60a-09064f1811e8",
    symbol="XIN",
    name="Mixin",
    price_usd=Decimal("0"),
)

ASSETS_BY_ID = {a.asset_id: a for a in (BTC, ETH, XIN)}
SYMBOLS = {a.symbol: a.asset_id for a in (BTC, ETH, XIN)}


def wire_message(
    text: str,
    *,
    category: str = PLAIN_TEXT,
    user_id: str = USER_ID,
    message_id: str | None = None,
) -> MessageView:
    """A relay message as received: payload still base64-encoded."""
    return MessageView(
        conversation_id=CONVERSATION_ID,
        user_id=user_id,
        message_id=message_id or str(uuid.uuid4()),
        category=category,
        data=encode_payload(text),
    )


def text_message(text: str, **kwargs) -> MessageView:
    """A decoded plain-text message, as commands receive it."""
    return wire_message(text, **kwargs).decode()


def transfer_body(amount: str = "0.5", *, asset_id: str = ETH.asset_id, user_id: str = USER_ID) -> str:
    return json.dumps({
        "snapshot_id": "5f8e7d6c-5b4a-4938-8271-6a5b4c3d2e1f",
        "asset_id": asset_id,
        "amount": amount,
        "counter_user_id": user_id,
        "memo": "",
    })


def wire_transfer(
    amount: str = "0.5",
    *,
    asset_id: str = ETH.asset_id,
    user_id: str = USER_ID,
    message_id: str | None = None,
) -> MessageView:
    return wire_message(
        transfer_body(amount, asset_id=asset_id, user_id=user_id),
        category=SYSTEM_ACCOUNT_SNAPSHOT,
        user_id=user_id,
        message_id=message_id,
    )


def transfer_message(amount: str = "0.5", **kwargs) -> MessageView:
    return wire_transfer(amount, **kwargs).decode()


def make_reader() -> AsyncMock:
    reader = AsyncMock()

    async def _read(asset_id: str) -> Asset:
        return ASSETS_BY_ID[asset_id]

    reader.read_asset.side_effect = _read
    return reader
