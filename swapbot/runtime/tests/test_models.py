"""Tests for message envelopes, button cards and derived identifiers."""

from __future__ import annotations

import json
import uuid

import pytest

from swapbot.runtime.messaging.cards import Button, button_group, pay_button, transfer_link
from swapbot.runtime.messaging.models import (
    APP_BUTTON_GROUP,
    MessageView,
    TransferView,
    decode_payload,
    encode_payload,
    reply_to,
)
from swapbot.runtime.tests.fakes import BOT_ID, USER_ID, transfer_body, wire_message
from swapbot.runtime.util.identifiers import (
    is_user_id,
    parse_uuid,
    refund_trace_id,
    reply_id,
)


class TestPayload:
    def test_unicode_payload(self) -> None:
        assert decode_payload(encode_payload("床前明月光 ≈")) == "床前明月光 ≈"

    @pytest.mark.parametrize("data", ["***", "////", "gA=="])
    def test_malformed_payload(self, data: str) -> None:
        with pytest.raises(ValueError):
            decode_payload(data)


class TestMessageView:
    def test_from_dict(self) -> None:
        view = MessageView.from_dict({
            "conversation_id": "c",
            "user_id": USER_ID,
            "message_id": "m",
            "category": "PLAIN_TEXT",
            "data": "aGk=",
            "source": "ignored",
        })
        assert view.is_text
        assert not view.is_transfer
        assert view.decode().data == "hi"

    def test_decode_is_idempotent(self) -> None:
        msg = wire_message("/help").decode()
        assert msg.decode() is msg

    def test_reply_to(self) -> None:
        msg = wire_message("hi").decode()
        reply = reply_to(msg, "hello", APP_BUTTON_GROUP)
        assert reply.recipient_id == USER_ID
        assert reply.conversation_id == msg.conversation_id
        assert reply.category == APP_BUTTON_GROUP
        assert reply.message_id == reply_id(msg.message_id)
        assert decode_payload(reply.to_dict()["data"]) == "hello"


class TestTransferView:
    def test_parse(self) -> None:
        view = TransferView.parse(transfer_body("1.5"))
        assert view.amount == "1.5"
        assert view.counter_user_id == USER_ID

    @pytest.mark.parametrize("text", ["[]", "{}", '{"asset_id": "x"}', "nope"])
    def test_parse_rejects(self, text: str) -> None:
        with pytest.raises(ValueError):
            TransferView.parse(text)


class TestCards:
    def test_pay_button(self) -> None:
        button = pay_button("BTC", BOT_ID)
        assert button == Button("Pay to swap for BTC", f"mixin://transfer/{BOT_ID}")
        assert transfer_link(BOT_ID) == button.action

    def test_button_group_json(self) -> None:
        payload = json.loads(button_group(Button("a", "b", "#000000"), Button("c", "d")))
        assert payload == [
            {"label": "a", "action": "b", "color": "#000000"},
            {"label": "c", "action": "d", "color": "#4A90E2"},
        ]

    def test_empty_group_rejected(self) -> None:
        with pytest.raises(ValueError):
            button_group()


class TestIdentifiers:
    def test_parse_uuid_falls_back_to_nil(self) -> None:
        assert parse_uuid("garbage").int == 0
        assert not is_user_id("garbage")
        assert not is_user_id(str(uuid.UUID(int=0)))
        assert is_user_id(USER_ID)

    def test_derived_ids_are_deterministic(self) -> None:
        message_id = str(uuid.uuid4())
        assert reply_id(message_id) == reply_id(message_id)
        assert reply_id(message_id) == str(uuid.uuid5(uuid.UUID(message_id), "reply"))
        assert refund_trace_id(message_id) == str(uuid.uuid5(uuid.UUID(message_id), "refund"))
        assert reply_id(message_id) != reply_id(str(uuid.uuid4()))
