"""Incoming payments -- refund unsolicited transfers, settle pending swaps."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Protocol

from ..config.settings import DEFAULT_SWAP_RESULT_BOT
from ..services.mixin import Asset, TransferInput
from ..util.identifiers import refund_trace_id, swap_trace_id
from .models import MessageRequest, MessageView, TransferView, reply_to

logger = logging.getLogger(__name__)

REFUND_MEMO = "refund"


class TransferClient(Protocol):
    @property
    def client_id(self) -> str: ...

    async def read_asset(self, asset_id: str) -> Asset: ...

    async def transfer(self, inp: TransferInput, pin: str) -> dict: ...


class Settlement(Protocol):
    async def swap(
        self,
        receiver_id: str,
        pay_asset_id: str,
        fill_asset_id: str,
        amount: str | Decimal,
        *,
        trace_id: str | None = None,
    ) -> str: ...


class TransferHandler:

    def __init__(
        self,
        client: TransferClient,
        settlement: Settlement,
        pin: str,
        *,
        swap_result_bot: str = DEFAULT_SWAP_RESULT_BOT,
    ) -> None:
        self._client = client
        self._settlement = settlement
        self._pin = pin
        self._swap_result_bot = swap_result_bot

    async def handle(self, msg: MessageView, target: Asset | None = None) -> MessageRequest | None:
        """Process a decoded transfer notification.

        Without a *target* the payment was unsolicited and is refunded in
        full; with one, the amount is swapped into *target* for the sender.
        Payments made by the bot itself are ignored.
        """
        if msg.user_id == self._client.client_id:
            logger.debug("[transfers.handle] ignoring own transfer message_id=%s", msg.message_id)
            return None

        view = TransferView.parse(msg.data)
        if target is None:
            await self.refund(msg, view)
            return None
        return await self.swap(msg, view, target)

    async def refund(self, msg: MessageView, view: TransferView) -> None:
        try:
            amount = Decimal(view.amount)
        except InvalidOperation as exc:
            raise ValueError(f"invalid transfer amount {view.amount!r}") from exc
        if amount <= 0:
            logger.debug("[transfers.refund] skipping outgoing snapshot %s", view.snapshot_id)
            return

        trace_id = refund_trace_id(msg.message_id)
        await self._client.transfer(
            TransferInput(
                asset_id=view.asset_id,
                opponent_id=msg.user_id,
                amount=amount,
                trace_id=trace_id,
                memo=REFUND_MEMO,
            ),
            self._pin,
        )
        logger.info(
            "[transfers.refund] user=%s asset=%s amount=%s trace=%s",
            msg.user_id, view.asset_id, view.amount, trace_id,
        )

    async def swap(self, msg: MessageView, view: TransferView, target: Asset) -> MessageRequest:
        incoming = await self._client.read_asset(view.asset_id)
        await self._settlement.swap(
            msg.user_id,
            incoming.asset_id,
            target.asset_id,
            view.amount,
            trace_id=swap_trace_id(msg.message_id),
        )
        text = (
            f"{incoming.symbol} -> {target.symbol}, swap at 4swap.\n"
            f"Please check @{self._swap_result_bot} for swap result"
        )
        return reply_to(msg, text)
