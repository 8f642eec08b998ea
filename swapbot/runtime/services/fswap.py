"""4swap settlement -- swap instructions addressed to the exchange's MTG group.

A swap is an ordinary payment of the asset being sold, sent to the
multi-party group that runs the exchange. The memo tells the group what to
buy, who receives it, and the minimum amount acceptable; the exchange then
settles asynchronously and the result reaches the receiver as a separate
transfer.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import aiohttp

from ..config.settings import DEFAULT_MTG_URL
from ..errors import SettlementError
from ..util.identifiers import FOLLOW_TAG, derive_id, random_id
from .mixin import MixinClient, TransactionInput

logger = logging.getLogger(__name__)

SWAP_ACTION = 3
MIN_RECEIVED = Decimal("0.00000001")


@dataclass(frozen=True)
class MtgGroup:
    members: tuple[str, ...]
    threshold: int
    public_key: str = ""


@dataclass(frozen=True)
class SwapAction:
    receiver_id: str
    follow_id: str
    fill_asset_id: str
    routes: str = ""
    minimum: Decimal = MIN_RECEIVED


def encode_swap_action(action: SwapAction) -> str:
    """Render *action* as a transfer memo.

    Routes are left empty so the exchange picks them.
    """
    fields = (
        str(SWAP_ACTION),
        action.receiver_id,
        action.follow_id,
        action.fill_asset_id,
        action.routes,
        format(action.minimum, "f"),
    )
    return base64.urlsafe_b64encode(",".join(fields).encode("utf-8")).decode("ascii")


def decode_swap_action(memo: str) -> SwapAction:
    try:
        text = base64.urlsafe_b64decode(memo.encode("ascii")).decode("utf-8")
        kind, receiver, follow, fill, routes, minimum = text.split(",")
        if int(kind) != SWAP_ACTION:
            raise ValueError(f"not a swap action: {kind}")
        return SwapAction(receiver, follow, fill, routes, Decimal(minimum))
    except (ValueError, InvalidOperation, UnicodeDecodeError) as exc:
        raise ValueError(f"malformed swap memo: {exc}") from exc


def _parse_group(raw: Any) -> MtgGroup:
    data = raw.get("data") if isinstance(raw, dict) else None
    if not isinstance(data, dict):
        raise SettlementError("group info has no data")
    members = data.get("members")
    threshold = data.get("threshold")
    if not isinstance(members, list) or not members or not isinstance(threshold, int):
        raise SettlementError("group info is missing members or threshold")
    if not 0 < threshold <= len(members):
        raise SettlementError(f"invalid threshold {threshold} for {len(members)} members")
    return MtgGroup(
        members=tuple(str(m) for m in members),
        threshold=threshold,
        public_key=str(data.get("public_key", "")),
    )


class SwapSettlement:

    def __init__(
        self,
        client: MixinClient,
        pin: str,
        *,
        mtg_url: str = DEFAULT_MTG_URL,
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._pin = pin
        self._mtg_url = mtg_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def read_group(self) -> MtgGroup:
        url = f"{self._mtg_url}/api/info"
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url) as resp:
                    if resp.status != 200:
                        raise SettlementError(f"group info request failed: HTTP {resp.status}")
                    raw = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            raise SettlementError(f"group info request failed: {exc}") from exc
        return _parse_group(raw)

    async def swap(
        self,
        receiver_id: str,
        pay_asset_id: str,
        fill_asset_id: str,
        amount: str | Decimal,
        *,
        trace_id: str | None = None,
    ) -> str:
        """Pay *amount* of *pay_asset_id* to the group, buying *fill_asset_id*.

        Returns the follow id the exchange uses to track the order. A fixed
        *trace_id* makes the payment idempotent, and the follow id is then
        derived from it.
        """
        try:
            value = Decimal(str(amount))
        except InvalidOperation as exc:
            raise SettlementError(f"invalid amount {amount!r}") from exc

        group = await self.read_group()
        trace_id = trace_id or random_id()
        action = SwapAction(
            receiver_id=receiver_id,
            follow_id=derive_id(trace_id, FOLLOW_TAG),
            fill_asset_id=fill_asset_id,
        )
        await self._client.transaction(
            TransactionInput(
                asset_id=pay_asset_id,
                amount=value,
                trace_id=trace_id,
                receivers=group.members,
                threshold=group.threshold,
                memo=encode_swap_action(action),
            ),
            self._pin,
        )
        logger.info(
            "[fswap.swap] receiver=%s pay=%s fill=%s amount=%s follow=%s",
            receiver_id, pay_asset_id, fill_asset_id, value, action.follow_id,
        )
        return action.follow_id
