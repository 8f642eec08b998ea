"""Thin REST client for the messaging network -- messages, assets, transfers.

Every response carries either ``{"data": ...}`` or ``{"error": {...}}``;
the latter (or a non-2xx status without a body) raises
:class:`~swapbot.runtime.errors.MixinAPIError`.

Requests authenticate with the bearer token from the keystore. Signing
per-request tokens and encrypting the PIN are left to whoever issues the
keystore.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import aiohttp

from ..config.keystore import Keystore
from ..config.settings import DEFAULT_API_BASE
from ..errors import MixinAPIError
from ..messaging.models import MessageRequest

logger = logging.getLogger(__name__)


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value)) if value not in (None, "") else Decimal(0)
    except InvalidOperation:
        return Decimal(0)


@dataclass(frozen=True)
class Asset:
    asset_id: str
    symbol: str
    name: str
    price_usd: Decimal = Decimal(0)
    price_btc: Decimal = Decimal(0)
    chain_id: str = ""
    icon_url: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Asset:
        return cls(
            asset_id=str(raw.get("asset_id", "")),
            symbol=str(raw.get("symbol", "")),
            name=str(raw.get("name", "")),
            price_usd=_decimal(raw.get("price_usd")),
            price_btc=_decimal(raw.get("price_btc")),
            chain_id=str(raw.get("chain_id", "")),
            icon_url=str(raw.get("icon_url", "")),
        )


@dataclass(frozen=True)
class TransferInput:
    asset_id: str
    opponent_id: str
    amount: Decimal
    trace_id: str
    memo: str = ""


@dataclass(frozen=True)
class TransactionInput:
    """Transfer addressed to a multisig group instead of a single user."""

    asset_id: str
    amount: Decimal
    trace_id: str
    receivers: tuple[str, ...]
    threshold: int
    memo: str = ""


class MixinClient:

    def __init__(
        self,
        keystore: Keystore,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._keystore = keystore
        self._api_base = api_base.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def client_id(self) -> str:
        return self._keystore.client_id

    @property
    def access_token(self) -> str:
        return self._keystore.access_token

    def auth_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._keystore.access_token:
            headers["Authorization"] = f"Bearer {self._keystore.access_token}"
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url = f"{self._api_base}{path}"
        session = self._get_session()
        async with session.request(method, url, json=payload, headers=self.auth_headers()) as resp:
            status = resp.status
            try:
                body = await resp.json(content_type=None)
            except (aiohttp.ContentTypeError, json.JSONDecodeError, ValueError):
                body = None

        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            err = body["error"]
            logger.warning(
                "[mixin.request] %s %s failed status=%s code=%s desc=%s",
                method, path, status, err.get("code"), err.get("description"),
            )
            raise MixinAPIError(
                status,
                int(err.get("code") or 0),
                str(err.get("description") or ""),
                extra=err,
            )
        if status >= 400 or not isinstance(body, dict):
            logger.warning("[mixin.request] %s %s unexpected response status=%s", method, path, status)
            raise MixinAPIError(status, description="unexpected response")
        return body.get("data")

    async def read_asset(self, asset_id: str) -> Asset:
        data = await self._request("GET", f"/assets/{asset_id}")
        if not isinstance(data, dict):
            raise MixinAPIError(200, description=f"asset {asset_id} has no data")
        return Asset.from_dict(data)

    async def send_message(self, request: MessageRequest) -> None:
        await self._request("POST", "/messages", request.to_dict())
        logger.debug(
            "[mixin.send] message_id=%s recipient=%s category=%s",
            request.message_id, request.recipient_id, request.category,
        )

    async def transfer(self, inp: TransferInput, pin: str) -> dict[str, Any]:
        payload = {
            "asset_id": inp.asset_id,
            "opponent_id": inp.opponent_id,
            "amount": format(inp.amount, "f"),
            "trace_id": inp.trace_id,
            "memo": inp.memo,
            "pin": pin,
        }
        data = await self._request("POST", "/transfers", payload)
        logger.info(
            "[mixin.transfer] asset=%s opponent=%s amount=%s trace=%s",
            inp.asset_id, inp.opponent_id, payload["amount"], inp.trace_id,
        )
        return data or {}

    async def transaction(self, inp: TransactionInput, pin: str) -> dict[str, Any]:
        payload = {
            "asset_id": inp.asset_id,
            "amount": format(inp.amount, "f"),
            "trace_id": inp.trace_id,
            "memo": inp.memo,
            "opponent_multisig": {
                "receivers": list(inp.receivers),
                "threshold": inp.threshold,
            },
            "pin": pin,
        }
        data = await self._request("POST", "/transactions", payload)
        logger.info(
            "[mixin.transaction] asset=%s amount=%s receivers=%d threshold=%d trace=%s",
            inp.asset_id, payload["amount"], len(inp.receivers), inp.threshold, inp.trace_id,
        )
        return data or {}
