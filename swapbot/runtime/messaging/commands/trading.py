"""Market commands: multi-symbol price quotes and asset swaps."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, localcontext

from ...errors import AssetNotFoundError, CommandError
from ...services.mixin import Asset
from ...state.session_store import PriceData, Session, SwapData
from ..cards import button_group, pay_button
from ..models import APP_BUTTON_GROUP, MessageView, reply_to
from ._base import Command, CommandDeps, CommandResult, format_decimal

logger = logging.getLogger(__name__)

PRICE_SYMBOLS_PROMPT = "Please send one or more symbols separated by spaces, e.g. BTC ETH."
PRICE_BASE_PROMPT = "Send Y to quote in USD, N to cancel, or a base symbol such as BTC."
SWAP_USAGE = "Please send the symbol you want to buy, e.g. /swap BTC."

_RATIO_EXP = Decimal("0.00000001")


def usd_line(asset: Asset) -> str:
    return f"1 {asset.symbol}({asset.name}) = {format_decimal(asset.price_usd)} USD"


def ratio_line(asset: Asset, base: Asset) -> str:
    with localcontext() as ctx:
        # room for every integer digit plus the fixed fraction
        digits = (asset.price_usd / base.price_usd).adjusted() + 1 - _RATIO_EXP.as_tuple().exponent
        ctx.prec = max(ctx.prec, digits)
        ratio = (asset.price_usd / base.price_usd).quantize(_RATIO_EXP, rounding=ROUND_HALF_UP)
        text = format_decimal(ratio)
    return f"1 {asset.symbol}({asset.name}) ≈ {text} {base.symbol}({base.name})"


class PriceCommand(Command):
    name = "/price"
    description = "Quote symbols in USD or in another asset, e.g. /price BTC ETH"
    step_count = 2

    async def execute(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        if session.current_step == 0:
            return await self._collect(session, msg, deps)
        return await self._quote(session, msg, deps)

    async def _collect(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        symbols = msg.data.split()
        if not symbols:
            return CommandResult(session, reply_to(msg, PRICE_SYMBOLS_PROMPT))

        assets: list[Asset] = []
        for symbol in symbols:
            try:
                assets.append(await deps.assets.resolve(symbol))
            except AssetNotFoundError as exc:
                # one miss discards the whole list
                return CommandResult(session.close(), reply_to(msg, str(exc)))

        return CommandResult(
            session.advance(PriceData(tuple(assets))),
            reply_to(msg, PRICE_BASE_PROMPT),
        )

    async def _quote(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        if not isinstance(session.data, PriceData) or not session.data.assets:
            raise CommandError("Nothing to quote, send /price <symbols> to start again.")
        assets = session.data.assets

        answer = msg.data.strip()
        if answer.lower() == "y":
            return CommandResult(session.close(), reply_to(msg, "\n".join(usd_line(a) for a in assets)))
        if answer.lower() == "n":
            return CommandResult(session.close())

        try:
            base = await deps.assets.resolve(answer)
        except AssetNotFoundError as exc:
            # stay on this step so the user can retry
            return CommandResult(session, reply_to(msg, str(exc)))

        if not base.price_usd:
            raise CommandError(f"{base.symbol} has no USD price, cannot use it as a base.")
        lines = [ratio_line(a, base) for a in assets]
        return CommandResult(session.close(), reply_to(msg, "\n".join(lines)))


class SwapCommand(Command):
    name = "/swap"
    description = "Swap the asset you pay for another one, e.g. /swap BTC"
    step_count = 2

    async def execute(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        if session.current_step == 0:
            return await self._select(session, msg, deps)
        return await self._settle(session, msg, deps)

    async def _select(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        symbol = msg.data.strip()
        if not symbol:
            return CommandResult(session.close(), reply_to(msg, SWAP_USAGE))
        try:
            target = await deps.assets.resolve(symbol)
        except AssetNotFoundError as exc:
            return CommandResult(session.close(), reply_to(msg, str(exc)))

        payload = button_group(pay_button(target.symbol, deps.client_id))
        return CommandResult(
            session.advance(SwapData(target)),
            reply_to(msg, payload, APP_BUTTON_GROUP),
        )

    async def _settle(self, session: Session, msg: MessageView, deps: CommandDeps) -> CommandResult:
        if not isinstance(session.data, SwapData):
            raise CommandError("Swap target lost, send /swap <symbol> to start again.")
        if not msg.is_transfer:
            raise CommandError("Swap cancelled, send /swap <symbol> to start again.")

        target = session.data.target
        logger.info("[swap.settle] user=%s target=%s", session.user_id, target.symbol)
        reply = await deps.transfers.handle(msg, target)
        return CommandResult(session.close(), reply)
