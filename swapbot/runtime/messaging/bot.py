"""Bot wiring -- builds the collaborators and runs the relay loop.

:meth:`Bot.create` performs every start-up step that may fail (keystore
client, asset list download) so that :meth:`Bot.run` only ever has to deal
with relay disconnects, which it retries after a fixed backoff.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..config.keystore import Keystore
from ..config.settings import Settings, cfg
from ..registries.assets import AssetDirectory, fetch_asset_directory
from ..registries.commands import CommandRegistry, default_registry
from ..services.fswap import SwapSettlement
from ..services.mixin import MixinClient
from ..services.quotes import QuoteClient
from ..state.session_store import SessionStore
from .commands import CommandDeps
from .dispatcher import Dispatcher
from .relay import BlazeRelay
from .transfers import TransferHandler

logger = logging.getLogger(__name__)

# How often idle sessions are swept when a TTL is configured.
_PRUNE_INTERVAL_SECONDS = 60.0


class Bot:
    def __init__(
        self,
        client: MixinClient,
        dispatcher: Dispatcher,
        relay: BlazeRelay,
        *,
        reconnect_seconds: float = 1.0,
    ) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self.relay = relay
        self._reconnect_seconds = reconnect_seconds

    @property
    def sessions(self) -> SessionStore:
        return self.dispatcher.sessions

    @classmethod
    async def create(
        cls,
        keystore: Keystore,
        pin: str,
        settings: Settings | None = None,
        *,
        registry: CommandRegistry | None = None,
    ) -> Bot:
        s = settings or cfg
        client = MixinClient(keystore, api_base=s.mixin_api_base, timeout=s.http_timeout_seconds)
        try:
            assets: AssetDirectory = await fetch_asset_directory(
                client, s.fswap_assets_url, timeout=s.http_timeout_seconds,
            )
        except Exception:
            await client.close()
            raise

        registry = registry or default_registry()
        settlement = SwapSettlement(client, pin, mtg_url=s.fswap_mtg_url, timeout=s.http_timeout_seconds)
        transfers = TransferHandler(client, settlement, pin, swap_result_bot=s.swap_result_bot)
        deps = CommandDeps(
            registry=registry,
            assets=assets,
            transfers=transfers,
            quotes=QuoteClient(s.quote_url, timeout=s.http_timeout_seconds),
            client_id=client.client_id,
        )
        dispatcher = Dispatcher(registry, SessionStore(s.session_ttl_seconds), deps, client)
        relay = BlazeRelay(keystore.access_token, url=s.mixin_blaze_url, timeout=s.http_timeout_seconds)
        logger.info(
            "[bot.create] client=%s commands=%s symbols=%d",
            client.client_id, ",".join(registry.names), len(assets),
        )
        return cls(client, dispatcher, relay, reconnect_seconds=s.relay_reconnect_seconds)

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Run the relay loop until *stop* is set or the task is cancelled."""
        stop = stop or asyncio.Event()
        pruner = asyncio.create_task(self._prune_loop())
        try:
            while not stop.is_set():
                await self._run_once(stop)
                if stop.is_set():
                    break
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop.wait(), self._reconnect_seconds)
        finally:
            pruner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pruner
        logger.info("[bot.run] stopped")

    async def _run_once(self, stop: asyncio.Event) -> None:
        loop_task = asyncio.create_task(self.relay.loop(self.dispatcher.handle_message))
        stop_task = asyncio.create_task(stop.wait())
        try:
            await asyncio.wait({loop_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_task.cancel()
            if not loop_task.done():
                loop_task.cancel()
                await asyncio.gather(loop_task, return_exceptions=True)
        if loop_task.cancelled():
            return
        exc = loop_task.exception()
        if exc is not None:
            logger.warning("[bot.run] relay loop failed: %s", exc, exc_info=exc)

    async def _prune_loop(self) -> None:
        if not self.sessions.ttl_seconds:
            return
        while True:
            await asyncio.sleep(_PRUNE_INTERVAL_SECONDS)
            removed = self.sessions.prune_expired()
            if removed:
                logger.info("[bot.prune] dropped %d idle sessions", removed)

    async def close(self) -> None:
        await self.client.close()
