"""Asset directory -- ticker symbols the exchange supports.

Built once at start-up from the exchange's asset list and never mutated
afterwards. A ticker resolves to an asset id locally; the full
:class:`~swapbot.runtime.services.mixin.Asset` (name, USD price) is then
read through an :class:`AssetReader`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Protocol

import aiohttp

from ..config.settings import DEFAULT_ASSETS_URL
from ..errors import AssetDirectoryError, AssetNotFoundError
from ..services.mixin import Asset

logger = logging.getLogger(__name__)


class AssetReader(Protocol):
    async def read_asset(self, asset_id: str) -> Asset: ...


def parse_asset_list(raw: Any) -> dict[str, str]:
    """Flatten ``{ts, data: {assets: [{id, name, symbol}]}}`` into ``{SYMBOL: id}``.

    Symbols are upper-cased; when two assets share a symbol the later one
    wins.
    """
    data = raw.get("data") if isinstance(raw, dict) else None
    assets = data.get("assets") if isinstance(data, dict) else None
    if not isinstance(assets, list):
        raise AssetDirectoryError("asset list response has no data.assets array")

    symbols: dict[str, str] = {}
    for entry in assets:
        if not isinstance(entry, dict):
            continue
        symbol = str(entry.get("symbol") or "").strip().upper()
        asset_id = str(entry.get("id") or "").strip()
        if symbol and asset_id:
            symbols[symbol] = asset_id
    return symbols


class AssetDirectory:

    def __init__(self, symbols: Mapping[str, str], reader: AssetReader) -> None:
        self._symbols = MappingProxyType({k.upper(): v for k, v in symbols.items()})
        self._reader = reader

    def lookup(self, symbol: str) -> str | None:
        return self._symbols.get(symbol.strip().upper())

    async def resolve(self, symbol: str) -> Asset:
        """Return the full asset for *symbol*.

        Raises :class:`AssetNotFoundError` when the ticker is not supported.
        """
        asset_id = self.lookup(symbol)
        if asset_id is None:
            raise AssetNotFoundError(symbol)
        return await self._reader.read_asset(asset_id)

    @property
    def symbols(self) -> Mapping[str, str]:
        return self._symbols

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.lookup(symbol) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)


async def fetch_asset_directory(
    reader: AssetReader,
    url: str = DEFAULT_ASSETS_URL,
    *,
    timeout: float = 10.0,
) -> AssetDirectory:
    """Download the supported asset list and build the directory.

    Any network or parse failure raises :class:`AssetDirectoryError`; the
    bot cannot start without it.
    """
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.get(url) as resp:
                if resp.status != 200:
                    raise AssetDirectoryError(f"asset list request failed: HTTP {resp.status}")
                raw = await resp.json(content_type=None)
    except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
        raise AssetDirectoryError(f"asset list request failed: {exc}") from exc

    directory = AssetDirectory(parse_asset_list(raw), reader)
    logger.info("[assets.fetch] loaded %d supported symbols from %s", len(directory), url)
    return directory
