"""Tests for the asset directory and its start-up download."""

from __future__ import annotations

import pytest
from aiohttp import test_utils, web

from swapbot.runtime.errors import AssetDirectoryError, AssetNotFoundError
from swapbot.runtime.registries.assets import (
    AssetDirectory,
    fetch_asset_directory,
    parse_asset_list,
)
from swapbot.runtime.tests.fakes import BTC, ETH, SYMBOLS, make_reader

ASSET_LIST = {
    "ts": 1700000000000,
    "data": {
        "assets": [
            {"id": BTC.asset_id, "name": "Bitcoin", "symbol": "BTC"},
            {"id": ETH.asset_id, "name": "Ether", "symbol": "eth"},
            {"id": "", "name": "Broken", "symbol": "BRK"},
        ],
    },
}


class TestParseAssetList:
    def test_symbols_upper_cased(self) -> None:
        symbols = parse_asset_list(ASSET_LIST)
        assert symbols == {"BTC": BTC.asset_id, "ETH": ETH.asset_id}

    def test_later_duplicate_wins(self) -> None:
        raw = {"data": {"assets": [
            {"id": "first", "symbol": "USDT"},
            {"id": "second", "symbol": "USDT"},
        ]}}
        assert parse_asset_list(raw) == {"USDT": "second"}

    @pytest.mark.parametrize("raw", [None, [], {}, {"data": {}}, {"data": {"assets": "x"}}])
    def test_malformed_payload(self, raw) -> None:
        with pytest.raises(AssetDirectoryError):
            parse_asset_list(raw)


class TestAssetDirectory:
    def test_lookup_case_insensitive(self) -> None:
        directory = AssetDirectory(SYMBOLS, make_reader())
        assert directory.lookup("btc") == BTC.asset_id
        assert directory.lookup(" ETH ") == ETH.asset_id
        assert directory.lookup("DOGE") is None
        assert "eth" in directory

    def test_symbols_are_read_only(self) -> None:
        directory = AssetDirectory(SYMBOLS, make_reader())
        with pytest.raises(TypeError):
            directory.symbols["DOGE"] = "x"  # type: ignore[index]

    @pytest.mark.asyncio
    async def test_resolve_reads_full_asset(self) -> None:
        reader = make_reader()
        directory = AssetDirectory(SYMBOLS, reader)
        asset = await directory.resolve("btc")
        assert asset == BTC
        reader.read_asset.assert_awaited_once_with(BTC.asset_id)

    @pytest.mark.asyncio
    async def test_resolve_unknown_symbol(self) -> None:
        reader = make_reader()
        directory = AssetDirectory(SYMBOLS, reader)
        with pytest.raises(AssetNotFoundError) as info:
            await directory.resolve("XXXX")
        assert str(info.value) == "Symbol(XXXX) not found."
        reader.read_asset.assert_not_awaited()


class TestFetchAssetDirectory:
    @pytest.mark.asyncio
    async def test_fetch_builds_directory(self) -> None:
        async def _assets(request: web.Request) -> web.Response:
            return web.json_response(ASSET_LIST)

        app = web.Application()
        app.router.add_get("/api/assets", _assets)
        async with test_utils.TestServer(app) as server:
            directory = await fetch_asset_directory(make_reader(), str(server.make_url("/api/assets")))

        assert len(directory) == 2
        assert set(directory) == {"BTC", "ETH"}

    @pytest.mark.asyncio
    async def test_http_error_raises(self) -> None:
        async def _fail(request: web.Request) -> web.Response:
            return web.Response(status=503)

        app = web.Application()
        app.router.add_get("/api/assets", _fail)
        async with test_utils.TestServer(app) as server:
            with pytest.raises(AssetDirectoryError, match="503"):
                await fetch_asset_directory(make_reader(), str(server.make_url("/api/assets")))

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        async def _garbage(request: web.Request) -> web.Response:
            return web.Response(text="not json", content_type="text/plain")

        app = web.Application()
        app.router.add_get("/api/assets", _garbage)
        async with test_utils.TestServer(app) as server:
            with pytest.raises(AssetDirectoryError):
                await fetch_asset_directory(make_reader(), str(server.make_url("/api/assets")))
