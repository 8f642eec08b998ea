"""Shared pytest fixtures for swapbot.runtime tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from swapbot.runtime.messaging.commands import CommandDeps
from swapbot.runtime.registries.assets import AssetDirectory
from swapbot.runtime.registries.commands import CommandRegistry, default_registry
from swapbot.runtime.services.quotes import Quote
from swapbot.runtime.tests.fakes import BOT_ID, SYMBOLS, make_reader


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("SWAPBOT_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOTENV_PATH", str(tmp_path / ".env"))
    return data_dir


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_data_dir: Path):
    from swapbot.runtime.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def data_dir(_isolate_data_dir: Path) -> Path:
    return _isolate_data_dir


@pytest.fixture()
def reader() -> AsyncMock:
    return make_reader()


@pytest.fixture()
def assets(reader: AsyncMock) -> AssetDirectory:
    return AssetDirectory(SYMBOLS, reader)


@pytest.fixture()
def registry() -> CommandRegistry:
    return default_registry()


@pytest.fixture()
def transfers() -> AsyncMock:
    handler = AsyncMock()
    handler.handle.return_value = None
    return handler


@pytest.fixture()
def quotes() -> AsyncMock:
    source = AsyncMock()
    source.fetch.return_value = Quote("床前明月光", "李白", "静夜思")
    return source


@pytest.fixture()
def deps(registry, assets, transfers, quotes) -> CommandDeps:
    return CommandDeps(
        registry=registry,
        assets=assets,
        transfers=transfers,
        quotes=quotes,
        client_id=BOT_ID,
    )
