"""Tests for the bot CLI (swapbot.cli.run)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from swapbot.cli.run import _build_parser, _run, main
from swapbot.runtime.errors import AssetDirectoryError

KEYSTORE = {
    "client_id": "0c3f1c5e-98e4-4a47-9a2c-55e4f2c8d301",
    "session_id": "3d6c8a1b-7e2f-4c5d-9a0b-1c2d3e4f5a6b",
    "private_key": "key",
    "pin_token": "pin-token",
    "access_token": "token-abc",
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def parser():
    return _build_parser()


@pytest.fixture()
def keystore_path(tmp_path: Path) -> Path:
    path = tmp_path / "keystore.json"
    path.write_text(json.dumps(KEYSTORE))
    return path


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestBuildParser:
    def test_defaults(self, parser):
        args = parser.parse_args([])
        assert args.config == "keystore.json"
        assert args.pin == ""

    def test_config_and_pin(self, parser):
        args = parser.parse_args(["--config", "/etc/bot.json", "--pin", "123456"])
        assert args.config == "/etc/bot.json"
        assert args.pin == "123456"


# ---------------------------------------------------------------------------
# Full run (mocked bot)
# ---------------------------------------------------------------------------


class TestRun:
    async def test_missing_pin(self, parser, keystore_path):
        args = parser.parse_args(["--config", str(keystore_path)])
        assert await _run(args) == 1

    async def test_missing_keystore(self, parser, tmp_path):
        args = parser.parse_args(["--config", str(tmp_path / "nope.json"), "--pin", "1"])
        assert await _run(args) == 1

    @patch("swapbot.cli.run.Bot")
    async def test_runs_until_stopped(self, mock_bot_cls, parser, keystore_path):
        mock_bot = MagicMock()
        mock_bot.run = AsyncMock()
        mock_bot.close = AsyncMock()
        mock_bot_cls.create = AsyncMock(return_value=mock_bot)

        args = parser.parse_args(["--config", str(keystore_path), "--pin", "123456"])
        code = await _run(args)

        assert code == 0
        keystore, pin = mock_bot_cls.create.await_args.args
        assert keystore.client_id == KEYSTORE["client_id"]
        assert pin == "123456"
        mock_bot.run.assert_awaited_once()
        mock_bot.close.assert_awaited_once()

    @patch("swapbot.cli.run.Bot")
    async def test_bot_closed_when_run_fails(self, mock_bot_cls, parser, keystore_path):
        mock_bot = MagicMock()
        mock_bot.run = AsyncMock(side_effect=RuntimeError("boom"))
        mock_bot.close = AsyncMock()
        mock_bot_cls.create = AsyncMock(return_value=mock_bot)

        args = parser.parse_args(["--config", str(keystore_path), "--pin", "123456"])
        with pytest.raises(RuntimeError):
            await _run(args)
        mock_bot.close.assert_awaited_once()

    @patch("swapbot.cli.run.Bot")
    async def test_startup_failure_returns_exit_1(self, mock_bot_cls, parser, keystore_path):
        mock_bot_cls.create = AsyncMock(side_effect=AssetDirectoryError("HTTP 503"))
        args = parser.parse_args(["--config", str(keystore_path), "--pin", "123456"])
        assert await _run(args) == 1


class TestMain:
    def test_keyboard_interrupt_exit_code(self, monkeypatch, keystore_path):
        monkeypatch.setattr("sys.argv", ["swapbot", "--config", str(keystore_path), "--pin", "1"])

        def _interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("swapbot.cli.run.asyncio.run", side_effect=_interrupt):
            with pytest.raises(SystemExit) as info:
                main()
        assert info.value.code == 130
