"""Application settings -- reads from environment and ``.env`` file."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from ..util.env_file import EnvFile
from ..util.singletons import register_singleton

DEFAULT_API_BASE = "https://api.mixin.one"
DEFAULT_BLAZE_URL = "wss://blaze.mixin.one"
DEFAULT_ASSETS_URL = "https://api.4swap.org/api/assets"
DEFAULT_MTG_URL = "https://mtgswap-api.fox.one"
DEFAULT_QUOTE_URL = "https://v1.jinrishici.com/all.json"
DEFAULT_SWAP_RESULT_BOT = "7000103537"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings:

    _DATA_DIR_ENV: ClassVar[str] = "SWAPBOT_DATA_DIR"

    def __init__(self) -> None:
        dotenv = os.getenv("DOTENV_PATH")
        if not dotenv:
            data_dir = os.getenv(self._DATA_DIR_ENV)
            if data_dir:
                dotenv = str(Path(data_dir) / ".env")
            else:
                dotenv = ".env"
        self.env = EnvFile(dotenv)
        self.reload()

    def reload(self) -> None:
        e = self._read

        self.mixin_api_base: str = (e("MIXIN_API_BASE") or DEFAULT_API_BASE).rstrip("/")
        self.mixin_blaze_url: str = e("MIXIN_BLAZE_URL") or DEFAULT_BLAZE_URL
        self.fswap_assets_url: str = e("FSWAP_ASSETS_URL") or DEFAULT_ASSETS_URL
        self.fswap_mtg_url: str = (e("FSWAP_MTG_URL") or DEFAULT_MTG_URL).rstrip("/")
        self.quote_url: str = e("QUOTE_URL") or DEFAULT_QUOTE_URL
        self.swap_result_bot: str = e("SWAP_RESULT_BOT") or DEFAULT_SWAP_RESULT_BOT

        # 0 disables session expiry
        self.session_ttl_seconds: int = int(e("SESSION_TTL_SECONDS") or "600")
        self.relay_reconnect_seconds: float = float(e("RELAY_RECONNECT_SECONDS") or "1")
        self.http_timeout_seconds: float = float(e("HTTP_TIMEOUT_SECONDS") or "10")

        level = (e("LOG_LEVEL") or "INFO").upper()
        self.log_level: str = level if level in _LOG_LEVELS else "INFO"

    @property
    def data_dir(self) -> Path:
        return Path(os.getenv(self._DATA_DIR_ENV, str(Path.home() / ".swapbot")))

    @property
    def default_keystore_path(self) -> Path:
        return self.data_dir / "keystore.json"

    @property
    def log_level_num(self) -> int:
        return logging.getLevelName(self.log_level)

    def _read(self, key: str) -> str:
        return self.env.read(key) or os.getenv(key, "")


cfg = Settings()


def _reset_cfg() -> None:
    global cfg
    cfg = Settings()


register_singleton(_reset_cfg)
