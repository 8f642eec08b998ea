"""Quote-of-the-day provider used by ``/poem``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..config.settings import DEFAULT_QUOTE_URL
from ..errors import QuoteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    content: str
    author: str = ""
    origin: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> Quote:
        if not isinstance(raw, dict) or not raw.get("content"):
            raise QuoteError("quote response has no content")
        return cls(
            content=str(raw["content"]).strip(),
            author=str(raw.get("author", "")).strip(),
            origin=str(raw.get("origin", "")).strip(),
        )

    def format(self) -> str:
        return f"{self.content}\n{self.author} <{self.origin}>"


class QuoteClient:

    def __init__(self, url: str = DEFAULT_QUOTE_URL, *, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def fetch(self) -> Quote:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(self._url) as resp:
                    if resp.status != 200:
                        raise QuoteError(f"HTTP {resp.status}")
                    raw = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            logger.warning("[quotes.fetch] request to %s failed: %s", self._url, exc)
            raise QuoteError(str(exc)) from exc
        return Quote.from_dict(raw)
