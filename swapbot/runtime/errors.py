"""Exception hierarchy for the bot runtime."""

from __future__ import annotations

from typing import Any


class SwapbotError(Exception):
    """Base class for all errors raised by the runtime."""


class CommandError(SwapbotError):
    """A command failed; ``str(exc)`` is sent back to the user verbatim."""


class AssetNotFoundError(CommandError):
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Symbol({symbol}) not found.")


class QuoteError(CommandError):
    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Failed to fetch a poem, please try again later.")


class AssetDirectoryError(SwapbotError):
    """The supported asset list could not be fetched or parsed."""


class KeystoreError(SwapbotError):
    """The keystore file is missing or malformed."""


class SettlementError(SwapbotError):
    """The settlement group could not be read or the swap was rejected."""


class MixinAPIError(SwapbotError):
    """Error envelope (or non-2xx status) returned by the REST API."""

    def __init__(
        self,
        status: int,
        code: int = 0,
        description: str = "",
        *,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status = status
        self.code = code
        self.description = description
        self.extra = extra or {}
        super().__init__(f"mixin api error: status={status} code={code} {description}".rstrip())
