"""Clients for external services: the messaging REST API, 4swap, and quotes."""

from .fswap import MtgGroup, SwapAction, SwapSettlement, decode_swap_action, encode_swap_action
from .mixin import Asset, MixinClient, TransactionInput, TransferInput
from .quotes import Quote, QuoteClient

__all__ = [
    "Asset",
    "MixinClient",
    "MtgGroup",
    "Quote",
    "QuoteClient",
    "SwapAction",
    "SwapSettlement",
    "TransactionInput",
    "TransferInput",
    "decode_swap_action",
    "encode_swap_action",
]
