"""Shared utilities."""

from .env_file import EnvFile
from .identifiers import (
    derive_id,
    is_user_id,
    parse_uuid,
    random_id,
    refund_trace_id,
    reply_id,
    swap_trace_id,
)
from .singletons import register_singleton, reset_all_singletons

__all__ = [
    "EnvFile",
    "derive_id",
    "is_user_id",
    "parse_uuid",
    "random_id",
    "refund_trace_id",
    "register_singleton",
    "reply_id",
    "reset_all_singletons",
    "swap_trace_id",
]
