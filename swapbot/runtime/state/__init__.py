"""Runtime state: per-user conversational sessions."""

from __future__ import annotations

from .session_store import PriceData, Session, SessionData, SessionStore, SwapData

__all__ = [
    "PriceData",
    "Session",
    "SessionData",
    "SessionStore",
    "SwapData",
]
