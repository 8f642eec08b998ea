"""Structured action payloads -- button groups with deep-link actions.

The relay renders ``APP_BUTTON_GROUP`` messages as a row of buttons; the
payload is a JSON list of ``{label, action, color}`` objects and is passed
through untouched.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

DEFAULT_BUTTON_COLOR = "#4A90E2"


@dataclass(frozen=True)
class Button:
    label: str
    action: str
    color: str = DEFAULT_BUTTON_COLOR


def transfer_link(recipient_id: str) -> str:
    """Deep link that opens a payment to *recipient_id*."""
    return f"mixin://transfer/{recipient_id}"


def pay_button(symbol: str, recipient_id: str, color: str = DEFAULT_BUTTON_COLOR) -> Button:
    return Button(
        label=f"Pay to swap for {symbol}",
        action=transfer_link(recipient_id),
        color=color,
    )


def button_group(*buttons: Button) -> str:
    """Serialise *buttons* into an ``APP_BUTTON_GROUP`` payload."""
    if not buttons:
        raise ValueError("a button group needs at least one button")
    return json.dumps([asdict(b) for b in buttons], ensure_ascii=False)
