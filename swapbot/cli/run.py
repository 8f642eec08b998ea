"""Bot entry point.

Loads the keystore, builds the bot and runs the relay loop until
interrupted.

Usage::

    swapbot --config keystore.json --pin 123456
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

import aiohttp
from rich.console import Console

from swapbot.runtime.config.keystore import load_keystore
from swapbot.runtime.config.settings import cfg
from swapbot.runtime.errors import SwapbotError
from swapbot.runtime.messaging.bot import Bot

logger = logging.getLogger(__name__)
console = Console(stderr=True)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swapbot",
        description="Run the swap bot on the Mixin relay.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="keystore.json",
        help="Path to the keystore JSON file (default: keystore.json).",
    )
    parser.add_argument(
        "--pin",
        type=str,
        default="",
        help="PIN used to authorise refunds and swap payments.",
    )
    return parser


def _configure_logging() -> None:
    logging.basicConfig(level=cfg.log_level_num, format=_LOG_FORMAT)
    for name in ("aiohttp.access", "aiohttp.client", "aiohttp.internal", "aiohttp.websocket"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _install_stop_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # not available on every platform; Ctrl+C still raises KeyboardInterrupt
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)


async def _run(args: argparse.Namespace) -> int:
    if not args.pin:
        console.print("[red]Error:[/red] --pin is required.")
        return 1

    try:
        keystore = load_keystore(args.config)
    except SwapbotError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        return 1

    try:
        bot = await Bot.create(keystore, args.pin)
    except (SwapbotError, aiohttp.ClientError) as exc:
        logger.error("[cli.start] bot start-up failed: %s", exc, exc_info=True)
        console.print(f"[red]Error:[/red] {exc}")
        return 1

    stop = asyncio.Event()
    _install_stop_handlers(stop)
    console.print(f"[bold green]swapbot[/bold green] listening as {keystore.client_id}")
    try:
        await bot.run(stop)
    finally:
        await bot.close()
        console.print("[dim]Stopped.[/dim]")
    return 0


def main() -> None:
    """CLI entry point for ``swapbot``."""
    parser = _build_parser()
    args = parser.parse_args()
    _configure_logging()

    try:
        code = asyncio.run(_run(args))
    except KeyboardInterrupt:
        code = 130

    sys.exit(code)


if __name__ == "__main__":
    main()
