from __future__ import annotations

import argparse
import asyncio
import functools
import logging
import signal
from pathlib import Path
from typing import Sequence

from replybot.config import core
from replybot.memory.sql import open_settings_store
from replybot.response.pipeline import API_KEY

logger = logging.getLogger(__name__)

_SECRET_KEYS = {API_KEY}


def _mask(key: str, value: str) -> str:
    if key not in _SECRET_KEYS:
        return value
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="replybot",
        description="Automated messaging responder backed by a chat completion model.",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Settings database path (defaults to {core.SETTINGS_DB_PATH}).",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>", required=True)

    subparsers.add_parser("run", help="Connect to the messaging network and answer messages.")

    settings_cmd = subparsers.add_parser("settings", help="Inspect or edit stored settings.")
    settings_sub = settings_cmd.add_subparsers(dest="action", metavar="<action>", required=True)
    settings_sub.add_parser("show", help="Print every stored setting.")
    set_cmd = settings_sub.add_parser("set", help="Store a setting.")
    set_cmd.add_argument("key")
    set_cmd.add_argument("value")
    unset_cmd = settings_sub.add_parser("unset", help="Remove a setting.")
    unset_cmd.add_argument("key")

    models_cmd = subparsers.add_parser("models", help="List models offered by the provider.")
    models_cmd.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="API key to query with (defaults to the stored openai_key).",
    )
    return parser


def _refresh_on_signal(runtime, pending: set[asyncio.Task]) -> asyncio.Task:
    task = asyncio.create_task(runtime.refresh_settings())
    pending.add(task)
    task.add_done_callback(functools.partial(_on_refresh_done, pending))
    return task


def _on_refresh_done(pending: set[asyncio.Task], task: asyncio.Task) -> None:
    pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Settings refresh failed: %s", exc, exc_info=exc)


async def _run(db: str | None) -> None:
    from replybot.runtime import Runtime

    runtime = Runtime.from_config(db)
    await runtime.init()

    loop = asyncio.get_running_loop()
    if hasattr(signal, "SIGHUP"):
        # Operators edit settings out of process; SIGHUP picks the changes up.
        refreshes: set[asyncio.Task] = set()
        loop.add_signal_handler(signal.SIGHUP, _refresh_on_signal, runtime, refreshes)

    try:
        await runtime.start()
        await asyncio.Event().wait()
    finally:
        await runtime.destroy()


async def _models(db: str | None, api_key: str | None) -> int:
    from replybot.runtime import Runtime

    runtime = Runtime.from_config(db)
    models = await runtime.list_models(api_key)
    if not models:
        print("No models available.")
        return 1
    for model in models:
        owner = f"  ({model.owned_by})" if model.owned_by else ""
        print(f"{model.id}{owner}")
    return 0


def _settings(db: str | None, args: argparse.Namespace) -> int:
    store = open_settings_store(db)
    if args.action == "show":
        rows = store.get_all()
        if not rows:
            print("No settings stored.")
        for key in sorted(rows):
            print(f"{key} = {_mask(key, rows[key])}")
        return 0
    if args.action == "set":
        store.set(args.key, args.value)
        print(f"Set {args.key}.")
        return 0
    if args.action == "unset":
        if store.delete(args.key):
            print(f"Removed {args.key}.")
            return 0
        print(f"{args.key} was not set.")
        return 1
    raise ValueError(f"Unknown settings action: {args.action}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    db = str(args.db) if args.db is not None else None

    if args.command == "settings":
        return _settings(db, args)
    if args.command == "models":
        return asyncio.run(_models(db, args.api_key))
    if args.command == "run":
        try:
            asyncio.run(_run(db))
        except KeyboardInterrupt:
            logger.info("Interrupted; session closed.")
        return 0
    parser.error(f"Unknown command: {args.command}")
    return 2


__all__ = ["build_parser", "main"]
