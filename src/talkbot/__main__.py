"""CLI entry point for talkbot."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from talkbot.app import TalkBotApp
from talkbot.config import AppConfig, load_config
from talkbot.log import setup_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="talkbot",
        description="Chat bot that replies with Claude completions",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (("start", "Start the bots"), ("config-check", "Validate configuration")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
        sub.add_argument("-e", "--env", default=".env", help="Path to .env file")

    args = parser.parse_args(argv)

    if args.command is None:
        args.command = "start"
        args.config = "config.yaml"
        args.env = ".env"

    if args.command == "config-check":
        _check_config(args.config, args.env)
    elif args.command == "start":
        _run(args.config, args.env)


def _load(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Run 'python install.py' first or copy config.example.yaml to config.yaml")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  Locale: {config.locale}")
    print(f"  Storage: {config.storage.backend} ({config.storage.db_path})")
    print(f"  Bots configured: {len(config.bots)}")
    for bot in config.bots:
        print(
            f"    - {bot.id} ({bot.platform}) name={bot.name!r} "
            f"[{bot.ai.model}, chunk={bot.reply.chunk_size}]"
        )
    if config.anthropic is None:
        print("  Warning: no 'anthropic' section; bots cannot reply", file=sys.stderr)


def _run(config_path: str, env_path: str) -> None:
    """Load config and run the application until SIGINT/SIGTERM."""
    config = _load(config_path, env_path)
    setup_logging(config.log_level, config.log_format)

    async def _async_main() -> None:
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(stop_event.set))

        app = TalkBotApp(config)
        await app.start()
        try:
            await stop_event.wait()
        finally:
            await app.stop()

    asyncio.run(_async_main())


if __name__ == "__main__":
    main()
