"""CLI entry point for content-manager.

Drives the same [RelayHandler][content_manager.services.handler.RelayHandler]
surface the desktop GUI binds to: manage saved relays, fetch events with a
filter, publish a text note and generate keys.

Examples:
    ```bash
    python -m content_manager relays list
    python -m content_manager relays add wss://relay.example.com
    python -m content_manager fetch --relay wss://relay.example.com --kind 1 --limit 20
    NOSTR_PRIVATE_KEY=nsec1... python -m content_manager send \\
        --relay wss://relay.example.com --message "hello"
    python -m content_manager keygen
    ```
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from content_manager.core.exceptions import ContentManagerError
from content_manager.core.logger import Logger, StructuredFormatter
from content_manager.core.yaml import load_yaml
from content_manager.services.handler import HandlerResult, RelayHandler
from content_manager.utils.keys import (
    ENV_PRIVATE_KEY,
    generate_key_pair,
    load_private_key_from_env,
)


DEFAULT_CONFIG = Path("config") / "content_manager.yaml"

logger = Logger("cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per handler operation."""
    parser = argparse.ArgumentParser(
        prog="content-manager",
        description="Nostr relay client",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Handler config path (default: {DEFAULT_CONFIG})",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    relays = commands.add_parser("relays", help="Manage saved relays")
    relay_actions = relays.add_subparsers(dest="action", required=True)
    relay_actions.add_parser("list", help="Print saved relays, one per line")
    relay_actions.add_parser("add", help="Save a wss:// relay").add_argument("url")
    relay_actions.add_parser("remove", help="Remove a saved relay").add_argument("url")

    fetch = commands.add_parser("fetch", help="Collect events matching a filter")
    fetch.add_argument("--relay", required=True, help="Relay URL to query")
    fetch.add_argument("--kind", type=int, action="append", dest="kinds", help="Event kind")
    fetch.add_argument("--author", action="append", dest="authors", help="Author pubkey (hex)")
    fetch.add_argument("--since", type=int, help="Lower created_at bound (inclusive)")
    fetch.add_argument("--until", type=int, help="Upper created_at bound (inclusive)")
    fetch.add_argument("--limit", type=int, help="Maximum number of events")
    fetch.add_argument("--window", type=float, help="Collection window in seconds")

    send = commands.add_parser("send", help="Sign and publish a text note")
    send.add_argument("--relay", required=True, help="Relay URL to publish to")
    send.add_argument("--message", required=True, help="Note content")
    send.add_argument(
        "--key-env",
        default=ENV_PRIVATE_KEY,
        help=f"Environment variable holding the private key (default: {ENV_PRIVATE_KEY})",
    )

    commands.add_parser("keygen", help="Generate a new nsec/npub key pair")

    return parser


def setup_logging(level: str) -> None:
    """Install a ``StructuredFormatter`` on the root handler (stderr)."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict, returning ``{}`` if the file does not exist."""
    if not path.exists():
        logger.debug("config_not_found", path=str(path))
        return {}
    return load_yaml(path)


def _report(result: HandlerResult[Any]) -> bool:
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
    return result.ok


def _filter_spec(args: argparse.Namespace) -> dict[str, Any]:
    fields = ("kinds", "authors", "since", "until", "limit")
    return {name: getattr(args, name) for name in fields if getattr(args, name) is not None}


def run_relays(handler: RelayHandler, args: argparse.Namespace) -> int:
    if args.action == "list":
        for url in handler.get_saved_relays():
            print(url)
        return 0
    if args.action == "add":
        return 0 if _report(handler.add_relay(args.url)) else 1
    return 0 if _report(handler.remove_relay(args.url)) else 1


async def run_fetch(handler: RelayHandler, args: argparse.Namespace) -> int:
    if not _report(await handler.connect_relay(args.relay)):
        return 1
    result = await handler.subscribe_to_relay([_filter_spec(args)], window=args.window)
    if not _report(result):
        return 1
    for event in result.value or []:
        print(json.dumps(event.to_dict(), ensure_ascii=False))
    return 0


async def run_send(handler: RelayHandler, args: argparse.Namespace) -> int:
    try:
        private_key = load_private_key_from_env(args.key_env)
    except ContentManagerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not _report(await handler.connect_relay(args.relay)):
        return 1
    result = await handler.send_note(private_key, args.message)
    if not _report(result):
        return 1
    print(f"Published: {result.value}")
    return 0


def run_keygen() -> int:
    nsec, npub = generate_key_pair()
    print(f"nsec: {nsec}")
    print(f"npub: {npub}")
    return 0


async def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point: parse args, build the handler and run the command."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "keygen":
        return run_keygen()

    try:
        handler = RelayHandler.from_dict(_load_yaml_dict(args.config))
    except Exception as e:  # Intentionally broad: CLI error boundary for configuration
        logger.error("config_invalid", path=str(args.config), error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "relays":
        return run_relays(handler, args)

    try:
        async with handler:
            if args.command == "fetch":
                return await run_fetch(handler, args)
            return await run_send(handler, args)
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
