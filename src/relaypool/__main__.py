"""CLI entry point for relaypool.

Reads, publishes and converts Nostr identifiers against a relay set taken
from ``--relay`` flags, the ``pool.relays`` list of a YAML config file, or
the ``NOSTR_RELAYS`` environment variable, in that order. Publishing
commands sign with the key in ``NOSTR_NSEC``. A ``.env`` file is loaded
first so either variable may live there.

Exit codes: 0 on success, 1 on failure (bad input, no relay accepted,
target event not found), 130 when interrupted.

Examples:
    ```bash
    python -m relaypool read '{"kinds": [1], "limit": 10}'
    relaypool --relay wss://nos.lol post "Hello Nostr!"
    relaypool react note1... 🤙
    relaypool resolve npub1...
    relaypool encode nevent <hex> --relay-hint wss://nos.lol
    ```
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from relaypool.core.exceptions import RelayPoolError
from relaypool.core.logger import Logger, setup_logging
from relaypool.models import Event, Filter, WriteResult
from relaypool.nips.event_builders import build_reaction, build_repost, build_text_note
from relaypool.pool.config import ClientConfig, KeysConfig, PoolConfig, load_relays_from_env
from relaypool.pool.read import read
from relaypool.pool.write import write
from relaypool.utils.keys import sign_event
from relaypool.utils.nip19 import (
    encode_nevent,
    encode_note,
    encode_nprofile,
    encode_npub,
    resolve,
)
from relaypool.utils.transport import RelayConnection


logger = Logger("cli")

ENCODERS = ("npub", "note", "nevent", "nprofile")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="relaypool",
        description="Fan-out reads and writes across Nostr relays",
    )
    parser.add_argument(
        "--relay",
        action="append",
        default=[],
        metavar="URL",
        help="Relay URL (repeatable; default: config file, then NOSTR_RELAYS)",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        help="Overall deadline per read or write (default: 10000)",
    )
    parser.add_argument("--config", type=Path, help="YAML config path")
    parser.add_argument(
        "--env-file",
        type=Path,
        help=".env file (default: nearest .env from the working directory up)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    p = commands.add_parser("read", help="Query relays and print events as JSON lines")
    p.add_argument("filters", nargs="+", metavar="FILTER_JSON", help="NIP-01 filter object")

    p = commands.add_parser("post", help="Publish a kind 1 text note")
    p.add_argument("text", nargs="*", help="Note text")
    p.add_argument("--reply", metavar="ID", help="Event to reply to")
    p.add_argument("--quote", metavar="ID", help="Event to quote")
    p.add_argument("--mention", action="append", default=[], metavar="PUBKEY")

    p = commands.add_parser("react", help="Publish a kind 7 reaction")
    p.add_argument("target", help="Event id (hex, note1 or nevent1)")
    p.add_argument("emoji", nargs="?", default="+")

    p = commands.add_parser("repost", help="Publish a kind 6 repost")
    p.add_argument("target", help="Event id (hex, note1 or nevent1)")

    p = commands.add_parser("resolve", help="Print the hex form of an identifier")
    p.add_argument("value")

    p = commands.add_parser("encode", help="Encode a hex id or pubkey as bech32")
    p.add_argument("prefix", choices=ENCODERS)
    p.add_argument("hex")
    p.add_argument("--relay-hint", action="append", default=[], metavar="URL")
    p.add_argument("--author", metavar="PUBKEY", help="Author pubkey (nevent only)")
    p.add_argument("--kind", type=int, help="Event kind (nevent only)")

    return parser


# =============================================================================
# Helpers
# =============================================================================


class _Context:
    """Per-invocation settings resolved from flags, config file and environment."""

    def __init__(self, args: argparse.Namespace, config: ClientConfig) -> None:
        self.args = args
        self.config = config
        pool = config.pool
        self.timeout_ms = pool.timeout_ms if args.timeout_ms is None else args.timeout_ms

    def relays(self) -> list[str]:
        if self.args.relay:
            return PoolConfig(relays=self.args.relay).relays
        if self.config.pool.relays:
            return self.config.pool.relays
        return load_relays_from_env()

    def connection(self, url: str) -> RelayConnection:
        pool = self.config.pool
        return RelayConnection(url, open_timeout=pool.open_timeout, proxy_url=pool.proxy_url)

    async def fetch(self, target: str) -> Event | None:
        events = await read(
            self.relays(),
            [Filter(ids=(resolve(target),), limit=1)],
            self.timeout_ms,
            verify=self.config.pool.verify,
            connection_factory=self.connection,
        )
        return events[0] if events else None

    async def publish(self, event: Event) -> WriteResult:
        relays = self.relays()
        print(f"Publishing to {len(relays)} relays...")
        print(f"  id: {event.id}")
        result = await write(relays, event, self.timeout_ms, connection_factory=self.connection)
        if result.accepted:
            print(f"OK: {', '.join(result.accepted)}")
        if result.rejected:
            print(f"Fail: {', '.join(str(outcome) for outcome in result.rejected)}")
        return result


def _load_config(args: argparse.Namespace) -> ClientConfig:
    if args.config is None:
        return ClientConfig()
    return ClientConfig.from_yaml(args.config)


def _parse_filter(raw: str) -> Filter:
    data: Any = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"filter must be a JSON object: {raw}")
    return Filter.from_dict(data)


# =============================================================================
# Commands
# =============================================================================


async def cmd_read(ctx: _Context) -> int:
    filters = [_parse_filter(raw) for raw in ctx.args.filters]
    events = await read(
        ctx.relays(),
        filters,
        ctx.timeout_ms,
        verify=ctx.config.pool.verify,
        connection_factory=ctx.connection,
    )
    for event in events:
        print(event.to_json())
    logger.info("read_printed", events=len(events))
    return 0


async def cmd_post(ctx: _Context) -> int:
    args = ctx.args
    keys = KeysConfig()
    reply_to: Event | str | None = None
    if args.reply:
        # reply threading needs the target's tags; fall back to the bare id
        reply_to = await ctx.fetch(args.reply) or args.reply

    draft = build_text_note(
        " ".join(args.text),
        reply_to=reply_to,
        quote=args.quote,
        mentions=args.mention,
    )
    event = sign_event(draft, keys.secret_key)
    result = await ctx.publish(event)
    return 0 if result.ok else 1


async def cmd_react(ctx: _Context) -> int:
    keys = KeysConfig()
    target = await ctx.fetch(ctx.args.target)
    if target is None:
        logger.error("event_not_found", target=ctx.args.target)
        return 1
    event = sign_event(build_reaction(target.id, target.pubkey, ctx.args.emoji), keys.secret_key)
    result = await ctx.publish(event)
    print(f"Reacted {ctx.args.emoji} to {encode_nevent(target.id)}")
    return 0 if result.ok else 1


async def cmd_repost(ctx: _Context) -> int:
    keys = KeysConfig()
    target = await ctx.fetch(ctx.args.target)
    if target is None:
        logger.error("event_not_found", target=ctx.args.target)
        return 1
    relays = ctx.relays()
    event = sign_event(build_repost(target, relays[0] if relays else ""), keys.secret_key)
    result = await ctx.publish(event)
    print(f"Reposted {encode_nevent(target.id)}")
    return 0 if result.ok else 1


async def cmd_resolve(ctx: _Context) -> int:
    print(resolve(ctx.args.value))
    return 0


async def cmd_encode(ctx: _Context) -> int:
    args = ctx.args
    value = resolve(args.hex)
    if args.prefix == "npub":
        token = encode_npub(value)
    elif args.prefix == "note":
        token = encode_note(value)
    elif args.prefix == "nprofile":
        token = encode_nprofile(value, args.relay_hint)
    else:
        author = resolve(args.author) if args.author else None
        token = encode_nevent(value, args.relay_hint, author, args.kind)
    print(token)
    return 0


COMMANDS = {
    "read": cmd_read,
    "post": cmd_post,
    "react": cmd_react,
    "repost": cmd_repost,
    "resolve": cmd_resolve,
    "encode": cmd_encode,
}


# =============================================================================
# Entry points
# =============================================================================


async def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, load configuration, and run the selected command."""
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file or find_dotenv(usecwd=True))

    try:
        config = _load_config(args)
    except (FileNotFoundError, RelayPoolError, ValidationError) as e:
        setup_logging(args.log_level or "INFO")
        logger.error("config_failed", error=str(e))
        return 1

    setup_logging(args.log_level or config.log_level)
    ctx = _Context(args, config)

    try:
        return await COMMANDS[args.command](ctx)
    except (RelayPoolError, ValidationError, ValueError, TypeError) as e:
        logger.error(f"{args.command}_failed", error=str(e))
        return 1


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli()
