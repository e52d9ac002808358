"""
BZTCP Command-Line Client

Connects to a BZTCP server, prints every STREAM record to stdout as one
JSON object per line and, when a Redis URL is configured, fans each
record out to Redis pub/sub. Runs until SIGINT/SIGTERM.

Usage:
    bztcp --user bztest --key 12345
    bztcp --addr tcp-v1.benzinga.io:11337 --tls -v
    bztcp --no-tls          # overrides BZTCP_TLS=true
    bztcp --redis-url redis://localhost:6379/0

Flags default to BZTCP_* environment variables (a .env file is loaded).
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from datetime import datetime, timezone
from typing import Optional, TextIO

from dotenv import load_dotenv

logger = logging.getLogger("bztcp")


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bztcp", description="BZTCP streaming client")
    parser.add_argument("--addr", default=settings.addr, help="address of bztcp server")
    parser.add_argument("--user", default=settings.username, help="username to authenticate with")
    parser.add_argument("--key", default=settings.key, help="key to authenticate with")
    parser.add_argument(
        "--tls",
        action=argparse.BooleanOptionalAction,
        default=settings.tls,
        help="whether or not to use TLS",
    )
    parser.add_argument("-v", dest="verbose", action="store_true", help="enable verbose logging")
    parser.add_argument(
        "--redis-url",
        default=settings.redis.url if settings.redis else None,
        help="also publish records to this Redis server",
    )
    parser.add_argument(
        "--redis-prefix",
        default=settings.redis.prefix if settings.redis else "bztcp",
        help="channel prefix for Redis publishing",
    )
    return parser


async def run(args: argparse.Namespace, out: TextIO = sys.stdout) -> None:
    """
    Dial, authenticate and stream until a shutdown signal arrives.

    Raises whatever the connection or publisher raises; a signal-driven
    shutdown returns normally.
    """
    from bztcp.client import dial
    from bztcp.models import StreamData
    from bztcp.pubsub import RecordPublisher

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("Received signal. Exiting...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    publisher: Optional[RecordPublisher] = None
    if args.redis_url:
        publisher = RecordPublisher(args.redis_url, prefix=args.redis_prefix)
        await publisher.connect()

    try:
        logger.info(
            f"Connecting to '{args.addr}' as user '{args.user}' (w/TLS: {args.tls})"
        )
        conn = await dial(args.addr, args.user, args.key, tls=args.tls)

        async def on_record(record: StreamData) -> None:
            out.write(json.dumps(record.to_dict()) + "\n")
            out.flush()
            if publisher is not None:
                await publisher.publish(record)

        logger.info("Connected. Waiting for events.")
        await conn.stream(on_record, shutdown_event)

        stats = conn.get_stats()
        logger.info(
            f"Final — messages: {stats['messages_received']}, "
            f"records: {stats['records_delivered']}, "
            f"pings: {stats['pings_sent']}"
        )
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        if publisher is not None:
            await publisher.close()


def main(argv: Optional[list[str]] = None) -> int:
    from bztcp.config import ConfigurationError, load_settings
    from bztcp.core.types import BZTCPError
    from bztcp.pubsub import PublisherError, SerializationError

    load_dotenv()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"bztcp: {e}", file=sys.stderr)
        return 2

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if not args.user or not args.key:
        parser.error("--user and --key (or BZTCP_USER and BZTCP_KEY) are required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
    )

    start = time.monotonic()
    started_at = datetime.now(timezone.utc)
    logger.info("BZTCP client initializing.")

    try:
        asyncio.run(run(args))
    except (BZTCPError, PublisherError, SerializationError, ConfigurationError) as e:
        logger.error(str(e))
        return 1

    logger.info(
        f"Finished. Runtime: {time.monotonic() - start:.3f}s "
        f"Started At: {started_at.isoformat()}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
