"""Example subscriber: print every webhook event relayed on the channel."""

import argparse
import asyncio
import logging
from collections.abc import Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from hookrelay.config import Settings, load_settings
from hookrelay.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _text(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def format_event(channel, payload) -> str:
    """Render one pub/sub message for the terminal."""
    return (
        "\n=== Received Event ===\n"
        f"Channel: {_text(channel)}\n"
        f"Payload:\n{_text(payload)}\n"
        "==================="
    )


async def consume(client: aioredis.Redis, channel: str, emit: Callable[[str], None] = print) -> None:
    """Subscribe to ``channel`` and emit each message until the stream ends."""
    pubsub = client.pubsub()
    await pubsub.subscribe(channel)
    logger.info("Waiting for messages on %s... (Press Ctrl+C to exit)", channel)

    try:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            emit(format_event(message["channel"], message["data"]))
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()


async def _run(settings: Settings) -> int:
    client = aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password or None,
    )
    try:
        try:
            await client.ping()
        except (RedisError, OSError) as exc:
            logger.error("Failed to connect to Redis at %s: %s", settings.redis_addr, exc)
            return 1

        logger.info("Connected to Redis at %s", settings.redis_addr)
        await consume(client, settings.redis_channel)
    finally:
        await client.aclose()
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()

    parser = argparse.ArgumentParser(
        prog="hookrelay-consume",
        description="Print webhook events published by hookrelay",
    )
    parser.add_argument("--redis-addr", default=settings.redis_addr, help="Redis host:port")
    parser.add_argument("--channel", default=settings.redis_channel, help="Pub/sub channel to subscribe to")
    parser.add_argument("--password", default=settings.redis_password, help="Redis password")
    args = parser.parse_args(argv)

    settings = settings.model_copy(
        update={"redis_addr": args.redis_addr, "redis_channel": args.channel, "redis_password": args.password}
    )
    configure_logging(log_level=settings.log_level, json_output=False)

    try:
        return asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Shutting down consumer...")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
