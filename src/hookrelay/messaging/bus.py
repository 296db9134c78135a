"""Message bus boundary: publish raw webhook bodies to a pub/sub channel."""

import logging
from typing import Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from hookrelay.config import Settings
from hookrelay.errors.exceptions import BusError

logger = logging.getLogger(__name__)


class MessageBus(Protocol):
    """Publish-capable client shared by all in-flight requests."""

    async def publish(self, channel: str, payload: bytes) -> int:
        """Publish ``payload`` unchanged; return the number of receivers."""
        ...

    async def ping(self) -> None:
        ...

    async def close(self) -> None:
        ...


class RedisMessageBus:
    """MessageBus backed by a ``redis.asyncio`` connection pool.

    The pool is safe for concurrent use, so no locking is added here.
    Transport failures are raised as ``BusError``; callers bound each call
    with their own timeout.
    """

    def __init__(self, client: aioredis.Redis, address: str = ""):
        self._client = client
        self.address = address

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisMessageBus":
        client = aioredis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password or None,
            socket_connect_timeout=settings.startup_timeout,
        )
        return cls(client, address=settings.redis_addr)

    async def publish(self, channel: str, payload: bytes) -> int:
        try:
            return await self._client.publish(channel, payload)
        except (RedisError, OSError) as exc:
            raise BusError(f"publish to {channel!r} failed: {exc}") from exc

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except (RedisError, OSError) as exc:
            raise BusError(f"ping {self.address} failed: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis connection closed (%s)", self.address)
